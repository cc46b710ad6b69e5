"""Sensor summary records.

Upstream sensors hand over loosely shaped summaries. Each is mapped onto one
record from a small closed set so the evidence builder can combine them with
a total function. Every record owns the derivation of its own signal
(``qualifying_activity``, ``flipped``, ...); the builder never parses raw
sensor data.

Absence of a summary means "signal unavailable", never "no feedback".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from ..logging_config import get_logger

logger = get_logger(__name__)


def _pick(data: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    for name in names:
        if name in data and data[name] is not None:
            return data[name]
    return default


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


@dataclass(frozen=True)
class NavigationSummary:
    url_changed: bool = False
    history_length_delta: int = 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NavigationSummary":
        return cls(
            url_changed=_as_bool(_pick(data, "urlChanged", "url_changed", default=False)),
            history_length_delta=_as_int(
                _pick(data, "historyLengthDelta", "history_length_delta", default=0)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"urlChanged": self.url_changed, "historyLengthDelta": self.history_length_delta}


@dataclass(frozen=True)
class NetworkSummary:
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    writes_blocked: int = 0
    status_codes: tuple[int, ...] = ()

    @property
    def request_made(self) -> bool:
        return self.total_requests > 0

    @property
    def qualifying_activity(self) -> bool:
        """At least one request completed successfully.

        Blocked writes never reached a server and failed requests are
        failure evidence, so neither counts as feedback.
        """
        return self.successful_requests > 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NetworkSummary":
        codes = _pick(data, "statusCodes", "status_codes", default=()) or ()
        if isinstance(codes, (str, bytes)) or not hasattr(codes, "__iter__"):
            codes = ()
        writes_blocked = _pick(data, "writesBlocked", "writes_blocked", "blockedWrites", default=0)
        if isinstance(writes_blocked, (list, tuple)):
            writes_blocked = len(writes_blocked)
        status_codes = tuple(sorted(_as_int(c) for c in codes))
        total = _as_int(_pick(data, "totalRequests", "total_requests", default=0))
        failed = _as_int(_pick(data, "failedRequests", "failed_requests", default=0))
        successful = _pick(data, "successfulRequests", "successful_requests")
        if successful is not None:
            successful = _as_int(successful)
        elif status_codes:
            successful = sum(1 for code in status_codes if 200 <= code < 300)
        elif total > 0 and failed == 0:
            # Requests made, none reported failed.
            successful = total
        else:
            successful = 0
        return cls(
            total_requests=total,
            successful_requests=successful,
            failed_requests=failed,
            writes_blocked=_as_int(writes_blocked),
            status_codes=status_codes,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalRequests": self.total_requests,
            "successfulRequests": self.successful_requests,
            "failedRequests": self.failed_requests,
            "writesBlocked": self.writes_blocked,
            "statusCodes": list(self.status_codes),
        }


@dataclass(frozen=True)
class ConsoleSummary:
    error_count: int = 0
    warning_count: int = 0
    unhandled_rejection_count: int = 0

    @property
    def error_total(self) -> int:
        return self.error_count + self.unhandled_rejection_count

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ConsoleSummary":
        return cls(
            error_count=_as_int(_pick(data, "errorCount", "error_count", "errors", default=0)),
            warning_count=_as_int(
                _pick(data, "warningCount", "warning_count", "warnings", default=0)
            ),
            unhandled_rejection_count=_as_int(
                _pick(
                    data,
                    "unhandledRejectionCount",
                    "unhandled_rejection_count",
                    "unhandledRejections",
                    default=0,
                )
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "errorCount": self.error_count,
            "warningCount": self.warning_count,
            "unhandledRejectionCount": self.unhandled_rejection_count,
        }


@dataclass(frozen=True)
class StateSummary:
    """Top-level store keys that changed. Values are never carried."""

    changed_keys: frozenset[str] = field(default_factory=frozenset)

    @property
    def changed(self) -> bool:
        return bool(self.changed_keys)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StateSummary":
        keys = _pick(data, "changedKeys", "changed_keys", "changed", default=()) or ()
        if isinstance(keys, (str, bytes)) or not hasattr(keys, "__iter__"):
            keys = ()
        return cls(changed_keys=frozenset(str(k) for k in keys))

    def to_dict(self) -> dict[str, Any]:
        return {"changedKeys": sorted(self.changed_keys)}


@dataclass(frozen=True)
class UIStateSummary:
    """Whitelisted accessibility-first UI state flips."""

    dialog_changed: bool = False
    tab_changed: bool = False
    expanded_changed: bool = False
    checked_changed: bool = False
    alert_text_changed: bool = False

    @property
    def flipped(self) -> bool:
        return (
            self.dialog_changed
            or self.tab_changed
            or self.expanded_changed
            or self.checked_changed
            or self.alert_text_changed
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UIStateSummary":
        return cls(
            dialog_changed=_as_bool(_pick(data, "dialogChanged", "dialog_changed", default=False)),
            tab_changed=_as_bool(_pick(data, "tabChanged", "tab_changed", default=False)),
            expanded_changed=_as_bool(
                _pick(data, "expandedChanged", "expanded_changed", default=False)
            ),
            checked_changed=_as_bool(
                _pick(data, "checkedChanged", "checked_changed", default=False)
            ),
            alert_text_changed=_as_bool(
                _pick(data, "alertTextChanged", "alert_text_changed", default=False)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "dialogChanged": self.dialog_changed,
            "tabChanged": self.tab_changed,
            "expandedChanged": self.expanded_changed,
            "checkedChanged": self.checked_changed,
            "alertTextChanged": self.alert_text_changed,
        }


SensorSummary = Union[
    NavigationSummary, NetworkSummary, ConsoleSummary, StateSummary, UIStateSummary
]

SENSOR_TYPES: dict[str, type] = {
    "navigation": NavigationSummary,
    "network": NetworkSummary,
    "console": ConsoleSummary,
    "state": StateSummary,
    "ui_state": UIStateSummary,
}

# Names upstream sensors have used for the same summaries.
SENSOR_ALIASES: dict[str, str] = {
    "nav": "navigation",
    "url": "navigation",
    "store": "state",
    "state_store": "state",
    "uiState": "ui_state",
    "ui-state": "ui_state",
    "stateUi": "ui_state",
}


def canonical_sensor_name(sensor: str) -> str:
    return SENSOR_ALIASES.get(sensor, sensor)


def coerce_summary(sensor: str, data: Any) -> Optional[SensorSummary]:
    """Return the typed summary for ``sensor``, or None if unusable.

    Accepts an already-typed record or a mapping with camelCase or
    snake_case keys. Never raises.
    """
    record_type = SENSOR_TYPES.get(canonical_sensor_name(sensor))
    if record_type is None or data is None:
        return None
    if isinstance(data, record_type):
        return data
    if isinstance(data, Mapping):
        return record_type.from_mapping(data)
    logger.debug("Sensor %s delivered %s, expected a mapping", sensor, type(data).__name__)
    return None
