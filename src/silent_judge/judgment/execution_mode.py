"""Execution mode: what a run could see, and the confidence ceiling it earns.

Resolved once per run and passed explicitly into every confidence
assessment. A run with source access and a live URL can reach full
confidence; a URL-only run is capped.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from ..config import DEFAULT_CONFIG, JudgeConfig
from ..exceptions import UnreachableTargetError
from ..logging_config import get_logger

logger = get_logger(__name__)


class ExecutionMode(str, Enum):
    FULL_PROJECT = "FULL_PROJECT"
    WEB_SCAN_LIMITED = "WEB_SCAN_LIMITED"


FULL_PROJECT_CEILING = 1.0


@dataclass(frozen=True)
class ExecutionModeContext:
    mode: ExecutionMode
    ceiling: float
    reason: str
    explanation: str
    source_path: Optional[str] = None

    @property
    def limited(self) -> bool:
        return self.mode is ExecutionMode.WEB_SCAN_LIMITED

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "ceiling": self.ceiling,
            "reason": self.reason,
            "explanation": self.explanation,
        }


def _source_resolves(source_path: Union[str, os.PathLike, None]) -> bool:
    if source_path is None or str(source_path).strip() == "":
        return False
    try:
        return Path(source_path).expanduser().exists()
    except OSError:
        return False


def resolve_execution_mode(
    source_path: Union[str, os.PathLike, None],
    url_reachable: bool,
    config: Optional[JudgeConfig] = None,
    url: Optional[str] = None,
) -> ExecutionModeContext:
    """Resolve the run's execution mode.

    Args:
        source_path: Project source directory, if the run was given one
        url_reachable: Whether the target URL answered
        config: Supplies web_scan_ceiling
        url: Target URL, for error context only

    Raises:
        UnreachableTargetError: The target URL is not reachable; no
            interaction can be judged
    """
    config = config or DEFAULT_CONFIG

    if not url_reachable:
        raise UnreachableTargetError(url)

    if _source_resolves(source_path):
        context = ExecutionModeContext(
            mode=ExecutionMode.FULL_PROJECT,
            ceiling=FULL_PROJECT_CEILING,
            reason="source_and_url",
            explanation="Source code and live URL available; confidence is not capped.",
            source_path=str(source_path),
        )
    else:
        reason = "no_source_path" if source_path is None else "source_path_unresolved"
        context = ExecutionModeContext(
            mode=ExecutionMode.WEB_SCAN_LIMITED,
            ceiling=config.web_scan_ceiling,
            reason=reason,
            explanation=(
                "Only the live URL was available, so promises could not be checked "
                f"against source; confidence is capped at {config.web_scan_ceiling:.2f}."
            ),
            source_path=None if source_path is None else str(source_path),
        )

    logger.debug("Execution mode %s (ceiling %.2f, %s)", context.mode.value, context.ceiling, context.reason)
    return context
