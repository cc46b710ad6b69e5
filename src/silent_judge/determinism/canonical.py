"""Canonical JSON form of artifacts and content-hash identifiers.

Two logically equal artifacts must produce the same bytes. Keys are sorted,
separators fixed, text written as UTF-8 with a trailing newline.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import math
from enum import Enum
from pathlib import PurePath
from typing import Any, Mapping

from ..exceptions import ErrorCode
from ..logging_config import get_logger

logger = get_logger(__name__)

ID_HASH_LENGTH = 16


def to_jsonable(obj: Any) -> Any:
    """Convert records, enums, tuples, sets and paths into plain JSON data.

    Objects with a ``to_dict`` method are converted through it so artifacts
    keep their published camelCase shape. Non-finite floats become None.
    """
    if obj is None or isinstance(obj, (bool, str, int)):
        return obj
    if isinstance(obj, float):
        if math.isfinite(obj):
            return obj
        logger.warning("[%s] Non-finite float %r written as null", ErrorCode.SJ500.value, obj)
        return None
    if isinstance(obj, Enum):
        return to_jsonable(obj.value)
    if hasattr(obj, "to_dict") and callable(obj.to_dict):
        return to_jsonable(obj.to_dict())
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable(dataclasses.asdict(obj))
    if isinstance(obj, Mapping):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (set, frozenset)):
        items = [to_jsonable(v) for v in obj]
        return sorted(items, key=canonical_json)
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    if isinstance(obj, PurePath):
        return obj.as_posix()
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    logger.warning(
        "[%s] %s is not JSON-representable, written as text", ErrorCode.SJ500.value, type(obj).__name__
    )
    return str(obj)


def canonical_json(obj: Any) -> str:
    """Compact, key-sorted JSON. Used for hashing and tie-breaking."""
    return json.dumps(
        to_jsonable(obj), sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False
    )


def serialize_artifact(obj: Any) -> bytes:
    """Byte form of an artifact as written to disk."""
    text = json.dumps(
        to_jsonable(obj), sort_keys=True, indent=2, ensure_ascii=False, allow_nan=False
    )
    return (text + "\n").encode("utf-8")


def artifact_digest(obj: Any) -> str:
    return hashlib.sha256(serialize_artifact(obj)).hexdigest()


def stable_id(prefix: str, fields: Mapping[str, Any]) -> str:
    """Content-hash identifier over the canonical form of ``fields``.

    Independent of the iteration order of ``fields``.
    """
    digest = hashlib.sha256(canonical_json(fields).encode("utf-8")).hexdigest()
    return f"{prefix}_{digest[:ID_HASH_LENGTH]}"
