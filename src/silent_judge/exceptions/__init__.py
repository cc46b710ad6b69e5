"""Exception hierarchy for silent-judge."""

from .base import SilentJudgeError
from .config import ConfigFileError, ConfigurationError, InvalidConfigError
from .taxonomy import (
    ErrorCode,
    ExecutionContextError,
    JudgeError,
    MissingExecutionContextError,
    UnreachableTargetError,
)

__all__ = [
    "SilentJudgeError",
    "ConfigurationError",
    "ConfigFileError",
    "InvalidConfigError",
    "ErrorCode",
    "JudgeError",
    "ExecutionContextError",
    "MissingExecutionContextError",
    "UnreachableTargetError",
]
