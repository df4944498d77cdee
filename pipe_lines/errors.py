"""Error codes and exceptions raised by pipe_lines."""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    CONFIG_ERROR = "CONFIG_ERROR"
    IO_ERROR = "IO_ERROR"


class PipeLinesError(RuntimeError):
    """Exception carrying a structured error code."""

    def __init__(self, code: ErrorCode, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        base = super().__str__()
        return f"[{self.code.value}] {base}" if base else self.code.value


class ConfigError(PipeLinesError):
    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(ErrorCode.CONFIG_ERROR, message, context=context)


class StreamReadError(PipeLinesError):
    """Raised by the iteration helpers when the stream reports a read failure."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(ErrorCode.IO_ERROR, f"read failed: {cause}", context={"cause": repr(cause)})
        self.cause = cause
