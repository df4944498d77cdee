"""Reader configuration: defaults, JSON file, environment, explicit overrides."""

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError

DEFAULT_CHUNK_SIZE = 65536
ALLOWED_ERROR_POLICIES = {"fail-fast", "strict", "replace"}
ENV_PREFIX = "PIPE_LINES_"


@dataclass(frozen=True)
class ReaderConfig:
    chunk_size: int = DEFAULT_CHUNK_SIZE
    terminator: bytes = b"\n"
    keep_terminator: bool = False
    encoding: str = "utf-8"
    error_policy: str = "fail-fast"

    def __post_init__(self) -> None:
        if isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int) or self.chunk_size < 1:
            raise ConfigError(f"chunk_size must be a positive integer, got {self.chunk_size!r}")
        if not isinstance(self.terminator, bytes) or len(self.terminator) != 1:
            raise ConfigError(f"terminator must be a single byte, got {self.terminator!r}")
        if self.error_policy not in ALLOWED_ERROR_POLICIES:
            raise ConfigError(
                f"error_policy must be one of {sorted(ALLOWED_ERROR_POLICIES)}, got {self.error_policy!r}"
            )
        try:
            "".encode(self.encoding)
        except LookupError as exc:
            raise ConfigError(f"unknown encoding {self.encoding!r}") from exc

    @property
    def decode_errors(self) -> str:
        return error_mode_from_policy(self.error_policy)


def error_mode_from_policy(policy: str) -> str:
    """Translate the error policy into a codec error handler name."""
    return "strict" if policy.lower() in {"fail-fast", "strict"} else "replace"


def parse_terminator(value: Any) -> bytes:
    """Accept ``b"\\n"``, ``"\\n"``, an escape such as ``"\\\\0"`` or an int byte value."""
    if isinstance(value, bytes):
        return value
    if isinstance(value, bool):
        raise ConfigError(f"invalid terminator {value!r}")
    if isinstance(value, int):
        if not 0 <= value <= 255:
            raise ConfigError(f"terminator byte out of range: {value}")
        return bytes([value])
    if isinstance(value, str):
        try:
            decoded = value.encode("latin-1").decode("unicode_escape").encode("latin-1")
        except (UnicodeEncodeError, UnicodeDecodeError) as exc:
            raise ConfigError(f"invalid terminator {value!r}") from exc
        return decoded
    raise ConfigError(f"invalid terminator {value!r}")


def load_reader_config(
    path: Optional[Path] = None,
    *,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ReaderConfig:
    """Build a ReaderConfig from defaults, ``path``, the environment and ``overrides``."""
    values: Dict[str, Any] = {}
    if path is not None:
        values.update(_read_config_json(Path(path)))
    values.update(_from_environ(os.environ if environ is None else environ))
    values.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return apply_values(ReaderConfig(), values)


def apply_values(config: ReaderConfig, values: Mapping[str, Any]) -> ReaderConfig:
    known = set(ReaderConfig.__dataclass_fields__)
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"unknown config keys {unknown}")
    cleaned = dict(values)
    if "terminator" in cleaned:
        cleaned["terminator"] = parse_terminator(cleaned["terminator"])
    if "keep_terminator" in cleaned and not isinstance(cleaned["keep_terminator"], bool):
        raise ConfigError(f"keep_terminator must be a boolean, got {cleaned['keep_terminator']!r}")
    return replace(config, **cleaned)


def _read_config_json(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"config file '{path}' not found") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"config file '{path}' is not valid JSON: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise ConfigError(f"config file '{path}' must contain an object")
    section = raw.get("reader", raw)
    if not isinstance(section, Mapping):
        raise ConfigError(f"'reader' section in '{path}' must be an object")
    return dict(section)


def _from_environ(environ: Mapping[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    chunk = environ.get(ENV_PREFIX + "CHUNK_SIZE")
    if chunk:
        try:
            values["chunk_size"] = int(chunk)
        except ValueError as exc:
            raise ConfigError(f"{ENV_PREFIX}CHUNK_SIZE must be an integer, got {chunk!r}") from exc
    encoding = environ.get(ENV_PREFIX + "ENCODING")
    if encoding:
        values["encoding"] = encoding
    return values
