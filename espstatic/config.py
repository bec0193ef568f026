import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional

from .compress import DEFAULT_COMPRESSLEVEL

ENFORCE_TIERS = ("pre", "post")
ENV_PREFIX = "ESPSTATIC_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _parse_bool(name, value):
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"{name}: expected a boolean, got {value!r}")


@dataclass(frozen=True)
class PluginConfig:
    """
    Options for one build.

    `enforce` is only carried through to the host build tool; the
    pipeline never looks at it.
    """

    logging: bool = False
    include_public: bool = True
    enforce: Optional[str] = None
    public_dir: Optional[Path] = None
    compresslevel: int = DEFAULT_COMPRESSLEVEL
    unique_identifiers: bool = False
    strict: bool = False
    template: Optional[Path] = None
    jobs: int = 1

    def __post_init__(self):
        if self.enforce not in (None,) + ENFORCE_TIERS:
            raise ValueError(
                f"enforce must be one of {', '.join(ENFORCE_TIERS)} or unset, got {self.enforce!r}"
            )
        if not 1 <= self.compresslevel <= 9:
            raise ValueError(f"compresslevel must be between 1 and 9, got {self.compresslevel}")
        if self.jobs < 1:
            raise ValueError(f"jobs must be at least 1, got {self.jobs}")
        if self.public_dir is not None and not isinstance(self.public_dir, Path):
            object.__setattr__(self, "public_dir", Path(self.public_dir))
        if self.template is not None and not isinstance(self.template, Path):
            object.__setattr__(self, "template", Path(self.template))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PluginConfig":
        """Build a config from ESPSTATIC_* environment variables."""
        if environ is None:
            environ = os.environ
        values = {}
        for field in fields(cls):
            key = ENV_PREFIX + field.name.upper()
            if key not in environ:
                continue
            raw = environ[key]
            if field.name in ("logging", "include_public", "unique_identifiers", "strict"):
                values[field.name] = _parse_bool(key, raw)
            elif field.name in ("compresslevel", "jobs"):
                try:
                    values[field.name] = int(raw)
                except ValueError:
                    raise ValueError(f"{key}: expected an integer, got {raw!r}") from None
            elif field.name in ("public_dir", "template"):
                values[field.name] = Path(raw) if raw else None
            else:
                values[field.name] = raw or None
        return cls(**values)

    def override(self, **changes) -> "PluginConfig":
        """Return a copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
