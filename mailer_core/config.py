from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

# --------------------------------
# Defaults

# Store a single options mapping by reference instead of copying it
DEFAULT_SHARE_OPTIONS = False

# Merge nested option mappings recursively instead of replacing them
DEFAULT_DEEP_MERGE = False

ENV_SHARE_OPTIONS = "MAILER_SHARE_OPTIONS"
ENV_DEEP_MERGE = "MAILER_DEEP_MERGE"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
# --------------------------------


@dataclass(frozen=True)
class Settings:
    share_options: bool = DEFAULT_SHARE_OPTIONS
    deep_merge: bool = DEFAULT_DEEP_MERGE

    def mailer_flags(self) -> Dict[str, bool]:
        return {"share_options": self.share_options, "deep_merge": self.deep_merge}

    @staticmethod
    def from_env(env: Optional[Mapping[str, str]] = None) -> "Settings":
        e = env if env is not None else os.environ

        def optional_flag(name: str, default: bool) -> bool:
            value = e.get(name)
            if value is None or not value.strip():
                return default
            normalized = value.strip().lower()
            if normalized in _TRUE_VALUES:
                return True
            if normalized in _FALSE_VALUES:
                return False
            raise ValueError(f"Environment variable {name} must be a boolean, got {value!r}.")

        return Settings(
            share_options=optional_flag(ENV_SHARE_OPTIONS, DEFAULT_SHARE_OPTIONS),
            deep_merge=optional_flag(ENV_DEEP_MERGE, DEFAULT_DEEP_MERGE),
        )
