from __future__ import annotations

import os
from dataclasses import dataclass, replace

_TRUTHY = {"1", "true", "yes", "on"}
LOG_FORMATS = ("text", "json")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class RunnerConfig:
    num_tests: int = 100
    max_shrink_steps: int = 1000
    shrink_timeout_seconds: float = 10.0
    verbose: bool = False
    seed: int | None = None
    exhaustive: bool = False
    max_discard_ratio: int = 10
    log_format: str | None = None

    def __post_init__(self) -> None:
        if self.num_tests < 0:
            raise ValueError(f"num_tests must be >= 0, got {self.num_tests}")
        if self.max_shrink_steps < 0:
            raise ValueError(f"max_shrink_steps must be >= 0, got {self.max_shrink_steps}")
        if self.shrink_timeout_seconds < 0:
            raise ValueError(
                f"shrink_timeout_seconds must be >= 0, got {self.shrink_timeout_seconds}"
            )
        if self.max_discard_ratio < 0:
            raise ValueError(f"max_discard_ratio must be >= 0, got {self.max_discard_ratio}")
        if self.log_format is not None and self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}, got {self.log_format!r}")

    @classmethod
    def from_env(cls) -> "RunnerConfig":
        seed = os.environ.get("QUICKPROP_SEED")
        return cls(
            num_tests=int(os.environ.get("QUICKPROP_NUM_TESTS", "100")),
            max_shrink_steps=int(os.environ.get("QUICKPROP_MAX_SHRINK_STEPS", "1000")),
            shrink_timeout_seconds=float(os.environ.get("QUICKPROP_SHRINK_TIMEOUT", "10.0")),
            verbose=_env_bool("QUICKPROP_VERBOSE", False),
            seed=int(seed) if seed else None,
            exhaustive=_env_bool("QUICKPROP_EXHAUSTIVE", False),
            max_discard_ratio=int(os.environ.get("QUICKPROP_MAX_DISCARD_RATIO", "10")),
            log_format=os.environ.get("QUICKPROP_LOG_FORMAT") or None,
        )

    def with_overrides(self, **changes) -> "RunnerConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
