"""
engine configuration

defaults live in module constants; RINGKYC_* environment variables override
them through EngineConfig.from_env().
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from ringkyc.errors import InvalidParameter

DEFAULT_DB_URL = "sqlite:///ringkyc.db"
DEFAULT_MIN_RING_SIZE = 2
DEFAULT_MAX_RING_SIZE = 64
DEFAULT_DECOYS = 4
DEFAULT_KDF_ITERATIONS = 100_000

# "replace": a new ring discards the previous one (latest ring wins)
# "merge": new members are appended to the existing ring
RING_UPDATE_POLICIES = ("replace", "merge")

ENV_PREFIX = "RINGKYC_"


@dataclass
class EngineConfig:
    """settings shared by the ring store, credential wallet and storage"""

    min_ring_size: int = DEFAULT_MIN_RING_SIZE
    max_ring_size: int = DEFAULT_MAX_RING_SIZE
    ring_update: str = "replace"
    default_decoys: int = DEFAULT_DECOYS
    db_url: str = DEFAULT_DB_URL
    kdf_iterations: int = DEFAULT_KDF_ITERATIONS

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if self.min_ring_size < 2:
            # a ring of one member identifies its signer
            raise InvalidParameter("min_ring_size must be at least 2")
        if self.max_ring_size < self.min_ring_size:
            raise InvalidParameter("max_ring_size must be >= min_ring_size")
        if self.ring_update not in RING_UPDATE_POLICIES:
            raise InvalidParameter(
                f"ring_update must be one of {RING_UPDATE_POLICIES}, got {self.ring_update!r}"
            )
        if self.default_decoys < self.min_ring_size - 1:
            raise InvalidParameter("default_decoys too small to reach min_ring_size")
        if self.kdf_iterations < 1:
            raise InvalidParameter("kdf_iterations must be positive")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """build a config from RINGKYC_* variables, falling back to defaults"""
        env = os.environ if environ is None else environ

        def _int(name: str, default: int) -> int:
            raw = env.get(ENV_PREFIX + name, "").strip()
            if not raw:
                return default
            try:
                return int(raw)
            except ValueError:
                raise InvalidParameter(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}")

        return cls(
            min_ring_size=_int("MIN_RING_SIZE", DEFAULT_MIN_RING_SIZE),
            max_ring_size=_int("MAX_RING_SIZE", DEFAULT_MAX_RING_SIZE),
            ring_update=env.get(ENV_PREFIX + "RING_UPDATE", "replace").strip().lower() or "replace",
            default_decoys=_int("DECOYS", DEFAULT_DECOYS),
            db_url=env.get(ENV_PREFIX + "DB_URL", "").strip() or DEFAULT_DB_URL,
            kdf_iterations=_int("KDF_ITERATIONS", DEFAULT_KDF_ITERATIONS),
        )
