"""Allocation policy for gap buffers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "GAP_ENGINE_"
DEFAULT_INITIAL_CAPACITY = 10
DEFAULT_GROWTH_FACTOR = 2.0


@dataclass(frozen=True, slots=True)
class BufferConfig:
    """Initial capacity and geometric growth factor of a buffer's block.

    Growth always reserves at least the bytes an insert needs, so a factor of
    ``1.0`` degrades to exact-fit reallocation.
    """

    initial_capacity: int = DEFAULT_INITIAL_CAPACITY
    growth_factor: float = DEFAULT_GROWTH_FACTOR

    def __post_init__(self) -> None:
        if self.initial_capacity < 0:
            raise ValueError("initial_capacity cannot be negative")
        if self.growth_factor < 1:
            raise ValueError("growth_factor must be at least 1")

    def grown_capacity(self, capacity: int, needed: int) -> int:
        """Capacity to reallocate to when ``needed`` more bytes must fit."""

        return max(int(capacity * self.growth_factor), capacity + needed)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BufferConfig":
        env = os.environ if environ is None else environ
        capacity = env.get(f"{ENV_PREFIX}INITIAL_CAPACITY")
        factor = env.get(f"{ENV_PREFIX}GROWTH_FACTOR")
        return cls(
            initial_capacity=(
                int(capacity) if capacity else DEFAULT_INITIAL_CAPACITY
            ),
            growth_factor=float(factor) if factor else DEFAULT_GROWTH_FACTOR,
        )


__all__ = [
    "BufferConfig",
    "ENV_PREFIX",
    "DEFAULT_GROWTH_FACTOR",
    "DEFAULT_INITIAL_CAPACITY",
]
