from __future__ import annotations

import random
from typing import Protocol

from parkline.models.apartment import ApartmentStatus
from parkline.models.config_models import DefaultsConfig

"""Placeholder strategies for floor / status values the sheet does not give.

The site always renders every apartment, so undetectable floors and statuses
get a placeholder. The strategy is injected into the normaliser so tests and
production can pick deterministic (cycle) or seeded-random behaviour.
"""

__all__ = [
    "DefaultStrategy",
    "CyclingDefaults",
    "SeededRandomDefaults",
    "DEMO_STATUSES",
    "PLACEHOLDER_FLOORS",
    "strategy_from_config",
]

# 60% available, as on the demo site
DEMO_STATUSES = (
    ApartmentStatus.AVAILABLE,
    ApartmentStatus.AVAILABLE,
    ApartmentStatus.AVAILABLE,
    ApartmentStatus.RESERVED,
    ApartmentStatus.SOLD,
)
PLACEHOLDER_FLOORS = range(1, 10)


class DefaultStrategy(Protocol):
    def floor(self, position: int) -> int:
        """Placeholder floor for the record at ``position`` (1-9)."""
        ...

    def status(self, position: int) -> ApartmentStatus:
        """Placeholder status for the record at ``position``."""
        ...


class CyclingDefaults:
    """Deterministic placeholders derived from the record position."""

    def floor(self, position: int) -> int:
        return PLACEHOLDER_FLOORS[position % len(PLACEHOLDER_FLOORS)]

    def status(self, position: int) -> ApartmentStatus:
        return DEMO_STATUSES[position % len(DEMO_STATUSES)]


class SeededRandomDefaults:
    """Pseudo-random placeholders; reproducible when ``seed`` is given."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def floor(self, position: int) -> int:
        return self._rng.choice(PLACEHOLDER_FLOORS)

    def status(self, position: int) -> ApartmentStatus:
        return self._rng.choice(DEMO_STATUSES)


def strategy_from_config(cfg: DefaultsConfig) -> DefaultStrategy:
    if cfg.strategy == "random":
        return SeededRandomDefaults(cfg.seed)
    return CyclingDefaults()
