"""
Allocation Data Models
======================

Checkpoints, per-leg allocation plans, purchase-order advisories and the
match results returned by the configuration resolvers.

Author: Fuel Ledger Team
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Mapping, Optional, Tuple


# ══════════════════════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════════════════════


class Checkpoint(str, Enum):
    """Ledger waypoints, in ledger column order"""

    TANGA_YARD = "tangaYard"
    DAR_YARD = "darYard"
    DAR_GOING = "darGoing"
    MORO_GOING = "moroGoing"
    MBEYA_GOING = "mbeyaGoing"
    TDM_GOING = "tdmGoing"
    ZAMBIA_GOING = "zambiaGoing"
    CONGO_FUEL = "congoFuel"
    ZAMBIA_RETURN = "zambiaReturn"
    TUNDUMA_RETURN = "tundumaReturn"
    MBEYA_RETURN = "mbeyaReturn"
    MORO_RETURN = "moroReturn"
    DAR_RETURN = "darReturn"
    TANGA_RETURN = "tangaReturn"


GOING_CHECKPOINTS: Tuple[Checkpoint, ...] = tuple(Checkpoint)[:8]
RETURN_CHECKPOINTS: Tuple[Checkpoint, ...] = tuple(Checkpoint)[8:]

# Free company stock, never covered by a purchase order
COMPANY_YARD_CHECKPOINTS: FrozenSet[Checkpoint] = frozenset(
    {Checkpoint.TANGA_YARD, Checkpoint.DAR_YARD}
)


class Leg(str, Enum):
    """Journey leg"""

    GOING = "GOING"
    RETURN = "RETURN"


class FuelLoadingPoint(str, Enum):
    """Where the truck draws its primary-yard fuel on the going leg"""

    DAR_YARD = "DAR_YARD"
    KISARAWE = "KISARAWE"
    DAR_STATION = "DAR_STATION"


class MatchType(str, Enum):
    """How a configuration key was matched"""

    EXACT = "exact"
    SUBSTRING = "substring"
    FUZZY = "fuzzy"
    DEFAULT = "default"


# ══════════════════════════════════════════════════════════════════════════════
# DATA CLASSES
# ══════════════════════════════════════════════════════════════════════════════


def empty_checkpoints() -> Dict[Checkpoint, float]:
    """All ledger checkpoints at zero"""
    return {checkpoint: 0.0 for checkpoint in Checkpoint}


@dataclass(frozen=True)
class AllocationPlan:
    """
    Liters handed out per checkpoint for one leg of one journey.

    Only checkpoints touched by an allocation rule are present; absent
    checkpoints read as 0. `paid_checkpoints` lists the allocations that are
    bought at a paid station and therefore need an LPO.
    """

    leg: Leg
    allocations: Mapping[Checkpoint, float]
    paid_checkpoints: FrozenSet[Checkpoint] = field(default_factory=frozenset)

    def liters(self, checkpoint: Checkpoint) -> float:
        return self.allocations.get(checkpoint, 0.0)

    def is_paid(self, checkpoint: Checkpoint) -> bool:
        return checkpoint in self.paid_checkpoints

    def total(self) -> float:
        """Sum of allocated liters, counting legacy negative entries as consumption"""
        return sum(abs(liters) for liters in self.allocations.values())

    def as_dict(self) -> Dict[str, float]:
        return {checkpoint.value: liters for checkpoint, liters in self.allocations.items()}


@dataclass(frozen=True)
class LPOAdvisory:
    """A proposed purchase order at a paid station. Never persisted by the engine."""

    station: str
    truck_no: str
    do_no: str
    liters: float
    destination: str
    checkpoint: Checkpoint


@dataclass(frozen=True)
class RouteSuggestion:
    """Near-miss route offered for human review"""

    route: str
    liters: float
    similarity: float


@dataclass(frozen=True)
class RouteMatch:
    """Result of resolving a destination against the route table"""

    liters: float
    matched: bool
    match_type: MatchType
    matched_route: Optional[str] = None
    suggestions: Tuple[RouteSuggestion, ...] = ()


@dataclass(frozen=True)
class TruckBatchMatch:
    """Result of resolving a truck plate to its batch bonus"""

    extra_fuel: float
    matched: bool
    truck_suffix: str
    batch_name: Optional[str] = None
    destination_override: bool = False
