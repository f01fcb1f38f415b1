"""
Fuel Allocation Calculator

Turns a journey into per-checkpoint liters for each leg.

Going leg (rules applied in order, each independent):
1. Secondary yard transfer: journeys starting at TANGA get 100 L to reach DAR
2. Primary yard draw, one of:
     DAR_YARD     darYard  = 550
     KISARAWE     darYard  = 580
     DAR_STATION  darGoing = total - 550   (paid station)
3. Mid-route:     mbeyaGoing = 450 (+ darGoing on the DAR_STATION path)
4. Final leg:     zambiaGoing = (total + extra) - 900
                  or the fixed liters of a special destination (LUSAKA, LUBUMBASHI)

Return leg (fixed, all bought at paid stations):
    zambiaReturn 400 (LAKE NDOLA 50 + LAKE KAPIRI 350), tundumaReturn 100,
    mbeyaReturn 400, plus moroReturn 100 / tangaReturn 70 for coastal journeys

Balance:
    (total + extra) - sum(|allocation|)
    Allocations are positive liters handed out against a positive total. The
    absolute value keeps rows imported with negative (consumption) entries
    correct. A negative balance before fulfillment is expected.

Author: Fuel Ledger Team
"""

from typing import Dict, Optional

import structlog

from ..config import FuelSystemConfig
from ..models.allocation import AllocationPlan, Checkpoint, FuelLoadingPoint, Leg
from ..models.fuel_record import FuelRecord
from .matching import normalize_key
from .route_resolver import RouteConfigResolver

logger = structlog.get_logger()


class FuelAllocationCalculator:
    """Allocation rules for one configuration snapshot"""

    def __init__(
        self,
        config: FuelSystemConfig,
        route_resolver: Optional[RouteConfigResolver] = None,
    ):
        self.config = config
        self.route_resolver = route_resolver or RouteConfigResolver(config)

    # ═══════════════════════════════════════════════════════════════════════
    # GOING LEG
    # ═══════════════════════════════════════════════════════════════════════

    def calculate_going(
        self,
        journey: FuelRecord,
        extra: float,
        total_liters: float,
        loading_point: FuelLoadingPoint = FuelLoadingPoint.DAR_YARD,
    ) -> AllocationPlan:
        """
        Going-leg allocations.

        Args:
            journey: Record being planned (start yard and going destination)
            extra: Truck batch bonus
            total_liters: Route round-trip liters
            loading_point: Where the truck draws its primary-yard fuel
        """
        std = self.config.allocations
        allocations: Dict[Checkpoint, float] = {}
        paid = set()

        if normalize_key(journey.start) == self.config.secondary_yard:
            allocations[Checkpoint.TANGA_YARD] = std.tanga_yard_to_dar

        loading_point = FuelLoadingPoint(loading_point)
        mbeya_going = std.mbeya_going
        if loading_point is FuelLoadingPoint.DAR_STATION:
            station_draw = total_liters - std.dar_station_baseline
            allocations[Checkpoint.DAR_GOING] = station_draw
            paid.add(Checkpoint.DAR_GOING)
            mbeya_going = station_draw + std.mbeya_going
        elif loading_point is FuelLoadingPoint.KISARAWE:
            allocations[Checkpoint.DAR_YARD] = std.dar_yard_kisarawe
        else:
            allocations[Checkpoint.DAR_YARD] = std.dar_yard_standard

        allocations[Checkpoint.MBEYA_GOING] = mbeya_going

        special = self.route_resolver.special_destination_liters(
            journey.going_destination
        )
        if special is not None:
            allocations[Checkpoint.ZAMBIA_GOING] = special
        else:
            allocations[Checkpoint.ZAMBIA_GOING] = (
                total_liters + extra
            ) - std.cumulative_consumption

        logger.debug(
            "Going allocations calculated",
            truck_no=journey.truck_no,
            destination=journey.going_destination,
            loading_point=loading_point.value,
            special_destination=special is not None,
        )
        return AllocationPlan(
            leg=Leg.GOING, allocations=allocations, paid_checkpoints=frozenset(paid)
        )

    # ═══════════════════════════════════════════════════════════════════════
    # RETURN LEG
    # ═══════════════════════════════════════════════════════════════════════

    def calculate_return(
        self, journey: FuelRecord, going_destination: Optional[str] = None
    ) -> AllocationPlan:
        """
        Return-leg allocations. Coastal extras follow the ORIGINAL going
        destination, not wherever the return order loads.
        """
        std = self.config.allocations
        destination = going_destination or journey.going_destination

        allocations: Dict[Checkpoint, float] = {
            Checkpoint.ZAMBIA_RETURN: self.config.zambia_return_total,
            Checkpoint.TUNDUMA_RETURN: std.tunduma_return,
            Checkpoint.MBEYA_RETURN: std.mbeya_return,
        }
        if self.route_resolver.is_coastal_destination(destination):
            allocations[Checkpoint.MORO_RETURN] = std.moro_return_coastal
            allocations[Checkpoint.TANGA_RETURN] = std.tanga_return_coastal

        return AllocationPlan(
            leg=Leg.RETURN,
            allocations=allocations,
            paid_checkpoints=frozenset(allocations),
        )

    # ═══════════════════════════════════════════════════════════════════════
    # BALANCE
    # ═══════════════════════════════════════════════════════════════════════

    @staticmethod
    def calculate_balance(total_liters: float, extra: float, plan: AllocationPlan) -> float:
        """(total + extra) - sum of absolute allocations"""
        return (total_liters + extra) - plan.total()
