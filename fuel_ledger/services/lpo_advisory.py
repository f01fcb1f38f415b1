"""
LPO Advisory

Proposes the Local Purchase Orders a leg needs: one per allocation bought at
a paid station. Company yard draws (tangaYard, darYard) are free stock and
never get an LPO. The zambiaReturn allocation is bought at two stations and
is split into one advisory per station.

Advisories are proposals only; issuing and fulfilling LPOs happens outside
this engine.
"""

from typing import List

import structlog

from ..config import FuelSystemConfig
from ..models.allocation import (
    COMPANY_YARD_CHECKPOINTS,
    AllocationPlan,
    Checkpoint,
    LPOAdvisory,
)
from ..models.fuel_record import FuelRecord

logger = structlog.get_logger()


class LPOAdvisor:
    """LPO proposals for one configuration snapshot"""

    def __init__(self, config: FuelSystemConfig):
        self.config = config

    def determine_lpos(
        self, record: FuelRecord, plan: AllocationPlan, is_return_leg: bool
    ) -> List[LPOAdvisory]:
        if is_return_leg:
            do_no = record.return_do or ""
            destination = record.from_location
        else:
            do_no = record.going_do
            destination = record.going_destination

        advisories: List[LPOAdvisory] = []
        for checkpoint, liters in plan.allocations.items():
            if checkpoint in COMPANY_YARD_CHECKPOINTS:
                continue
            if not plan.is_paid(checkpoint) or liters <= 0:
                continue

            if checkpoint is Checkpoint.ZAMBIA_RETURN:
                for station in self.config.zambia_return_stations:
                    advisories.append(
                        LPOAdvisory(
                            station=station.name,
                            truck_no=record.truck_no,
                            do_no=do_no,
                            liters=station.liters,
                            destination=destination,
                            checkpoint=checkpoint,
                        )
                    )
                continue

            advisories.append(
                LPOAdvisory(
                    station=self.config.station_for(checkpoint),
                    truck_no=record.truck_no,
                    do_no=do_no,
                    liters=liters,
                    destination=destination,
                    checkpoint=checkpoint,
                )
            )

        logger.debug(
            "LPO advisories determined",
            truck_no=record.truck_no,
            leg="RETURN" if is_return_leg else "GOING",
            count=len(advisories),
        )
        return advisories


def determine_lpos(
    record: FuelRecord,
    plan: AllocationPlan,
    is_return_leg: bool,
    config: FuelSystemConfig,
) -> List[LPOAdvisory]:
    """Functional shortcut for LPOAdvisor(config).determine_lpos(...)"""
    return LPOAdvisor(config).determine_lpos(record, plan, is_return_leg)


__all__ = ["LPOAdvisor", "determine_lpos"]
