"""
Truck Batch Resolver

Trucks are grouped into batches by the last token of their plate
("T664 ECQ" -> "ecq"). Each batch carries a flat extra-fuel bonus that is
added to the route total. A per-truck destination rule, when configured,
wins over the batch bonus.

Author: Fuel Ledger Team
"""

from typing import Optional

import structlog

from ..config import FuelSystemConfig
from ..models.allocation import TruckBatchMatch
from .matching import match_key, normalize_key

logger = structlog.get_logger()


def truck_suffix(truck_no: Optional[str]) -> str:
    """Last whitespace-delimited token of a plate, lowercased ("" if none)"""
    tokens = (truck_no or "").split()
    return tokens[-1].lower() if tokens else ""


class TruckBatchResolver:
    """Extra-fuel bonus lookup for one configuration snapshot"""

    def __init__(self, config: FuelSystemConfig):
        self.config = config

    def resolve_extra_fuel(
        self, truck_no: str, destination_override: Optional[str] = None
    ) -> TruckBatchMatch:
        """
        Extra fuel for a truck.

        Args:
            truck_no: Plate as typed on the delivery order
            destination_override: Going destination, checked against the
                truck's destination rules before the batch tiers

        Returns:
            TruckBatchMatch; matched=False with the default extra (0) when
            the suffix is empty or in no batch
        """
        suffix = truck_suffix(truck_no)
        default = self.config.matching.default_extra_liters

        if not suffix:
            logger.warning("Truck number has no suffix", truck_no=truck_no)
            return TruckBatchMatch(extra_fuel=default, matched=False, truck_suffix="")

        if destination_override:
            rules = self.config.batch_destination_overrides.get(suffix, ())
            if rules:
                result = match_key(
                    destination_override,
                    [rule.destination for rule in rules],
                    self.config.matching,
                )
                if result.matched:
                    rule = next(r for r in rules if r.destination == result.key)
                    logger.debug(
                        "Destination rule applied",
                        truck_no=truck_no,
                        destination=normalize_key(destination_override),
                        extra=rule.extra_liters,
                    )
                    return TruckBatchMatch(
                        extra_fuel=rule.extra_liters,
                        matched=True,
                        truck_suffix=suffix,
                        batch_name="override",
                        destination_override=True,
                    )

        for tier in self.config.truck_batches:
            if suffix in tier.suffixes:
                return TruckBatchMatch(
                    extra_fuel=tier.extra_liters,
                    matched=True,
                    truck_suffix=suffix,
                    batch_name=tier.name,
                )

        logger.warning(
            "Truck suffix not in any batch", truck_no=truck_no, suffix=suffix
        )
        return TruckBatchMatch(extra_fuel=default, matched=False, truck_suffix=suffix)

    def extra_or_none(
        self, truck_no: str, destination_override: Optional[str] = None
    ) -> Optional[float]:
        """Extra fuel, or None when the truck needs configuring first"""
        match = self.resolve_extra_fuel(truck_no, destination_override)
        return match.extra_fuel if match.matched else None
