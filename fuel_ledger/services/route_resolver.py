"""
Route Configuration Resolver

Maps free-text destinations and loading points to configured liters:
- total round-trip liters per destination (default 2200 when unknown)
- loading-point extra liters for the return leg
- coastal-cluster extra liters for journeys that started at a coastal yard

Unknown destinations never raise. The caller gets matched=False plus the
closest configured routes so a human can fix the order or add the route.

Author: Fuel Ledger Team
"""

import structlog

from ..config import FuelSystemConfig
from ..models.allocation import MatchType, RouteMatch, RouteSuggestion
from .matching import match_key, normalize_key

logger = structlog.get_logger()


class RouteConfigResolver:
    """
    Destination / loading point lookups against one configuration snapshot.

    Example Usage:
        resolver = RouteConfigResolver(default_fuel_config())
        match = resolver.resolve_total_liters("kolwezi")
        # match.liters = 2400, match.match_type = MatchType.EXACT
    """

    def __init__(self, config: FuelSystemConfig):
        self.config = config

    def resolve_total_liters(self, destination: str) -> RouteMatch:
        """Round-trip liters for a destination"""
        routes = self.config.route_total_liters
        matching = self.config.matching
        result = match_key(destination, routes.keys(), matching)

        suggestions = tuple(
            RouteSuggestion(route=key, liters=routes[key], similarity=round(score, 3))
            for key, score in result.candidates
        )

        if not result.matched:
            logger.warning(
                "Route not configured, using default total liters",
                destination=normalize_key(destination),
                default_liters=matching.default_total_liters,
                suggestions=[s.route for s in suggestions],
            )
            return RouteMatch(
                liters=matching.default_total_liters,
                matched=False,
                match_type=MatchType.DEFAULT,
                suggestions=suggestions,
            )

        if result.match_type is not MatchType.EXACT:
            logger.info(
                "Route resolved by approximate match",
                destination=normalize_key(destination),
                matched_route=result.key,
                match_type=result.match_type.value,
                similarity=round(result.similarity, 3),
            )

        return RouteMatch(
            liters=routes[result.key],
            matched=True,
            match_type=result.match_type,
            matched_route=result.key,
            suggestions=suggestions,
        )

    def resolve_loading_point_extra(self, loading_point: str) -> float:
        """Extra liters when the return leg loads at this point (0 if none)"""
        table = self.config.loading_point_extras
        result = match_key(loading_point, table.keys(), self.config.matching)
        if not result.matched:
            return 0.0
        logger.debug(
            "Loading point extra resolved",
            loading_point=normalize_key(loading_point),
            matched=result.key,
            extra=table[result.key],
        )
        return table[result.key]

    def resolve_destination_cluster_extra(self, destination: str) -> float:
        """Extra liters for returning to a coastal-cluster yard (0 if none)"""
        table = self.config.destination_cluster_extras
        result = match_key(destination, table.keys(), self.config.matching)
        if not result.matched:
            return 0.0
        return table[result.key]

    def is_coastal_destination(self, destination: str) -> bool:
        """Whether a going destination belongs to the coastal cluster"""
        table = self.config.destination_cluster_extras
        return match_key(destination, table.keys(), self.config.matching).matched

    def special_destination_liters(self, destination: str):
        """Fixed final-leg liters for special destinations, None otherwise"""
        table = self.config.special_destinations
        result = match_key(destination, table.keys(), self.config.matching)
        if not result.matched:
            return None
        return table[result.key]
