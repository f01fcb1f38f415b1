"""
Fuel Ledger Configuration

Route liters, truck batches, checkpoint allocations and station names used
by the allocation engine.

A configuration is an immutable snapshot (FuelSystemConfig) loaded from YAML
and passed explicitly to every resolver and calculator. There is no
module-level mutable configuration: reload by calling load_fuel_config()
again and handing the new snapshot to the services.
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union

import yaml

from .errors import ConfigurationError
from .models.allocation import Checkpoint

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "fuel_config.yaml"


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIG GROUPS
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class MatchingConfig:
    """Thresholds for destination / suffix matching"""

    # Similarity (0-1) needed to accept a fuzzy match
    fuzzy_threshold: float = 0.8

    # Similarity (0-1) needed to be offered as a suggestion
    suggestion_threshold: float = 0.6

    max_suggestions: int = 3

    # Shorter strings are never substring-matched ("A" would hit every route)
    min_substring_length: int = 3

    # Returned when a destination is not configured
    default_total_liters: float = 2200.0

    # Returned when a truck suffix is in no batch
    default_extra_liters: float = 0.0


@dataclass(frozen=True)
class StandardAllocations:
    """Fixed checkpoint allocations (liters)"""

    # Going leg
    tanga_yard_to_dar: float = 100.0
    dar_yard_standard: float = 550.0
    dar_yard_kisarawe: float = 580.0
    dar_station_baseline: float = 550.0
    mbeya_going: float = 450.0
    cumulative_consumption: float = 900.0

    # Return leg
    tunduma_return: float = 100.0
    mbeya_return: float = 400.0
    moro_return_coastal: float = 100.0
    tanga_return_coastal: float = 70.0


@dataclass(frozen=True)
class StationAllocation:
    """Fixed liters bought at a named station"""

    name: str
    liters: float


@dataclass(frozen=True)
class TruckBatchTier:
    """Trucks (by lowercase plate suffix) sharing a flat extra-fuel bonus"""

    name: str
    extra_liters: float
    suffixes: FrozenSet[str]


@dataclass(frozen=True)
class DestinationFuelRule:
    """Per-truck extra fuel that overrides the batch bonus for one destination"""

    destination: str
    extra_liters: float


# ═══════════════════════════════════════════════════════════════════════════════
# DEFAULT TABLES
# ═══════════════════════════════════════════════════════════════════════════════

DEFAULT_ROUTE_TOTAL_LITERS: Dict[str, float] = {
    "LUBUMBASHI": 2100,
    "LUBUMBASH": 2100,
    "LIKASI": 2200,
    "KAMBOVE": 2220,
    "FUNGURUME": 2300,
    "KINSANFU": 2360,
    "LAMIKAL": 2360,
    "KOLWEZI": 2400,
    "KAMOA": 2440,
    "KALONGWE": 2440,
    "LUSAKA": 1900,
}

DEFAULT_LOADING_POINT_EXTRAS: Dict[str, float] = {
    "KAMOA": 40,
    "NMI": 20,
    "KALONGWE": 60,
}

DEFAULT_DESTINATION_CLUSTER_EXTRAS: Dict[str, float] = {
    "MOSHI": 170,
    "MSA": 170,
    "MOMBASA": 170,
}

DEFAULT_SPECIAL_DESTINATIONS: Dict[str, float] = {
    "LUSAKA": 60,
    "LUBUMBASHI": 260,
}

DEFAULT_TRUCK_BATCHES: Tuple[TruckBatchTier, ...] = (
    TruckBatchTier(
        "batch_100",
        100,
        frozenset({"dnh", "dny", "dpn", "dre", "drf", "dnw", "dxy", "eaf", "dtb"}),
    ),
    TruckBatchTier("batch_80", 80, frozenset({"dvk", "dvl", "dwk"})),
    TruckBatchTier(
        "batch_60",
        60,
        frozenset(
            {
                "dyy", "dzy", "eag", "ecq", "edd", "egj", "ehj", "ehe",
                "ely", "elv", "eeq", "eng", "efp", "efn", "ekt", "eks",
            }
        ),
    ),
)

DEFAULT_ZAMBIA_RETURN_STATIONS: Tuple[StationAllocation, StationAllocation] = (
    StationAllocation("LAKE NDOLA", 50),
    StationAllocation("LAKE KAPIRI", 350),
)

DEFAULT_CHECKPOINT_STATIONS: Dict[Checkpoint, str] = {
    Checkpoint.DAR_GOING: "DAR STATION",
    Checkpoint.TUNDUMA_RETURN: "TUNDUMA STATION",
    Checkpoint.MBEYA_RETURN: "MBEYA RETURN STATION",
    Checkpoint.MORO_RETURN: "MORO STATION",
    Checkpoint.TANGA_RETURN: "TANGA STATION",
    Checkpoint.DAR_RETURN: "DAR STATION",
}

DEFAULT_PRIMARY_YARD = "DAR"
DEFAULT_SECONDARY_YARD = "TANGA"
DEFAULT_ORIGINS: Tuple[str, ...] = ("TANGA", "MOSHI", "MSA", "MOMBASA", "DAR")


# ═══════════════════════════════════════════════════════════════════════════════
# SNAPSHOT
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class FuelSystemConfig:
    """Read-only configuration snapshot handed to every calculation"""

    route_total_liters: Mapping[str, float]
    loading_point_extras: Mapping[str, float]
    destination_cluster_extras: Mapping[str, float]
    special_destinations: Mapping[str, float]
    truck_batches: Tuple[TruckBatchTier, ...]
    batch_destination_overrides: Mapping[str, Tuple[DestinationFuelRule, ...]]
    zambia_return_stations: Tuple[StationAllocation, ...]
    checkpoint_stations: Mapping[Checkpoint, str]
    allocations: StandardAllocations = field(default_factory=StandardAllocations)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    primary_yard: str = DEFAULT_PRIMARY_YARD
    secondary_yard: str = DEFAULT_SECONDARY_YARD
    origins: Tuple[str, ...] = DEFAULT_ORIGINS

    @property
    def zambia_return_total(self) -> float:
        return sum(station.liters for station in self.zambia_return_stations)

    def station_for(self, checkpoint: Checkpoint) -> str:
        """Paid station name for a checkpoint (checkpoint name if unconfigured)"""
        return self.checkpoint_stations.get(checkpoint, checkpoint.value)

    def with_matching(self, matching: MatchingConfig) -> "FuelSystemConfig":
        return replace(self, matching=matching)


def _upper_keys(table: Mapping[str, Any]) -> Mapping[str, float]:
    return MappingProxyType(
        {" ".join(str(k).upper().split()): float(v) for k, v in (table or {}).items()}
    )


def default_fuel_config(matching: Optional[MatchingConfig] = None) -> FuelSystemConfig:
    """Built-in configuration snapshot"""
    return FuelSystemConfig(
        route_total_liters=_upper_keys(DEFAULT_ROUTE_TOTAL_LITERS),
        loading_point_extras=_upper_keys(DEFAULT_LOADING_POINT_EXTRAS),
        destination_cluster_extras=_upper_keys(DEFAULT_DESTINATION_CLUSTER_EXTRAS),
        special_destinations=_upper_keys(DEFAULT_SPECIAL_DESTINATIONS),
        truck_batches=DEFAULT_TRUCK_BATCHES,
        batch_destination_overrides=MappingProxyType({}),
        zambia_return_stations=DEFAULT_ZAMBIA_RETURN_STATIONS,
        checkpoint_stations=MappingProxyType(dict(DEFAULT_CHECKPOINT_STATIONS)),
        matching=matching or MatchingConfig(),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# YAML LOADING
# ═══════════════════════════════════════════════════════════════════════════════


def _parse_routes(raw: Any) -> Mapping[str, float]:
    """
    Routes are a list of {destination, total_liters, aliases} entries.
    Aliases are flattened into the lookup table with the route's liters.
    """
    table: Dict[str, float] = {}
    for entry in raw or []:
        if not entry.get("active", True):
            continue
        liters = float(entry["total_liters"])
        names = [entry["destination"], *entry.get("aliases", [])]
        for name in names:
            table[" ".join(str(name).upper().split())] = liters
    return MappingProxyType(table)


def _parse_batches(raw: Any) -> Tuple[TruckBatchTier, ...]:
    tiers = [
        TruckBatchTier(
            name=str(entry["name"]),
            extra_liters=float(entry["extra_liters"]),
            suffixes=frozenset(str(s).strip().lower() for s in entry.get("suffixes", [])),
        )
        for entry in raw or []
    ]
    # Highest bonus first; scanning order is part of the contract
    tiers.sort(key=lambda tier: tier.extra_liters, reverse=True)
    return tuple(tiers)


def _parse_overrides(raw: Any) -> Mapping[str, Tuple[DestinationFuelRule, ...]]:
    overrides = {
        str(suffix).strip().lower(): tuple(
            DestinationFuelRule(
                destination=" ".join(str(rule["destination"]).upper().split()),
                extra_liters=float(rule["extra_liters"]),
            )
            for rule in rules or []
        )
        for suffix, rules in (raw or {}).items()
    }
    return MappingProxyType(overrides)


def _parse_checkpoint_stations(raw: Any) -> Mapping[Checkpoint, str]:
    stations = dict(DEFAULT_CHECKPOINT_STATIONS)
    for key, name in (raw or {}).items():
        stations[Checkpoint(key)] = str(name)
    return MappingProxyType(stations)


def _build_config(
    data: Dict[str, Any],
    matching: Optional[MatchingConfig],
    matching_overrides: Optional[Mapping[str, Any]] = None,
) -> FuelSystemConfig:
    defaults = default_fuel_config()

    if matching is None:
        # File section first, then whatever the environment set explicitly
        matching = MatchingConfig(
            **{**(data.get("matching") or {}), **(matching_overrides or {})}
        )

    stations = data.get("zambia_return_stations")
    yards = data.get("yards", {})

    return FuelSystemConfig(
        route_total_liters=(
            _parse_routes(data["routes"]) if "routes" in data else defaults.route_total_liters
        ),
        loading_point_extras=(
            _upper_keys(data["loading_point_extras"])
            if "loading_point_extras" in data
            else defaults.loading_point_extras
        ),
        destination_cluster_extras=(
            _upper_keys(data["destination_cluster_extras"])
            if "destination_cluster_extras" in data
            else defaults.destination_cluster_extras
        ),
        special_destinations=(
            _upper_keys(data["special_destinations"])
            if "special_destinations" in data
            else defaults.special_destinations
        ),
        truck_batches=(
            _parse_batches(data["truck_batches"])
            if "truck_batches" in data
            else defaults.truck_batches
        ),
        batch_destination_overrides=_parse_overrides(data.get("batch_destination_overrides")),
        zambia_return_stations=(
            tuple(StationAllocation(str(s["name"]), float(s["liters"])) for s in stations)
            if stations
            else defaults.zambia_return_stations
        ),
        checkpoint_stations=_parse_checkpoint_stations(data.get("checkpoint_stations")),
        allocations=StandardAllocations(**data.get("allocations", {})),
        matching=matching,
        primary_yard=str(yards.get("primary", DEFAULT_PRIMARY_YARD)).upper(),
        secondary_yard=str(yards.get("secondary", DEFAULT_SECONDARY_YARD)).upper(),
        origins=tuple(str(o).upper() for o in data.get("origins", DEFAULT_ORIGINS)),
    )


def load_fuel_config(
    path: Optional[Union[str, Path]] = None,
    matching: Optional[MatchingConfig] = None,
    matching_overrides: Optional[Mapping[str, Any]] = None,
) -> FuelSystemConfig:
    """
    Load a configuration snapshot from YAML.

    Sections missing from the file fall back to the built-in defaults.

    Args:
        path: YAML file; defaults to the packaged fuel_config.yaml
        matching: Replaces the file's `matching` section entirely
        matching_overrides: Individual `matching` values applied on top of
            the file's section (e.g. the env vars that are set)

    Raises:
        ConfigurationError: file unreadable, invalid YAML, or malformed entries
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"Cannot read fuel config: {e}", path=str(config_path)) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in fuel config: {e}", path=str(config_path)) from e

    if not isinstance(data, dict):
        raise ConfigurationError("Fuel config must be a mapping", path=str(config_path))

    try:
        config = _build_config(data, matching, matching_overrides)
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Malformed fuel config entry: {e!r}", path=str(config_path)
        ) from e

    logger.info(
        f"✅ Loaded fuel config from {config_path.name}: "
        f"{len(config.route_total_liters)} routes, {len(config.truck_batches)} batches"
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "MatchingConfig",
    "StandardAllocations",
    "StationAllocation",
    "TruckBatchTier",
    "DestinationFuelRule",
    "FuelSystemConfig",
    "default_fuel_config",
    "load_fuel_config",
]
