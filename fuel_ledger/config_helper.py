"""
Configuration helper for the service layer

Bridges environment settings with the configuration snapshot and the
services built from it.

Usage:
    from fuel_ledger.config_helper import get_fuel_config, create_services

    config = get_fuel_config()
    services = create_services(config)
    opening = services["journey"].open_journey(order)
"""

from typing import Any, Dict

from .config import FuelSystemConfig, load_fuel_config
from .settings import Settings, get_settings


def get_fuel_config(settings: Settings = None) -> FuelSystemConfig:
    """
    Load the fuel configuration snapshot described by the settings.

    Args:
        settings: Optional settings. If None, uses get_settings()

    Returns:
        FuelSystemConfig read from FUEL_CONFIG_PATH (or the packaged YAML),
        with the matching thresholds set in the environment applied on top
        of the file's `matching:` section
    """
    if settings is None:
        settings = get_settings()

    return load_fuel_config(
        settings.config_path,
        matching_overrides=settings.matching.overrides(),
    )


def create_services(config: FuelSystemConfig = None) -> Dict[str, Any]:
    """
    Create all service instances sharing one configuration snapshot.

    Args:
        config: Optional snapshot. If None, uses get_fuel_config()

    Returns:
        Dict with service instances:
        {
            'routes': RouteConfigResolver,
            'batches': TruckBatchResolver,
            'calculator': FuelAllocationCalculator,
            'lifecycle': FuelRecordLifecycle,
            'lpo': LPOAdvisor,
            'journey': JourneyService,
        }
    """
    from .services import (
        FuelAllocationCalculator,
        FuelRecordLifecycle,
        JourneyService,
        LPOAdvisor,
        RouteConfigResolver,
        TruckBatchResolver,
    )

    if config is None:
        config = get_fuel_config()

    routes = RouteConfigResolver(config)
    batches = TruckBatchResolver(config)
    calculator = FuelAllocationCalculator(config, routes)
    lifecycle = FuelRecordLifecycle(config, routes)
    lpo = LPOAdvisor(config)

    return {
        "routes": routes,
        "batches": batches,
        "calculator": calculator,
        "lifecycle": lifecycle,
        "lpo": lpo,
        "journey": JourneyService(
            config,
            route_resolver=routes,
            batch_resolver=batches,
            calculator=calculator,
            lifecycle=lifecycle,
            lpo_advisor=lpo,
        ),
    }
