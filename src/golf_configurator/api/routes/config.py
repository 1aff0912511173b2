"""Configuration API endpoints."""

from fastapi import APIRouter

from golf_configurator.api.dependencies import ConfigDep
from golf_configurator.api.schemas import CatalogResponse, RulesResponse

router = APIRouter()


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog(config: ConfigDep) -> CatalogResponse:
    """Get the club, shaft and grip catalog.

    Returns the clubs that can be selected, the shaft brands offered as
    upgrades and the grip models and sizes per brand.
    """
    return CatalogResponse(
        clubs=config.clubs,
        shaft_brands=config.shaft_brands,
        grips=config.grips,
    )


@router.get("/rules", response_model=RulesResponse)
async def get_rules(config: ConfigDep) -> RulesResponse:
    """Get the business rules.

    Returns club count limits, required clubs, club dependencies, lie and
    length options, and the properties every bundle line must carry.
    """
    return RulesResponse(rules=config.rules, required_properties=config.required_properties)
