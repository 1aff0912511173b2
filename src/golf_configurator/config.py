"""YAML configuration loader for catalog and business rules."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from golf_configurator.models.pydantic_models import BusinessRules, Club, GripCatalogEntry

CONFIG_ENV_VAR = "GOLF_CONFIGURATOR_CONFIG"

DEFAULT_CLUBS: list[Club] = [
    Club(id="4", name="4-Iron", type="iron", is_required=False, is_optional=True),
    Club(id="5", name="5-Iron", type="iron", is_required=False, is_optional=True),
    Club(id="6", name="6-Iron", type="iron", is_required=True, is_optional=False),
    Club(id="7", name="7-Iron", type="iron", is_required=True, is_optional=False),
    Club(id="8", name="8-Iron", type="iron", is_required=True, is_optional=False),
    Club(id="9", name="9-Iron", type="iron", is_required=True, is_optional=False),
    Club(id="PW", name="Pitching Wedge", type="wedge", is_required=True, is_optional=False),
]


class TitleTemplates(BaseModel):
    """Title templates for merged bundles."""

    base: str = "Custom Golf Iron Set - {set_size}"
    with_shaft: str = "Custom Golf Iron Set - {set_size} with {shaft}"

    model_config = ConfigDict(frozen=True)


class PersistenceSettings(BaseModel):
    """Settings for the debounced selection writer."""

    enabled: bool = True
    debounce_ms: int = Field(300, ge=0)

    model_config = ConfigDict(frozen=True)


class ConfiguratorConfig(BaseModel):
    """Complete configurator configuration."""

    rules: BusinessRules = Field(default_factory=BusinessRules)
    clubs: list[Club] = Field(default_factory=lambda: list(DEFAULT_CLUBS))
    grips: dict[str, GripCatalogEntry] = Field(default_factory=dict)
    shaft_brands: list[str] = Field(default_factory=list)
    title_templates: TitleTemplates = Field(default_factory=TitleTemplates)
    required_properties: list[str] = Field(
        default_factory=lambda: ["bundleId", "parentVariantId", "componentType"],
        description="Line properties every bundle line must carry",
    )
    persistence: PersistenceSettings = Field(default_factory=PersistenceSettings)

    model_config = ConfigDict(frozen=True)

    def club_by_id(self, club_id: str) -> Club | None:
        """Look up a catalog club by id."""
        for club in self.clubs:
            if club.id == club_id:
                return club
        return None


def _get_default_config_path() -> Path:
    """Get the config path from the environment or relative to project root."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path(__file__).parent.parent.parent / "config" / "configurator.yaml"


def _load_raw_config(path: Path | None = None) -> dict[str, Any]:
    """Load raw YAML config from path.

    Args:
        path: Path to YAML config file. If None, uses default config/configurator.yaml.

    Returns:
        Raw config dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If YAML parsing fails.
    """
    if path is None:
        path = _get_default_config_path()

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        raw_config: dict[str, Any] | None = yaml.safe_load(f)

    return raw_config if raw_config is not None else {}


def _parse_clubs(clubs_data: list[dict[str, Any]]) -> list[Club]:
    """Parse the club catalog section.

    Args:
        clubs_data: List of club dictionaries from YAML.

    Returns:
        List of validated Club instances.
    """
    clubs = []
    for club_dict in clubs_data:
        is_required = club_dict.get("is_required", False)
        club = Club(
            id=str(club_dict["id"]),
            name=club_dict["name"],
            type=club_dict.get("type", "iron"),
            is_required=is_required,
            is_optional=club_dict.get("is_optional", not is_required),
        )
        clubs.append(club)
    return clubs


def load_configurator_config(path: Path | None = None) -> ConfiguratorConfig:
    """Load and validate the configurator configuration from YAML.

    Sections that are absent fall back to the built-in defaults.

    Args:
        path: Path to YAML config file. If None, uses $GOLF_CONFIGURATOR_CONFIG
            or config/configurator.yaml.

    Returns:
        Validated ConfiguratorConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If YAML parsing fails.
        ValidationError: If config doesn't match expected schema.
    """
    raw_config = _load_raw_config(path)

    values: dict[str, Any] = {}

    if "rules" in raw_config:
        rules_dict = dict(raw_config["rules"] or {})
        # YAML may give numeric club ids
        if "required_clubs" in rules_dict:
            rules_dict["required_clubs"] = [str(c) for c in rules_dict["required_clubs"]]
        if "dependencies" in rules_dict:
            rules_dict["dependencies"] = {
                str(k): [str(v) for v in deps] for k, deps in rules_dict["dependencies"].items()
            }
        values["rules"] = BusinessRules(**rules_dict)

    if "clubs" in raw_config:
        values["clubs"] = _parse_clubs(raw_config["clubs"])

    if "grips" in raw_config:
        values["grips"] = {
            brand: GripCatalogEntry(**(entry or {}))
            for brand, entry in raw_config["grips"].items()
        }

    for key in ("shaft_brands", "required_properties"):
        if key in raw_config:
            values[key] = raw_config[key]

    if "title_templates" in raw_config:
        values["title_templates"] = TitleTemplates(**raw_config["title_templates"])

    if "persistence" in raw_config:
        values["persistence"] = PersistenceSettings(**raw_config["persistence"])

    return ConfiguratorConfig(**values)


def load_rules(path: Path | None = None) -> BusinessRules:
    """Load only the business rules section.

    Args:
        path: Path to YAML config file. If None, uses the default path.

    Returns:
        BusinessRules instance.
    """
    return load_configurator_config(path).rules


def load_catalog(path: Path | None = None) -> list[Club]:
    """Load only the club catalog.

    Args:
        path: Path to YAML config file. If None, uses the default path.

    Returns:
        List of catalog clubs.
    """
    return load_configurator_config(path).clubs
