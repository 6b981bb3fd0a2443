"""Helpers for loading the adapter configuration file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Tuple

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .categories import Category, build_categories
from .errors import ConfigError
from .roles import DEFAULT_ROLE_ORDER, SourceRole, parse_roles
from .scaling import DEFAULT_SCALING, ScalingTable

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"

DEFAULT_ROLE_TIMEOUT = 0.25
DEFAULT_NAV_TIMEOUT = 0.25
DEFAULT_INCLINOMETER_TIMEOUT = 0.25

_yaml = YAML(typ="safe")


@dataclass(frozen=True)
class AdapterConfig:
    """Validated configuration for one adapter instance."""

    categories: Mapping[str, Category]
    roles: Tuple[SourceRole, ...] = DEFAULT_ROLE_ORDER
    role_timeout: float = DEFAULT_ROLE_TIMEOUT
    nav_timeout: float = DEFAULT_NAV_TIMEOUT
    inclinometer_timeout: float = DEFAULT_INCLINOMETER_TIMEOUT
    scaling: ScalingTable = field(default=DEFAULT_SCALING)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "AdapterConfig":
        categories = _section(data, "categories", required=True)
        if not categories:
            raise ConfigError("'categories' must define at least one category")
        sources = _section(data, "sources")
        navigation = _section(data, "navigation")
        inclinometer = _section(data, "inclinometer")
        scaling = _section(data, "scaling")

        try:
            roles = parse_roles(sources.get("roles", [r.value for r in DEFAULT_ROLE_ORDER]))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"invalid source roles: {exc}") from exc

        return cls(
            categories=build_categories(categories),
            roles=roles,
            role_timeout=_timeout(sources, "role_timeout_s", DEFAULT_ROLE_TIMEOUT),
            nav_timeout=_timeout(navigation, "timeout_s", DEFAULT_NAV_TIMEOUT),
            inclinometer_timeout=_timeout(inclinometer, "timeout_s", DEFAULT_INCLINOMETER_TIMEOUT),
            scaling=DEFAULT_SCALING.with_overrides(scaling) if scaling else DEFAULT_SCALING,
        )


def _section(data: Mapping[str, object], name: str, *, required: bool = False) -> Dict[str, object]:
    if name not in data:
        if required:
            raise ConfigError(f"config file must contain a '{name}' mapping")
        return {}
    section = data[name]
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"'{name}' must be a mapping")
    return dict(section)


def _timeout(section: Mapping[str, object], key: str, default: float) -> float:
    raw = section.get(key, default)
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ConfigError(f"'{key}' must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"'{key}' must be positive")
    return value


def load_config(path: Path | None = None) -> AdapterConfig:
    """Load and validate the adapter configuration.

    Parameters
    ----------
    path:
        Optional path to a YAML configuration file. When omitted the built-in
        ``config.yaml`` packaged alongside :mod:`efis_adapter` is used.
    """

    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise ConfigError(f"configuration file not found: {config_path}")
    try:
        data = _yaml.load(config_path.read_text(encoding="utf-8"))
    except YAMLError as exc:
        raise ConfigError(f"cannot parse {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("config file must contain a mapping")
    return AdapterConfig.from_mapping(data)
