"""Typed configuration loader for `config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from .geo import NAME_PROPERTY_KEYS


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _optional_mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    return _mapping(value, field_name)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _optional_str(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    return _str(value, field_name)


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"Expected float for '{field_name}'")


def _str_list(value: Any, field_name: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Expected list for '{field_name}'")
    out: list[str] = []
    for idx, item in enumerate(value):
        out.append(_str(item, f"{field_name}[{idx}]"))
    return tuple(out)


def _date(value: Any, field_name: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(_str(value, field_name))
    except ValueError as exc:
        raise ValueError(f"Expected ISO date for '{field_name}'") from exc


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


@dataclass(frozen=True, slots=True)
class PathsConfig:
    status_catalog: Path
    name_mapping: Path
    regions: Path
    geometry: Path
    reports_dir: Path
    logs_dir: Path

    @property
    def build_directories(self) -> tuple[Path, ...]:
        return (self.reports_dir, self.logs_dir)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> PathsConfig:
        return cls(
            status_catalog=_path_from_cfg(raw.get("status_catalog"), "paths.status_catalog", root_dir),
            name_mapping=_path_from_cfg(raw.get("name_mapping"), "paths.name_mapping", root_dir),
            regions=_path_from_cfg(raw.get("regions"), "paths.regions", root_dir),
            geometry=_path_from_cfg(raw.get("geometry"), "paths.geometry", root_dir),
            reports_dir=_path_from_cfg(raw.get("reports_dir"), "paths.reports_dir", root_dir),
            logs_dir=_path_from_cfg(raw.get("logs_dir"), "paths.logs_dir", root_dir),
        )


@dataclass(frozen=True, slots=True)
class SourcesConfig:
    """Optional remote sources. When a URL is set it replaces the local file."""

    name_mapping_url: str | None
    geometry_url: str | None
    request_timeout_s: float
    user_agent: str

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> SourcesConfig:
        timeout = _float(raw.get("request_timeout_s", 30), "sources.request_timeout_s")
        if timeout <= 0:
            raise ValueError("sources.request_timeout_s must be > 0")
        return cls(
            name_mapping_url=_optional_str(raw.get("name_mapping_url"), "sources.name_mapping_url"),
            geometry_url=_optional_str(raw.get("geometry_url"), "sources.geometry_url"),
            request_timeout_s=timeout,
            user_agent=_str(raw.get("user_agent", "councilmap/0.1"), "sources.user_agent"),
        )


@dataclass(frozen=True, slots=True)
class MatchingConfig:
    name_property_keys: tuple[str, ...]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> MatchingConfig:
        keys_raw = raw.get("name_property_keys")
        if keys_raw is None:
            return cls(name_property_keys=NAME_PROPERTY_KEYS)
        keys = _str_list(keys_raw, "matching.name_property_keys")
        if not keys:
            raise ValueError("matching.name_property_keys must not be empty")
        return cls(name_property_keys=keys)


@dataclass(frozen=True, slots=True)
class CatalogConfig:
    default_last_updated: date | None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> CatalogConfig:
        updated_raw = raw.get("default_last_updated")
        return cls(
            default_last_updated=(
                None
                if updated_raw is None
                else _date(updated_raw, "catalog.default_last_updated")
            ),
        )


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path
    paths: PathsConfig
    sources: SourcesConfig
    matching: MatchingConfig
    catalog: CatalogConfig

    @property
    def name_mapping_source(self) -> str | Path:
        return self.sources.name_mapping_url or self.paths.name_mapping

    @property
    def geometry_source(self) -> str | Path:
        return self.sources.geometry_url or self.paths.geometry

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path) -> AppConfig:
        root_dir = source_path.parent.resolve()
        return cls(
            source_path=source_path.resolve(),
            paths=PathsConfig.from_mapping(_mapping(raw.get("paths"), "paths"), root_dir),
            sources=SourcesConfig.from_mapping(_optional_mapping(raw.get("sources"), "sources")),
            matching=MatchingConfig.from_mapping(_optional_mapping(raw.get("matching"), "matching")),
            catalog=CatalogConfig.from_mapping(_optional_mapping(raw.get("catalog"), "catalog")),
        )


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the YAML config file into typed settings."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
