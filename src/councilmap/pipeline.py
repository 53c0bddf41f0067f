"""Per-feature style computation for boundary layers."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any, Callable, Sequence

import requests

from .catalog import StatusCatalog, load_region_table, load_status_catalog
from .config import AppConfig
from .filters import matches
from .geo import NAME_PROPERTY_KEYS, first_non_empty, load_geo_features
from .mapping import NameMappingTable, load_name_mapping
from .metrics import ResolutionObserver
from .models import FilterCriteria, GeoFeature, StyleDescriptor
from .resolver import NameResolver, Resolution
from .style import HIDDEN_STYLE, UNMAPPED_STYLE, style_for
from .util import build_session, is_url

_LOGGER = logging.getLogger("councilmap.pipeline")

SessionFactory = Callable[[], requests.Session]


@dataclass(frozen=True, slots=True)
class StyledFeature:
    feature: GeoFeature
    resolution: Resolution
    style: StyleDescriptor


class RenderPipeline:
    """Decide the drawn style of each boundary feature.

    Every criteria change restyles all features; there is no incremental
    path. Boundary layers hold a few hundred features, which keeps that cheap.
    """

    def __init__(
        self,
        resolver: NameResolver,
        *,
        property_keys: Sequence[str] = NAME_PROPERTY_KEYS,
    ) -> None:
        if not property_keys:
            raise ValueError("property_keys must not be empty")
        self.resolver = resolver
        self.property_keys = tuple(property_keys)

    def feature_name(self, feature: GeoFeature) -> str | None:
        return first_non_empty(feature.properties, self.property_keys)

    def resolve_feature(self, feature: GeoFeature) -> Resolution:
        return self.resolver.match(self.feature_name(feature))

    def style_feature(
        self,
        feature: GeoFeature,
        criteria: FilterCriteria,
        *,
        hover: bool = False,
    ) -> StyleDescriptor:
        return self._style_resolution(self.resolve_feature(feature), criteria, hover=hover)

    def restyle(
        self,
        features: Sequence[GeoFeature],
        criteria: FilterCriteria,
    ) -> list[StyledFeature]:
        styled: list[StyledFeature] = []
        for feature in features:
            resolution = self.resolve_feature(feature)
            styled.append(
                StyledFeature(
                    feature=feature,
                    resolution=resolution,
                    style=self._style_resolution(resolution, criteria),
                )
            )
        return styled

    @staticmethod
    def _style_resolution(
        resolution: Resolution,
        criteria: FilterCriteria,
        *,
        hover: bool = False,
    ) -> StyleDescriptor:
        entity = resolution.entity
        if entity is None:
            return UNMAPPED_STYLE
        if not matches(entity, criteria):
            return HIDDEN_STYLE
        return style_for(entity.status, hover=hover)


@dataclass(frozen=True, slots=True)
class PipelineInputs:
    catalog: StatusCatalog
    mapping: NameMappingTable | None
    features: list[GeoFeature]


def _load_source(
    loader: Callable[..., Any],
    source: str | Path,
    *,
    session_factory: SessionFactory,
    timeout_s: float,
) -> Any:
    if not is_url(source):
        return loader(source, timeout_s=timeout_s)
    # requests.Session is not thread-safe; each remote load owns its session.
    with session_factory() as session:
        return loader(source, session=session, timeout_s=timeout_s)


def load_inputs(cfg: AppConfig, *, session_factory: SessionFactory | None = None) -> PipelineInputs:
    """Build the catalog and fetch mapping + geometry side by side.

    Catalog validation errors propagate. Mapping and geometry failures degrade.
    """
    if session_factory is None:
        session_factory = partial(build_session, cfg.sources.user_agent)
    regions = load_region_table(cfg.paths.regions)
    catalog = load_status_catalog(
        cfg.paths.status_catalog,
        regions=regions,
        default_last_updated=cfg.catalog.default_last_updated,
    )
    timeout_s = cfg.sources.request_timeout_s
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="councilmap-load") as pool:
        mapping_future = pool.submit(
            _load_source,
            load_name_mapping,
            cfg.name_mapping_source,
            session_factory=session_factory,
            timeout_s=timeout_s,
        )
        features_future = pool.submit(
            _load_source,
            load_geo_features,
            cfg.geometry_source,
            session_factory=session_factory,
            timeout_s=timeout_s,
        )
        mapping = mapping_future.result()
        features = features_future.result()
    _LOGGER.info(
        "Inputs loaded: %d catalog entries, %s mapping entries, %d features",
        len(catalog),
        len(mapping) if mapping is not None else "no",
        len(features),
    )
    return PipelineInputs(catalog=catalog, mapping=mapping, features=features)


def build_pipeline(
    cfg: AppConfig,
    inputs: PipelineInputs,
    *,
    observer: ResolutionObserver | None = None,
) -> RenderPipeline:
    resolver = NameResolver(inputs.catalog, inputs.mapping, observer=observer)
    return RenderPipeline(resolver, property_keys=cfg.matching.name_property_keys)
