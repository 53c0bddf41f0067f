"""Boundary dataset loading and name-property probing."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

import requests

from .models import GeoFeature
from .util import fetch_json, is_url, read_document

_LOGGER = logging.getLogger("councilmap.geo")

# Boundary publishers have used different property names across releases.
NAME_PROPERTY_KEYS = (
    "lga_name_2021",
    "lga_name_2016",
    "lga_name",
    "LGA_NAME",
    "lganame",
    "abb_name",
    "name",
    "NAME",
)


def first_non_empty(properties: Mapping[str, Any], keys: Sequence[str]) -> str | None:
    """Return the first property in `keys` holding a non-blank string."""
    for key in keys:
        value = properties.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def parse_feature_collection(raw: Any) -> list[GeoFeature]:
    if not isinstance(raw, Mapping):
        raise ValueError("Expected GeoJSON object")
    if raw.get("type") == "Feature":
        return [GeoFeature.from_geojson(raw)]
    features_raw = raw.get("features")
    if not isinstance(features_raw, list):
        raise ValueError("Expected 'features' list in GeoJSON FeatureCollection")
    features: list[GeoFeature] = []
    for idx, item in enumerate(features_raw):
        if not isinstance(item, Mapping):
            raise ValueError(f"Expected feature mapping at index {idx}")
        features.append(GeoFeature.from_geojson(item))
    return features


def load_geo_features(
    source: str | Path,
    *,
    session: requests.Session | None = None,
    timeout_s: float = 30.0,
) -> list[GeoFeature]:
    """Load boundary features in one attempt.

    Any failure yields an empty list; downstream styling copes with no features.
    """
    try:
        if is_url(source):
            if session is None:
                raise ValueError("An HTTP session is required for remote geometry sources")
            raw = fetch_json(session, str(source), timeout_s=timeout_s)
        else:
            path = Path(source)
            if not path.exists():
                _LOGGER.warning("Geometry file not found: %s", path)
                return []
            raw = read_document(path)
        features = parse_feature_collection(raw)
    except (requests.RequestException, json.JSONDecodeError, OSError, ValueError) as exc:
        _LOGGER.warning("Failed loading geometry from %s: %s", source, exc)
        return []
    _LOGGER.info("Loaded %d boundary features from %s", len(features), source)
    return features
