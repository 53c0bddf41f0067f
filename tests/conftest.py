"""
Pytest configuration and shared fixtures.
"""

import json
from datetime import date
from pathlib import Path
from typing import Any, Dict

import pytest
import requests
import yaml

from councilmap.catalog import StatusCatalog
from councilmap.mapping import NameMappingTable
from councilmap.metrics import ResolutionStats
from councilmap.resolver import NameResolver


FIXED_DATE = date(2025, 1, 22)


@pytest.fixture
def raw_catalog() -> Dict[str, Any]:
    """Curated status records keyed by internal name."""
    return {
        "SYDNEY": {"status": "Yes", "notes": "Baits in parks.", "email": "council@cityofsydney.nsw.gov.au"},
        "LITHGOW CITY": {"status": "No", "notes": "Wildlife-safe pest control.", "email": "council@lithgow.nsw.gov.au"},
        "NEWCASTLE": {"status": "Unknown", "notes": "", "email": "mail@ncc.nsw.gov.au"},
        "KU-RING-GAI": {"status": "No", "notes": "SGAR-free since 2023.", "email": "krg@krg.nsw.gov.au"},
        "TAMWORTH REGIONAL": {"status": "Yes", "notes": "Used at the waste facility.", "email": "trc@tamworth.nsw.gov.au"},
    }


@pytest.fixture
def region_table() -> Dict[str, str]:
    return {
        "SYDNEY": "Metro South",
        "LITHGOW CITY": "Central West",
        "NEWCASTLE": "Hunter",
        "KU-RING-GAI": "Metro North",
        "TAMWORTH REGIONAL": "Northern Inland",
    }


@pytest.fixture
def catalog(raw_catalog, region_table) -> StatusCatalog:
    return StatusCatalog.from_mapping(
        raw_catalog,
        regions=region_table,
        default_last_updated=FIXED_DATE,
    )


@pytest.fixture
def raw_mapping() -> Dict[str, str]:
    return {
        "SYDNEY": "Council of the City of Sydney",
        "NEWCASTLE": "City of Newcastle",
        "KU-RING-GAI": "Ku-ring-gai Council",
        "TAMWORTH REGIONAL": "Tamworth Regional Council",
    }


@pytest.fixture
def mapping(raw_mapping) -> NameMappingTable:
    return NameMappingTable(raw_mapping)


@pytest.fixture
def stats() -> ResolutionStats:
    return ResolutionStats()


@pytest.fixture
def resolver(catalog, mapping, stats) -> NameResolver:
    return NameResolver(catalog, mapping, observer=stats)


class FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self) -> Any:
        return self._payload


class FakeSession:
    """Stands in for requests.Session; records every GET."""

    def __init__(self, routes: Dict[str, Any]) -> None:
        self.routes = routes
        self.calls: list = []
        self.closed = False

    def __enter__(self) -> "FakeSession":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.closed = True

    def get(self, url: str, timeout: float = None) -> FakeResponse:
        self.calls.append((url, timeout))
        route = self.routes.get(url)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, FakeResponse):
            return route
        if route is None:
            return FakeResponse(None, status_code=404)
        return FakeResponse(route)


@pytest.fixture
def fake_session_factory():
    return FakeSession


def feature_collection(*names_by_key: Dict[str, str]) -> Dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "id": f"f-{idx}",
                "properties": dict(props),
                "geometry": None,
            }
            for idx, props in enumerate(names_by_key)
        ],
    }


@pytest.fixture
def make_feature_collection():
    return feature_collection


@pytest.fixture
def project_dir(tmp_path, raw_catalog, raw_mapping, region_table) -> Path:
    """A config.yaml with local data files, laid out like a real checkout."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "council_status.json").write_text(json.dumps(raw_catalog), encoding="utf-8")
    (data_dir / "council_name_mapping.json").write_text(json.dumps(raw_mapping), encoding="utf-8")
    regions: Dict[str, list] = {}
    for name, region in region_table.items():
        regions.setdefault(region, []).append(name)
    (data_dir / "regions.yaml").write_text(yaml.safe_dump(regions), encoding="utf-8")
    geo = feature_collection(
        {"lga_name_2021": "Council of the City of Sydney"},
        {"lga_name": "Lithgow City Council"},
        {"name": "Unincorporated Far West"},
    )
    (data_dir / "lga_boundaries.geojson").write_text(json.dumps(geo), encoding="utf-8")
    config = {
        "paths": {
            "status_catalog": "data/council_status.json",
            "name_mapping": "data/council_name_mapping.json",
            "regions": "data/regions.yaml",
            "geometry": "data/lga_boundaries.geojson",
            "reports_dir": "build/reports",
            "logs_dir": "build/logs",
        },
        "catalog": {"default_last_updated": "2025-01-22"},
    }
    (tmp_path / "config.yaml").write_text(yaml.safe_dump(config), encoding="utf-8")
    return tmp_path
