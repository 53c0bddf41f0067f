"""Status catalog loading, region assignment, and summary statistics."""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping

import yaml

from .models import DataValidationError, EntityRecord, Status, collapse_whitespace, entity_id
from .util import read_document

DEFAULT_REGION = "Other"
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value))


class StatusCatalog:
    """Ordered, id-unique collection of entity records.

    Iteration order is the order of the source document and is the
    tie-break order used by fuzzy name resolution.
    """

    def __init__(self, records: Iterable[EntityRecord]) -> None:
        self._records: list[EntityRecord] = []
        self._by_id: dict[str, EntityRecord] = {}
        for record in records:
            if record.id in self._by_id:
                raise DataValidationError(f"Duplicate entity id '{record.id}'")
            self._records.append(record)
            self._by_id[record.id] = record

    def __iter__(self) -> Iterator[EntityRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, entity_id_: object) -> bool:
        return isinstance(entity_id_, str) and self.get(entity_id_) is not None

    def get(self, entity_id_: str) -> EntityRecord | None:
        """Exact id lookup, then a whitespace-collapsed retry."""
        key = entity_id_.strip().upper()
        found = self._by_id.get(key)
        if found is not None:
            return found
        return self._by_id.get(collapse_whitespace(key))

    def regions(self) -> list[str]:
        return sorted({record.region for record in self._records})

    @classmethod
    def from_mapping(
        cls,
        raw: Mapping[str, Any],
        *,
        regions: Mapping[str, str] | None = None,
        default_last_updated: date | None = None,
    ) -> StatusCatalog:
        region_by_id = regions or {}
        updated = default_last_updated or date.today()
        records: list[EntityRecord] = []
        for name, value in raw.items():
            if not isinstance(name, str):
                raise DataValidationError(f"Catalog key must be a string, got {name!r}")
            if not isinstance(value, Mapping):
                raise DataValidationError(f"Catalog value for '{name}' must be a mapping")
            records.append(
                EntityRecord.from_mapping(
                    name,
                    value,
                    region=region_by_id.get(entity_id(name), DEFAULT_REGION),
                    default_last_updated=updated,
                )
            )
        return cls(records)


def load_region_table(path: Path) -> dict[str, str]:
    """Load optional `region -> [entity names]` YAML, inverted to id -> region."""
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        try:
            raw = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ValueError(f"Failed parsing region table {path}: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Expected mapping in {path}")

    region_by_id: dict[str, str] = {}
    for region_raw, members in raw.items():
        if not isinstance(region_raw, str) or not region_raw.strip():
            raise ValueError(f"Region names must be non-empty strings in {path}")
        region = region_raw.strip()
        if not isinstance(members, list):
            raise ValueError(f"Region '{region}' must list entity names in {path}")
        for member in members:
            if not isinstance(member, str) or not member.strip():
                raise ValueError(f"Region '{region}' has an invalid member in {path}")
            key = entity_id(member)
            previous = region_by_id.get(key)
            if previous is not None and previous != region:
                raise ValueError(f"'{member}' is listed under both '{previous}' and '{region}'")
            region_by_id[key] = region
    return region_by_id


def load_status_catalog(
    path: Path,
    *,
    regions: Mapping[str, str] | None = None,
    default_last_updated: date | None = None,
) -> StatusCatalog:
    """Load and validate the curated status document."""
    if not path.exists():
        raise FileNotFoundError(f"Status catalog not found: {path}")
    try:
        raw = read_document(path)
    except (ValueError, yaml.YAMLError) as exc:
        raise DataValidationError(f"Failed parsing status catalog {path}: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise DataValidationError(f"Expected mapping in {path}")
    return StatusCatalog.from_mapping(
        raw,
        regions=regions,
        default_last_updated=default_last_updated,
    )


def summarize_catalog(catalog: StatusCatalog) -> dict[str, Any]:
    """Counts by status overall and per region."""
    by_region: dict[str, dict[str, int]] = {}
    totals = {status.value: 0 for status in Status}
    for record in catalog:
        totals[record.status.value] += 1
        region_counts = by_region.setdefault(
            record.region,
            {"total": 0, **{status.value: 0 for status in Status}},
        )
        region_counts["total"] += 1
        region_counts[record.status.value] += 1
    return {
        "total": len(catalog),
        "by_status": totals,
        "regions": len(by_region),
        "by_region": {region: by_region[region] for region in sorted(by_region)},
    }
