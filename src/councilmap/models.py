"""Domain models shared across pipeline modules."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Iterable, Mapping

_WHITESPACE_RE = re.compile(r"\s+")
_WORD_START_RE = re.compile(r"\b\w")


class DataValidationError(ValueError):
    """Raised when an input document fails validation at load time."""


def collapse_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value).strip()


def entity_id(name: str) -> str:
    """Canonical internal id: uppercased, trimmed, single-spaced."""
    return collapse_whitespace(name).upper()


def title_case(value: str) -> str:
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), value.lower())


def _optional_str(value: Any, field_name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DataValidationError(f"Expected string for '{field_name}'")
    return value.strip()


class Status(Enum):
    """Three-valued policy status."""

    USING = "Yes"
    FREE = "No"
    UNKNOWN = "Unknown"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @classmethod
    def from_wire(cls, value: Any) -> Status:
        """Strict parse for stored documents: exactly Yes, No or Unknown."""
        for status in cls:
            if value == status.value:
                return status
        raise DataValidationError(f"Invalid status {value!r}; must be one of: {_allowed_values()}")

    @classmethod
    def from_raw(cls, value: Any) -> Status:
        """Lenient parse for user input; also takes names and labels in any case."""
        if isinstance(value, Status):
            return value
        if isinstance(value, str):
            raw = value.strip()
            for status in cls:
                if raw == status.value:
                    return status
            by_name = raw.casefold()
            for status in cls:
                if by_name in (status.name.casefold(), status.label.casefold()):
                    return status
        raise DataValidationError(f"Invalid status {value!r}; must be one of: {_allowed_values()}")


_STATUS_LABELS = {
    Status.USING: "Using",
    Status.FREE: "Free",
    Status.UNKNOWN: "Unknown",
}


def _allowed_values() -> str:
    return ", ".join(status.value for status in Status)


@dataclass(frozen=True, slots=True)
class EntityRecord:
    """One curated status record, keyed by its normalized internal name."""

    id: str
    display_name: str
    status: Status
    region: str
    notes: str
    contact_email: str
    last_updated: date

    @classmethod
    def from_mapping(
        cls,
        name: str,
        data: Mapping[str, Any],
        *,
        region: str,
        default_last_updated: date,
    ) -> EntityRecord:
        if not isinstance(name, str) or not name.strip():
            raise DataValidationError("Expected non-empty string for entity name")
        status_raw = data.get("status", data.get("sgars"))
        if status_raw is None:
            raise DataValidationError(f"Missing status for '{name}'")
        try:
            status = Status.from_wire(status_raw)
        except DataValidationError as exc:
            raise DataValidationError(f"{name}: {exc}") from exc

        region_raw = data.get("region")
        if isinstance(region_raw, str) and region_raw.strip():
            region = region_raw.strip()

        updated_raw = data.get("last_updated", data.get("lastUpdated"))
        if updated_raw is None:
            last_updated = default_last_updated
        elif isinstance(updated_raw, date):
            last_updated = updated_raw
        elif isinstance(updated_raw, str):
            try:
                last_updated = date.fromisoformat(updated_raw.strip())
            except ValueError as exc:
                raise DataValidationError(
                    f"{name}: invalid last_updated date {updated_raw!r}"
                ) from exc
        else:
            raise DataValidationError(f"{name}: invalid last_updated value {updated_raw!r}")

        return cls(
            id=entity_id(name),
            display_name=title_case(collapse_whitespace(name)),
            status=status,
            region=region,
            notes=_optional_str(data.get("notes"), f"{name}.notes"),
            contact_email=_optional_str(data.get("email"), f"{name}.email"),
            last_updated=last_updated,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "status": self.status.value,
            "region": self.region,
            "notes": self.notes,
            "contact_email": self.contact_email,
            "last_updated": self.last_updated.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class FilterCriteria:
    """Active filter selection. Empty sets and an empty search match everything."""

    statuses: frozenset[Status] = field(default_factory=frozenset)
    regions: frozenset[str] = field(default_factory=frozenset)
    search: str = ""

    @classmethod
    def build(
        cls,
        *,
        statuses: Iterable[Status | str] = (),
        regions: Iterable[str] = (),
        search: str | None = None,
    ) -> FilterCriteria:
        return cls(
            statuses=frozenset(Status.from_raw(item) for item in statuses),
            regions=frozenset(item.strip() for item in regions if item and item.strip()),
            search=(search or "").strip(),
        )

    @property
    def is_noop(self) -> bool:
        return not self.statuses and not self.regions and not self.search


@dataclass(frozen=True, slots=True)
class StyleDescriptor:
    fill_color: str
    border_color: str | None
    visible: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "fill_color": self.fill_color,
            "border_color": self.border_color,
            "visible": self.visible,
        }


@dataclass(frozen=True, slots=True)
class GeoFeature:
    """Externally owned geometry with its property bag. Never mutated here."""

    properties: Mapping[str, Any]
    geometry: Mapping[str, Any] | None = None
    feature_id: str | None = None

    @classmethod
    def from_geojson(cls, raw: Mapping[str, Any]) -> GeoFeature:
        properties = raw.get("properties")
        if properties is None:
            properties = {}
        if not isinstance(properties, Mapping):
            raise ValueError("Expected mapping for feature 'properties'")
        geometry = raw.get("geometry")
        if geometry is not None and not isinstance(geometry, Mapping):
            raise ValueError("Expected mapping or null for feature 'geometry'")
        feature_id = raw.get("id")
        return cls(
            properties=dict(properties),
            geometry=geometry,
            feature_id=str(feature_id) if feature_id is not None else None,
        )
