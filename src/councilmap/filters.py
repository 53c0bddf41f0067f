"""Conjunctive status/region/search predicate over catalog records."""

from __future__ import annotations

from typing import Iterable

from .models import EntityRecord, FilterCriteria


def search_text(entity: EntityRecord) -> str:
    """Searchable text: name, region and notes joined by single spaces."""
    return f"{entity.display_name} {entity.region} {entity.notes}"


def matches(entity: EntityRecord, criteria: FilterCriteria) -> bool:
    if criteria.statuses and entity.status not in criteria.statuses:
        return False
    if criteria.regions and entity.region not in criteria.regions:
        return False
    if criteria.search:
        return criteria.search.casefold() in search_text(entity).casefold()
    return True


def filter_entities(entities: Iterable[EntityRecord], criteria: FilterCriteria) -> list[EntityRecord]:
    return [entity for entity in entities if matches(entity, criteria)]
