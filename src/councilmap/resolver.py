"""Resolve authoritative boundary names to status catalog entries.

Resolution runs two stages and stops at the first hit:

1. exact lookup through the name mapping table (when one was loaded);
2. qualifier-stripped comparison against every catalog id, accepting equal
   names or a substring in either direction.

When several catalog entries pass stage 2, the first in catalog order wins.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .catalog import StatusCatalog
from .mapping import NameMappingTable
from .metrics import MatchMethod, NullObserver, ResolutionObserver
from .models import EntityRecord, collapse_whitespace

_LOGGER = logging.getLogger("councilmap.resolver")

# Longest phrases first so that "CITY OF" is removed whole rather than leaving "OF".
QUALIFIER_PHRASES = (
    "THE COUNCIL OF THE",
    "COUNCIL OF THE",
    "MUNICIPALITY OF",
    "CITY OF",
    "SHIRE OF",
    "CITY",
    "SHIRE",
    "REGIONAL",
    "MUNICIPAL",
    "COUNCIL",
)
_QUALIFIER_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(phrase) for phrase in QUALIFIER_PHRASES) + r")\b"
)


def normalize_name(value: str) -> str:
    """Uppercase, drop boundary qualifier words and collapse whitespace.

    Stripping repeats until nothing changes, so the result is a fixed point.
    """
    current = collapse_whitespace(value.upper())
    while True:
        stripped = collapse_whitespace(_QUALIFIER_RE.sub(" ", current))
        if stripped == current:
            return current
        current = stripped


@dataclass(frozen=True, slots=True)
class Resolution:
    name: str | None
    entity: EntityRecord | None
    method: MatchMethod

    @property
    def found(self) -> bool:
        return self.entity is not None


class NameResolver:
    def __init__(
        self,
        catalog: StatusCatalog,
        mapping: NameMappingTable | None = None,
        *,
        observer: ResolutionObserver | None = None,
    ) -> None:
        self.catalog = catalog
        self.mapping = mapping
        self.observer: ResolutionObserver = observer or NullObserver()
        self._normalized_ids: list[tuple[str, EntityRecord]] | None = None
        if mapping is None:
            reason = "name mapping table unavailable; using fuzzy matching only"
            _LOGGER.warning("Degraded mode: %s", reason)
            self.observer.record_degraded(reason)

    @property
    def degraded(self) -> bool:
        return self.mapping is None

    def resolve(self, name: str | None) -> EntityRecord | None:
        return self.match(name).entity

    def match(self, name: str | None) -> Resolution:
        if not isinstance(name, str) or not name.strip():
            return self._finish(Resolution(name=None, entity=None, method=MatchMethod.NOT_FOUND))

        entity = self._match_mapping(name)
        if entity is not None:
            return self._finish(Resolution(name=name, entity=entity, method=MatchMethod.MAPPING))

        entity = self._match_fuzzy(name)
        if entity is not None:
            return self._finish(Resolution(name=name, entity=entity, method=MatchMethod.FUZZY))

        _LOGGER.debug("No catalog entry for boundary name %r", name)
        return self._finish(Resolution(name=name, entity=None, method=MatchMethod.NOT_FOUND))

    def _finish(self, resolution: Resolution) -> Resolution:
        self.observer.record_resolution(resolution.method, resolution.name)
        return resolution

    def _match_mapping(self, name: str) -> EntityRecord | None:
        if self.mapping is None:
            return None
        mapped_id = self.mapping.lookup_id(name)
        if mapped_id is None:
            return None
        entity = self.catalog.get(mapped_id)
        if entity is None:
            _LOGGER.debug("Mapping entry %r has no catalog record; trying fuzzy match", mapped_id)
        return entity

    def _match_fuzzy(self, name: str) -> EntityRecord | None:
        target = normalize_name(name)
        if not target:
            return None
        for normalized, record in self._catalog_index():
            if normalized == target or target in normalized or normalized in target:
                return record
        return None

    def _catalog_index(self) -> list[tuple[str, EntityRecord]]:
        if self._normalized_ids is None:
            self._normalized_ids = [
                (normalized, record)
                for record in self.catalog
                if (normalized := normalize_name(record.id))
            ]
        return self._normalized_ids
