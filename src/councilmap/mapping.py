"""Exact internal-name to authoritative-name mapping table."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

import requests
import yaml

from .models import DataValidationError, collapse_whitespace, entity_id
from .util import fetch_json, is_url, read_document

_LOGGER = logging.getLogger("councilmap.mapping")


def _authoritative_key(name: str) -> str:
    return collapse_whitespace(name).upper()


class NameMappingTable:
    """Read-only id -> authoritative name table.

    The reverse index is derived on first use and then reused for every lookup.
    """

    def __init__(self, entries: Mapping[str, str]) -> None:
        self._entries: dict[str, str] = {}
        for key, value in entries.items():
            if not isinstance(key, str) or not key.strip():
                raise DataValidationError(f"Mapping key must be a non-empty string, got {key!r}")
            if not isinstance(value, str) or not value.strip():
                raise DataValidationError(f"Mapping value for '{key}' must be a non-empty string")
            self._entries[entity_id(key)] = value.strip()
        self._reverse: dict[str, str] | None = None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entity_id_: object) -> bool:
        return isinstance(entity_id_, str) and entity_id(entity_id_) in self._entries

    @property
    def entries(self) -> dict[str, str]:
        return dict(self._entries)

    @property
    def reverse_index(self) -> Mapping[str, str]:
        if self._reverse is None:
            reverse: dict[str, str] = {}
            for key, authoritative in self._entries.items():
                # First entry wins when two ids claim the same authoritative name.
                reverse.setdefault(_authoritative_key(authoritative), key)
            self._reverse = reverse
        return self._reverse

    def authoritative_name(self, entity_id_: str) -> str | None:
        return self._entries.get(entity_id(entity_id_))

    def lookup_id(self, authoritative_name: str) -> str | None:
        return self.reverse_index.get(_authoritative_key(authoritative_name))

    @classmethod
    def from_document(cls, raw: Any) -> NameMappingTable:
        if not isinstance(raw, Mapping):
            raise DataValidationError("Name mapping document must be a mapping of strings")
        return cls(raw)


def load_name_mapping(
    source: str | Path,
    *,
    session: requests.Session | None = None,
    timeout_s: float = 30.0,
) -> NameMappingTable | None:
    """Load the mapping table; `None` means run without it.

    Missing or unreachable sources degrade silently to fuzzy-only matching.
    A document that is present but malformed raises `DataValidationError`.
    """
    if is_url(source):
        if session is None:
            raise ValueError("An HTTP session is required for remote name mapping sources")
        try:
            raw = fetch_json(session, str(source), timeout_s=timeout_s)
        except (requests.RequestException, json.JSONDecodeError) as exc:
            _LOGGER.warning("Name mapping unavailable from %s: %s", source, exc)
            return None
    else:
        path = Path(source)
        if not path.exists():
            _LOGGER.warning("Name mapping file not found: %s", path)
            return None
        try:
            raw = read_document(path)
        except (ValueError, yaml.YAMLError) as exc:
            raise DataValidationError(f"Failed parsing name mapping {path}: {exc}") from exc

    table = NameMappingTable.from_document(raw)
    _LOGGER.info("Loaded %d name mapping entries from %s", len(table), source)
    return table
