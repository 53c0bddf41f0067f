"""
Tests for the name mapping table and its loader.
"""

import json

import pytest
import requests

from councilmap.mapping import NameMappingTable, load_name_mapping
from councilmap.models import DataValidationError


class TestNameMappingTable:

    def test_lookup_is_case_and_space_insensitive(self, mapping):
        assert mapping.lookup_id("Council of the City of Sydney") == "SYDNEY"
        assert mapping.lookup_id("  COUNCIL OF THE CITY OF  SYDNEY ") == "SYDNEY"
        assert mapping.lookup_id("Sydney") is None

    def test_keys_normalized(self):
        table = NameMappingTable({" lithgow  city ": "Lithgow City Council"})
        assert "LITHGOW CITY" in table
        assert table.authoritative_name("lithgow city") == "Lithgow City Council"

    def test_reverse_index_built_once(self, mapping):
        first = mapping.reverse_index
        assert mapping.reverse_index is first

    def test_first_key_wins_on_shared_authoritative_name(self):
        table = NameMappingTable({"A": "Same Council", "B": "same council"})
        assert table.lookup_id("Same Council") == "A"
        assert len(table.reverse_index) == 1

    @pytest.mark.parametrize("entries", [{"A": 3}, {"A": ""}, {"": "X"}])
    def test_bad_entries_rejected(self, entries):
        with pytest.raises(DataValidationError):
            NameMappingTable(entries)

    def test_from_document_requires_mapping(self):
        with pytest.raises(DataValidationError):
            NameMappingTable.from_document(["SYDNEY"])


class TestLoadNameMapping:

    def test_loads_file(self, tmp_path, raw_mapping):
        path = tmp_path / "mapping.json"
        path.write_text(json.dumps(raw_mapping), encoding="utf-8")
        table = load_name_mapping(path)
        assert len(table) == len(raw_mapping)

    def test_missing_file_degrades(self, tmp_path, caplog):
        with caplog.at_level("WARNING", logger="councilmap.mapping"):
            assert load_name_mapping(tmp_path / "missing.json") is None
        assert "not found" in caplog.text

    def test_malformed_document_raises(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text('["SYDNEY"]', encoding="utf-8")
        with pytest.raises(DataValidationError):
            load_name_mapping(path)

    def test_unparseable_document_raises(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text("{oops", encoding="utf-8")
        with pytest.raises(DataValidationError):
            load_name_mapping(path)

    def test_fetches_url_once(self, fake_session_factory, raw_mapping):
        url = "https://example.org/mapping.json"
        session = fake_session_factory({url: raw_mapping})
        table = load_name_mapping(url, session=session, timeout_s=5)
        assert table.lookup_id("City of Newcastle") == "NEWCASTLE"
        assert session.calls == [(url, 5)]

    def test_http_error_degrades(self, fake_session_factory):
        url = "https://example.org/mapping.json"
        session = fake_session_factory({})
        assert load_name_mapping(url, session=session) is None
        assert len(session.calls) == 1

    def test_connection_error_degrades(self, fake_session_factory):
        url = "https://example.org/mapping.json"
        session = fake_session_factory({url: requests.ConnectionError("down")})
        assert load_name_mapping(url, session=session) is None
