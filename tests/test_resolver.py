"""
Tests for boundary name resolution.
"""

import pytest

from councilmap.catalog import StatusCatalog
from councilmap.mapping import NameMappingTable
from councilmap.metrics import MatchMethod, ResolutionStats
from councilmap.resolver import NameResolver, normalize_name


class TestNormalizeName:

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Lithgow City Council", "LITHGOW"),
            ("LITHGOW CITY", "LITHGOW"),
            ("Council of the City of Sydney", "SYDNEY"),
            ("The Council of the Shire of Hornsby", "HORNSBY"),
            ("Municipality of Kiama", "KIAMA"),
            ("Tamworth Regional Council", "TAMWORTH"),
            ("  Upper   Hunter  Shire ", "UPPER HUNTER"),
            ("Ku-ring-gai Council", "KU-RING-GAI"),
            ("City Council", ""),
        ],
    )
    def test_strips_qualifiers(self, raw, expected):
        assert normalize_name(raw) == expected

    def test_qualifier_inside_word_kept(self):
        assert normalize_name("Cityview Shireton") == "CITYVIEW SHIRETON"

    @pytest.mark.parametrize(
        "raw",
        [
            "Council of the City of Sydney",
            "THE COUNCIL OF SHIRE THE",
            "City of City of Shire of X",
            "plain name",
            "",
        ],
    )
    def test_idempotent(self, raw):
        once = normalize_name(raw)
        assert normalize_name(once) == once


class TestMappingStage:

    def test_every_mapped_name_resolves_to_its_key(self, resolver, raw_mapping):
        for key, authoritative in raw_mapping.items():
            record = resolver.resolve(authoritative)
            assert record is not None
            assert record.id == key.upper()

    def test_case_insensitive_mapping_hit(self, resolver):
        match = resolver.match("council of the city of sydney")
        assert match.method is MatchMethod.MAPPING
        assert match.entity.id == "SYDNEY"

    def test_sydney_via_mapping(self, catalog):
        resolver = NameResolver(catalog, NameMappingTable({"SYDNEY": "Council of the City of Sydney"}))
        match = resolver.match("Council of the City of Sydney")
        assert match.method is MatchMethod.MAPPING
        assert match.entity is catalog.get("SYDNEY")

    def test_stale_mapping_falls_through_to_fuzzy(self, catalog):
        mapping = NameMappingTable({"LITHGOW": "Lithgow City Council"})
        resolver = NameResolver(catalog, mapping)
        match = resolver.match("Lithgow City Council")
        assert match.method is MatchMethod.FUZZY
        assert match.entity.id == "LITHGOW CITY"

    def test_double_spaced_mapping_key(self, catalog):
        mapping = NameMappingTable({"LITHGOW  CITY": "Lithgow Council Area"})
        resolver = NameResolver(catalog, mapping)
        assert resolver.match("Lithgow Council Area").method is MatchMethod.MAPPING


class TestFuzzyStage:

    def test_lithgow_without_mapping(self, catalog):
        resolver = NameResolver(catalog)
        record = resolver.resolve("Lithgow City Council")
        assert record is catalog.get("LITHGOW CITY")

    def test_substring_either_direction(self, catalog):
        resolver = NameResolver(catalog)
        assert resolver.resolve("Newcastle").id == "NEWCASTLE"
        assert resolver.resolve("Greater Newcastle City").id == "NEWCASTLE"

    def test_first_catalog_entry_wins(self):
        catalog = StatusCatalog.from_mapping(
            {
                "NORTH SYDNEY": {"status": "No"},
                "SYDNEY": {"status": "Yes"},
            }
        )
        resolver = NameResolver(catalog)
        assert resolver.resolve("Sydney").id == "NORTH SYDNEY"

    def test_qualifier_only_name_never_matches(self, catalog):
        resolver = NameResolver(catalog)
        assert resolver.resolve("City Council") is None

    def test_unrelated_name_not_found(self, resolver):
        match = resolver.match("Unincorporated Far West")
        assert match.method is MatchMethod.NOT_FOUND
        assert not match.found


class TestResolverContract:

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_empty_input_not_found(self, resolver, value):
        assert resolver.resolve(value) is None

    def test_repeat_calls_return_same_record(self, resolver):
        first = resolver.resolve("Lithgow City Council")
        assert resolver.resolve("Lithgow City Council") is first
        assert resolver.resolve("Ku-ring-gai Council") is resolver.resolve("Ku-ring-gai Council")

    def test_outcomes_reported_to_observer(self, resolver, stats):
        resolver.resolve("Council of the City of Sydney")
        resolver.resolve("Lithgow City Council")
        resolver.resolve("Nowhere")
        resolver.resolve("")
        assert stats.counts[MatchMethod.MAPPING] == 1
        assert stats.counts[MatchMethod.FUZZY] == 1
        assert stats.counts[MatchMethod.NOT_FOUND] == 2
        assert stats.missed_names == {"Nowhere"}
        assert not stats.degraded

    def test_degraded_mode_reported_once(self, catalog, caplog):
        stats = ResolutionStats()
        with caplog.at_level("WARNING", logger="councilmap.resolver"):
            resolver = NameResolver(catalog, None, observer=stats)
            resolver.resolve("Lithgow City Council")
            resolver.resolve("Nowhere")
        assert resolver.degraded
        assert len(stats.degraded_reasons) == 1
        assert caplog.text.count("Degraded mode") == 1
