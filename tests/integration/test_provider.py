"""
Integration tests for the completion provider.

Tests cover:
- complete() per position, with grouping and prefix filtering
- validate() error positions and codes
- decode() of full and partial headings
- get_field_suggestions() and the module-level helpers
"""

import logging

import pytest

from ttaaii import (
    CompletionOptions,
    ErrorCode,
    ProviderConfig,
    RegionalConfig,
    TableEntry,
    TableExtension,
    TtaaiiContext,
    TtaaiiField,
    TtaaiiProvider,
    complete,
    decode,
    get_field_suggestions,
    validate,
)


class TestComplete:
    """Tests for TtaaiiProvider.complete()."""

    def test_empty_input(self, provider):
        result = provider.complete("")
        assert result.position == 0
        assert result.field == TtaaiiField.T1
        assert result.table_id == "A"
        assert len(result.items) > 20
        assert not result.is_complete

    def test_analyses_subtypes(self, provider):
        result = provider.complete("A")
        assert result.field == TtaaiiField.T2
        labels = {item.code: item.label for item in result.items}
        assert labels["C"] == "Cyclone"
        assert labels["S"] == "Surface"
        assert labels["U"] == "Upper air"

    def test_lowercase_normalized(self, provider):
        result = provider.complete("s")
        assert result.input == "S"
        assert result.field == TtaaiiField.T2
        assert "A" in [item.code for item in result.items]

    def test_metar_subtype_carries_code_form(self, provider):
        result = provider.complete("S")
        metar = next(item for item in result.items if item.code == "A")
        assert "METAR" in metar.code_form

    def test_country_a1(self, provider):
        result = provider.complete("AC")
        assert result.field == TtaaiiField.A1
        assert result.table_id == "C1"
        assert all(len(item.code) == 1 for item in result.items)

    def test_a2_for_country(self, provider):
        result = provider.complete("ACF")
        assert result.table_id == "C1"
        labels = {item.code: item.label for item in result.items}
        assert labels["R"] == "France"

    def test_ii_ranges(self, provider):
        result = provider.complete("FAUK")
        assert result.field == TtaaiiField.II
        assert result.table_id == "D3_FA"
        assert len(result.items) == 59

    def test_generic_ii(self, provider):
        result = provider.complete("SAUK")
        assert len(result.items) == 100

    def test_complete_heading(self, provider):
        result = provider.complete("SAUK31")
        assert result.is_complete
        assert result.position == 6

    def test_no_table(self, provider):
        """Unassigned T1 gives no items rather than an error."""
        result = provider.complete("Z")
        assert result.items == []
        assert result.table_id is None
        assert result.groups is None

    def test_no_table_grouped(self, provider):
        result = provider.complete("B", CompletionOptions(group_by="continent"))
        assert result.groups == []

    def test_prefix_filter(self, provider):
        result = provider.complete("FAUK", CompletionOptions(prefix="5"))
        assert [item.code for item in result.items] == [f"5{n}" for n in range(10)]

    def test_prefix_filter_case(self, provider):
        result = provider.complete("", CompletionOptions(prefix="s"))
        assert [item.code for item in result.items] == ["S"]

    def test_same_input_same_items(self, provider):
        first = provider.complete("SAW")
        second = provider.complete("SAW")
        assert [i.code for i in first.items] == [i.code for i in second.items]

    def test_items_independent_between_calls(self, provider):
        first = provider.complete("")
        first.items[0].metadata["touched"] = True
        assert "touched" not in provider.complete("").items[0].metadata

    def test_to_dict(self, provider):
        data = provider.complete("SA").to_dict()
        assert data["field"] == "A1"
        assert data["table_id"] == "C1/C2"
        assert data["context"]["T1"] == "S"
        assert data["groups"] is None


class TestGrouping:
    """Grouping of completion items."""

    def test_continent_groups_preserve_items(self, provider):
        result = provider.complete("AC", CompletionOptions(group_by="continent"))
        grouped = sum(len(group.items) for group in result.groups)
        assert grouped == len(result.items)

    def test_continent_labels(self, provider):
        result = provider.complete("ACF", CompletionOptions(group_by="continent"))
        labels = {group.key: group.label for group in result.groups}
        assert labels["EU"] == "Europe"

    def test_other_last(self, provider):
        """Station types carry no continent and fall into OTHER."""
        result = provider.complete("SA", CompletionOptions(group_by="continent"))
        assert result.groups[-1].key == "OTHER"
        assert {"W", "V", "F"} <= {item.code for item in result.groups[-1].items}
        grouped = sum(len(group.items) for group in result.groups)
        assert grouped == len(result.items)

    def test_metadata_groups_sorted_by_label(self, provider):
        result = provider.complete("ACF", CompletionOptions(group_by="continent"))
        labels = [group.label for group in result.groups if group.key != "OTHER"]
        assert labels == sorted(labels)

    def test_table_groups_keep_declared_order(self, provider, tables):
        result = provider.complete("DT", CompletionOptions(group_by="table"))
        assert [group.key for group in result.groups] == \
            [group.key for group in tables.c3.groups]

    def test_table_groups_each_item_once(self, provider):
        result = provider.complete("DT", CompletionOptions(group_by="table"))
        codes = [item.code for group in result.groups for item in group.items]
        assert sorted(codes) == sorted(item.code for item in result.items)

    def test_table_groups_without_declared_groups(self, provider):
        result = provider.complete("", CompletionOptions(group_by="table"))
        assert [group.key for group in result.groups] == ["OTHER"]

    def test_arbitrary_metadata_key(self, provider):
        result = provider.complete("FAUK", CompletionOptions(group_by="range"))
        assert [group.key for group in result.groups] == ["01-49", "50-59"]


class TestValidate:
    """Tests for TtaaiiProvider.validate()."""

    @pytest.mark.parametrize("heading", ["SAUK31", "FAUK50", "UAUK75", "ACFR01", "SAWA01"])
    def test_valid_headings(self, provider, heading):
        result = provider.validate(heading)
        assert result.valid, result.errors
        assert result.complete

    def test_incomplete_is_valid(self, provider):
        result = provider.validate("SA")
        assert result.valid
        assert not result.complete

    def test_empty(self, provider):
        result = provider.validate("")
        assert result.valid
        assert result.errors == []

    def test_invalid_t1(self, provider):
        result = provider.validate("Z")
        assert not result.valid
        error = result.errors[0]
        assert error.position == 0
        assert error.field == TtaaiiField.T1
        assert error.code == ErrorCode.INVALID_CHARACTER

    def test_unknown_table(self, provider):
        result = provider.validate("BA")
        assert [e.code for e in result.errors] == [ErrorCode.UNKNOWN_TABLE]
        assert result.errors[0].position == 1

    def test_invalid_subtype(self, provider):
        result = provider.validate("AZ")
        assert result.errors[0].code == ErrorCode.INVALID_CHARACTER
        assert result.errors[0].field == TtaaiiField.T2

    @pytest.mark.parametrize("heading,bad_ii", [("FAUK00", "00"), ("FAUK60", "60")])
    def test_ii_outside_d3_ranges(self, provider, heading, bad_ii):
        result = provider.validate(heading)
        assert not result.valid
        error = result.errors[0]
        assert error.position == 5
        assert error.field == TtaaiiField.II
        assert error.code == ErrorCode.INVALID_II
        assert bad_ii in error.message

    def test_ii_digit_format(self, provider):
        result = provider.validate("SAUKX1")
        assert [(e.position, e.code) for e in result.errors] == [(4, ErrorCode.INVALID_FORMAT)]

    def test_letter_format(self, provider):
        result = provider.validate("S1")
        assert result.errors[0].code == ErrorCode.INVALID_FORMAT

    def test_too_long(self, provider):
        result = provider.validate("SAUK311")
        assert not result.valid
        assert result.errors[-1].code == ErrorCode.TOO_LONG
        assert result.errors[-1].position == 6

    def test_pressure_level(self, provider):
        assert provider.validate("DTAA85").valid
        assert not provider.validate("DTAA84").valid

    @pytest.mark.parametrize("heading", ["SAUK31", "FAUK59", "SAWA01", "IUSA01", "KSAA01"])
    def test_valid_prefixes_stay_valid(self, provider, heading):
        """Every prefix of a valid heading validates without errors."""
        for end in range(len(heading) + 1):
            assert provider.validate(heading[:end]).valid

    def test_idempotent(self, provider):
        first = provider.validate("FAUK60").to_dict()
        assert provider.validate("FAUK60").to_dict() == first

    def test_lowercase(self, provider):
        assert provider.validate("sauk31").valid


class TestDecode:
    """Tests for TtaaiiProvider.decode()."""

    def test_analyses_cyclone(self, provider):
        decoded = provider.decode("AC")
        assert decoded.data_type.code == "A"
        assert decoded.data_type.label == "Analyses"
        assert decoded.data_subtype.code == "C"
        assert decoded.data_subtype.label == "Cyclone"

    def test_metar(self, provider):
        decoded = provider.decode("SAUK31")
        assert decoded.data_type.code == "S"
        assert decoded.data_subtype.label == "Aviation routine reports"
        assert decoded.data_subtype.code_form == "FM 15 (METAR)"
        assert decoded.area_or_type1.code == "UK"
        assert decoded.area_or_type1.label.startswith("United Kingdom")
        assert decoded.area_or_time2 is None
        assert decoded.level.label == "Bulletin 31"

    def test_field_names(self, provider):
        decoded = provider.decode("SAUK31")
        assert decoded.data_type.name == "Data Type"
        assert decoded.field_labels["ii"] == "Level/Sequence"
        assert decoded.field_labels["A1A2"] == "Area"

    def test_taf(self, provider):
        decoded = provider.decode("FCFR31")
        assert decoded.data_subtype.code_form == "FM 51 (TAF)"
        assert decoded.area_or_type1.label == "France"

    def test_gamet_range(self, provider):
        decoded = provider.decode("FAUK50")
        assert decoded.level.label == "GAMET (50)"

    def test_ship_station(self, provider):
        """SAWA: ocean weather station in area A (Table C2)."""
        decoded = provider.decode("SAWA01")
        assert decoded.area_or_type1.code == "W"
        assert decoded.area_or_type1.label == "Ocean weather stations"
        assert decoded.area_or_type1.table == "C2"
        assert decoded.area_or_time2.code == "A"
        assert decoded.area_or_time2.label.startswith("Area between")

    def test_country_wins_over_station(self, provider):
        decoded = provider.decode("SAWS01")
        assert decoded.area_or_type1.label == "Samoa"
        assert decoded.area_or_time2 is None

    def test_partial_country(self, provider):
        decoded = provider.decode("ACF")
        assert decoded.area_or_type1.label == "Countries starting with F"

    def test_grid_fields(self, provider):
        decoded = provider.decode("DTAA85")
        assert decoded.area_or_type1.table == "C3"
        assert decoded.area_or_time2.table == "C4"
        assert decoded.level.table == "D2"
        assert "850" in decoded.level.label

    def test_invalid_fields_left_empty(self, provider):
        decoded = provider.decode("FAUK60")
        assert decoded.area_or_type1 is not None
        assert decoded.level is None

    def test_unknown_t1(self, provider):
        decoded = provider.decode("ZZZZ99")
        assert decoded.decoded_fields() == {}

    def test_to_dict(self, provider):
        data = provider.decode("SAUK31").to_dict()
        assert data["input"] == "SAUK31"
        assert data["data_type"]["code"] == "S"
        assert "area_or_time2" not in data


class TestFieldSuggestions:
    """Tests for get_field_suggestions()."""

    def test_explicit_context(self, provider):
        result = provider.get_field_suggestions(TtaaiiField.II, TtaaiiContext(t1="O", t2="T"))
        assert result.table_id == "D1"

    def test_field_by_value(self, provider):
        result = provider.get_field_suggestions("A1", TtaaiiContext(t1="I", t2="S"))
        assert result.field == TtaaiiField.A1
        assert result.table_id == "C6"

    def test_matches_complete(self, provider):
        suggestions = provider.get_field_suggestions(
            TtaaiiField.A2, TtaaiiContext(t1="S", t2="A", a1="W"))
        completion = provider.complete("SAW")
        assert [i.code for i in suggestions.items] == [i.code for i in completion.items]

    def test_no_table(self, provider):
        result = provider.get_field_suggestions(TtaaiiField.T2, TtaaiiContext(t1="M"))
        assert result.items == []
        assert result.table_id is None

    def test_unknown_field(self, provider):
        """An unknown field name gives an empty answer, not an exception."""
        result = provider.get_field_suggestions("XX", TtaaiiContext())
        assert result.field is None
        assert result.items == []
        assert result.table_id is None
        assert result.to_dict()["field"] is None

    def test_unknown_field_grouped(self, provider):
        result = provider.get_field_suggestions(
            "XX", TtaaiiContext(), CompletionOptions(group_by="continent"))
        assert result.groups == []


class TestProviderConfig:
    """Provider construction."""

    def test_regional_config(self):
        regional = RegionalConfig(
            id="test",
            name="Test",
            extensions=(TableExtension("C1", (TableEntry(code="QQ", label="Test Centre"),)),),
        )
        provider = TtaaiiProvider(config=ProviderConfig(regional=regional))
        assert provider.decode("ACQQ").area_or_type1.label == "Test Centre"
        assert TtaaiiProvider().decode("ACQQ").area_or_type1 is None

    def test_with_tables(self, provider, tables):
        other = provider.with_tables(tables)
        assert other is not provider
        assert other.tables is tables

    def test_same_locale_option(self, provider):
        result = provider.complete("", CompletionOptions(locale="en"))
        assert result.table_id == "A"

    def test_unavailable_locale_falls_back(self, provider, caplog):
        """A locale with no table-set answers from the provider's own tables."""
        with caplog.at_level(logging.WARNING, logger="ttaaii.core.provider"):
            result = provider.complete("", CompletionOptions(locale="fr"))
        assert result.table_id == "A"
        assert len(result.items) == len(provider.complete("").items)
        assert "fr" in caplog.text

    def test_malformed_locale_falls_back(self, provider):
        result = provider.get_field_suggestions(
            TtaaiiField.T2, TtaaiiContext(t1="S"), CompletionOptions(locale="../en"))
        assert result.table_id == "B1"


class TestModuleHelpers:
    """Module-level helpers use the default provider."""

    def test_helpers(self):
        assert complete("SA").table_id == "C1/C2"
        assert validate("SAUK31").complete
        assert decode("SAUK31").area_or_type1.code == "UK"
        assert get_field_suggestions(TtaaiiField.T1, TtaaiiContext()).table_id == "A"
