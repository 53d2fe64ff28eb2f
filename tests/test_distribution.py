"""Tests for distribution parsing, tables and the registry."""

import pytest

from qgen.distribution import (
    DistributionRegistry,
    DistributionTable,
    load_distribution,
    load_row_counts,
    parse_distribution,
    split_fields,
    split_values,
)
from qgen.errors import DistributionLoadError, UnknownReferenceError
from qgen.sampler import RandomStream


class TestSplitting:
    def test_split_fields_respects_escaped_colon(self):
        assert split_fields(r"a\:b, c : 1, 2") == [r"a\:b, c", "1, 2"]

    def test_split_values_strips_escapes(self):
        assert split_values(r"two\, kept one, x\:y , z") == ["two, kept one", "x:y", "z"]


class TestParseDistribution:
    def test_comments_and_blank_lines_skipped(self):
        lines = ["-- header", "", "   ", "a, 1:5", "  -- indented comment", "b, 2:7"]
        table = parse_distribution("t", lines, ["name", "code"], ["w"])
        assert table.size == 2
        assert table.cell(0, 1) == "b"
        assert table.cell(1, 0) == "1"

    def test_cumulative_weights(self):
        lines = ["a:10, 1", "b:5, 1", "c:0, 1"]
        table = parse_distribution("t", lines, ["v"], ["skewed", "uniform"])
        assert table.cumulative_weights(0) == (10, 15, 15)
        assert table.cumulative_weights(1) == (1, 2, 3)
        assert [table.weight_for_index(r, 0) for r in range(3)] == [10, 5, 0]

    def test_wrong_part_count(self):
        with pytest.raises(DistributionLoadError, match="2 parts"):
            parse_distribution("t", ["a:1:2"], ["v"], ["w"])

    def test_wrong_value_count(self):
        with pytest.raises(DistributionLoadError, match="values"):
            parse_distribution("t", ["a, b:1"], ["v"], ["w"])

    def test_wrong_weight_count(self):
        with pytest.raises(DistributionLoadError, match="weights"):
            parse_distribution("t", ["a:1, 2"], ["v"], ["w"])

    def test_negative_weight(self):
        with pytest.raises(DistributionLoadError, match="negative"):
            parse_distribution("t", ["a:-1"], ["v"], ["w"])

    def test_non_integer_weight(self):
        with pytest.raises(DistributionLoadError):
            parse_distribution("t", ["a:x"], ["v"], ["w"])

    def test_empty_distribution(self):
        with pytest.raises(DistributionLoadError):
            parse_distribution("t", ["-- nothing"], ["v"], ["w"])


class TestLoadDistribution:
    def test_reads_iso_8859_1(self, write_dst):
        path = write_dst("cafes.dst", "-- cafes\nCafé Noir:2\nBistro\\, Inc:3\n")
        table = load_distribution(path, "cafes", ["name"], ["w"])
        assert table.cell(0, 0) == "Café Noir"
        assert table.cell(0, 1) == "Bistro, Inc"
        assert table.cumulative_weights(0) == (2, 5)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DistributionLoadError, match="not found"):
            load_distribution(tmp_path / "missing.dst", "missing", ["v"], ["w"])


class TestDistributionTable:
    def test_lookups(self, tiny_table):
        assert len(tiny_table) == 2
        assert tiny_table.value_field_count == 2
        assert tiny_table.cell(1, 1) == "B"
        assert tiny_table.value_at_index(0, 0) == "alpha"
        with pytest.raises(IndexError):
            tiny_table.cell(2, 0)
        with pytest.raises(IndexError):
            tiny_table.cell(0, 2)

    def test_value_at_index_mod_size(self, tiny_table):
        assert tiny_table.value_at_index_mod_size(0, 5) == "beta"
        assert tiny_table.value_at_index_mod_size(0, 4) == "alpha"
        assert tiny_table.value_at_index_mod_size(1, -1) == "B"

    def test_weight_index_by_name_then_number(self, tiny_table):
        assert tiny_table.weight_index("uniform") == 1
        assert tiny_table.weight_index("skewed") == 0
        assert tiny_table.weight_index("1") == 0
        assert tiny_table.weight_index("2") == 1
        with pytest.raises(UnknownReferenceError):
            tiny_table.weight_index("3")
        with pytest.raises(UnknownReferenceError):
            tiny_table.weight_index("population")

    def test_pick_random_value(self, tiny_table):
        stream = RandomStream(1)
        picks = [tiny_table.pick_random_value(0, 0, stream) for _ in range(5)]
        assert picks == ["alpha", "beta", "alpha", "alpha", "beta"]

    def test_decreasing_cumulative_rejected(self):
        with pytest.raises(DistributionLoadError, match="non-decreasing"):
            DistributionTable("bad", [["a", "b"]], [[5, 3]])

    def test_ragged_columns_rejected(self):
        with pytest.raises(DistributionLoadError):
            DistributionTable("bad", [["a", "b"], ["c"]], [[1, 2]])

    def test_default_weight_names(self):
        table = DistributionTable.from_rows("t", [(["a"], [1, 2, 3])])
        assert table.weight_names == ("1", "2", "3")


class TestRegistry:
    WELL_KNOWN = [
        "fips_county",
        "i_manager_id",
        "cities",
        "categories",
        "gender",
        "marital_status",
        "education",
        "colors",
        "units",
        "sizes",
        "ship_mode_carrier",
        "return_reasons",
    ]

    def test_well_known_names(self, registry):
        for name in self.WELL_KNOWN:
            assert name in registry
            assert registry.get(name).size > 0

    def test_cumulative_weights_consistent(self, registry):
        for name in registry.names():
            table = registry.get(name)
            for weight in range(table.weight_field_count):
                cumulative = table.cumulative_weights(weight)
                assert all(a <= b for a, b in zip(cumulative, cumulative[1:]))
                raw = [table.weight_for_index(row, weight) for row in range(table.size)]
                assert cumulative[-1] == sum(raw)

    def test_stores_alias(self, registry):
        assert "stores" in registry
        assert registry.get("stores") is registry.get("ship_mode_carrier")

    def test_unknown_distribution(self, registry):
        with pytest.raises(UnknownReferenceError, match="unknown distribution: nope"):
            registry.get("nope")

    def test_shipped_escapes(self, registry):
        reasons = registry.get("return_reasons")
        assert "Ordered two, kept one" in [reasons.cell(0, r) for r in range(reasons.size)]
        assert reasons.weight_field_count == 6

    def test_row_counts(self, registry):
        assert registry.row_count("store_sales") == 2880404
        assert registry.row_count("STORE") == 12
        with pytest.raises(UnknownReferenceError):
            registry.row_count("active_counties")

    def test_alias_to_unknown_table(self, tiny_table):
        with pytest.raises(DistributionLoadError):
            DistributionRegistry({"tiny": tiny_table}, aliases={"x": "missing"})

    def test_catalog_from_yaml(self, tmp_path, write_dst):
        write_dst("pets.dst", "cat, meow:3\ndog, woof:1\n")
        (tmp_path / "catalog.yaml").write_text(
            "distributions:\n"
            "  pets:\n"
            "    file: pets.dst\n"
            "    values: [name, sound]\n"
            "    weights: [popularity]\n",
            encoding="utf-8",
        )
        (tmp_path / "counts.yaml").write_text("row_counts:\n  pet_store: 7\n", encoding="utf-8")
        registry = DistributionRegistry.from_catalog(tmp_path / "catalog.yaml", tmp_path / "counts.yaml")
        assert registry.names() == ["pets"]
        assert registry.get("pets").value_names == ("name", "sound")
        assert registry.get("pets").weight_index("popularity") == 0
        assert registry.row_count("Pet_Store") == 7

    def test_missing_catalog(self, tmp_path):
        with pytest.raises(DistributionLoadError):
            DistributionRegistry.from_catalog(tmp_path / "none.yaml")

    def test_load_row_counts_flat_mapping(self, tmp_path):
        path = tmp_path / "rc.yaml"
        path.write_text("item: 18000\n", encoding="utf-8")
        assert load_row_counts(path) == {"ITEM": 18000}
