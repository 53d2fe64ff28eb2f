"""Tests for YAML configuration loading."""

import pytest

from qgen.config import GeneratorConfig, load_config
from qgen.distribution.registry import DEFAULT_CATALOG, DEFAULT_ROW_COUNTS
from qgen.templates import QueryLibrary
from qgen.templates.query import DEFAULT_TEMPLATES_DIR


class TestLoadConfig:
    def test_defaults(self):
        config = GeneratorConfig()
        assert config.distributions == DEFAULT_CATALOG
        assert config.row_counts == DEFAULT_ROW_COUNTS
        assert config.templates_dir == DEFAULT_TEMPLATES_DIR
        assert config.dialect == "ansi"
        assert config.seed == 0

    def test_empty_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "qgen.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == GeneratorConfig()

    def test_relative_paths_resolve_against_file(self, tmp_path):
        path = tmp_path / "conf" / "qgen.yaml"
        path.parent.mkdir()
        path.write_text("templates_dir: templates\ndialect: db2\nseed: '7'\n", encoding="utf-8")
        config = load_config(path)
        assert config.templates_dir == path.parent / "templates"
        assert config.distributions == DEFAULT_CATALOG
        assert config.dialect == "db2"
        assert config.seed == 7

    def test_absolute_path_kept(self, tmp_path):
        path = tmp_path / "qgen.yaml"
        path.write_text(f"row_counts: {DEFAULT_ROW_COUNTS}\n", encoding="utf-8")
        assert load_config(path).row_counts == DEFAULT_ROW_COUNTS

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "qgen.yaml"
        path.write_text("scale: 10\n", encoding="utf-8")
        with pytest.raises(ValueError, match="scale"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "qgen.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)

    def test_to_dict(self):
        payload = GeneratorConfig(seed=3).to_dict()
        assert payload["seed"] == 3
        assert payload["templates_dir"] == str(DEFAULT_TEMPLATES_DIR)


class TestLibraryFromConfig:
    def test_custom_templates(self, tmp_path):
        templates = tmp_path / "templates"
        templates.mkdir()
        (templates / "query5.tpl").write_text(
            "define G = dist(gender, 1, 1);\ndefine _LIMIT = 3;\nselect '[G]' [_LIMITC];\n",
            encoding="iso-8859-1",
        )
        config = GeneratorConfig(templates_dir=templates, dialect="db2")
        library = QueryLibrary.from_config(config)
        assert library.available() == [5]
        sql = library.generate_sql(5, 0)
        assert sql.startswith("select '")
        assert sql.rstrip().endswith("fetch first 3 rows only")
        assert sql.split("'")[1] in {"M", "F"}

    def test_unknown_dialect(self):
        with pytest.raises(ValueError):
            QueryLibrary.from_config(GeneratorConfig(dialect="cobol"))
