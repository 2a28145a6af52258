"""Tests for workflow YAML reading and writing."""

import pytest

from reusable_workflows.errors import AssetParseError
from reusable_workflows.yaml_io import dump_yaml, load_yaml, read_yaml_file


class TestLoadYaml:
    def test_on_key_stays_a_string(self):
        data = load_yaml("on:\n  push:\n")
        assert list(data) == ["on"]

    @pytest.mark.parametrize("text", ["yes", "no", "on", "off", "y", "Y"])
    def test_yaml11_words_are_strings(self, text):
        assert load_yaml(f"value: {text}\n")["value"] == text

    @pytest.mark.parametrize("text,expected", [("true", True), ("False", False), ("TRUE", True)])
    def test_yaml12_booleans(self, text, expected):
        assert load_yaml(f"value: {text}\n")["value"] is expected

    def test_empty_document(self):
        assert load_yaml("") is None

    def test_invalid(self):
        with pytest.raises(AssetParseError, match="in example.yml"):
            load_yaml("key: [unclosed\n", source="example.yml")

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(AssetParseError, match="Could not read"):
            read_yaml_file(tmp_path / "missing.yml")


class TestDumpYaml:
    def test_keeps_insertion_order_and_block_style(self):
        text = dump_yaml({"name": "x", "on": {"push": {"branches": ["main"]}}, "a": 1})
        assert text == "name: x\non:\n  push:\n    branches:\n    - main\na: 1\n"

    def test_quotes_strings_that_look_like_booleans(self):
        text = dump_yaml({"flag": "true", "real": True, "word": "yes"})
        assert text == "flag: 'true'\nreal: true\nword: yes\n"

    def test_no_aliases(self):
        shared = {"branches": ["main"]}
        text = dump_yaml({"a": shared, "b": shared})
        assert "&" not in text and "*" not in text

    def test_long_values_not_wrapped(self):
        value = "x " * 100
        assert dump_yaml({"v": value.strip()}).count("\n") == 1

    def test_unicode(self):
        assert dump_yaml({"name": "Déploiement"}) == "name: Déploiement\n"
