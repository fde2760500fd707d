"""
test_config_manager.py
----------------------
Unit tests for load_config with JSON and YAML files.
"""

import json

import pytest
import yaml

from stagecraft.core.config_manager import load_config


def test_load_yaml_merges_defaults(tmp_path):
    path = tmp_path / "sheet.yaml"
    path.write_text(
        "_notes: human comments\n"
        "fade:\n"
        "  transition_duration: 150ms\n"
    )
    defaults = {"fade": {"transition_delay": "0ms"}, "other": {"alpha": 0}}

    config = load_config(str(path), defaults)
    assert config == {
        "fade": {"transition_delay": "0ms", "transition_duration": "150ms"},
        "other": {"alpha": 0},
    }


def test_load_json(tmp_path):
    path = tmp_path / "card.json"
    path.write_text(json.dumps({"id": "card", "appear": True}))
    assert load_config(str(path)) == {"id": "card", "appear": True}


def test_empty_yaml_loads_as_empty_dict(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("")
    assert load_config(str(path), {"a": 1}) == {"a": 1}


def test_missing_file_falls_back_to_defaults(tmp_path):
    defaults = {"a": 1}
    config = load_config(str(tmp_path / "missing.json"), defaults)
    assert config == defaults
    assert config is not defaults


def test_missing_file_strict_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.json"), strict=True)


def test_malformed_yaml_strict_raises_parser_error(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("fade: [unclosed\n")
    with pytest.raises(yaml.YAMLError):
        load_config(str(path), strict=True)


def test_malformed_json_strict_raises_parser_error(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{\"id\": ")
    with pytest.raises(json.JSONDecodeError):
        load_config(str(path), strict=True)


def test_malformed_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("fade: [unclosed\n")
    assert load_config(str(path), {"a": 1}) == {"a": 1}
