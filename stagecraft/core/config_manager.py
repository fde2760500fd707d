"""
config_manager.py
-----------------
Configuration loader for transition options and stylesheets.

Features:
- Supports .json, .yaml and .yml config files
- Recursively merges defaults
- Ignores '_notes' keys for human-readable configs
"""

import os
import json

import yaml

from stagecraft.core.debug_logger import DebugLogger


YAML_EXTENSIONS = (".yaml", ".yml")

# Raised for a file that exists but does not parse
PARSE_ERRORS = (json.JSONDecodeError, yaml.YAMLError)


# ===========================================================
# Public API
# ===========================================================

def load_config(filename, default_dict=None, strict=False):
    """
    Load a configuration file.

    Args:
        filename: Path to a .json, .yaml or .yml file
        default_dict: Default fallback config
        strict: If True, raise FileNotFoundError on a missing or unreadable
            file and re-raise the parser error on a malformed one

    Returns:
        dict: Merged configuration
    """
    if default_dict is None:
        default_dict = {}

    try:
        if filename.endswith(YAML_EXTENSIONS):
            data = _load_yaml(filename)
        else:
            data = _load_json(filename)

        return _merge_dicts(default_dict, data)

    except PARSE_ERRORS as e:
        if strict:
            DebugLogger.fail(f"Malformed config {filename}: {e}", category="loading")
            raise
        DebugLogger.warn(f"Failed to parse {filename}: {e} - using defaults", category="loading")
        return default_dict.copy()

    except (FileNotFoundError, IOError) as e:
        if strict:
            raise FileNotFoundError(f"Config not found or unreadable: {filename}") from e
        DebugLogger.warn(f"Failed to load {filename}: {e} - using defaults", category="loading")
        return default_dict.copy()


# ===========================================================
# File Loaders
# ===========================================================

def _load_json(path):
    """Load JSON config file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    DebugLogger.system(f"Loaded {os.path.basename(path)}", category="loading")
    return data


def _load_yaml(path):
    """Load YAML config file. Empty documents load as an empty dict."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    DebugLogger.system(f"Loaded {os.path.basename(path)} (YAML)", category="loading")
    return data


# ===========================================================
# Merge Utilities
# ===========================================================

def _merge_dicts(default, override):
    """Recursively merge two dicts. Ignores '_notes' keys."""
    merged = default.copy()
    for key, value in override.items():
        if key == "_notes":
            continue
        if isinstance(value, dict) and key in merged and isinstance(merged[key], dict):
            merged[key] = _merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged
