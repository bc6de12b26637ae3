# -*- coding: utf-8 -*-

import logging
from pathlib import Path

import yaml


#=======================================================================
# YAML Utilities
#=======================================================================

def read_yaml(path, default=None):
    """
    Read a YAML file.

    Args:
        path (str): Path to the YAML file.
        default: Returned when the file does not exist or is empty.

    Returns:
        dict or list: Parsed YAML content.
    """
    path = Path(path)
    if not path.exists():
        return default
    with path.open('r', encoding='utf-8') as f:
        content = yaml.safe_load(f)
    return default if content is None else content


def write_yaml(data, path):
    """Write data to a YAML file, keeping the insertion order of keys."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open('w', encoding='utf-8') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


#=======================================================================
# Path Utilities
#=======================================================================

def display_path(path):
    """Shorten a path for log messages, using '~' for the home directory."""
    path = Path(path)
    try:
        return f"~/{path.relative_to(Path.home())}"
    except ValueError:
        return str(path)


def ensure_folder(path, description="Folder"):
    """Create a folder if it is missing and return it as a Path."""
    path = Path(path)
    if not path.is_dir():
        logging.info(f"{description} does not exist. Creating it at: {display_path(path)}")
        path.mkdir(parents=True, exist_ok=True)
    return path
