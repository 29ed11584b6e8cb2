from __future__ import annotations

"""
Configuration Domain Management.

Holds the default runtime configuration, the traversal depth limits and
the optional JSON configuration file loader. The configuration is a plain
dictionary until it is validated and frozen into TreeOptions.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from gtree.domain.tree_models import TreeOptions

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
MAX_DEPTH_CEILING = 1024
MIN_DEPTH = 2


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # IO Paths
        "input_path": "",
        "output_file": "",

        # Traversal
        "max_depth": MAX_DEPTH_CEILING,
        "follow_links": False,
        "show_hidden": False,

        # Rendering
        "show_files": False,
        "show_file_stats": False,
        "colour_files": False,
        "json_summary": False,
    }


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load a configuration file and overlay it on the defaults.

    Unknown keys are dropped. A missing or corrupt file leaves the defaults
    untouched.

    Args:
        path: Location of a JSON configuration file.

    Returns:
        Dict[str, Any]: The merged configuration.
    """
    config = get_default_config()
    if not path:
        return config

    if not os.path.exists(path):
        logger.warning(f"Config file not found at '{path}'. Using defaults.")
        return config

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read config file '{path}': {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.error(f"Config file '{path}' must contain a JSON object. Using defaults.")
        return config

    for key, value in data.items():
        if key in config:
            config[key] = value
        else:
            logger.debug(f"Ignoring unknown config key: {key}")
    return config


def options_from_config(config: Dict[str, Any]) -> TreeOptions:
    """
    Freeze a validated configuration dictionary into TreeOptions.

    Args:
        config: Configuration as returned by validate_config.

    Returns:
        TreeOptions: Immutable traversal switches.
    """
    colour = bool(config.get("colour_files", False))
    return TreeOptions(
        max_depth=int(config.get("max_depth", MAX_DEPTH_CEILING)),
        follow_links=bool(config.get("follow_links", False)),
        show_hidden=bool(config.get("show_hidden", False)),
        show_files=bool(config.get("show_files", False)) or colour,
        show_file_stats=bool(config.get("show_file_stats", False)),
        colour_files=colour,
    )
