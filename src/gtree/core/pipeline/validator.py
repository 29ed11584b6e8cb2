from __future__ import annotations

"""
Configuration Validation Service.

Gatekeeper between raw configuration sources (CLI flags, JSON config file)
and the traversal engine. Handles type coercion, depth clamping and default
value injection so the walker only ever sees well-formed values.
"""

import logging
from typing import Any, Dict, List, Tuple

from gtree.domain.config import MAX_DEPTH_CEILING, MIN_DEPTH, get_default_config

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: A tuple containing the normalized
                                          configuration and a list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    # 1. Base Type Validation
    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update({k: v for k, v in config.items() if k in defaults})

    # 2. Schema Definition (Declarative mapping)
    string_fields = ["input_path", "output_file"]

    bool_fields = [
        "follow_links", "show_hidden", "show_files",
        "show_file_stats", "colour_files", "json_summary",
    ]

    # 3. Field Processing & Normalization
    for field in string_fields:
        merged[field] = _as_str(
            merged.get(field), defaults.get(field, ""), field, warnings, strict
        )

    for field in bool_fields:
        merged[field] = _as_bool(
            merged.get(field), defaults.get(field, False), field, warnings, strict
        )

    depth = _as_int(merged.get("max_depth"), defaults["max_depth"], "max_depth", warnings, strict)
    merged["max_depth"] = _clamp_depth(depth, warnings)

    # 4. Domain-Specific Normalization (colour output lists files)
    if merged["colour_files"] and not merged["show_files"]:
        merged["show_files"] = True

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        # Support numeric coercion (0/1)
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        # Support string coercion (human-friendly keywords)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    """Coerce integer-like inputs, rejecting booleans."""
    if value is None:
        return fallback
    if isinstance(value, int) and not isinstance(value, bool):
        return value

    if not strict and isinstance(value, str):
        try:
            parsed = int(value.strip())
        except ValueError:
            pass
        else:
            warnings.append(f"Field '{field}' converted from '{value}' to {parsed}.")
            return parsed

    msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: DOMAIN NORMALIZATION
# -----------------------------------------------------------------------------

def _clamp_depth(depth: int, warnings: List[str]) -> int:
    """Keep the depth bound within [MIN_DEPTH, MAX_DEPTH_CEILING]."""
    if depth < MIN_DEPTH:
        warnings.append(f"max_depth {depth} raised to the minimum of {MIN_DEPTH}.")
        return MIN_DEPTH
    if depth > MAX_DEPTH_CEILING:
        warnings.append(f"max_depth {depth} lowered to the ceiling of {MAX_DEPTH_CEILING}.")
        return MAX_DEPTH_CEILING
    return depth
