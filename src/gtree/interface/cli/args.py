from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the raw argparse namespace
into configuration overrides understood by the validator.
"""

import argparse
from typing import Any, Dict

from gtree import __version__
from gtree.utils.i18n import i18n

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the gtree CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="gtree",
        description=i18n.t("app.description"),
    )

    p.add_argument(
        "input_path",
        nargs="?",
        default=None,
        help=i18n.t("cli.args.path"),
    )

    # --- Traversal ---
    p.add_argument(
        "-d", "--depth",
        dest="max_depth",
        type=int,
        default=None,
        metavar="N",
        help=i18n.t("cli.args.depth"),
    )
    p.add_argument(
        "-l", "--follow-links",
        action="store_true",
        help=i18n.t("cli.args.follow_links"),
    )
    p.add_argument(
        "-j", "--hidden",
        dest="show_hidden",
        action="store_true",
        help=i18n.t("cli.args.hidden"),
    )

    # --- Rendering ---
    p.add_argument(
        "-f", "--files",
        dest="show_files",
        action="store_true",
        help=i18n.t("cli.args.files"),
    )
    p.add_argument(
        "-s", "--stats",
        dest="show_file_stats",
        action="store_true",
        help=i18n.t("cli.args.stats"),
    )
    p.add_argument(
        "-c", "--colour",
        dest="colour_files",
        action="store_true",
        help=i18n.t("cli.args.colour"),
    )

    # --- Output ---
    p.add_argument(
        "-o", "--output",
        dest="output_file",
        default=None,
        help=i18n.t("cli.args.output"),
    )
    p.add_argument(
        "--json",
        dest="json_summary",
        action="store_true",
        help=i18n.t("cli.args.json"),
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--config",
        dest="config_file",
        default=None,
        help=i18n.t("cli.args.config"),
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help=i18n.t("cli.args.dump"),
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help=i18n.t("cli.args.debug"),
    )
    p.add_argument(
        "--verbose",
        action="store_true",
        help=i18n.t("cli.args.verbose"),
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help=i18n.t("cli.args.log_file"),
    )
    p.add_argument(
        "-V", "--version",
        action="version",
        version=i18n.t("app.version", version=__version__),
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration dictionary.

    Switches that were not given stay out of the result so that values
    from a configuration file are not reset.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    overrides["input_path"] = args.input_path
    overrides["output_file"] = args.output_file
    overrides["max_depth"] = args.max_depth

    if args.follow_links:
        overrides["follow_links"] = True
    if args.show_hidden:
        overrides["show_hidden"] = True
    if args.show_files:
        overrides["show_files"] = True
    if args.show_file_stats:
        overrides["show_file_stats"] = True
    if args.colour_files:
        overrides["colour_files"] = True
        overrides["show_files"] = True
    if args.json_summary:
        overrides["json_summary"] = True

    return overrides
