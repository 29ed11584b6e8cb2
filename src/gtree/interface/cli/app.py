from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration merging
(defaults, optional JSON file, command-line overrides), the streamed
traversal and the closing summary.
"""

import json
import os
import sys
from typing import Any, Dict, List, Optional, TextIO

from gtree import __version__
from gtree.core.analysis.tree_renderer import render_summary, summary_to_dict
from gtree.core.analysis.tree_walker import walk_directory_tree
from gtree.core.pipeline.validator import validate_config
from gtree.domain.config import load_config, options_from_config
from gtree.domain.tree_models import RootDirectoryError
from gtree.infra.fs import normalize_path, open_output_file
from gtree.infra.logging import LoggingConfig, configure_logging, get_logger
from gtree.interface.cli import args as cli_args
from gtree.utils.i18n import i18n

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BAD_ROOT = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 for success, non-zero for failure).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")
    elif hasattr(sys.stdout, "reconfigure"):
        # Undecodable names come back out as the bytes they were read as
        sys.stdout.reconfigure(errors="surrogateescape")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console stderr, optional rotating file)
    if args.debug:
        log_level = "DEBUG"
    elif args.verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=args.log_file))

    logger.debug(i18n.t("app.version", version=__version__))

    # 3. Resolve configuration hierarchy
    base_conf = load_config(args.config_file)
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf, overrides)

    # 4. Schema validation and normalization
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    # 5. Pre-flight input verification
    if not clean_conf["input_path"]:
        msg = i18n.t("cli.errors.no_path")
        logger.error(msg)
        return EXIT_BAD_ROOT

    # 6. Traversal phase
    try:
        return _run_tree(clean_conf)
    except RootDirectoryError as e:
        logger.error(i18n.t("cli.errors.root_invalid", path=e.path, reason=e.reason))
        return EXIT_BAD_ROOT
    except BrokenPipeError:
        _silence_stdout()
        logger.debug("Output reader closed the pipe; stopping early.")
        return EXIT_OK
    except KeyboardInterrupt:
        logger.warning(i18n.t("cli.status.interrupted"))
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.critical(i18n.t("cli.errors.unexpected", error=str(e)), exc_info=True)
        return EXIT_FAILURE

# -----------------------------------------------------------------------------
# EXECUTION
# -----------------------------------------------------------------------------

def _run_tree(conf: Dict[str, Any]) -> int:
    """
    Stream the tree to stdout, then print the summary block.

    With an output file, each line is written there as it is printed.

    Raises:
        RootDirectoryError: If the starting directory cannot be opened.
    """
    options = options_from_config(conf)
    input_path = normalize_path(conf["input_path"], fallback=".")
    output_file = conf["output_file"]

    sink: Optional[TextIO] = None
    sink_failed = False

    def emit(line: str) -> None:
        nonlocal sink, sink_failed
        print(line)
        if not output_file or sink_failed:
            return
        # Opened on the first line so a rejected root leaves no file behind
        if sink is None:
            try:
                sink = open_output_file(output_file)
            except OSError as e:
                sink_failed = True
                logger.error(f"Failed to open output file '{output_file}': {e}")
                return
        sink.write(line + "\n")

    try:
        logger.info(f"Targeting input directory: {input_path}")
        ctx = walk_directory_tree(input_path, options, emit=emit)

        include_files = options.show_files or options.show_file_stats
        if conf["json_summary"]:
            summary_lines = [json.dumps(summary_to_dict(ctx.report, include_files), indent=2)]
        else:
            summary_lines = render_summary(ctx.report, include_files)

        for line in summary_lines:
            emit(line)
    finally:
        if sink is not None:
            sink.close()
            logger.info(f"Tree saved to file: {output_file}")

    return EXIT_OK


def _silence_stdout() -> None:
    """Point stdout at devnull so the interpreter's final flush cannot fail."""
    try:
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
    except (OSError, ValueError) as e:
        logger.debug(f"Could not redirect stdout after broken pipe: {e}")

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only known keys with non-None values are merged.

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    for k, v in overrides.items():
        if k in base and v is not None:
            out[k] = v
    return out

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
