from __future__ import annotations

"""
CLI Argument Definition.

Defines the command-line interface schema: backend selection, the path to
list or download, the local destination and the mirroring mode.
"""

import argparse

from superscan.core.analysis.tree_renderer import BRANCH_STYLE, STYLES
from superscan.infra.sources.registry import SOURCE_TYPES

USAGE = (
    "superscan --source <source-type> [--path <path>] [--destination <dest-path>] "
    "[--recursive] [--sample <number>]"
)

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the SuperScan CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="superscan",
        usage=USAGE,
        description="List, mirror or sample the file tree of a storage backend.",
    )

    # --- Backend Selection ---
    p.add_argument(
        "-s", "--source",
        dest="source_type",
        choices=SOURCE_TYPES,
        default=None,
        help="Source type (filesystem, s3, google-drive).",
    )
    p.add_argument(
        "-p", "--path",
        dest="path",
        default=None,
        help="Path for listing or downloading (defaults to the configured start path).",
    )

    # --- Download Mode ---
    p.add_argument(
        "-d", "--destination",
        dest="destination",
        default=None,
        help="Local destination directory; enables download mode.",
    )
    p.add_argument(
        "-r", "--recursive",
        action="store_true",
        help="Download the entire directory tree (directory paths only).",
    )
    p.add_argument(
        "--sample",
        dest="sample_size",
        type=_non_negative_int,
        default=0,
        help="Number of random files to download (0 downloads every file).",
    )

    # --- Presentation ---
    p.add_argument(
        "--style",
        choices=STYLES,
        default=BRANCH_STYLE,
        help="Tree rendering style.",
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Configuration file to use instead of the default location.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration and exit.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        nargs="?",
        const="",
        default=None,
        help="Also write logs to this file (rotated); without a value, to the user data directory.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit.",
    )

    return p

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError("sample size cannot be negative")
    return number


def is_directory_path(path: str) -> bool:
    """Whether a user supplied path explicitly names a directory."""
    return path.endswith("/") or path.endswith("\\")
