from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration loading,
backend creation and dispatch to one of the three modes (list the tree,
mirror or sample a directory tree, download a single file), followed by a
human readable report.
"""

import os
import platform
import sys
from typing import List, Optional, Union

from superscan import __version__
from superscan.core.analysis.tree_builder import build_tree
from superscan.core.analysis.tree_renderer import render_tree
from superscan.core.mirror.service import download_tree
from superscan.domain.config import config_to_json, load_config
from superscan.domain.errors import BackendUnavailable, NotFound, SuperscanError
from superscan.domain.tree_models import MirrorResult, SampleResult
from superscan.infra.fs import normalize_path, safe_mkdir
from superscan.infra.logging import LoggingConfig, configure_logging, get_default_log_path, get_logger
from superscan.infra.sources.base import Source
from superscan.infra.sources.registry import create_source, default_start_path
from superscan.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

_LIST_TIPS = (
    "Verify the path is correct",
    "Try listing the root directory first (omit --path)",
    "Check if you have proper permissions to access the path",
)
_DOWNLOAD_TIPS = (
    "Verify the file path is correct",
    "Use --path without --destination to list available files",
    "Check if you have proper permissions to access the file",
)
_DIRECTORY_TIPS = (
    "Use --recursive flag to download entire directory",
    "Or specify a file path instead of a directory",
)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print_version()
        return EXIT_OK

    # 2. Logging bootstrap
    log_file = get_default_log_path() if args.log_file == "" else args.log_file
    configure_logging(LoggingConfig.for_cli(args.debug, log_file))

    # 3. Configuration
    config = load_config(args.config_path)
    if args.dump_config:
        print(config_to_json(config))
        return EXIT_OK

    if not args.source_type:
        logger.error("Source type is required")
        print(f"Usage: {cli_args.USAGE}", file=sys.stderr)
        return EXIT_USAGE

    # 4. Backend creation
    try:
        source = create_source(args.source_type, config)
    except (ValueError, SuperscanError) as e:
        logger.error(f"Failed to create source: {e}")
        return EXIT_FAILURE

    path = args.path if args.path is not None else default_start_path(args.source_type, config)

    # 5. Mode dispatch
    try:
        if args.destination:
            return _run_download(source, args.path, path, args)
        return _run_list(source, path, args.style)
    except KeyboardInterrupt:
        logger.warning("Operation interrupted by user")
        return EXIT_INTERRUPTED

# -----------------------------------------------------------------------------
# MODES
# -----------------------------------------------------------------------------

def _run_list(source: Source, path: str, style: str) -> int:
    try:
        tree = build_tree(source, path)
    except NotFound:
        logger.error(f"Path not found: {path}")
        _print_tips(_LIST_TIPS)
        return EXIT_FAILURE
    except BackendUnavailable as e:
        logger.error(f"Failed to list files: {e}")
        return EXIT_FAILURE

    print(render_tree(tree, style=style))
    return EXIT_OK


def _run_download(source: Source, explicit_path: Optional[str], path: str, args) -> int:
    if not explicit_path:
        logger.error("Path is required for download")
        print(f"Usage: {cli_args.USAGE}", file=sys.stderr)
        return EXIT_USAGE

    dest_root = normalize_path(args.destination, fallback=os.getcwd())
    ok, err = safe_mkdir(dest_root)
    if not ok:
        logger.error(f"Failed to create destination directory: {err}")
        return EXIT_FAILURE

    if args.recursive:
        logger.info(f"Downloading directory tree from {path} to {dest_root}")
        try:
            result = download_tree(
                source, path, dest_root,
                sample_size=args.sample_size, style=args.style,
            )
        except NotFound:
            logger.error(f"Path not found: {path}")
            _print_tips(_LIST_TIPS)
            return EXIT_FAILURE
        except BackendUnavailable as e:
            logger.error(f"Failed to get file tree: {e}")
            return EXIT_FAILURE

        _print_summary(result)
        return EXIT_OK if result.ok else EXIT_FAILURE

    return _download_single(source, path, dest_root)


def _download_single(source: Source, path: str, dest_root: str) -> int:
    if cli_args.is_directory_path(path):
        logger.error("Path is a directory. Use --recursive flag to download directories")
        _print_tips(_DIRECTORY_TIPS)
        return EXIT_FAILURE

    filename = os.path.basename(path.replace("\\", "/").rstrip("/"))
    final_dest = os.path.join(dest_root, filename)

    logger.info(f"Downloading file from {path} to {final_dest}")
    try:
        source.download_file(path, final_dest)
    except NotFound:
        logger.error(f"File not found: {path}")
        _print_tips(_DOWNLOAD_TIPS)
        return EXIT_FAILURE
    except SuperscanError as e:
        logger.error(f"Failed to download file: {e}")
        return EXIT_FAILURE

    logger.info("Download completed successfully")
    return EXIT_OK

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_summary(result: Union[MirrorResult, SampleResult]) -> None:
    """Print the counters of a mirror or sample run to standard output."""
    if isinstance(result, SampleResult):
        print(f"Sampled {result.selected} of {result.population} files")
        print(f"Downloaded {result.files_downloaded} of {result.selected} files")
    else:
        total = result.files_downloaded + result.files_failed
        print(f"Directories created: {result.directories_created}")
        print(f"Downloaded {result.files_downloaded} of {total} files")

    if result.directories_failed:
        print(f"Directories failed: {result.directories_failed}")
    if result.files_failed:
        print(f"Files failed: {result.files_failed}")


def _print_tips(tips: tuple) -> None:
    print("\nTips:")
    for i, tip in enumerate(tips, start=1):
        print(f"{i}. {tip}")


def print_version() -> None:
    print(f"SuperScan Version: {__version__}")
    print(f"Python Version: {platform.python_version()}")
    print(f"OS/Arch: {platform.system().lower()}/{platform.machine()}")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
