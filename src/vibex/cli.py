"""
vx: prepare source code for AI tools.

Overview
--------
This utility turns a source tree into one annotated text document that can be
pasted into, or uploaded to, a Large Language Model:

1) **combine (`vx c`)**: concatenates every selected text file between
   `<start of PATH>` / `<end of PATH>` markers into `vx_<name>.txt`, with
   optional comment removal (`--rc`), redaction of sensitive data (`--rp`),
   character ranges (`--trim`, `--cut`) and live updates (`--monitor`).

2) **remove-comments (`vx rcm`)**: strips comments from the selected files
   **in place**.

3) **detect**: reports what kind of sensitive data each file seems to hold.

Without `--files`, every supported file under the current directory is used.
`node_modules/`, `.git/` and previous `vx_*.txt` outputs are skipped unless
`--force` is given. Project defaults (extra excludes, redaction tokens) can be
kept in `.vibex.yaml`.

Usage
-----
Run `vx --help` for full options. Common examples:
    - Combine specific files:
        vx c -f index.js utils.js

    - All Python files without comments or secrets:
        vx c -f "**/*.py" --rc --rp

    - Keep the first 201 characters and everything from offset 500:
        vx c -f app.js --trim "s-200" "500-e"

    - Rebuild the output whenever a file changes:
        vx c -f "src/**/*.ts" -mx
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

from vibex import __version__
from vibex.assembler import build_artifact
from vibex.binary_detection import BinaryDetector
from vibex.exceptions import ArtifactWriteError, ConfigFileError
from vibex.file_resolver import read_file_text, resolve_files
from vibex.logging import logger, setup_logging
from vibex.rewrite import remove_comments_in_files
from vibex.scrubber import detect_sensitive_info
from vibex.settings import Settings, build_settings
from vibex.watcher import WatchController

if TYPE_CHECKING:
    from collections.abc import Sequence

COMMAND_ALIASES = {
    "c": "combine",
    "rcm": "remove-comments",
}


def _add_selection_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-f",
        "--files",
        nargs="+",
        action="extend",
        default=[],
        metavar="PATTERN",
        help="Files or glob patterns to include (default: all supported files).",
    )
    p.add_argument(
        "-x",
        "--exclude",
        nargs="+",
        action="extend",
        default=[],
        metavar="PATTERN",
        help="Patterns to exclude (gitignore syntax).",
    )
    p.add_argument(
        "--force",
        action="store_true",
        help="Include normally excluded folders (node_modules, .git).",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="vx",
        description="Prepare source code for AI analysis.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--config", default=argparse.SUPPRESS, help="YAML project configuration.")
    p.add_argument("--log-file", default=argparse.SUPPRESS, help="Also write log lines to this file.")

    sub = p.add_subparsers(dest="command", required=True, metavar="COMMAND")

    combine = sub.add_parser("combine", aliases=["c"], help="Combine files for AI analysis.")
    _add_selection_args(combine)
    combine.add_argument(
        "-s",
        "--separate",
        action="store_true",
        help="Keep files visually separated.",
    )
    combine.add_argument("--rc", action="store_true", help="Remove comments.")
    combine.add_argument("--rp", action="store_true", help="Remove private information.")
    combine.add_argument(
        "-mx",
        "--monitor",
        "--watch",
        dest="monitor",
        action="store_true",
        help="Monitor files and rebuild the output on changes.",
    )
    combine.add_argument(
        "--trim",
        nargs="+",
        action="extend",
        default=[],
        metavar="RANGE",
        help='Only keep characters in these ranges ("start-end", "s" = start, "e" = end).',
    )
    combine.add_argument(
        "--cut",
        nargs="+",
        action="extend",
        default=[],
        metavar="RANGE",
        help='Drop characters in these ranges ("start-end", "s" = start, "e" = end).',
    )

    rcm = sub.add_parser(
        "remove-comments",
        aliases=["rcm"],
        help="Remove comments from files IN PLACE.",
    )
    _add_selection_args(rcm)

    detect = sub.add_parser("detect", help="Report sensitive-looking data per file.")
    _add_selection_args(detect)
    return p


def parse_args(argv: Sequence[str] | None = None) -> tuple[str, Settings]:
    """Parse the command line into a command name and its Settings.

    Raises:
        ConfigFileError: if the project configuration cannot be loaded.

    Returns:
        tuple[str, Settings]: the canonical command name and the run options
    """
    args = vars(build_parser().parse_args(argv))
    command = args.pop("command")
    return COMMAND_ALIASES.get(command, command), build_settings(**args)


async def combine(settings: Settings) -> int:
    detector = BinaryDetector()
    result = await build_artifact(settings, detector=detector)
    if result is None:
        return 0
    print(f"Combined content written to {result.output_path}")
    if settings.monitor:
        await WatchController(settings, detector=detector).run(result.files)
    return 0


def remove_comments(settings: Settings) -> int:
    report = remove_comments_in_files(settings)
    if not report.total:
        logger.warning("No suitable text files found to process.")
        return 0
    print(f"Files modified: {len(report.modified)}")
    print(f"Files unchanged/no comments: {len(report.unchanged)}")
    if report.errored:
        print(f"Files with errors: {len(report.errored)}")
    return 0


def detect(settings: Settings) -> int:
    files = resolve_files(settings)
    if not files:
        logger.warning("No suitable text files found to scan.")
        return 0
    for file_spec in files:
        try:
            found = detect_sensitive_info(read_file_text(file_spec.path))
        except OSError as e:
            logger.error("Error reading file %s, skipping: %s", file_spec.rel, e)
            continue
        if found:
            counts = " ".join(f"{k}={v}" for k, v in found.items())
            print(f"{file_spec.rel}: {counts}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    try:
        command, settings = parse_args(argv)
    except ConfigFileError as e:
        logger.error("Invalid configuration: %s", e)
        return 2
    if settings.log_file:
        setup_logging(Path(settings.log_file))

    if command == "remove-comments":
        return remove_comments(settings)
    if command == "detect":
        return detect(settings)

    try:
        return asyncio.run(combine(settings))
    except ArtifactWriteError as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
