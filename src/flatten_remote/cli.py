"""
flatten_remote: Export a GitHub repository as one text for an LLM.

Overview
--------
Walks a repository through the GitHub REST contents API and prints:

1) an indented listing of the tree (directories first), then
2) every text file with 3-character line numbers, between 80-dash delimiters.

Binary files are listed with a placeholder. A file that cannot be fetched is
reported in place and does not stop the export; a directory that cannot be
listed aborts it.

Usage
-----
    flatten-remote https://github.com/owner/repo
    flatten-remote https://github.com/owner/repo/tree/dev --max-depth 5 --output repo.txt
    GITHUB_TOKEN=... flatten-remote https://github.com/owner/private-repo --ignore tests

The token is read from `--token`, then `GITHUB_TOKEN` (a `.env` file is loaded
from the working directory).
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from flatten_remote import __version__
from flatten_remote.exceptions import FlattenRemoteError
from flatten_remote.export import export_repository
from flatten_remote.logging import logger, setup_logging
from flatten_remote.settings import Settings, build_settings, load_env

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    p = argparse.ArgumentParser(
        prog="flatten-remote",
        description="Export a GitHub repository as a single text (tree + numbered contents).",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("url", help="Repository URL, e.g. https://github.com/owner/repo.")
    p.add_argument("--token", type=str, default=None, help="Access token (default: $GITHUB_TOKEN).")
    p.add_argument("--branch", type=str, default=None, help="Branch to read (default: repository default).")
    p.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Deepest directory level listed (default: 3).",
    )
    p.add_argument("--output", type=str, default=None, help="Output file (default: stdout).")
    p.add_argument("--config", type=str, default=None, help="YAML configuration file.")
    p.add_argument(
        "--ignore",
        dest="extra_ignore",
        action="append",
        default=[],
        help="Extra ignore substring (repeatable).",
    )
    p.add_argument(
        "--binary-ext",
        dest="extra_binary",
        action="append",
        default=[],
        help="Extra binary extension, e.g. .psd (repeatable).",
    )
    p.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds (default: 30).")
    p.add_argument("--log-file", type=str, default=None, help="Log file path.")
    p.add_argument("--verbose", action="store_true", default=None, help="Debug logging.")
    args = p.parse_args(argv)
    return build_settings(vars(args))


def write_output(text: str, output: Path | None) -> None:
    if output is None:
        sys.stdout.write(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")


def main(argv: Sequence[str] | None = None) -> int:
    load_env()
    try:
        settings = parse_args(argv)
    except FlattenRemoteError as e:
        logger.error("invalid_configuration", error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 2

    if settings.log_file or settings.verbose:
        setup_logging(
            settings.log_file or None,
            level=logging.DEBUG if settings.verbose else logging.INFO,
            force=True,
        )

    try:
        text = export_repository(settings)
    except FlattenRemoteError as e:
        logger.error("export_failed", url=settings.url, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1

    write_output(text, settings.output)
    if settings.output is not None:
        print(f"Wrote {settings.output} bytes={len(text.encode('utf-8'))}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
