from __future__ import annotations

import io
from typing import TYPE_CHECKING

from flatten_remote.config import FileEntry
from flatten_remote.exceptions import FetchError
from flatten_remote.filters import DEFAULT_FILTER, PatternFilter
from flatten_remote.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from flatten_remote.config import FlatEntryMap
    from flatten_remote.tree import FileNode

DELIMITER = "-" * 80
INDENT = "    "
BRANCH = "├── "
BINARY_PLACEHOLDER = "Binary file, content display skipped."
NOT_FETCHED = "content not fetched"


def render_listing(root: FileNode) -> str:
    """Render the tree as an indented listing.

    The root itself is not printed. Direct children of the root have no
    indent, each deeper level adds four spaces. Every line starts with "├── "
    and directories end with "/". There is no "└──" terminal marker and no
    vertical bars.

    Args:
        root (FileNode): the root returned by `build_tree`

    Returns:
        str: one newline-terminated line per node
    """
    out = io.StringIO()

    def walk(node: FileNode, level: int) -> None:
        for child in node.sorted_children():
            indent = INDENT * (level - 1)
            suffix = "/" if child.is_directory else ""
            out.write(f"{indent}{BRANCH}{child.name}{suffix}\n")
            if child.is_directory:
                walk(child, level + 1)

    walk(root, 1)
    return out.getvalue()


def number_lines(content: str) -> str:
    """Prefix each line with a right-justified 3-character line number.

    "a\\nb" gives "  1 | a\\n  2 | b\\n". A trailing newline yields a last,
    empty numbered line.
    """
    return "".join(f"{n:>3} | {line}\n" for n, line in enumerate(content.split("\n"), start=1))


def _header(path: str) -> str:
    return f"\n{DELIMITER}\n/{path}:\n{DELIMITER}\n"


def _error_block(message: str, url: str, *, token_supplied: bool) -> str:
    return f"Error: {message}\nURL: {url}\nToken used: {'yes' if token_supplied else 'no'}\n\n"


def render_contents(
    flat: FlatEntryMap,
    contents: Mapping[str, str | Exception],
    *,
    token_supplied: bool = False,
    pattern_filter: PatternFilter = DEFAULT_FILTER,
) -> str:
    """Render the fetched contents as delimited, line-numbered blocks.

    Files are rendered in the map's order. Directories produce nothing, binary
    files get a placeholder line and a failed fetch becomes an inline error
    block; neither stops the rendering of the remaining files.

    Args:
        flat (FlatEntryMap): the walker's output
        contents (Mapping[str, str | Exception]): text, or the fetch error, by path
        token_supplied (bool): whether an access token was used, shown in error blocks
        pattern_filter (PatternFilter): binary decisions

    Returns:
        str: the contents block
    """
    out = io.StringIO()
    for path, entry in flat.items():
        if not isinstance(entry, FileEntry):
            continue
        out.write(_header(path))
        if pattern_filter.is_binary(path):
            out.write(f"{BINARY_PLACEHOLDER}\n\n")
            continue
        content = contents.get(path)
        if content is None:
            out.write(_error_block(NOT_FETCHED, entry.locator, token_supplied=token_supplied))
        elif isinstance(content, Exception):
            out.write(_error_block(str(content), entry.locator, token_supplied=token_supplied))
        else:
            out.write(number_lines(content))
            out.write("\n")
    return out.getvalue()


def collect_contents(
    flat: FlatEntryMap,
    fetch: Callable[[str], str],
    *,
    pattern_filter: PatternFilter = DEFAULT_FILTER,
) -> dict[str, str | Exception]:
    """Fetch every text file of the map, one after the other.

    A `FetchError` is kept as the value for its path so that the rendering can
    show it in place; other exceptions propagate.

    Args:
        flat (FlatEntryMap): the walker's output
        fetch (Callable[[str], str]): locator -> text
        pattern_filter (PatternFilter): binary files are not fetched

    Returns:
        dict[str, str | Exception]: text or error by path
    """
    contents: dict[str, str | Exception] = {}
    for path, entry in flat.items():
        if not isinstance(entry, FileEntry) or pattern_filter.is_binary(path):
            continue
        try:
            contents[path] = fetch(entry.locator)
        except FetchError as e:
            logger.warning("file_fetch_failed", path=path, url=entry.locator, error=str(e))
            contents[path] = e
    return contents


def build_output(
    root: FileNode,
    flat: FlatEntryMap,
    contents: Mapping[str, str | Exception],
    *,
    token_supplied: bool = False,
    pattern_filter: PatternFilter = DEFAULT_FILTER,
) -> str:
    """Concatenate the listing and the contents block."""
    return render_listing(root) + render_contents(
        flat,
        contents,
        token_supplied=token_supplied,
        pattern_filter=pattern_filter,
    )
