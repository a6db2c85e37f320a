from __future__ import annotations

import pytest

from flatten_remote.config import DirectoryEntry, FileEntry
from flatten_remote.exceptions import FetchError
from flatten_remote.output_construction import (
    BINARY_PLACEHOLDER,
    DELIMITER,
    build_output,
    collect_contents,
    number_lines,
    render_contents,
    render_listing,
)
from flatten_remote.tree import build_tree


@pytest.mark.unit
def test_render_listing_nested_example() -> None:
    root = build_tree({"a/b.txt": FileEntry(locator="X"), "a": DirectoryEntry()})

    assert render_listing(root) == "├── a/\n    ├── b.txt\n"


@pytest.mark.unit
def test_render_listing_directories_first_then_alphabetical() -> None:
    flat = {
        "zeta.txt": FileEntry(locator="z"),
        "Alpha.md": FileEntry(locator="a"),
        "src": DirectoryEntry(),
        "src/main.py": FileEntry(locator="m"),
        "src/lib": DirectoryEntry(),
        "src/lib/util.py": FileEntry(locator="u"),
        "docs": DirectoryEntry(),
    }

    listing = render_listing(build_tree(flat))

    assert listing == (
        "├── docs/\n"
        "├── src/\n"
        "    ├── lib/\n"
        "        ├── util.py\n"
        "    ├── main.py\n"
        "├── Alpha.md\n"
        "├── zeta.txt\n"
    )


@pytest.mark.unit
def test_render_listing_is_idempotent() -> None:
    flat = {"b/c.txt": FileEntry(locator="c"), "b": DirectoryEntry(), "a.txt": FileEntry(locator="a")}

    assert render_listing(build_tree(flat)) == render_listing(build_tree(flat))
    root = build_tree(flat)
    assert render_listing(root) == render_listing(root)


@pytest.mark.unit
def test_render_listing_empty_tree() -> None:
    assert render_listing(build_tree({})) == ""


@pytest.mark.unit
def test_number_lines_right_justifies() -> None:
    assert number_lines("line1\nline2") == "  1 | line1\n  2 | line2\n"
    assert number_lines("x\n").splitlines() == ["  1 | x", "  2 | "]


@pytest.mark.unit
def test_render_contents_text_block() -> None:
    flat = {"x.txt": FileEntry(locator="https://raw/x.txt")}

    out = render_contents(flat, {"x.txt": "line1\nline2"})

    assert out == f"\n{DELIMITER}\n/x.txt:\n{DELIMITER}\n  1 | line1\n  2 | line2\n\n"
    assert len(DELIMITER) == 80


@pytest.mark.unit
def test_render_contents_wide_line_numbers() -> None:
    content = "\n".join(f"l{i}" for i in range(1, 1001))

    out = render_contents({"big.txt": FileEntry(locator="u")}, {"big.txt": content})

    assert "  9 | l9\n" in out
    assert " 99 | l99\n" in out
    assert "1000 | l1000\n" in out


@pytest.mark.unit
def test_render_contents_binary_placeholder_and_directories() -> None:
    flat = {"img": DirectoryEntry(), "img/logo.PNG": FileEntry(locator="u")}

    out = render_contents(flat, {})

    assert out == f"\n{DELIMITER}\n/img/logo.PNG:\n{DELIMITER}\n{BINARY_PLACEHOLDER}\n\n"


@pytest.mark.unit
def test_render_contents_error_block_does_not_stop_rendering() -> None:
    flat = {
        "bad.txt": FileEntry(locator="https://raw/bad.txt"),
        "good.txt": FileEntry(locator="https://raw/good.txt"),
    }

    out = render_contents(flat, {"bad.txt": RuntimeError("boom"), "good.txt": "fine"}, token_supplied=True)

    assert "Error: boom\nURL: https://raw/bad.txt\nToken used: yes\n" in out
    assert "/good.txt:" in out
    assert "  1 | fine" in out
    assert out.index("/bad.txt:") < out.index("/good.txt:")


@pytest.mark.unit
def test_render_contents_missing_content() -> None:
    out = render_contents({"a.txt": FileEntry(locator="u")}, {})

    assert "Error: content not fetched\nURL: u\nToken used: no\n" in out


@pytest.mark.unit
def test_collect_contents_keeps_fetch_errors_and_continues() -> None:
    flat = {
        "a.txt": FileEntry(locator="A"),
        "dir": DirectoryEntry(),
        "logo.png": FileEntry(locator="P"),
        "b.txt": FileEntry(locator="B"),
    }
    fetched: list[str] = []

    def fetch(locator: str) -> str:
        fetched.append(locator)
        if locator == "A":
            raise FetchError(url=locator, reason="boom")
        return "ok"

    contents = collect_contents(flat, fetch)

    assert fetched == ["A", "B"]
    assert isinstance(contents["a.txt"], FetchError)
    assert contents["b.txt"] == "ok"
    out = render_contents(flat, contents)
    assert "boom" in out
    assert "/b.txt:" in out


@pytest.mark.unit
def test_collect_contents_propagates_unexpected_errors() -> None:
    def fetch(locator: str) -> str:
        raise KeyError(locator)

    with pytest.raises(KeyError):
        collect_contents({"a.txt": FileEntry(locator="A")}, fetch)


@pytest.mark.unit
def test_build_output_is_listing_then_contents() -> None:
    flat = {"a": DirectoryEntry(), "a/b.txt": FileEntry(locator="X")}

    out = build_output(build_tree(flat), flat, {"a/b.txt": "hello"})

    assert out.startswith("├── a/\n    ├── b.txt\n\n" + DELIMITER)
    assert out.endswith("  1 | hello\n\n")
