from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from flatten_remote.config import FileEntry

if TYPE_CHECKING:
    from flatten_remote.config import FlatEntryMap


class FileNode(BaseModel):
    """A node of the reconstructed repository tree.

    Attributes:
        name: Last path segment ("" for the root).
        path: Repository-relative path ("" for the root).
        is_directory: Whether the node is a directory. Directories may be empty.
        locator: Content URL for files, None for directories.
        children: Child nodes by name. Always empty for files.
    """

    name: str = ""
    path: str = ""
    is_directory: bool = True
    locator: str | None = None
    children: dict[str, FileNode] = Field(default_factory=dict)

    def sorted_children(self) -> list[FileNode]:
        """Return the children directories first, then alphabetically."""
        return sorted(self.children.values(), key=node_sort_key)


def path_sort_key(path: str) -> tuple[str, str]:
    """Case-insensitive ordering; on a tie the lowercase spelling comes first."""
    return (path.casefold(), path.swapcase())


def node_sort_key(node: FileNode) -> tuple[bool, str, str]:
    """Directories before files, then by name."""
    return (not node.is_directory, *path_sort_key(node.name))


def build_tree(flat: FlatEntryMap) -> FileNode:
    """Rebuild the directory hierarchy from a flat path -> entry map.

    Entries are processed in path order, whatever order the provider listed
    them in. Intermediate directories are created on demand and reused, never
    overwritten. A segment becomes a file node only when it is the last one of
    its path and the entry is a file.

    Args:
        flat (FlatEntryMap): the walker's output

    Returns:
        FileNode: the synthetic root (`path=""`, directory)
    """
    root = FileNode()
    for path in sorted(flat, key=path_sort_key):
        entry = flat[path]
        parts = [p for p in path.split("/") if p]
        cur = root
        for i, part in enumerate(parts):
            child = cur.children.get(part)
            if child is None:
                last = i == len(parts) - 1
                is_file = last and isinstance(entry, FileEntry)
                child = FileNode(
                    name=part,
                    path="/".join(parts[: i + 1]),
                    is_directory=not is_file,
                    locator=entry.locator if is_file else None,
                )
                cur.children[part] = child
            cur = child
    return root
