from __future__ import annotations

from enum import StrEnum, auto
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

GITHUB_API_BASE_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
RAW_CONTENT_HOST = "raw.githubusercontent.com"
USER_AGENT = "flatten-remote"

FALLBACK_BRANCH = "main"
DEFAULT_MAX_DEPTH = 3
DEFAULT_TIMEOUT = 30.0

JSON_ACCEPT = "application/vnd.github.v3+json"
RAW_ACCEPT = "application/vnd.github.raw"

DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    ".git",
    "node_modules",
    ".DS_Store",
    ".env",
    ".vscode",
    ".idea",
    ".next",
    "build",
    "dist",
    "out",
)

DEFAULT_BINARY_EXTENSIONS: tuple[str, ...] = (
    # images
    ".ico",
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".bmp",
    ".webp",
    ".svg",
    # documents and archives
    ".pdf",
    ".zip",
    ".tar",
    ".gz",
    ".rar",
    # executables and libraries
    ".exe",
    ".dll",
    ".so",
    ".dylib",
    ".jar",
    ".war",
    ".ear",
    # media
    ".mp3",
    ".mp4",
    ".avi",
    ".mov",
    ".mkv",
    # fonts
    ".ttf",
    ".otf",
    ".woff",
    ".woff2",
    # bytecode
    ".pyc",
    ".pyo",
    ".class",
    # generic binary / databases
    ".bin",
    ".dat",
    ".db",
    ".sqlite",
)


class EntryKind(StrEnum):
    """Kind of an item in a contents listing, as reported by the API."""

    FILE = auto()
    DIR = auto()
    SYMLINK = auto()
    SUBMODULE = auto()


class RepositoryRef(BaseModel):
    """A repository on the provider, optionally pinned to a branch.

    Attributes:
        owner: User or organisation owning the repository.
        repo: Repository name.
        branch: Branch or ref to read; None means the provider default.
    """

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., min_length=1, description="Repository owner")
    repo: str = Field(..., min_length=1, description="Repository name")
    branch: str | None = Field(default=None, description="Branch or ref, None for default")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def with_branch(self, branch: str | None) -> RepositoryRef:
        """Return a copy pinned to `branch`."""
        return self.model_copy(update={"branch": branch})


class FileEntry(BaseModel):
    """A file found while walking, with the locator used to fetch its content."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"
    locator: str = Field(..., min_length=1, description="URL to fetch the raw content from")


class DirectoryEntry(BaseModel):
    """A directory found while walking. Directories are never fetched."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["dir"] = "dir"


Entry = FileEntry | DirectoryEntry

# Repository-relative path ("src/app.py", no leading slash) to entry.
FlatEntryMap = dict[str, Entry]
