from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FlattenRemoteError(Exception):
    """Base exception for errors in the flatten_remote module."""

    def __str__(self) -> str:
        return getattr(self, "message", "") or self.__class__.__name__


@dataclass(frozen=True)
class InputError(FlattenRemoteError):
    """Raised when the repository URL cannot be parsed."""

    url: str
    message: str = "Invalid GitHub repository URL. Expected: https://github.com/owner/repo"


@dataclass(frozen=True)
class ConfigError(FlattenRemoteError):
    """Raised when a configuration file is unreadable or malformed."""

    path: Path
    message: str = "Invalid configuration file."


@dataclass(frozen=True)
class TransportError(FlattenRemoteError):
    """Raised by a transport when no HTTP response could be obtained."""

    url: str
    message: str = "Transport failure."


@dataclass(frozen=True)
class ProviderError(FlattenRemoteError):
    """Raised when a listing or metadata endpoint answers with a non-success status.

    Structural failures abort the whole export.
    """

    url: str
    status: int = 0
    reason: str = ""
    message: str = ""

    def __str__(self) -> str:
        base = f"GitHub API error: {self.status} {self.reason}".rstrip()
        return f"{base} ({self.message})" if self.message else base


@dataclass(frozen=True)
class FetchError(FlattenRemoteError):
    """Raised when the content of a single file cannot be retrieved.

    Callers recover from it per file.
    """

    url: str
    status: int = 0
    reason: str = ""
    body: str = ""

    def __str__(self) -> str:
        text = f"Failed to fetch file: {self.status} {self.reason}".rstrip()
        if self.body:
            text += f" - {self.body}"
        return text
