from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from flatten_remote.config import DEFAULT_BINARY_EXTENSIONS, DEFAULT_IGNORE_PATTERNS


class PatternFilter(BaseModel):
    """Decide which repository items are skipped or treated as binary.

    Both decisions are pure string checks: no I/O, same input same answer.

    Attributes:
        ignore_patterns: Substrings excluding any item whose name contains one of them.
            Matching is substring based, so "node_modules" also excludes
            "my_node_modules_fork".
        binary_extensions: Suffixes (compared lowercased) whose content is never fetched.
    """

    model_config = ConfigDict(frozen=True)

    ignore_patterns: tuple[str, ...] = Field(default=DEFAULT_IGNORE_PATTERNS)
    binary_extensions: tuple[str, ...] = Field(default=DEFAULT_BINARY_EXTENSIONS)

    @field_validator("ignore_patterns")
    @classmethod
    def _drop_empty_patterns(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        # an empty pattern would match every name
        return tuple(p for p in value if p)

    @field_validator("binary_extensions")
    @classmethod
    def _lower_extensions(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(ext.lower() for ext in value if ext)

    def should_ignore(self, name: str) -> bool:
        """Check whether an item must be skipped during traversal.

        Args:
            name (str): the item name (a single path segment)

        Returns:
            bool: True if `name` contains any ignore pattern as a substring
        """
        return any(pattern in name for pattern in self.ignore_patterns)

    def is_binary(self, path: str) -> bool:
        """Check whether a file is binary based on its extension.

        Args:
            path (str): the repository-relative file path

        Returns:
            bool: True if the lowercased path ends with a binary extension
        """
        lowered = path.lower()
        return lowered.endswith(self.binary_extensions)


DEFAULT_FILTER = PatternFilter()


def should_ignore(name: str) -> bool:
    """Check `name` against the default ignore patterns."""
    return DEFAULT_FILTER.should_ignore(name)


def is_binary(path: str) -> bool:
    """Check `path` against the default binary extensions."""
    return DEFAULT_FILTER.is_binary(path)
