from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, ValidationError

from flatten_remote.config import (
    DEFAULT_MAX_DEPTH,
    GITHUB_API_BASE_URL,
    DirectoryEntry,
    EntryKind,
    FileEntry,
    FlatEntryMap,
)
from flatten_remote.exceptions import ProviderError, TransportError
from flatten_remote.filters import DEFAULT_FILTER, PatternFilter
from flatten_remote.github_api import api_headers, contents_url
from flatten_remote.logging import logger

if TYPE_CHECKING:
    from flatten_remote.config import RepositoryRef
    from flatten_remote.transport import Transport

_FORBIDDEN = 403


class ContentItem(BaseModel):
    """One item of a contents API listing. Unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    path: str
    type: str = EntryKind.FILE
    download_url: str | None = None
    url: str | None = None

    @property
    def locator(self) -> str | None:
        # download_url is null for submodules and some private files,
        # the API url still serves the content
        return self.download_url or self.url


def _provider_message(payload: Any, rate_limit_remaining: str | None, status: int) -> str:  # noqa: ANN401
    message = payload.get("message", "") if isinstance(payload, dict) else ""
    if status == _FORBIDDEN and rate_limit_remaining == "0":
        return f"rate limit exceeded. {message}".strip()
    return str(message)


def list_directory(
    ref: RepositoryRef,
    path: str,
    token: str | None = None,
    *,
    transport: Transport,
    api_base_url: str = GITHUB_API_BASE_URL,
) -> Any:  # noqa: ANN401
    """Fetch the contents listing for `path`.

    Args:
        ref (RepositoryRef): the repository, pinned to a branch or not
        path (str): repository-relative directory (or file) path, "" for the root
        token (str | None): optional access token
        transport (Transport): the HTTP transport
        api_base_url (str): the API root

    Raises:
        ProviderError: on transport failure, error status or a non-JSON body

    Returns:
        Any: the decoded payload, a list for a directory or a dict for a single file
    """
    url = contents_url(ref, path, api_base_url)
    try:
        response = transport.fetch(url, api_headers(token))
    except TransportError as e:
        raise ProviderError(url=url, reason="transport failure", message=e.message) from e

    try:
        payload = response.json_body()
    except ValueError:
        payload = None

    if not response.ok:
        raise ProviderError(
            url=url,
            status=response.status,
            reason=response.reason,
            message=_provider_message(payload, response.header("X-RateLimit-Remaining"), response.status),
        )
    if payload is None:
        raise ProviderError(url=url, status=response.status, reason=response.reason, message="invalid JSON payload")
    return payload


def _file_entry(item: ContentItem) -> FileEntry | None:
    if not item.locator:
        logger.warning("entry_without_locator", path=item.path)
        return None
    return FileEntry(locator=item.locator)


def _parse_item(raw: Any, url: str) -> ContentItem:  # noqa: ANN401
    try:
        return ContentItem.model_validate(raw)
    except ValidationError as e:
        raise ProviderError(url=url, reason="unexpected payload", message=str(e)) from e


def walk_repository(
    ref: RepositoryRef,
    token: str | None = None,
    *,
    transport: Transport,
    path: str = "",
    depth: int = 0,
    max_depth: int = DEFAULT_MAX_DEPTH,
    pattern_filter: PatternFilter = DEFAULT_FILTER,
    api_base_url: str = GITHUB_API_BASE_URL,
) -> FlatEntryMap:
    """Recursively enumerate a repository into a flat path -> entry map.

    Each call returns its own map and the caller merges the result of the
    recursion, so the final order is a depth-first pre-order traversal.

    - Beyond `max_depth` nothing is listed (silent truncation).
    - Items whose name matches the ignore patterns are skipped with their subtree.
    - A directory at `max_depth` is recorded but never listed.
    - When `path` denotes a single file the map holds just that file.

    Args:
        ref (RepositoryRef): the repository, pinned to a branch or not
        token (str | None): optional access token
        transport (Transport): the HTTP transport
        path (str): directory to start from, "" for the root
        depth (int): depth of `path`, 0 for the starting directory
        max_depth (int): deepest level whose directories are still listed
        pattern_filter (PatternFilter): ignore decisions
        api_base_url (str): the API root

    Raises:
        ProviderError: if any listing fails; the whole walk is aborted

    Returns:
        FlatEntryMap: the entries found under `path`
    """
    if depth > max_depth:
        return {}

    url = contents_url(ref, path, api_base_url)
    payload = list_directory(ref, path, token, transport=transport, api_base_url=api_base_url)
    logger.debug("directory_listed", repository=ref.full_name, path=path or "/", depth=depth)

    if isinstance(payload, dict):
        item = _parse_item(payload, url)
        entry = _file_entry(item)
        return {item.path: entry} if entry else {}
    if not isinstance(payload, list):
        raise ProviderError(url=url, reason="unexpected payload", message=type(payload).__name__)

    found: FlatEntryMap = {}
    for raw in payload:
        item = _parse_item(raw, url)
        if pattern_filter.should_ignore(item.name):
            logger.debug("entry_ignored", path=item.path)
            continue
        if item.type == EntryKind.FILE:
            entry = _file_entry(item)
            if entry:
                found[item.path] = entry
        elif item.type == EntryKind.DIR:
            found[item.path] = DirectoryEntry()
            if depth < max_depth:
                found.update(
                    walk_repository(
                        ref,
                        token,
                        transport=transport,
                        path=item.path,
                        depth=depth + 1,
                        max_depth=max_depth,
                        pattern_filter=pattern_filter,
                        api_base_url=api_base_url,
                    ),
                )
        else:
            logger.debug("entry_skipped", path=item.path, type=item.type)
    return found
