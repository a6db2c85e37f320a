from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

from flatten_remote.config import FileEntry
from flatten_remote.fetching import fetch_content, resolve_default_branch
from flatten_remote.github_api import parse_repository_url
from flatten_remote.logging import logger
from flatten_remote.output_construction import build_output, collect_contents
from flatten_remote.transport import HttpxTransport
from flatten_remote.tree import build_tree
from flatten_remote.walker import walk_repository

if TYPE_CHECKING:
    from flatten_remote.config import RepositoryRef
    from flatten_remote.settings import Settings
    from flatten_remote.transport import Transport


def resolve_ref(settings: Settings, transport: Transport) -> RepositoryRef:
    """Parse the URL and pin the branch to traverse.

    The branch comes from `settings.branch`, then from a `/tree/<branch>` URL,
    then from the repository's default branch.
    """
    ref = parse_repository_url(settings.url)
    branch = settings.branch or ref.branch
    if not branch:
        branch = resolve_default_branch(
            ref,
            settings.token,
            transport=transport,
            api_base_url=settings.api_base_url,
        )
    return ref.with_branch(branch)


def flatten_repository(settings: Settings, transport: Transport) -> str:
    """Export one repository to a single text using `transport` for every request.

    Args:
        settings (Settings): the export settings
        transport (Transport): the HTTP transport

    Raises:
        InputError: if the URL is not a GitHub repository URL
        ProviderError: if a directory listing fails

    Returns:
        str: the indented listing followed by the line-numbered contents
    """
    ref = resolve_ref(settings, transport)
    pattern_filter = settings.pattern_filter()
    logger.info("export_started", repository=ref.full_name, branch=ref.branch, max_depth=settings.max_depth)

    flat = walk_repository(
        ref,
        settings.token,
        transport=transport,
        max_depth=settings.max_depth,
        pattern_filter=pattern_filter,
        api_base_url=settings.api_base_url,
    )
    logger.info("walk_finished", repository=ref.full_name, entries=len(flat))
    root = build_tree(flat)

    fetch = partial(
        fetch_content,
        token=settings.token,
        transport=transport,
        api_base_url=settings.api_base_url,
    )
    contents = collect_contents(flat, fetch, pattern_filter=pattern_filter)
    failures = sum(1 for value in contents.values() if isinstance(value, Exception))
    logger.info(
        "export_finished",
        repository=ref.full_name,
        entries=len(flat),
        files=sum(1 for entry in flat.values() if isinstance(entry, FileEntry)),
        fetched=len(contents) - failures,
        failures=failures,
    )
    return build_output(
        root,
        flat,
        contents,
        token_supplied=bool(settings.token),
        pattern_filter=pattern_filter,
    )


def export_repository(settings: Settings, transport: Transport | None = None) -> str:
    """Export a repository, opening an httpx transport when none is given."""
    if transport is not None:
        return flatten_repository(settings, transport)
    with HttpxTransport(timeout=settings.timeout) as http:
        return flatten_repository(settings, http)
