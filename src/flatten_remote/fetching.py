from __future__ import annotations

import base64
import binascii
import json
from typing import TYPE_CHECKING

from flatten_remote.config import FALLBACK_BRANCH, GITHUB_API_BASE_URL, RAW_ACCEPT
from flatten_remote.exceptions import FetchError, TransportError
from flatten_remote.github_api import api_headers, raw_to_api_url, repository_url
from flatten_remote.logging import logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from flatten_remote.config import RepositoryRef
    from flatten_remote.transport import Transport, TransportResponse

BODY_SNIPPET_CHARS = 200


def resolve_default_branch(
    ref: RepositoryRef,
    token: str | None = None,
    *,
    transport: Transport,
    api_base_url: str = GITHUB_API_BASE_URL,
) -> str:
    """Look up the default branch of a repository.

    Best effort: a failed lookup must not abort the export, so any transport
    failure, error status or unexpected payload falls back to "main".

    Args:
        ref (RepositoryRef): the repository to query (its branch is ignored)
        token (str | None): optional access token
        transport (Transport): the HTTP transport
        api_base_url (str): the API root

    Returns:
        str: the default branch name, or "main" when it cannot be determined
    """
    url = repository_url(ref, api_base_url)
    try:
        response = transport.fetch(url, api_headers(token))
    except TransportError as e:
        logger.warning("default_branch_fallback", repository=ref.full_name, reason=str(e))
        return FALLBACK_BRANCH
    if not response.ok:
        logger.warning(
            "default_branch_fallback",
            repository=ref.full_name,
            reason=f"{response.status} {response.reason}",
        )
        return FALLBACK_BRANCH
    try:
        data = response.json_body()
    except ValueError:
        data = None
    branch = data.get("default_branch") if isinstance(data, dict) else None
    if not isinstance(branch, str) or not branch:
        logger.warning("default_branch_fallback", repository=ref.full_name, reason="no default_branch")
        return FALLBACK_BRANCH
    logger.info("default_branch_resolved", repository=ref.full_name, branch=branch)
    return branch


def _request(url: str, headers: Mapping[str, str], transport: Transport) -> TransportResponse:
    try:
        response = transport.fetch(url, headers)
    except TransportError as e:
        raise FetchError(url=url, reason=e.message) from e
    if not response.ok:
        raise FetchError(
            url=url,
            status=response.status,
            reason=response.reason,
            body=response.text[:BODY_SNIPPET_CHARS].strip(),
        )
    return response


def decode_payload(body: bytes) -> str:
    """Turn a content response body into text.

    The contents API may answer with its JSON envelope instead of the raw
    bytes; in that case the base64 `content` field is decoded. Anything else
    is returned as UTF-8 text.

    Args:
        body (bytes): the response body

    Returns:
        str: the file text
    """
    text = body.decode("utf-8", errors="replace")
    if not text.lstrip().startswith("{"):
        return text
    try:
        data = json.loads(text)
    except ValueError:
        return text
    if not isinstance(data, dict) or not isinstance(data.get("content"), str):
        return text
    if data.get("encoding", "base64") != "base64":
        return text
    try:
        raw = base64.b64decode(data["content"].replace("\n", ""), validate=True)
    except binascii.Error:
        return text
    return raw.decode("utf-8", errors="replace")


def fetch_content(
    locator: str,
    token: str | None = None,
    *,
    transport: Transport,
    api_base_url: str = GITHUB_API_BASE_URL,
) -> str:
    """Fetch the text content of one file.

    The locator is requested first. When it is a raw.githubusercontent.com URL
    and that request fails, it is rewritten into the equivalent contents API
    URL and retried once. No caching: every call hits the network.

    Args:
        locator (str): the file's download URL (raw or API)
        token (str | None): optional access token
        transport (Transport): the HTTP transport
        api_base_url (str): the API root used for the fallback

    Raises:
        FetchError: if the content cannot be retrieved

    Returns:
        str: the file text
    """
    headers = api_headers(token, accept=RAW_ACCEPT)
    try:
        response = _request(locator, headers, transport)
    except FetchError as e:
        api_url = raw_to_api_url(locator, api_base_url)
        if api_url is None:
            raise
        logger.info("content_fetch_fallback", url=locator, api_url=api_url, reason=str(e))
        response = _request(api_url, headers, transport)
    return decode_payload(response.body)
