from __future__ import annotations

from urllib.parse import quote, unquote, urlencode, urlsplit

from flatten_remote.config import (
    GITHUB_API_BASE_URL,
    GITHUB_API_VERSION,
    JSON_ACCEPT,
    RAW_CONTENT_HOST,
    USER_AGENT,
    RepositoryRef,
)
from flatten_remote.exceptions import InputError

_MIN_REPO_SEGMENTS = 2


def parse_repository_url(url: str) -> RepositoryRef:
    """Parse a GitHub web URL into a repository reference.

    Accepted shapes::

        https://github.com/owner/repo
        https://github.com/owner/repo.git
        https://github.com/owner/repo/tree/branch[/sub/path]
        github.com/owner/repo

    A `/tree/<branch>` suffix pins the branch; anything after it is ignored.

    Args:
        url (str): the repository URL as typed by the user

    Raises:
        InputError: if the host is not GitHub or owner/repo are missing

    Returns:
        RepositoryRef: the parsed reference, `branch` is None unless pinned by the URL
    """
    raw = (url or "").strip()
    if not raw:
        raise InputError(url=url, message="Repository URL is empty.")
    if "://" not in raw:
        raw = f"https://{raw}"
    parts = urlsplit(raw)
    if "github.com" not in parts.netloc.lower():
        raise InputError(url=url)

    segments = [s for s in parts.path.split("/") if s]
    if len(segments) < _MIN_REPO_SEGMENTS:
        raise InputError(url=url)

    owner, repo = segments[0], segments[1].removesuffix(".git")
    if not repo:
        raise InputError(url=url)
    branch = None
    if len(segments) > 3 and segments[2] == "tree":  # noqa: PLR2004
        branch = unquote(segments[3])
    return RepositoryRef(owner=owner, repo=repo, branch=branch)


def api_headers(token: str | None = None, accept: str = JSON_ACCEPT) -> dict[str, str]:
    """Build the request headers for a GitHub API call.

    Args:
        token (str | None): optional personal access token, sent as a bearer token
        accept (str): the media type to request

    Returns:
        dict[str, str]: headers ready to hand to a transport
    """
    headers = {
        "Accept": accept,
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
        "User-Agent": USER_AGENT,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def repository_url(ref: RepositoryRef, api_base_url: str = GITHUB_API_BASE_URL) -> str:
    """Return the repository metadata endpoint."""
    base = api_base_url.rstrip("/")
    return f"{base}/repos/{quote(ref.owner)}/{quote(ref.repo)}"


def contents_url(
    ref: RepositoryRef,
    path: str = "",
    api_base_url: str = GITHUB_API_BASE_URL,
) -> str:
    """Return the contents endpoint for `path`, pinned to `ref.branch` when set."""
    url = f"{repository_url(ref, api_base_url)}/contents/{quote(path.strip('/'), safe='/')}"
    if ref.branch:
        url += "?" + urlencode({"ref": ref.branch})
    return url


def raw_to_api_url(locator: str, api_base_url: str = GITHUB_API_BASE_URL) -> str | None:
    """Rewrite a raw.githubusercontent.com URL into the matching contents API URL.

    Raw URLs look like ``/{owner}/{repo}/{branch}/{path...}`` or
    ``/{owner}/{repo}/refs/heads/{branch}/{path...}``. Query strings (such as the
    short-lived ``?token=`` of private repositories) are dropped. A branch name
    containing "/" cannot be told apart from the file path; the first segment wins.

    Args:
        locator (str): the download URL to rewrite
        api_base_url (str): the API root to target

    Returns:
        str | None: the contents API URL, or None if `locator` is not a raw URL
    """
    parts = urlsplit(locator)
    if parts.netloc.lower() != RAW_CONTENT_HOST:
        return None
    segments = [unquote(s) for s in parts.path.split("/") if s]
    if len(segments) >= 6 and segments[2:4] == ["refs", "heads"]:  # noqa: PLR2004
        segments = [*segments[:2], *segments[4:]]
    if len(segments) < 4:  # noqa: PLR2004
        return None
    owner, repo, branch, *path = segments
    ref = RepositoryRef(owner=owner, repo=repo, branch=branch)
    return contents_url(ref, "/".join(path), api_base_url)
