import pytest

from flatten_remote.config import RepositoryRef
from flatten_remote.exceptions import InputError
from flatten_remote.github_api import api_headers, contents_url, parse_repository_url, raw_to_api_url


@pytest.mark.unit
@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://github.com/octo/demo", RepositoryRef(owner="octo", repo="demo")),
        ("https://github.com/octo/demo/", RepositoryRef(owner="octo", repo="demo")),
        ("https://github.com/octo/demo.git", RepositoryRef(owner="octo", repo="demo")),
        ("github.com/octo/demo", RepositoryRef(owner="octo", repo="demo")),
        ("https://www.github.com/octo/demo/issues", RepositoryRef(owner="octo", repo="demo")),
        (
            "https://github.com/octo/demo/tree/dev/src",
            RepositoryRef(owner="octo", repo="demo", branch="dev"),
        ),
    ],
)
def test_parse_repository_url(url: str, expected: RepositoryRef) -> None:
    assert parse_repository_url(url) == expected


@pytest.mark.unit
@pytest.mark.parametrize(
    "url",
    ["", "https://gitlab.com/octo/demo", "https://github.com/octo", "not a url"],
)
def test_parse_repository_url_rejects_bad_input(url: str) -> None:
    with pytest.raises(InputError) as exc_info:
        parse_repository_url(url)

    assert exc_info.value.url == url
    assert str(exc_info.value)


@pytest.mark.unit
def test_api_headers_with_and_without_token() -> None:
    anonymous = api_headers()
    authed = api_headers("t0k", accept="application/vnd.github.raw")

    assert "Authorization" not in anonymous
    assert anonymous["Accept"] == "application/vnd.github.v3+json"
    assert authed["Authorization"] == "Bearer t0k"
    assert authed["Accept"] == "application/vnd.github.raw"


@pytest.mark.unit
def test_contents_url_adds_ref_and_quotes_path() -> None:
    ref = RepositoryRef(owner="octo", repo="demo", branch="feature/x")

    url = contents_url(ref, "docs/read me.md")

    assert url == "https://api.github.com/repos/octo/demo/contents/docs/read%20me.md?ref=feature%2Fx"


@pytest.mark.unit
def test_contents_url_without_branch_for_root() -> None:
    ref = RepositoryRef(owner="octo", repo="demo")

    assert contents_url(ref, "", "https://ghe.example.com/api/v3/") == (
        "https://ghe.example.com/api/v3/repos/octo/demo/contents/"
    )


@pytest.mark.unit
def test_raw_to_api_url_rewrites_raw_locator() -> None:
    raw = "https://raw.githubusercontent.com/octo/demo/main/src/app.py?token=ABC"

    assert raw_to_api_url(raw) == "https://api.github.com/repos/octo/demo/contents/src/app.py?ref=main"


@pytest.mark.unit
def test_raw_to_api_url_handles_refs_heads_shape() -> None:
    raw = "https://raw.githubusercontent.com/octo/demo/refs/heads/dev/a.txt"

    assert raw_to_api_url(raw) == "https://api.github.com/repos/octo/demo/contents/a.txt?ref=dev"


@pytest.mark.unit
@pytest.mark.parametrize(
    "locator",
    [
        "https://api.github.com/repos/octo/demo/contents/a.txt",
        "https://raw.githubusercontent.com/octo/demo/main",
    ],
)
def test_raw_to_api_url_ignores_other_shapes(locator: str) -> None:
    assert raw_to_api_url(locator) is None
