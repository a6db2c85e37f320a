from __future__ import annotations

import pytest
from github_fakes import API, FakeTransport, dir_item, file_item, listing_url, raw_url


@pytest.fixture
def fake_github() -> FakeTransport:
    """A small repository: README, src/ with a module and a logo, an ignored node_modules."""
    return FakeTransport(
        {
            f"{API}/repos/octo/demo": {"default_branch": "main"},
            listing_url(): [
                file_item("README.md"),
                dir_item("src"),
                dir_item("node_modules"),
            ],
            listing_url("src"): [
                file_item("src/app.py"),
                file_item("src/logo.png"),
            ],
            raw_url("README.md"): b"# Demo\nHello",
            raw_url("src/app.py"): b"print('hi')",
        },
    )


@pytest.fixture(autouse=True)
def _no_ambient_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_API_URL", raising=False)
