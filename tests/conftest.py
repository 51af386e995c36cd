"""Shared fixtures: an in-memory GitHub contents endpoint."""

import base64
import json

import httpx
import pytest

from weight_log_sync.infrastructure.github_client.client import GitHubContentsClient
from weight_log_sync.services.sync import RemoteSyncClient
from weight_log_sync.utils.parameters import RemoteConfig


class FakeRepo:
    """
    Single-file repository speaking the contents API.

    A PUT whose sha does not match the current version gets a 409, like the
    real endpoint. ``forced_conflicts`` makes the next N PUTs conflict
    regardless of sha, and ``fail_status`` answers every request with that
    status.
    """

    def __init__(self, text: str | None = None) -> None:
        self.text = text
        self.version = 1 if text is not None else 0
        self.forced_conflicts = 0
        self.fail_status: int | None = None
        self.requests: list[httpx.Request] = []
        self.put_bodies: list[dict] = []

    @property
    def sha(self) -> str | None:
        return f"sha-{self.version}" if self.text is not None else None

    def external_write(self, text: str) -> None:
        """Simulate another writer committing a new version."""
        self.text = text
        self.version += 1

    def methods(self) -> list[str]:
        return [request.method for request in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.fail_status is not None:
            return httpx.Response(self.fail_status, json={"message": "Server Error"})

        if request.method == "GET":
            if self.text is None:
                return httpx.Response(404, json={"message": "Not Found"})
            encoded = base64.encodebytes(self.text.encode("utf-8")).decode("ascii")
            return httpx.Response(200, json={"content": encoded, "encoding": "base64", "sha": self.sha})

        body = json.loads(request.content)
        self.put_bodies.append(body)

        if self.forced_conflicts:
            self.forced_conflicts -= 1
            return httpx.Response(409, json={"message": "is at sha-x but expected sha-y"})
        if body.get("sha") != self.sha:
            return httpx.Response(409, json={"message": "sha mismatch"})

        self.external_write(base64.b64decode(body["content"]).decode("utf-8"))
        return httpx.Response(200, json={"content": {"sha": self.sha}})


@pytest.fixture
def remote_config() -> RemoteConfig:
    return RemoteConfig(owner="someone", repo="weights", path="weight_log.csv")


@pytest.fixture
def fake_repo() -> FakeRepo:
    return FakeRepo()


@pytest.fixture
def make_sync_client(remote_config, fake_repo):
    def factory(token: str | None = "secret", max_value: float | None = 300.0) -> RemoteSyncClient:
        contents = GitHubContentsClient(remote_config, transport=httpx.MockTransport(fake_repo.handler))
        return RemoteSyncClient(contents, token=token, max_value=max_value)

    return factory
