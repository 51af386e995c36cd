"""
GitHub contents API client.

Provides versioned read and versioned write of a single repository file.
Content travels base64-encoded; this module encodes and decodes it so
callers only see plain text and revision tokens (blob SHAs).
"""

import base64
import binascii
import logging
from typing import Any

import httpx

from weight_log_sync.utils.exceptions import (
    AuthenticationError,
    TransportError,
    VersionConflictError,
)
from weight_log_sync.utils.parameters import RemoteConfig

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "application/vnd.github.v3+json"


class RemoteFile:
    """Decoded file content with its revision token."""

    def __init__(self, text: str, sha: str) -> None:
        """
        Initialize remote file.

        Args:
            text: Decoded file content.
            sha: Revision token of this version.
        """
        self.text = text
        self.sha = sha

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {"text": self.text, "sha": self.sha}


def encode_content(text: str) -> str:
    """Encode text as base64 of its UTF-8 bytes."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_content(content: str) -> str:
    """
    Decode base64 file content to text.

    The API wraps base64 payloads at 60 columns, so embedded newlines are
    removed before decoding.

    Raises:
        TransportError: If the payload is not valid base64 UTF-8.
    """
    try:
        return base64.b64decode("".join(content.split())).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise TransportError(f"Undecodable file content: {e}") from e


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = {}

    message = payload.get("message") if isinstance(payload, dict) else None
    return message or response.reason_phrase or f"HTTP {response.status_code}"


def _raise_for_status(response: httpx.Response) -> None:
    """
    Map an error response to the exception taxonomy.

    Raises:
        VersionConflictError: On 409.
        AuthenticationError: On 401 or 403.
        TransportError: On any other non-2xx status.
    """
    if response.is_success:
        return

    message = _error_message(response)
    status = response.status_code

    if status == 409:
        raise VersionConflictError(f"Version conflict: {message}")
    if status in (401, 403):
        raise AuthenticationError(f"GitHub rejected the token ({status}): {message}")
    raise TransportError(f"GitHub error {status}: {message}", status_code=status)


class GitHubContentsClient:
    """
    Async client for one file in a GitHub repository.

    The access token is passed per call so the owner of the credential
    can change it without rebuilding the client.
    """

    def __init__(
        self,
        config: RemoteConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize contents client.

        Args:
            config: Remote repository configuration.
            transport: Optional transport (e.g. httpx.MockTransport in tests).
        """
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.api_url,
            timeout=config.timeout_seconds,
            transport=transport,
        )

    @property
    def url(self) -> str:
        """Path of the file's contents endpoint."""
        return f"/repos/{self.config.owner}/{self.config.repo}/contents/{self.config.path}"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "GitHubContentsClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"token {token}",
            "Accept": ACCEPT_HEADER,
            "Cache-Control": "no-cache",
        }

    async def _request(self, method: str, token: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(
                method, self.url, headers=self._headers(token), **kwargs
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Request to GitHub failed: {e}") from e

    async def get_file(self, token: str) -> RemoteFile | None:
        """
        Fetch the file and its revision token.

        Args:
            token: Access token.

        Returns:
            The decoded file, or None if it does not exist yet.

        Raises:
            AuthenticationError: If the token is rejected.
            TransportError: On any other failure.
        """
        params = {"ref": self.config.branch} if self.config.branch else None
        response = await self._request("GET", token, params=params)

        if response.status_code == 404:
            logger.info(f"{self.config.path} not found in {self.config.owner}/{self.config.repo}")
            return None

        _raise_for_status(response)

        try:
            data = response.json()
            content, sha = data["content"], data["sha"]
        except (ValueError, KeyError, TypeError) as e:
            raise TransportError(f"Unexpected response from GitHub: {e}") from e

        # files over 1 MB come back with encoding "none" and empty content
        encoding = data.get("encoding")
        if encoding != "base64":
            raise TransportError(
                f"{self.config.path} cannot be read through the contents API (encoding {encoding!r})"
            )

        logger.debug(f"Fetched {self.config.path} at {sha}")
        return RemoteFile(text=decode_content(content), sha=sha)

    async def put_file(
        self, token: str, text: str, message: str, sha: str | None = None
    ) -> str:
        """
        Replace the whole file.

        Args:
            token: Access token.
            text: New file content.
            message: Commit message.
            sha: Revision token the change is based on; omit for a new file.

        Returns:
            Revision token of the written file.

        Raises:
            VersionConflictError: If sha no longer matches the remote.
            AuthenticationError: If the token is rejected.
            TransportError: On any other failure.
        """
        payload: dict[str, Any] = {"message": message, "content": encode_content(text)}
        if sha:
            payload["sha"] = sha
        if self.config.branch:
            payload["branch"] = self.config.branch

        response = await self._request("PUT", token, json=payload)
        _raise_for_status(response)

        try:
            new_sha: str = response.json()["content"]["sha"]
        except (ValueError, KeyError, TypeError) as e:
            raise TransportError(f"Unexpected response from GitHub: {e}") from e

        logger.debug(f"Wrote {self.config.path} at {new_sha}")
        return new_sha
