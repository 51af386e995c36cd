"""
Remote sync service.

Owns the local record set, the revision token and the credential, and runs
the read / write cycle against the remote file:

- Reading replaces the record set wholesale (or empties it on 404).
- Writing serializes the whole set and sends it with the last known token.
- A 409 on write triggers re-read, replay of the pending edit and another
  write, up to ``max_retries`` times.

Only one cycle runs at a time; a conflict retry holds the cycle lock from
the failed write until its final write completes.
"""

import asyncio
import logging
from datetime import datetime, timezone

from weight_log_sync.domain.record import (
    EditOutcome,
    PendingEdit,
    ReadOutcome,
    SaveResult,
    SyncState,
)
from weight_log_sync.infrastructure.codec.csv_codec import decode, encode
from weight_log_sync.infrastructure.github_client.client import GitHubContentsClient
from weight_log_sync.services.reconciler import (
    EditReconciler,
    is_valid_date,
    is_valid_name,
    parse_positive_value,
)
from weight_log_sync.services.record_store import RecordStore
from weight_log_sync.utils.exceptions import (
    AuthenticationError,
    ValidationError,
    VersionConflictError,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 2


class RemoteSyncClient:
    """
    Synchronizes a RecordStore with one remote CSV file.

    Constructed empty; ``set_credential`` and ``clear_credential`` reset it
    to that state.
    """

    def __init__(
        self,
        contents_client: GitHubContentsClient,
        token: str | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        max_value: float | None = None,
    ) -> None:
        """
        Initialize sync client.

        Args:
            contents_client: Client for the remote file.
            token: Optional access token.
            max_retries: Conflict retries allowed per save.
            max_value: Optional upper bound for directly saved values.
        """
        self.contents_client = contents_client
        self.max_retries = max_retries
        self.max_value = max_value

        self._token: str | None = token or None
        self._store = RecordStore()
        self._reconciler = EditReconciler(self._store)
        self._revision_token: str | None = None
        self._state = SyncState.IDLE
        self._lock = asyncio.Lock()

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def revision_token(self) -> str | None:
        return self._revision_token

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def has_credential(self) -> bool:
        return self._token is not None

    def _reset(self) -> None:
        self._store.clear()
        self._revision_token = None

    def set_credential(self, token: str) -> None:
        """
        Replace the access token and discard data read with the old one.

        Raises:
            AuthenticationError: If the token is blank.
        """
        token = token.strip()
        if not token:
            raise AuthenticationError("Access token must not be empty")
        self._token = token
        self._reset()

    def clear_credential(self) -> None:
        """Forget the access token and all synced data."""
        self._token = None
        self._reset()

    def _require_token(self) -> str:
        if self._token is None:
            raise AuthenticationError(
                "No GitHub access token configured; set WLS_TOKEN or 'token' in the config file"
            )
        return self._token

    def view(self, name: str, year_month: str) -> dict[int, float]:
        """Day -> value mapping for one identity and one YYYY-MM period."""
        return self._store.filter_for(name, year_month)

    async def start(self) -> ReadOutcome | None:
        """
        Perform the initial read if a credential is available.

        Returns:
            The read outcome, or None when no credential is present.
        """
        if not self.has_credential:
            logger.info("No access token; skipping initial read")
            return None
        return await self.refresh()

    async def refresh(self) -> ReadOutcome:
        """
        Read the remote file into the store.

        Returns:
            FOUND, or NOT_FOUND if the file does not exist yet.

        Raises:
            AuthenticationError: If no token is set or it is rejected.
            TransportError: On any other failure. The store is left untouched.
        """
        token = self._require_token()
        async with self._lock:
            return await self._read(token)

    async def _read(self, token: str) -> ReadOutcome:
        self._state = SyncState.READING
        try:
            remote = await self.contents_client.get_file(token)
        finally:
            self._state = SyncState.IDLE

        if remote is None:
            self._reset()
            logger.info("No data file found, starting fresh")
            return ReadOutcome.NOT_FOUND

        records = decode(remote.text)
        self._store.replace_all(records)
        self._revision_token = remote.sha
        logger.info(f"Read {len(records)} records at revision {remote.sha}")
        return ReadOutcome.FOUND

    async def _write(self, token: str, name: str) -> str:
        self._state = SyncState.WRITING
        try:
            message = f"Update {name} - {datetime.now(timezone.utc).isoformat()}"
            sha = await self.contents_client.put_file(
                token, encode(self._store.records), message, sha=self._revision_token
            )
        finally:
            self._state = SyncState.IDLE

        self._revision_token = sha
        return sha

    def _validate(self, date: str, name: str, raw_value: str | float) -> None:
        if not is_valid_date(date):
            raise ValidationError(f"Invalid date: {date!r} (expected YYYY-MM-DD)")
        if not is_valid_name(name):
            raise ValidationError(
                f"Invalid name: {name!r} (must be non-blank without commas or line breaks)"
            )
        value = parse_positive_value(raw_value)
        if value is None:
            raise ValidationError(f"Invalid value: {raw_value!r} (must be a positive number)")
        if self.max_value is not None and value > self.max_value:
            raise ValidationError(f"Invalid value: {raw_value!r} (must not exceed {self.max_value:g})")

    async def save(self, date: str, name: str, raw_value: str | float) -> SaveResult:
        """
        Merge one value into the record set and write the file.

        Args:
            date: Calendar date (YYYY-MM-DD).
            name: Identity label.
            raw_value: Value as entered.

        Returns:
            The new revision token and the number of write attempts.

        Raises:
            AuthenticationError: If no token is set or it is rejected.
            ValidationError: If the input is rejected. Nothing is changed.
            VersionConflictError: If every attempt conflicted.
            TransportError: On any other failure.

        On failure the store is rolled back to the last state read from the
        remote, so the failed edit is never carried into a later save.
        """
        token = self._require_token()
        self._validate(date, name, raw_value)
        edit = PendingEdit(date=date, name=name, raw_value=raw_value)

        async with self._lock:
            baseline = self._store.records
            if self._reconciler.apply(edit) is EditOutcome.REJECTED:
                raise ValidationError(f"Invalid value: {raw_value!r}")

            attempts = 0
            try:
                while True:
                    attempts += 1
                    try:
                        sha = await self._write(token, name)
                    except VersionConflictError as e:
                        if attempts > self.max_retries:
                            logger.error(f"Giving up after {attempts} conflicting writes")
                            raise VersionConflictError(
                                f"Remote file kept changing; gave up after {attempts} attempts",
                                attempts=attempts,
                            ) from e

                        logger.warning(
                            f"Conflict detected, retrying ({attempts}/{self.max_retries})"
                        )
                        await self._read(token)
                        baseline = self._store.records
                        self._reconciler.apply(edit)
                        continue

                    logger.info(f"Saved {name} {date} at revision {sha} ({attempts} attempt(s))")
                    return SaveResult(revision_token=sha, attempts=attempts)
            except BaseException:
                self._store.replace_all(baseline)
                raise
