"""
Note Store Client.

Async access to the signed-in user's notes over the REST API. Every
successful mutation is pushed to the change feed, so views stay current
without refetching.

Error mapping:
    401                  -> AuthError
    404                  -> NoteNotFoundError
    403 on a share link  -> NoteUnavailableError
    409                  -> NoteLifecycleError
    transport failure or any other non-2xx on a write -> WriteError
"""

import asyncio
from collections.abc import Callable
from typing import Any

import httpx

from notekeeper.backend.core.config import get_app_config
from notekeeper.backend.core.exceptions import ExternalServiceError
from notekeeper.backend.core.logging import get_logger, log_with_source
from notekeeper.backend.schemas.note import (
    FOLDER_ALL,
    FOLDER_TRASH,
    NoteCreate,
    NoteResponse,
    NoteUpdate,
    PublicNoteResponse,
    PurgeReport,
)
from notekeeper.client.api import APIClient, data_of, error_of
from notekeeper.client.errors import (
    AuthError,
    NoteLifecycleError,
    NoteNotFoundError,
    NoteUnavailableError,
    WriteError,
)
from notekeeper.client.feed import FeedCallback, NoteFeed

logger = get_logger(__name__)

API = "/api/v1"
PAGE_SIZE = 100


class NoteStoreClient:
    """
    Note operations of the signed-in user.

    Usage:
        store = NoteStoreClient(api)
        note = await store.create(NoteCreate(title="Groceries"))
        await store.update(note.id, NoteUpdate(content="Milk"))
    """

    def __init__(self, api: APIClient, feed: NoteFeed | None = None) -> None:
        self.api = api
        self.feed = feed or NoteFeed()
        self._poll_task: asyncio.Task | None = None

    # -------------------------------------------------------------------------
    # Transport and error mapping
    # -------------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        path: str,
        *,
        write: bool = False,
        note_id: str | None = None,
        public: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await self.api.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            if write:
                raise WriteError(f"Could not reach the note store: {e}") from e
            raise ExternalServiceError(f"Could not reach the note store: {e}") from e

        if response.is_success:
            return response

        code, message = error_of(response)
        status = response.status_code
        if status == 401:
            raise AuthError(message, code=code)
        if status == 404 and note_id is not None:
            raise NoteNotFoundError(note_id)
        if status == 403 and public:
            raise NoteUnavailableError(message)
        if status == 409:
            raise NoteLifecycleError(message, code=code)
        if write:
            raise WriteError(message, code=code)
        raise ExternalServiceError(f"{method} {path} failed: {code} {message}")

    # -------------------------------------------------------------------------
    # Notes
    # -------------------------------------------------------------------------

    async def create(self, data: NoteCreate) -> NoteResponse:
        """Save a new note immediately."""
        response = await self._send(
            "POST",
            f"{API}/notes",
            write=True,
            json=data.model_dump(mode="json", exclude_none=True),
        )
        note = NoteResponse.model_validate(data_of(response))
        self.feed.upsert(note)
        return note

    async def get(self, note_id: str) -> NoteResponse:
        response = await self._send("GET", f"{API}/notes/{note_id}", note_id=note_id)
        return NoteResponse.model_validate(data_of(response))

    async def update(self, note_id: str, data: NoteUpdate) -> NoteResponse:
        """Write the fields set on ``data``."""
        response = await self._send(
            "PATCH",
            f"{API}/notes/{note_id}",
            write=True,
            note_id=note_id,
            json=data.model_dump(mode="json", exclude_unset=True),
        )
        note = NoteResponse.model_validate(data_of(response))
        self.feed.upsert(note)
        return note

    async def soft_delete(self, note_id: str) -> NoteResponse:
        response = await self._send(
            "POST", f"{API}/notes/{note_id}/trash", write=True, note_id=note_id
        )
        note = NoteResponse.model_validate(data_of(response))
        self.feed.upsert(note)
        return note

    async def restore(self, note_id: str) -> NoteResponse:
        response = await self._send(
            "POST", f"{API}/notes/{note_id}/restore", write=True, note_id=note_id
        )
        note = NoteResponse.model_validate(data_of(response))
        self.feed.upsert(note)
        return note

    async def purge(self, note_id: str) -> None:
        await self._send("DELETE", f"{API}/notes/{note_id}", write=True, note_id=note_id)
        self.feed.remove(note_id)

    async def empty_trash(self) -> PurgeReport:
        """Ask the server to purge every trashed note in one call."""
        response = await self._send("DELETE", f"{API}/trash", write=True)
        report = PurgeReport.model_validate(data_of(response))
        for note_id in report.purged:
            self.feed.remove(note_id)
        return report

    async def _list_folder(self, folder: str) -> list[NoteResponse]:
        notes: list[NoteResponse] = []
        offset = 0
        while True:
            response = await self._send(
                "GET",
                f"{API}/notes",
                params={"folder": folder, "limit": PAGE_SIZE, "offset": offset},
            )
            body = response.json()
            page = [NoteResponse.model_validate(item) for item in body["data"]]
            notes.extend(page)
            if not body["pagination"]["has_more"] or not page:
                return notes
            offset += len(page)

    async def list_all(self) -> list[NoteResponse]:
        """Every note of the user, active and trashed."""
        active = await self._list_folder(FOLDER_ALL)
        trashed = await self._list_folder(FOLDER_TRASH)
        return active + trashed

    async def export_pdf(self, note_id: str) -> bytes:
        response = await self._send("GET", f"{API}/notes/{note_id}/export", note_id=note_id)
        return response.content

    async def get_public(self, note_id: str) -> PublicNoteResponse:
        """Read a note through its share link. Works signed out."""
        response = await self._send(
            "GET", f"{API}/public/notes/{note_id}", note_id=note_id, public=True
        )
        return PublicNoteResponse.model_validate(data_of(response))

    def share_url(self, note_id: str) -> str:
        base = get_app_config().notes.public_share_base_url.rstrip("/")
        return f"{base}/{note_id}"

    # -------------------------------------------------------------------------
    # Change feed
    # -------------------------------------------------------------------------

    def subscribe(self, callback: FeedCallback) -> Callable[[], None]:
        """Receive note changes. Returns the unsubscribe function."""
        return self.feed.subscribe(callback)

    async def refresh(self) -> list[NoteResponse]:
        """Fetch everything and push it to subscribers as a snapshot."""
        notes = await self.list_all()
        self.feed.snapshot(notes)
        return notes

    async def _poll(self, interval: float) -> None:
        while True:
            try:
                await self.refresh()
            except AuthError:
                log_with_source(logger, "client", "warning", "Polling stopped, session ended")
                return
            except (ExternalServiceError, httpx.HTTPError) as e:
                log_with_source(logger, "client", "warning", "Note refresh failed", error=str(e))
            await asyncio.sleep(interval)

    def start_polling(self, interval: float | None = None) -> asyncio.Task:
        """Refresh subscribers every ``interval`` seconds until stopped."""
        if self._poll_task is not None and not self._poll_task.done():
            return self._poll_task
        if interval is None:
            interval = get_app_config().notes.sync.poll_interval_seconds
        self._poll_task = asyncio.get_running_loop().create_task(self._poll(interval))
        return self._poll_task

    async def stop_polling(self) -> None:
        if self._poll_task is None:
            return
        self._poll_task.cancel()
        try:
            await self._poll_task
        except asyncio.CancelledError:
            pass
        self._poll_task = None
