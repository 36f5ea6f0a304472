"""
Application Context.

Everything the client's screens share, held in one object that is passed
around explicitly: the API client, the session, the theme and the
note services built on top of them.

Usage:
    ctx = AppContext()
    await ctx.init()
    await ctx.auth.sign_in("ada@example.com", "secret1")
    notes = await ctx.store.refresh()
    await ctx.teardown()
"""

from enum import Enum

import httpx

from notekeeper.backend.core.logging import get_logger, log_with_source
from notekeeper.backend.schemas.auth import SessionResponse
from notekeeper.client.api import APIClient
from notekeeper.client.auth import AuthClient, AuthGate
from notekeeper.client.autosave import AutosaveController, NoteDraft
from notekeeper.client.feed import NoteFeed
from notekeeper.client.lifecycle import TrashManager
from notekeeper.client.listing import NoteListViewModel
from notekeeper.client.store import NoteStoreClient

logger = get_logger(__name__)


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class AppContext:
    """Shared client state."""

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        theme: Theme = Theme.LIGHT,
    ) -> None:
        self.api = APIClient(base_url=base_url, transport=transport)
        self.auth = AuthClient(self.api)
        self.gate = AuthGate(self.auth)
        self.feed = NoteFeed()
        self.store = NoteStoreClient(self.api, self.feed)
        self.notes = NoteListViewModel()
        self.trash = TrashManager(self.store, self.notes)
        self.theme = theme
        self._initialized = False
        self._unsubscribe_session = None

    @property
    def session(self) -> SessionResponse | None:
        return self.auth.current_session

    def toggle_theme(self) -> Theme:
        self.theme = Theme.DARK if self.theme == Theme.LIGHT else Theme.LIGHT
        return self.theme

    async def init(self) -> None:
        """Wire the view-model to the feed. Safe to call twice."""
        if self._initialized:
            return
        self.notes.attach(self.feed)
        self._unsubscribe_session = self.auth.on_session_change(self._on_session_change)
        self._initialized = True
        log_with_source(logger, "client", "debug", "Client context initialized", base_url=self.api.base_url)

    def _on_session_change(self, session: SessionResponse | None) -> None:
        if session is None:
            # Signed out: nothing of the previous user stays visible.
            self.feed.snapshot([])

    def autosave_for(self, note, debounce_ms: int | None = None) -> AutosaveController:
        """Autosave controller for an open note."""
        return AutosaveController(
            self.store,
            note.id,
            NoteDraft.from_note(note),
            debounce_ms=debounce_ms,
        )

    async def teardown(self) -> None:
        """Sign out and release the HTTP client."""
        await self.store.stop_polling()
        self.auth.sign_out()
        self.notes.detach()
        if self._unsubscribe_session is not None:
            self._unsubscribe_session()
            self._unsubscribe_session = None
        await self.api.close()
        self._initialized = False
        log_with_source(logger, "client", "debug", "Client context torn down")
