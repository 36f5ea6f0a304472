"""
Unit Test Fixtures.

Services get a mocked session; client-side code gets NoteResponse
objects built from a fixed clock. The few tests that need real SQL use
the in-memory fixtures from the root conftest.
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from notekeeper.backend.schemas.note import NoteResponse

BASE_TIME = datetime(2026, 3, 1, 9, 0, 0)


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """AsyncSession stand-in. ``add`` is synchronous on the real session."""
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_note() -> Callable[..., NoteResponse]:
    """
    Build a NoteResponse; created/updated are minutes after BASE_TIME.

        note = make_note("n-1", title="Groceries", updated=5, pinned=True)
    """

    def _make(
        note_id: str,
        *,
        title: str = "Note",
        content: str = "",
        tags: list[str] | None = None,
        folder: str = "All Notes",
        pinned: bool = False,
        public: bool = False,
        deleted: bool = False,
        created: int = 0,
        updated: int = 0,
    ) -> NoteResponse:
        updated_at = BASE_TIME + timedelta(minutes=updated)
        return NoteResponse(
            id=note_id,
            title=title,
            content=content,
            tags=tags or [],
            folder=folder,
            pinned=pinned,
            public=public,
            deleted=deleted,
            deleted_at=updated_at if deleted else None,
            created_at=BASE_TIME + timedelta(minutes=created),
            updated_at=updated_at,
        )

    return _make
