"""
Integration Tests for the Client Core.

Drives the client (auth, store, autosave, trash) against the real
FastAPI application in process.
"""

import httpx
import pytest

from notekeeper.backend.schemas.note import NoteCreate
from notekeeper.client.autosave import SaveStatus
from notekeeper.client.context import AppContext
from notekeeper.client.errors import (
    AuthError,
    NoteLifecycleError,
    NoteNotFoundError,
    NoteUnavailableError,
)


@pytest.fixture
async def ctx(app):
    ctx = AppContext(base_url="http://test", transport=httpx.ASGITransport(app=app))
    await ctx.init()
    yield ctx
    await ctx.teardown()


@pytest.fixture
async def signed_in(ctx):
    await ctx.auth.sign_up("ada@example.com", "secret1")
    return ctx


class TestAuthFlow:
    """Sign-up, sign-in and the route gate."""

    @pytest.mark.asyncio
    async def test_sign_up_then_sign_in(self, ctx):
        created = await ctx.auth.sign_up("ada@example.com", "secret1")
        ctx.auth.sign_out()

        session = await ctx.auth.sign_in("ada@example.com", "secret1")

        assert session.user_id == created.user_id
        assert ctx.gate.resolve("/notes") == "/notes"

    @pytest.mark.asyncio
    async def test_duplicate_sign_up_message(self, ctx):
        await ctx.auth.sign_up("ada@example.com", "secret1")

        with pytest.raises(AuthError) as exc_info:
            await ctx.auth.sign_up("ada@example.com", "secret1")

        assert exc_info.value.message == "An account already exists with this email."

    @pytest.mark.asyncio
    async def test_protected_calls_fail_when_signed_out(self, ctx):
        assert ctx.gate.resolve("/trash") == "/login"
        with pytest.raises(AuthError):
            await ctx.store.refresh()


class TestNoteFlow:
    """Create, autosave, list and share."""

    @pytest.mark.asyncio
    async def test_create_shows_up_in_list(self, signed_in):
        note = await signed_in.store.create(NoteCreate(title="Groceries"))

        assert [n.id for n in signed_in.notes.visible] == [note.id]
        assert signed_in.notes.counts["All Notes"] == 1

    @pytest.mark.asyncio
    async def test_autosave_flush_persists_draft(self, signed_in):
        note = await signed_in.store.create(NoteCreate(title="Groceries"))
        autosave = signed_in.autosave_for(note, debounce_ms=10_000)

        autosave.edit(content="Milk, eggs", tags=["home"])
        saved = await autosave.flush()
        await autosave.close()

        assert saved.content == "Milk, eggs"
        assert autosave.status == SaveStatus.IDLE
        fetched = await signed_in.store.get(note.id)
        assert fetched.content == "Milk, eggs"
        assert fetched.tags == ["home"]

    @pytest.mark.asyncio
    async def test_refresh_replaces_known_notes(self, signed_in):
        await signed_in.store.create(NoteCreate(title="One"))
        await signed_in.store.create(NoteCreate(title="Two", pinned=True))
        signed_in.feed.snapshot([])

        notes = await signed_in.store.refresh()

        assert len(notes) == 2
        assert [n.title for n in signed_in.notes.visible] == ["Two", "One"]

    @pytest.mark.asyncio
    async def test_share_link(self, signed_in):
        private = await signed_in.store.create(NoteCreate(title="Secret"))
        shared = await signed_in.store.create(NoteCreate(title="Shared", public=True))
        signed_in.auth.sign_out()

        with pytest.raises(NoteUnavailableError):
            await signed_in.store.get_public(private.id)
        assert (await signed_in.store.get_public(shared.id)).title == "Shared"

    @pytest.mark.asyncio
    async def test_export_pdf(self, signed_in):
        note = await signed_in.store.create(NoteCreate(title="Report", content="Body"))

        assert (await signed_in.store.export_pdf(note.id)).startswith(b"%PDF")


class TestTrashFlow:
    """Lifecycle through the trash manager."""

    @pytest.mark.asyncio
    async def test_trash_restore_purge(self, signed_in):
        note = await signed_in.store.create(NoteCreate(title="Cycle"))

        trashed = await signed_in.trash.soft_delete(note.id)
        assert trashed.deleted is True
        signed_in.notes.set_folder("Recently Deleted")
        assert [n.id for n in signed_in.notes.visible] == [note.id]

        restored = await signed_in.trash.restore(note.id)
        assert restored.deleted is False

        with pytest.raises(NoteLifecycleError):
            await signed_in.trash.purge(note.id)

        await signed_in.trash.soft_delete(note.id)
        await signed_in.trash.purge(note.id)
        assert signed_in.notes.get(note.id) is None
        with pytest.raises(NoteNotFoundError):
            await signed_in.store.get(note.id)

    @pytest.mark.asyncio
    async def test_purge_all(self, signed_in):
        notes = [await signed_in.store.create(NoteCreate(title=f"N{i}")) for i in range(3)]
        for note in notes[:2]:
            await signed_in.trash.soft_delete(note.id)

        result = await signed_in.trash.purge_all()

        assert result.purged == sorted(n.id for n in notes[:2])
        assert result.failed == []
        assert [n.id for n in signed_in.notes.notes] == [notes[2].id]
