"""
Unit Tests for the Application Context.
"""

import httpx
import pytest

from notekeeper.client.autosave import AutosaveController
from notekeeper.client.context import AppContext, Theme

SESSION = {
    "access_token": "token-abc",
    "token_type": "bearer",
    "user_id": "user-1",
    "email": "ada@example.com",
}


def _handler(request: httpx.Request) -> httpx.Response:
    if request.url.path.startswith("/api/v1/auth/"):
        return httpx.Response(200, json={"success": True, "data": SESSION})
    return httpx.Response(404)


@pytest.fixture
async def ctx():
    ctx = AppContext(base_url="http://test", transport=httpx.MockTransport(_handler))
    yield ctx
    await ctx.teardown()


class TestTheme:
    """Tests for the theme toggle."""

    def test_starts_light_and_toggles(self, ctx):
        assert ctx.theme == Theme.LIGHT
        assert ctx.toggle_theme() == Theme.DARK
        assert ctx.toggle_theme() == Theme.LIGHT


class TestInit:
    """Tests for wiring on init."""

    @pytest.mark.asyncio
    async def test_attaches_view_model_to_feed(self, ctx, make_note):
        await ctx.init()

        ctx.feed.upsert(make_note("a"))

        assert [n.id for n in ctx.notes.visible] == ["a"]

    @pytest.mark.asyncio
    async def test_init_is_idempotent(self, ctx):
        await ctx.init()
        await ctx.init()

        assert ctx.feed.subscriber_count == 1

    @pytest.mark.asyncio
    async def test_sign_out_clears_visible_notes(self, ctx, make_note):
        await ctx.init()
        await ctx.auth.sign_in("ada@example.com", "secret1")
        ctx.feed.snapshot([make_note("a"), make_note("b")])
        assert ctx.session is not None

        ctx.auth.sign_out()

        assert ctx.notes.notes == []
        assert ctx.session is None


class TestAutosaveFor:
    """Tests for building autosave controllers."""

    @pytest.mark.asyncio
    async def test_draft_starts_from_note(self, ctx, make_note):
        note = make_note("a", title="Groceries", content="Milk", tags=["home"])

        autosave = ctx.autosave_for(note, debounce_ms=50)

        assert isinstance(autosave, AutosaveController)
        assert autosave.note_id == "a"
        assert autosave.draft.title == "Groceries"
        assert autosave.draft.tags == ["home"]
        assert autosave.delay == pytest.approx(0.05)
        await autosave.close()


class TestTeardown:
    """Tests for releasing client state."""

    @pytest.mark.asyncio
    async def test_signs_out_and_detaches(self, make_note):
        ctx = AppContext(base_url="http://test", transport=httpx.MockTransport(_handler))
        await ctx.init()
        await ctx.auth.sign_in("ada@example.com", "secret1")

        await ctx.teardown()

        assert ctx.session is None
        assert ctx.api.token is None
        assert ctx.feed.subscriber_count == 0
        ctx.feed.upsert(make_note("late"))
        assert ctx.notes.notes == []
