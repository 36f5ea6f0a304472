"""
Unit Tests for Note Schemas.
"""

import pytest
from pydantic import ValidationError

from notekeeper.backend.schemas.note import (
    NoteCreate,
    NoteSort,
    NoteUpdate,
    normalize_tags,
)


class TestNormalizeTags:
    """Tests for tag clean-up."""

    def test_strips_and_drops_blanks(self):
        assert normalize_tags([" work ", "", "   ", "home"]) == ["work", "home"]

    def test_drops_duplicates_keeping_first(self):
        assert normalize_tags(["b", "a", "b ", "a"]) == ["b", "a"]

    def test_is_case_sensitive(self):
        assert normalize_tags(["Work", "work"]) == ["Work", "work"]


class TestNoteCreate:
    """Tests for the create payload."""

    def test_defaults(self):
        data = NoteCreate()

        assert data.title == ""
        assert data.content == ""
        assert data.tags == []
        assert data.pinned is False
        assert data.public is False
        assert data.folder is None

    def test_tags_are_cleaned(self):
        assert NoteCreate(tags=["x", " x ", ""]).tags == ["x"]

    def test_title_length_is_capped(self):
        with pytest.raises(ValidationError):
            NoteCreate(title="t" * 256)


class TestNoteUpdate:
    """Tests for partial updates."""

    def test_only_set_fields_are_dumped(self):
        data = NoteUpdate(title="New")

        assert data.model_dump(exclude_unset=True) == {"title": "New"}

    def test_tags_none_stays_none(self):
        assert NoteUpdate().tags is None

    def test_tags_are_cleaned(self):
        assert NoteUpdate(tags=["a", "a"]).tags == ["a"]


class TestNoteSort:
    """Tests for sort key parsing."""

    @pytest.mark.parametrize("value", ["updated_at", "created_at", "title"])
    def test_accepts_known_keys(self, value):
        assert NoteSort(value).value == value

    def test_rejects_unknown_key(self):
        with pytest.raises(ValueError):
            NoteSort("color")
