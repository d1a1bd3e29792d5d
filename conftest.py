"""Shared test fixtures for reading list tests."""

from __future__ import annotations

import itertools
from unittest.mock import MagicMock

import pytest

from reading_lists.analytics import ReadingListsFunnel
from reading_lists.config import MemoryPreferences
from reading_lists.models import PageRef, ReadingList
from reading_lists.store import DuplicateListNameError, SqliteListStore, StorageError

# ── Fakes ────────────────────────────────────────────────────────────────────


class FakeListStore:
    """In-memory ListStore; set ``fail`` to simulate unavailable storage."""

    def __init__(self, lists: list[ReadingList] | None = None) -> None:
        self.lists: list[ReadingList] = lists if lists is not None else []
        self.fail = False
        self.calls: list[str] = []
        self._ids = itertools.count(max((rl.id for rl in self.lists), default=0) + 1)

    def _check(self, op: str) -> None:
        self.calls.append(op)
        if self.fail:
            raise StorageError("disk I/O error")

    def stored(self, list_id: int) -> ReadingList:
        return next(rl for rl in self.lists if rl.id == list_id)

    async def get_all_lists(self) -> list[ReadingList]:
        self._check("get_all_lists")
        return [
            ReadingList(
                id=rl.id,
                name=rl.name,
                description=rl.description,
                pages=list(rl.pages),
                is_default=rl.is_default,
                created=rl.created,
                modified=rl.modified,
            )
            for rl in self.lists
        ]

    async def create_list(self, name: str, description: str = "") -> ReadingList:
        self._check("create_list")
        if any(rl.name.casefold() == name.casefold() for rl in self.lists):
            raise DuplicateListNameError(name)
        created = ReadingList(id=next(self._ids), name=name, description=description)
        self.lists.append(created)
        return ReadingList(id=created.id, name=name, description=description)

    async def add_pages_if_absent(
        self, reading_list: ReadingList, pages: list[PageRef]
    ) -> list[PageRef]:
        self._check("add_pages_if_absent")
        target = self.stored(reading_list.id)
        keys = {p.key for p in target.pages}
        added = []
        for page in pages:
            if page.key in keys:
                continue
            target.pages.append(page)
            keys.add(page.key)
            added.append(page)
        return added


# ── Factories ────────────────────────────────────────────────────────────────


@pytest.fixture
def make_page():
    """Factory fixture for PageRef instances."""

    def _make(title: str = "Test_Page", site: str = "en.wikipedia.org") -> PageRef:
        return PageRef(title=title, site=site)

    return _make


@pytest.fixture
def make_list():
    """Factory fixture for ReadingList instances with sensible defaults."""
    ids = itertools.count(1)

    def _make(
        name: str = "Travel",
        pages: list[PageRef] | None = None,
        *,
        is_default: bool = False,
        list_id: int | None = None,
        description: str = "",
        modified: str = "2024-01-15T10:00:00+00:00",
    ) -> ReadingList:
        return ReadingList(
            id=list_id if list_id is not None else next(ids),
            name=name,
            description=description,
            pages=list(pages or []),
            is_default=is_default,
            created=modified,
            modified=modified,
        )

    return _make


@pytest.fixture
def fake_store():
    """Factory fixture building an in-memory store from lists."""

    def _make(lists: list[ReadingList] | None = None) -> FakeListStore:
        return FakeListStore(lists)

    return _make


@pytest.fixture
def prefs():
    return MemoryPreferences({"onboarding_enabled": False})


@pytest.fixture
def funnel():
    return MagicMock(spec=ReadingListsFunnel)


@pytest.fixture
def sqlite_store(tmp_path):
    return SqliteListStore(tmp_path / "lists" / "reading_lists.db")
