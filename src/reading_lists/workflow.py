"""Add-pages workflow: list loading, list creation and dedup-aware adding.

One ``AddPagesWorkflow`` serves one picker interaction. Its coroutines only
suspend at the store boundary; callers resume on whatever loop owns the
display. Every failure is returned as a ``Rejected`` value, so nothing
raised by the store reaches the presentation layer.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from reading_lists.analytics import LoggingFunnel, ReadingListsFunnel
from reading_lists.config import SORT_MODE_PREF_KEY, Preferences
from reading_lists.models import (
    REASON_ARTICLE_LIMIT_EXCEEDED,
    REASON_DUPLICATE_LIST_NAME,
    REASON_INVALID_LIST_NAME,
    REASON_LIST_LIMIT_EXCEEDED,
    REASON_NO_PAGES,
    REASON_STORAGE_UNAVAILABLE,
    SORT_NAME_ASC,
    STATE_LISTS_VISIBLE,
    AddOutcome,
    Added,
    AlreadyPresent,
    DisplayedLists,
    InvocationContext,
    ListLimits,
    PageRef,
    ReadingList,
    Rejected,
)
from reading_lists.onboarding import OnboardingGate
from reading_lists.ordering import sort_reading_lists
from reading_lists.store import DuplicateListNameError, ListStore, StorageError

logger = logging.getLogger(__name__)


class AddPagesWorkflow:
    """Files a fixed set of pages into a chosen or newly created list."""

    def __init__(
        self,
        pages: Sequence[PageRef],
        *,
        store: ListStore,
        prefs: Preferences,
        context: InvocationContext | None = None,
        limits: ListLimits | None = None,
        funnel: ReadingListsFunnel | None = None,
    ) -> None:
        self.pages = list(pages)
        self.context = context or InvocationContext()
        self.limits = limits or ListLimits()
        self._store = store
        self._prefs = prefs
        self._funnel = funnel or LoggingFunnel()
        self.gate = OnboardingGate(prefs)
        self.reading_lists: list[ReadingList] = []
        self.displayed = DisplayedLists()
        self._click_logged = False

    # -- loading -------------------------------------------------------------

    def _sort_mode(self) -> str:
        return self._prefs.get_str(SORT_MODE_PREF_KEY, SORT_NAME_ASC)

    def _build_displayed(self) -> DisplayedLists:
        lists = sort_reading_lists(
            self.reading_lists,
            self._sort_mode(),
            show_default=self.context.show_default_list,
        )
        state = self.gate.state
        return DisplayedLists(
            lists=lists,
            all_lists=list(self.reading_lists),
            state=state,
            prompt_create=state == STATE_LISTS_VISIBLE and not lists,
        )

    async def load_lists(self) -> DisplayedLists:
        """Fetch, order and gate the user's lists; storage errors are reported, not raised."""
        if not self._click_logged:
            self._click_logged = True
            self._funnel.log_add_click(self.context.source)
        try:
            self.reading_lists = await self._store.get_all_lists()
        except StorageError as e:
            logger.warning("Could not load reading lists", exc_info=True)
            self.reading_lists = []
            self.displayed = DisplayedLists(
                error=Rejected(reason=REASON_STORAGE_UNAVAILABLE, detail=str(e)),
            )
            return self.displayed
        self.gate.evaluate(self.reading_lists)
        self.displayed = self._build_displayed()
        return self.displayed

    def dismiss_onboarding(self) -> DisplayedLists:
        """Leave the onboarding panel for the picker."""
        self.gate.dismiss()
        self.displayed = self._build_displayed()
        return self.displayed

    # -- list creation -------------------------------------------------------

    def check_can_create(self) -> Rejected | None:
        """Return a rejection when the user may not create another list."""
        if len(self.reading_lists) >= self.limits.max_lists:
            return Rejected(reason=REASON_LIST_LIMIT_EXCEEDED, limit=self.limits.max_lists)
        return None

    async def _reload_lists(self) -> Rejected | None:
        """Replace the snapshot with what the store holds now."""
        try:
            self.reading_lists = await self._store.get_all_lists()
        except StorageError as e:
            logger.warning("Could not reload reading lists", exc_info=True)
            return Rejected(reason=REASON_STORAGE_UNAVAILABLE, detail=str(e))
        return None

    async def create_list(self, name: str, description: str = "") -> ReadingList | Rejected:
        """Create a list after checking the list-count limit and name clashes.

        Limits and names are checked against a fresh read of the store.
        """
        rejected = await self._reload_lists()
        if rejected is None:
            rejected = self.check_can_create()
        if rejected is not None:
            return rejected
        name = name.strip()
        if not name:
            return Rejected(reason=REASON_INVALID_LIST_NAME)
        if any(rl.name == name for rl in self.reading_lists):
            return Rejected(reason=REASON_DUPLICATE_LIST_NAME, detail=name)
        try:
            created = await self._store.create_list(name, description.strip())
        except DuplicateListNameError as e:
            return Rejected(reason=REASON_DUPLICATE_LIST_NAME, detail=e.name)
        except StorageError as e:
            logger.warning("Could not create reading list %r", name, exc_info=True)
            return Rejected(reason=REASON_STORAGE_UNAVAILABLE, detail=str(e))
        self.reading_lists.append(created)
        self.displayed = self._build_displayed()
        return created

    # -- adding pages --------------------------------------------------------

    async def add_pages(
        self, reading_list: ReadingList, pages: Sequence[PageRef] | None = None
    ) -> AddOutcome:
        """Add pages to a list, skipping ones that are already members."""
        requested = list(self.pages if pages is None else pages)
        if not requested:
            return Rejected(reason=REASON_NO_PAGES, reading_list=reading_list)
        limit = self.limits.max_pages_per_list
        if reading_list.member_count + len(requested) > limit:
            return Rejected(
                reason=REASON_ARTICLE_LIMIT_EXCEEDED,
                limit=limit,
                reading_list=reading_list,
            )
        try:
            added = await self._store.add_pages_if_absent(reading_list, requested)
        except StorageError as e:
            logger.warning("Could not add pages to %r", reading_list.name, exc_info=True)
            return Rejected(
                reason=REASON_STORAGE_UNAVAILABLE,
                reading_list=reading_list,
                detail=str(e),
            )
        if not added:
            return AlreadyPresent(reading_list=reading_list, pages=requested)

        for page in added:
            if not reading_list.contains(page):
                reading_list.pages.append(page)
        self._funnel.log_add_to_list(reading_list, len(self.reading_lists), self.context.source)
        logger.debug("Added %d page(s) to %r", len(added), reading_list.name)
        return Added(reading_list=reading_list, pages=list(added))

    async def create_list_and_add(
        self, name: str, description: str = "", pages: Sequence[PageRef] | None = None
    ) -> AddOutcome:
        """Create a list, and only once it exists, add the pages to it."""
        created = await self.create_list(name, description)
        if isinstance(created, Rejected):
            return created
        return await self.add_pages(created, pages)


__all__ = [
    "AddPagesWorkflow",
]
