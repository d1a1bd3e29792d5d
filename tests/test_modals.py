"""Focused tests for the reading list modals and host app."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from textual.app import App
from textual.widgets import Button, ListView

from reading_lists.app import ReadingListsApp
from reading_lists.config import MemoryPreferences
from reading_lists.modals import AddToReadingListModal, ReadingListTitleModal, format_list_row
from reading_lists.models import (
    REASON_LIST_LIMIT_EXCEEDED,
    REASON_STORAGE_UNAVAILABLE,
    Added,
    DisplayedLists,
    ListLimits,
    Rejected,
)
from reading_lists.workflow import AddPagesWorkflow


def _workflow(store, make_page, *, onboarding=False, limits=None):
    return AddPagesWorkflow(
        [make_page("Paris"), make_page("Rome")],
        store=store,
        prefs=MemoryPreferences({"onboarding_enabled": onboarding}),
        limits=limits,
    )


def test_format_list_row_escapes_markup(make_list, make_page):
    row = format_list_row(make_list("[b]Art[/b]", [make_page()], description="Museums"))

    assert row.startswith("\\[b]Art\\[/b] [dim](1 article)[/]")
    assert row.endswith("\n[dim]Museums[/]")


@pytest.mark.asyncio
async def test_title_modal_compose_and_actions():
    app = App()
    modal = ReadingListTitleModal(["Travel"], name="Art", description="Museums")

    async with app.run_test() as pilot:
        app.push_screen(modal)
        await pilot.pause(0.05)
        assert modal.query_one("#rltitle-dialog") is not None
        assert modal.query_one("#rltitle-name").value == "Art"
        assert modal.query_one("#rltitle-desc").value == "Museums"

    focus_target = MagicMock()
    modal.query_one = MagicMock(return_value=focus_target)
    modal.on_mount()
    focus_target.focus.assert_called_once_with()

    modal.dismiss = MagicMock()
    modal.query_one = MagicMock(
        side_effect=[SimpleNamespace(value=" Books "), SimpleNamespace(value=" To read ")]
    )
    modal.action_save()
    modal.dismiss.assert_called_once_with(("Books", "To read"))

    modal.dismiss = MagicMock()
    modal.action_cancel()
    modal.dismiss.assert_called_once_with(None)

    modal.action_save = MagicMock()
    modal.on_ok_pressed()
    modal.on_input_submitted()
    assert modal.action_save.call_count == 2

    modal.action_cancel = MagicMock()
    modal.on_cancel_pressed()
    modal.action_cancel.assert_called_once_with()


@pytest.mark.parametrize("value", ["   ", "Travel"])
def test_title_modal_rejects_blank_and_existing_names(value):
    modal = ReadingListTitleModal(["Travel"])
    modal.dismiss = MagicMock()
    modal.notify = MagicMock()
    modal.query_one = MagicMock(return_value=SimpleNamespace(value=value))

    modal.action_save()

    modal.dismiss.assert_not_called()
    assert modal.notify.call_args.kwargs["severity"] == "warning"


@pytest.mark.asyncio
async def test_picker_shows_sorted_lists(make_list, make_page, fake_store):
    store = fake_store(
        [make_list("Saved", is_default=True), make_list("travel"), make_list("Art")]
    )
    app = ReadingListsApp(_workflow(store, make_page))

    async with app.run_test() as pilot:
        await pilot.pause(0.05)
        modal = app.screen
        assert isinstance(modal, AddToReadingListModal)
        assert modal.query_one("#addrl-onboarding").display is False
        assert modal.query_one("#addrl-lists").display is True
        assert len(modal.query_one("#addrl-list", ListView).children) == 3
        assert [rl.name for rl in modal._displayed.lists] == ["Saved", "Art", "travel"]
        assert app.query_one("#pages") is not None


@pytest.mark.asyncio
async def test_picker_onboarding_then_dismissed(make_list, make_page, fake_store):
    store = fake_store([make_list("Travel")])
    workflow = _workflow(store, make_page, onboarding=True)
    app = ReadingListsApp(workflow)

    async with app.run_test() as pilot:
        await pilot.pause(0.05)
        modal = app.screen
        assert modal.query_one("#addrl-onboarding").display is True
        assert modal.query_one("#addrl-create", Button).disabled is True

        modal.on_onboarding_ok_pressed()
        await pilot.pause(0.05)

        assert modal.query_one("#addrl-onboarding").display is False
        assert modal.query_one("#addrl-create", Button).disabled is False
        assert workflow.gate.is_onboarding is False


@pytest.mark.asyncio
async def test_picker_storage_error_offers_retry(make_list, make_page, fake_store):
    store = fake_store([make_list("Travel")])
    store.fail = True
    app = ReadingListsApp(_workflow(store, make_page))

    async with app.run_test() as pilot:
        await pilot.pause(0.05)
        modal = app.screen
        assert modal.query_one("#addrl-retry").display is True
        assert modal._displayed.error is not None
        assert modal.query_one("#addrl-create", Button).disabled is True

        store.fail = False
        modal.on_retry_pressed()
        await pilot.pause(0.05)

        assert modal.query_one("#addrl-retry").display is False
        assert modal.query_one("#addrl-create", Button).disabled is False
        assert [rl.name for rl in modal._displayed.lists] == ["Travel"]


@pytest.mark.asyncio
async def test_picker_create_opens_title_modal(make_list, make_page, fake_store):
    store = fake_store([make_list("Travel")])
    app = ReadingListsApp(_workflow(store, make_page))

    async with app.run_test() as pilot:
        await pilot.pause(0.05)
        modal = app.screen
        app.push_screen = MagicMock()
        modal.action_create_list()

        screen, callback = app.push_screen.call_args.args
        assert isinstance(screen, ReadingListTitleModal)

        modal._create_and_add = MagicMock(return_value="coro")
        modal._track_task = MagicMock()
        callback(None)
        modal._track_task.assert_not_called()
        callback(("Books", ""))
        modal._create_and_add.assert_called_once_with("Books", "")
        modal._track_task.assert_called_once_with("coro")


@pytest.mark.asyncio
async def test_picker_create_at_list_limit_finishes_rejected(make_list, make_page, fake_store):
    store = fake_store([make_list("Travel")])
    workflow = _workflow(store, make_page, limits=ListLimits(max_lists=1))
    await workflow.load_lists()
    modal = AddToReadingListModal(workflow)
    modal.dismiss = MagicMock()
    modal.notify = MagicMock()

    modal.action_create_list()

    outcome = modal.dismiss.call_args.args[0]
    assert isinstance(outcome, Rejected)
    assert outcome.reason == REASON_LIST_LIMIT_EXCEEDED
    assert modal.notify.call_args.kwargs["severity"] == "warning"


@pytest.mark.asyncio
async def test_picker_add_finishes_with_outcome(make_list, make_page, fake_store):
    store = fake_store([make_list("Travel", list_id=4)])
    workflow = _workflow(store, make_page)
    await workflow.load_lists()
    modal = AddToReadingListModal(workflow)
    modal.dismiss = MagicMock()
    modal.notify = MagicMock()

    await modal._add_to(workflow.reading_lists[0])

    outcome = modal.dismiss.call_args.args[0]
    assert isinstance(outcome, Added)
    assert store.stored(4).member_count == 2
    assert modal.notify.call_args.args[0] == "Added 2 articles to Travel."

    modal.dismiss = MagicMock()
    modal.action_cancel()
    modal.dismiss.assert_called_once_with(None)


@pytest.mark.asyncio
async def test_picker_unmount_cancels_pending_tasks(make_page, fake_store):
    modal = AddToReadingListModal(_workflow(fake_store(), make_page))
    task = modal._track_task(asyncio.sleep(10))

    modal.on_unmount()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert task.cancelled()
    assert not modal._tasks


def test_picker_ignores_selection_while_add_in_flight(make_list, make_page, fake_store):
    travel = make_list("Travel")
    modal = AddToReadingListModal(_workflow(fake_store([travel]), make_page))
    modal._displayed = DisplayedLists(lists=[travel], all_lists=[travel])
    modal.query_one = MagicMock(return_value=SimpleNamespace(index=0))
    pending = MagicMock()
    modal._add_to = MagicMock(return_value=pending)
    modal._track_task = MagicMock()

    modal.on_list_selected(None)
    modal.on_list_selected(None)

    modal._track_task.assert_called_once_with(pending)
    pending.close.assert_called_once_with()


def test_picker_create_ignored_on_storage_error(make_page, fake_store):
    modal = AddToReadingListModal(_workflow(fake_store(), make_page))
    modal._displayed = DisplayedLists(
        error=Rejected(reason=REASON_STORAGE_UNAVAILABLE, detail="disk I/O error")
    )
    modal._finish = MagicMock()

    modal.action_create_list()

    modal._finish.assert_not_called()
