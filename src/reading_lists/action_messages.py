"""User-facing copy for add-to-list outcomes and rejections."""

from __future__ import annotations

from reading_lists.models import (
    REASON_ARTICLE_LIMIT_EXCEEDED,
    REASON_DUPLICATE_LIST_NAME,
    REASON_INVALID_LIST_NAME,
    REASON_LIST_LIMIT_EXCEEDED,
    REASON_NO_PAGES,
    REASON_STORAGE_UNAVAILABLE,
    AddOutcome,
    Added,
    AlreadyPresent,
    PageRef,
    Rejected,
)

_SENTENCE_ENDINGS = (".", "!", "?")


def _ensure_sentence(text: str) -> str:
    """Strip text and close it with a full stop unless it already ends a sentence."""
    text = text.strip()
    if text and not text.endswith(_SENTENCE_ENDINGS):
        text += "."
    return text


def build_next_step_hint(next_step: str) -> str:
    return "Next step: " + _ensure_sentence(next_step)


def build_actionable_error(
    action: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Error text naming the failed action and the next step, with an optional reason."""
    parts = [f"Could not {action.strip()}."]
    parts += [f"Why: {_ensure_sentence(why)}"] if why else []
    parts.append(build_next_step_hint(next_step))
    return "\n".join(parts)


def pluralize_articles(count: int) -> str:
    return f"{count} article{'s' if count != 1 else ''}"


def build_added_message(added: list[PageRef], list_name: str) -> str:
    """Confirmation after pages were added."""
    if len(added) == 1:
        return f"Added {added[0].display_text} to {list_name}."
    return f"Added {pluralize_articles(len(added))} to {list_name}."


def build_already_present_message(requested: list[PageRef], list_name: str) -> str:
    """Notice when every requested page was already in the list."""
    if len(requested) == 1:
        return f"{requested[0].display_text} is already in {list_name}."
    return f"All {len(requested)} articles are already in {list_name}."


def build_rejection_message(rejected: Rejected, requested_count: int = 1) -> str:
    """Map a rejection to its specific message."""
    list_name = rejected.reading_list.name if rejected.reading_list else "the list"
    if rejected.reason == REASON_ARTICLE_LIMIT_EXCEEDED:
        what = "this article" if requested_count == 1 else f"these {requested_count} articles"
        return build_actionable_error(
            f"add {what} to {list_name}",
            why=f"a reading list can hold at most {pluralize_articles(rejected.limit or 0)}",
            next_step="remove some articles or choose another list",
        )
    if rejected.reason == REASON_LIST_LIMIT_EXCEEDED:
        return build_actionable_error(
            "create a new reading list",
            why=f"you already have the maximum of {rejected.limit} reading lists",
            next_step="delete a list you no longer need or add to an existing one",
        )
    if rejected.reason == REASON_DUPLICATE_LIST_NAME:
        return build_actionable_error(
            "create the reading list",
            why=f"a list named {rejected.detail!r} already exists",
            next_step="pick a different name",
        )
    if rejected.reason == REASON_INVALID_LIST_NAME:
        return build_actionable_error(
            "create the reading list",
            why="the name is empty",
            next_step="enter a name for the list",
        )
    if rejected.reason == REASON_NO_PAGES:
        return build_actionable_error(
            f"add to {list_name}",
            why="no articles were selected",
            next_step="select at least one article",
        )
    if rejected.reason == REASON_STORAGE_UNAVAILABLE:
        return build_actionable_error(
            "access your reading lists",
            why=rejected.detail or "local storage is unavailable",
            next_step="try again",
        )
    return build_actionable_error("complete the request", next_step="try again")


def describe_outcome(outcome: AddOutcome, requested: list[PageRef]) -> str:
    """One message per outcome, phrased for the number of requested pages."""
    if isinstance(outcome, Added):
        return build_added_message(outcome.pages, outcome.reading_list.name)
    if isinstance(outcome, AlreadyPresent):
        return build_already_present_message(requested, outcome.reading_list.name)
    return build_rejection_message(outcome, len(requested))


__all__ = [
    "build_actionable_error",
    "build_added_message",
    "build_already_present_message",
    "build_next_step_hint",
    "build_rejection_message",
    "describe_outcome",
    "pluralize_articles",
]
