"""Analytics hooks for the add-to-list flow."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from reading_lists.models import ReadingList

# Usage events only; keep diagnostics on module loggers
event_logger = logging.getLogger("reading_lists.events")


@runtime_checkable
class ReadingListsFunnel(Protocol):
    """Receiver for reading list usage events."""

    def log_add_click(self, source: str) -> None:
        """The add-to-list picker was opened."""
        ...

    def log_add_to_list(self, reading_list: ReadingList, list_count: int, source: str) -> None:
        """Pages were added to a list."""
        ...


class LoggingFunnel:
    """Default funnel that records events through the logging system."""

    def log_add_click(self, source: str) -> None:
        event_logger.info("add_click source=%s", source)

    def log_add_to_list(self, reading_list: ReadingList, list_count: int, source: str) -> None:
        event_logger.info(
            "add_to_list list_id=%s items=%d lists=%d source=%s",
            reading_list.id,
            reading_list.member_count,
            list_count,
            source,
        )


__all__ = [
    "LoggingFunnel",
    "ReadingListsFunnel",
]
