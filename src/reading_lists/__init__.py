"""Reading lists: file pages into user-owned lists from a terminal picker."""

from reading_lists.models import (
    AddOutcome,
    Added,
    AlreadyPresent,
    DisplayedLists,
    InvocationContext,
    ListLimits,
    PageRef,
    ReadingList,
    Rejected,
    UserConfig,
)
from reading_lists.ordering import sort_reading_lists
from reading_lists.store import (
    DuplicateListNameError,
    ListStore,
    ReadingListError,
    SqliteListStore,
    StorageError,
)
from reading_lists.workflow import AddPagesWorkflow

__version__ = "0.1.0"

__all__ = [
    "AddOutcome",
    "AddPagesWorkflow",
    "Added",
    "AlreadyPresent",
    "DisplayedLists",
    "DuplicateListNameError",
    "InvocationContext",
    "ListLimits",
    "ListStore",
    "PageRef",
    "ReadingList",
    "ReadingListError",
    "Rejected",
    "SqliteListStore",
    "StorageError",
    "UserConfig",
    "sort_reading_lists",
]
