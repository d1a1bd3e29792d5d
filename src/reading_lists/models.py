"""Data models and constants for reading lists."""

from __future__ import annotations

from dataclasses import dataclass, field

# Application identity used for platformdirs paths
CONFIG_APP_NAME = "reading-lists"

DEFAULT_SITE = "en.wikipedia.org"
DEFAULT_LIST_NAME = "Saved"

# Limits used until the server supplies its own
MAX_READING_LISTS = 100
MAX_PAGES_PER_LIST = 5000

# Sort modes for the list picker (persisted preference)
SORT_NAME_ASC = "name_asc"
SORT_NAME_DESC = "name_desc"
SORT_RECENT = "recent"
SORT_ARTICLE_COUNT = "article_count"
SORT_MODES = (SORT_NAME_ASC, SORT_NAME_DESC, SORT_RECENT, SORT_ARTICLE_COUNT)

# Where the add-to-list flow was started from
INVOKE_SOURCES = (
    "article",
    "link_preview",
    "search",
    "reading_list",
    "feed",
    "history",
    "context_menu",
    "toc",
)

# Onboarding gate states
STATE_ONBOARDING = "onboarding"
STATE_LISTS_VISIBLE = "lists_visible"

# Rejection reasons
REASON_STORAGE_UNAVAILABLE = "storage_unavailable"
REASON_LIST_LIMIT_EXCEEDED = "list_limit_exceeded"
REASON_ARTICLE_LIMIT_EXCEEDED = "article_limit_exceeded"
REASON_DUPLICATE_LIST_NAME = "duplicate_list_name"
REASON_INVALID_LIST_NAME = "invalid_list_name"
REASON_NO_PAGES = "no_pages"
REJECTION_REASONS = (
    REASON_STORAGE_UNAVAILABLE,
    REASON_LIST_LIMIT_EXCEEDED,
    REASON_ARTICLE_LIMIT_EXCEEDED,
    REASON_DUPLICATE_LIST_NAME,
    REASON_INVALID_LIST_NAME,
    REASON_NO_PAGES,
)


@dataclass(slots=True, frozen=True)
class PageRef:
    """Reference to a single page; immutable and hashable."""

    title: str
    site: str = DEFAULT_SITE
    namespace: str = ""

    @property
    def key(self) -> str:
        """Identity used for membership checks."""
        return f"{self.site}:{self.namespace}:{self.title.strip().replace(' ', '_')}"

    @property
    def display_text(self) -> str:
        return self.title.replace("_", " ")


@dataclass(slots=True)
class ReadingList:
    """A named, ordered collection of pages owned by the user."""

    id: int
    name: str
    description: str = ""
    pages: list[PageRef] = field(default_factory=list)
    is_default: bool = False
    created: str = ""  # ISO 8601
    modified: str = ""  # ISO 8601, bumped on every membership change

    @property
    def member_count(self) -> int:
        return len(self.pages)

    def contains(self, page: PageRef) -> bool:
        key = page.key
        return any(p.key == key for p in self.pages)


@dataclass(slots=True)
class InvocationContext:
    """Why the workflow was started and whether the default list is offered."""

    source: str = "article"
    show_default_list: bool = True


@dataclass(slots=True)
class ListLimits:
    """Global list-count and per-list page-count limits."""

    max_lists: int = MAX_READING_LISTS
    max_pages_per_list: int = MAX_PAGES_PER_LIST


@dataclass(slots=True)
class Added:
    """Some of the requested pages were newly added to the list."""

    reading_list: ReadingList
    pages: list[PageRef]


@dataclass(slots=True)
class AlreadyPresent:
    """Every requested page was already a member of the list."""

    reading_list: ReadingList
    pages: list[PageRef]


@dataclass(slots=True)
class Rejected:
    """The operation was refused before (or instead of) mutating storage."""

    reason: str
    limit: int | None = None
    reading_list: ReadingList | None = None
    detail: str = ""


AddOutcome = Added | AlreadyPresent | Rejected


@dataclass(slots=True)
class GateDecision:
    """Result of evaluating the onboarding gate."""

    state: str
    onboarding_enabled: bool


@dataclass(slots=True)
class DisplayedLists:
    """Lists ready for rendering plus the picker state."""

    lists: list[ReadingList] = field(default_factory=list)
    all_lists: list[ReadingList] = field(default_factory=list)
    state: str = STATE_LISTS_VISIBLE
    prompt_create: bool = False
    error: Rejected | None = None

    @property
    def names(self) -> list[str]:
        return [rl.name for rl in self.lists]


@dataclass(slots=True)
class UserConfig:
    """Persisted preferences and limits."""

    onboarding_enabled: bool = True
    sort_mode: str = SORT_NAME_ASC
    max_lists: int = MAX_READING_LISTS
    max_pages_per_list: int = MAX_PAGES_PER_LIST
    site: str = DEFAULT_SITE
    db_path: str = ""  # Empty = use the platform data dir
    limits_fetched_at: str = ""  # ISO 8601, empty until the server answered once
    version: int = 1

    def __post_init__(self) -> None:
        """Fall back to name sorting for unknown modes."""
        if self.sort_mode not in SORT_MODES:
            self.sort_mode = SORT_NAME_ASC

    @property
    def limits(self) -> ListLimits:
        return ListLimits(max_lists=self.max_lists, max_pages_per_list=self.max_pages_per_list)


__all__ = [
    "CONFIG_APP_NAME",
    "DEFAULT_LIST_NAME",
    "DEFAULT_SITE",
    "INVOKE_SOURCES",
    "MAX_PAGES_PER_LIST",
    "MAX_READING_LISTS",
    "REASON_ARTICLE_LIMIT_EXCEEDED",
    "REASON_DUPLICATE_LIST_NAME",
    "REASON_INVALID_LIST_NAME",
    "REASON_LIST_LIMIT_EXCEEDED",
    "REASON_NO_PAGES",
    "REASON_STORAGE_UNAVAILABLE",
    "REJECTION_REASONS",
    "SORT_ARTICLE_COUNT",
    "SORT_MODES",
    "SORT_NAME_ASC",
    "SORT_NAME_DESC",
    "SORT_RECENT",
    "STATE_LISTS_VISIBLE",
    "STATE_ONBOARDING",
    "AddOutcome",
    "Added",
    "AlreadyPresent",
    "DisplayedLists",
    "GateDecision",
    "InvocationContext",
    "ListLimits",
    "PageRef",
    "ReadingList",
    "Rejected",
    "UserConfig",
]
