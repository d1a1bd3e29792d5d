"""CLI/bootstrap helpers for the reading list picker."""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.handlers
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from reading_lists.action_messages import (
    build_actionable_error,
    describe_outcome,
    pluralize_articles,
)
from reading_lists.analytics import LoggingFunnel
from reading_lists.config import (
    CONFIG_APP_NAME,
    ConfigPreferences,
    get_db_path,
    load_config,
    save_config,
)
from reading_lists.models import (
    INVOKE_SOURCES,
    SORT_MODES,
    InvocationContext,
    ListLimits,
    PageRef,
    Rejected,
    UserConfig,
)
from reading_lists.ordering import sort_reading_lists
from reading_lists.site_info import resolve_list_limits
from reading_lists.store import SqliteListStore, StorageError
from reading_lists.workflow import AddPagesWorkflow

logger = logging.getLogger(__name__)


LOG_FILENAME = "debug.log"
LOG_MAX_BYTES = 2 * 1024 * 1024
LOG_BACKUP_COUNT = 2


def _configure_logging(debug: bool) -> None:
    """Silence logging for the TUI, or with ``debug`` send everything to a rotating file."""
    if debug:
        log_path = Path(user_config_dir(CONFIG_APP_NAME)) / LOG_FILENAME
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        root = logging.getLogger()
        root.addHandler(handler)
        root.setLevel(logging.DEBUG)
    else:
        # The picker owns the terminal
        logging.disable(logging.CRITICAL)


def _validate_interactive_tty() -> bool:
    """Return True when stdin/stdout are interactive terminals."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Save pages to reading lists")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/reading-lists/debug.log)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Reading list database path (default: platform data dir)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    add = commands.add_parser("add", help="Add one or more pages to a reading list")
    add.add_argument("titles", nargs="+", help="Page titles to save")
    add.add_argument("--site", default=None, help="Wiki the titles belong to (default: config)")
    add.add_argument(
        "--source",
        choices=INVOKE_SOURCES,
        default="article",
        help="Where the request came from (default: article)",
    )
    add.add_argument(
        "--hide-default",
        action="store_true",
        help="Leave the default list out of the picker",
    )
    add.add_argument(
        "--refresh-limits",
        action="store_true",
        help="Fetch list limits from the wiki before showing the picker",
    )

    commands.add_parser("show", help="Print reading lists in the configured sort order")

    sort = commands.add_parser("sort", help="Set the picker sort order")
    sort.add_argument("mode", choices=SORT_MODES)

    commands.add_parser("reset-onboarding", help="Show the onboarding panel again")
    return parser


def _print_lists(store: SqliteListStore, config: UserConfig) -> int:
    try:
        lists = asyncio.run(store.get_all_lists())
    except StorageError as e:
        print(
            build_actionable_error(
                "read reading lists",
                why=str(e),
                next_step="check the --db path and its permissions",
            ),
            file=sys.stderr,
        )
        return 1
    for rl in sort_reading_lists(lists, config.sort_mode):
        marker = " [default]" if rl.is_default else ""
        print(f"{rl.name}{marker} ({pluralize_articles(rl.member_count)})")
    return 0


def main(
    argv: list[str] | None = None,
    *,
    load_config_fn: Callable[[], UserConfig] = load_config,
    save_config_fn: Callable[[UserConfig], bool] = save_config,
    store_factory: Callable[[Path], SqliteListStore] = SqliteListStore,
    resolve_limits_fn: Callable[[UserConfig], Awaitable[ListLimits]] = resolve_list_limits,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    app_factory: Callable[..., Any] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    args = _build_parser().parse_args(argv)
    configure_logging_fn(args.debug)
    logger.debug("reading-lists starting, command=%s", args.command)

    config = load_config_fn()
    if args.db is not None:
        config.db_path = str(args.db)
    store = store_factory(get_db_path(config))

    if args.command == "show":
        return _print_lists(store, config)

    if args.command == "sort":
        config.sort_mode = args.mode
        if not save_config_fn(config):
            print("Error: could not save the sort order", file=sys.stderr)
            return 1
        print(f"Sorting reading lists by {args.mode}")
        return 0

    if args.command == "reset-onboarding":
        config.onboarding_enabled = True
        if not save_config_fn(config):
            print("Error: could not save the onboarding setting", file=sys.stderr)
            return 1
        print("Onboarding will be shown next time")
        return 0

    # add
    if not validate_interactive_tty_fn():
        print(
            "Error: reading-lists add requires an interactive TTY for the picker.",
            file=sys.stderr,
        )
        print("Use 'reading-lists show' for non-interactive output.", file=sys.stderr)
        return 2

    if args.refresh_limits:
        asyncio.run(resolve_limits_fn(config))
        save_config_fn(config)

    site = args.site or config.site
    pages = [PageRef(title=title, site=site) for title in args.titles]
    workflow = AddPagesWorkflow(
        pages,
        store=store,
        prefs=ConfigPreferences(config, save=False),
        context=InvocationContext(source=args.source, show_default_list=not args.hide_default),
        limits=config.limits,
        funnel=LoggingFunnel(),
    )

    if app_factory is None:
        from reading_lists.app import ReadingListsApp as _ReadingListsApp

        app_factory = _ReadingListsApp

    app = app_factory(workflow)
    outcome = app.run()
    save_config_fn(config)
    if outcome is None:
        return 0
    print(describe_outcome(outcome, pages))
    return 1 if isinstance(outcome, Rejected) else 0


__all__ = [
    "_configure_logging",
    "_validate_interactive_tty",
    "main",
]
