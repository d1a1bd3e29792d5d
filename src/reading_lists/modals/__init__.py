"""Modal dialogs for the reading list picker.

Import modals from this package: ``from reading_lists.modals import AddToReadingListModal``
"""

# add_to_list.py: list picker with onboarding panel
from reading_lists.modals.add_to_list import AddToReadingListModal, format_list_row

# list_title.py: new list name/description form
from reading_lists.modals.list_title import ReadingListTitleModal

__all__ = [
    "AddToReadingListModal",
    "ReadingListTitleModal",
    "format_list_row",
]
