"""One-time onboarding gate shown ahead of the list picker.

The gate has two states. ``STATE_ONBOARDING`` hides the picker behind an
introductory panel; ``STATE_LISTS_VISIBLE`` shows the picker. The persisted
``onboarding_enabled`` flag only ever moves from True to False: either the
user dismisses the panel, or the lists turn out to already hold pages (for
example after a sync), which makes the introduction pointless.
"""

from __future__ import annotations

import logging

from reading_lists.config import ONBOARDING_PREF_KEY, Preferences
from reading_lists.models import (
    STATE_LISTS_VISIBLE,
    STATE_ONBOARDING,
    GateDecision,
    ReadingList,
)

logger = logging.getLogger(__name__)


def evaluate(onboarding_enabled: bool, lists: list[ReadingList]) -> GateDecision:
    """Decide the gate state from the persisted flag and the user's lists."""
    if not onboarding_enabled:
        return GateDecision(state=STATE_LISTS_VISIBLE, onboarding_enabled=False)
    if any(rl.member_count > 0 for rl in lists):
        return GateDecision(state=STATE_LISTS_VISIBLE, onboarding_enabled=False)
    return GateDecision(state=STATE_ONBOARDING, onboarding_enabled=True)


def dismiss() -> GateDecision:
    """Transition taken when the user accepts or closes the panel."""
    return GateDecision(state=STATE_LISTS_VISIBLE, onboarding_enabled=False)


class OnboardingGate:
    """Binds the pure transitions to a persisted preference store."""

    def __init__(self, prefs: Preferences) -> None:
        self._prefs = prefs
        self.state = STATE_LISTS_VISIBLE

    @property
    def is_onboarding(self) -> bool:
        return self.state == STATE_ONBOARDING

    def evaluate(self, lists: list[ReadingList]) -> GateDecision:
        """Re-read the flag and decide; persist only when it flips."""
        enabled = self._prefs.get_bool(ONBOARDING_PREF_KEY, True)
        decision = evaluate(enabled, lists)
        if enabled and not decision.onboarding_enabled:
            logger.debug("Lists already contain pages; disabling onboarding")
            self._prefs.set_bool(ONBOARDING_PREF_KEY, False)
        self.state = decision.state
        return decision

    def dismiss(self) -> GateDecision:
        decision = dismiss()
        if self._prefs.get_bool(ONBOARDING_PREF_KEY, True):
            self._prefs.set_bool(ONBOARDING_PREF_KEY, False)
        self.state = decision.state
        return decision


__all__ = [
    "OnboardingGate",
    "dismiss",
    "evaluate",
]
