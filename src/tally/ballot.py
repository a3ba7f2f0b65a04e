"""
A single ranked ballot and the logic for moving it between preferences.
"""

import logging
from typing import List, Optional, Sequence

try:
    from .candidate import Candidate
except ImportError:
    from tally.candidate import Candidate

logger = logging.getLogger(__name__)


class Ballot:
    """
    One voter's ranked preferences plus a pointer to the preference
    currently being counted.

    The preferences are references into the election's roster, so the
    ballot sees eliminations as soon as they happen. The constructor does
    not validate; the election checks preference lists before building
    ballots.
    """

    def __init__(self, preferences: Sequence[Candidate]):
        self.preferences = tuple(preferences)
        self._choice = 0
        self._in_count = False

    def __repr__(self):
        ids = ",".join(str(c.candidate_id) for c in self.preferences)
        return f"Ballot([{ids}], choice={self._choice})"

    def __len__(self):
        return len(self.preferences)

    def preference_ids(self) -> List[int]:
        return [candidate.candidate_id for candidate in self.preferences]

    def get_choice(self) -> int:
        """Index of the preference currently being counted."""
        return self._choice

    def start_count(self):
        """Count the ballot for its first preference."""
        self._choice = 0
        self._in_count = True
        self.preferences[0].increment_count()

    def redistribute(self):
        """
        Move the ballot past eliminated preferences.

        The count of the candidate the ballot lands on is incremented once.
        Calling this again without a new elimination changes nothing, and an
        exhausted ballot stays on its last preference without counting.
        """
        if not self._in_count:
            return

        start = self._choice
        last = len(self.preferences) - 1
        while self.preferences[self._choice].is_eliminated() and self._choice < last:
            self._choice += 1

        current = self.preferences[self._choice]
        if self._choice != start and not current.is_eliminated():
            current.increment_count()
            logger.debug(
                f"Ballot moved from preference {start + 1} to {self._choice + 1} "
                f"({current.name})"
            )

    def active_choice(self) -> Optional[Candidate]:
        """First non-eliminated candidate from the current index, if any."""
        for candidate in self.preferences[self._choice:]:
            if not candidate.is_eliminated():
                return candidate
        return None

    def in_count(self) -> bool:
        """Whether the ballot has been counted since the last start."""
        return self._in_count

    def is_exhausted(self) -> bool:
        return self.active_choice() is None
