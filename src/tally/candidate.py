import logging

try:
    from .errors import AlreadyEliminatedError
except ImportError:
    from tally.errors import AlreadyEliminatedError

logger = logging.getLogger(__name__)


class Candidate:
    """
    A named contestant with a running vote count.

    The candidate_id is the position in the election's roster and never
    changes once the roster is built.
    """

    def __init__(self, candidate_id: int, name: str):
        self.candidate_id = candidate_id
        self.name = name
        self._count = 0
        self._eliminated = False

    def __repr__(self):
        status = "eliminated" if self._eliminated else f"{self._count} votes"
        return f"Candidate({self.candidate_id}, {self.name!r}, {status})"

    @property
    def count(self) -> int:
        return self._count

    def reset(self):
        """Clear both the count and the eliminated flag."""
        self.reset_count()
        self.reset_elimination()

    def reset_elimination(self):
        self._eliminated = False

    def reset_count(self):
        self._count = 0

    def increment_count(self):
        self._count += 1

    def eliminate(self):
        """
        Mark the candidate as eliminated.

        The count is left untouched; the election decides what an eliminated
        candidate's count reads as.

        Raises:
            AlreadyEliminatedError: if the candidate was already eliminated
        """
        if self._eliminated:
            raise AlreadyEliminatedError(self.name)
        self._eliminated = True
        logger.debug(f"Eliminated candidate {self.candidate_id} ({self.name})")

    def is_eliminated(self) -> bool:
        return self._eliminated
