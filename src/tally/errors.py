"""
Exception hierarchy for instant-runoff tallying.

Submission errors are recoverable and leave the election unchanged.
Counting state errors mean the caller drove the election out of order.
"""

from pathlib import Path
from typing import List, Tuple, Union


class TallyError(Exception):
    """Base class for every error raised by the tally package."""


class BallotValidationError(TallyError, ValueError):
    """A submitted preference list was rejected."""


class TooManyPreferencesError(BallotValidationError):
    def __init__(self, given: int, limit: int):
        self.given = given
        self.limit = limit
        super().__init__(
            f"Too many preferences selected: {given} given, at most {limit} allowed"
        )


class NoPreferencesError(BallotValidationError):
    def __init__(self):
        super().__init__("No preferences selected")


class UnknownCandidateError(BallotValidationError):
    def __init__(self, candidate_id):
        self.candidate_id = candidate_id
        super().__init__(f"Candidate could not be found: {candidate_id!r}")


class DuplicateCandidateError(BallotValidationError):
    def __init__(self, candidate_id: int):
        self.candidate_id = candidate_id
        super().__init__(f"Candidate cannot be selected twice: {candidate_id}")


class GapAfterBlankPreferenceError(BallotValidationError):
    def __init__(self, position: int):
        self.position = position
        super().__init__(
            f"Cannot select preferences after a blank preference (position {position + 1})"
        )


class MalformedPreferenceError(BallotValidationError):
    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Preference is not a candidate number: {value!r}")


class CountingStateError(TallyError, RuntimeError):
    """A counting operation was called in the wrong state."""


class CountingInProgressError(CountingStateError):
    def __init__(self, round_number: int):
        self.round_number = round_number
        super().__init__(
            f"Counting is already in progress (round {round_number}); "
            "redistribute until a candidate is elected"
        )


class CountingNotStartedError(CountingStateError):
    def __init__(self):
        super().__init__("Counting has not started or has already been decided")


class AlreadyEliminatedError(CountingStateError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Candidate {name} has already been eliminated")


class BallotFileError(TallyError):
    """One or more lines of a ballot file were rejected."""

    def __init__(
        self,
        path: Union[str, Path],
        errors: List[Tuple[int, BallotValidationError]],
    ):
        self.path = Path(path)
        self.errors = errors
        first_line, first_error = errors[0]
        super().__init__(
            f"{len(errors)} invalid ballot line(s) in {self.path}; "
            f"first at line {first_line}: {first_error}"
        )


class BallotFileEncodingError(TallyError, ValueError):
    """A ballot file could not be decoded as UTF-8 text."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot read {self.path} as UTF-8 text: {reason}")
