"""
Instant-runoff (alternative vote) tallying.

- Election: owns the roster and ballots and runs the rounds
- Candidate, Ballot: records mutated by the election while counting
- IRVCrossCheck: compares a finished count with PyRankVote
"""

from .ballot import Ballot
from .candidate import Candidate
from .election import DEFAULT_CANDIDATES, Election, IRVRound
from .errors import (
    AlreadyEliminatedError,
    BallotFileEncodingError,
    BallotFileError,
    BallotValidationError,
    CountingInProgressError,
    CountingNotStartedError,
    CountingStateError,
    DuplicateCandidateError,
    GapAfterBlankPreferenceError,
    MalformedPreferenceError,
    NoPreferencesError,
    TallyError,
    TooManyPreferencesError,
    UnknownCandidateError,
)
from .verification import IRVCrossCheck

__all__ = [
    "Election",
    "IRVRound",
    "Candidate",
    "Ballot",
    "DEFAULT_CANDIDATES",
    "IRVCrossCheck",
    "TallyError",
    "BallotValidationError",
    "TooManyPreferencesError",
    "NoPreferencesError",
    "UnknownCandidateError",
    "DuplicateCandidateError",
    "GapAfterBlankPreferenceError",
    "MalformedPreferenceError",
    "CountingStateError",
    "CountingInProgressError",
    "CountingNotStartedError",
    "AlreadyEliminatedError",
    "BallotFileError",
    "BallotFileEncodingError",
]
