"""Ballot file ingestion for instant-runoff elections."""

from .ballot_loader import (
    BLANK_PREFERENCE,
    BallotLoader,
    compact_preferences,
    format_errors,
    load_ballots,
)

__all__ = [
    "BLANK_PREFERENCE",
    "BallotLoader",
    "compact_preferences",
    "format_errors",
    "load_ballots",
]
