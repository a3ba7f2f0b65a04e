"""
Loads ballots from comma-separated preference files.

Each line is one ballot: zero-based candidate ids in preference order.
Empty fields mean "no further preference" and may only trail the line.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from tally.election import Election
from tally.errors import (
    BallotFileEncodingError,
    BallotFileError,
    BallotValidationError,
    GapAfterBlankPreferenceError,
    MalformedPreferenceError,
)

logger = logging.getLogger(__name__)

# Marker ballot-entry widgets use for an unselected preference.
BLANK_PREFERENCE = -1


def _is_blank(field) -> bool:
    if field is None:
        return True
    if isinstance(field, str):
        return field.strip() == ""
    return field == BLANK_PREFERENCE


def compact_preferences(fields: Iterable[Union[str, int, None]]) -> List[int]:
    """
    Drop trailing blank preferences and convert the rest to ints.

    Args:
        fields: Raw preference fields, e.g. the split of one file line

    Returns:
        Candidate ids in preference order

    Raises:
        GapAfterBlankPreferenceError: a preference follows a blank one
        MalformedPreferenceError: a field is not a plain decimal number
    """
    preference_ids = []
    found_blank = False
    for position, field in enumerate(fields):
        if _is_blank(field):
            found_blank = True
            continue
        if found_blank:
            raise GapAfterBlankPreferenceError(position)
        if isinstance(field, str):
            digits = field.strip()
            # int() would also take "+1", "0_0" and non-ASCII digits
            if not (digits.isascii() and digits.isdigit()):
                raise MalformedPreferenceError(field)
            field = int(digits)
        preference_ids.append(field)
    return preference_ids


class BallotLoader:
    """
    Reads ballot files into an Election.

    Every line is checked against the election before anything is added, so
    a rejected line never leaves a partial ballot behind.
    """

    def __init__(self, election: Election):
        self.election = election

    def parse_lines(
        self, lines: Iterable[str]
    ) -> Tuple[List[Tuple[int, List[int]]], List[Tuple[int, BallotValidationError]], int]:
        """
        Parse and validate lines without touching the election.

        Returns:
            (valid ballots as (line_number, ids), errors as
            (line_number, error), number of blank lines skipped)
        """
        valid = []
        errors = []
        blank_lines = 0
        for line_number, line in enumerate(lines, 1):
            line = line.rstrip("\r\n")
            if not line.strip():
                blank_lines += 1
                continue
            try:
                preference_ids = compact_preferences(line.split(","))
                self.election.validate_preferences(preference_ids)
            except BallotValidationError as e:
                errors.append((line_number, e))
                continue
            valid.append((line_number, preference_ids))
        return valid, errors, blank_lines

    def load(self, path: Union[str, Path], strict: bool = True) -> Dict:
        """
        Load ballots from a file into the election.

        Args:
            path: Path to the ballot file
            strict: Reject the whole file if any line is invalid; otherwise
                add the valid lines and report the rest

        Returns:
            Dictionary with loading statistics

        Raises:
            FileNotFoundError: the file does not exist
            BallotFileEncodingError: the file is not UTF-8 text
            BallotFileError: strict mode and at least one invalid line
        """
        path = Path(path)
        logger.info(f"Loading ballots from: {path}")

        # utf-8-sig drops the byte-order mark spreadsheet exports write
        try:
            with open(path, "r", encoding="utf-8-sig") as f:
                lines = f.readlines()
        except UnicodeDecodeError as e:
            raise BallotFileEncodingError(path, str(e)) from e

        valid, errors, blank_lines = self.parse_lines(lines)

        for line_number, error in errors:
            logger.warning(f"Rejected ballot on line {line_number}: {error}")

        if errors and strict:
            raise BallotFileError(path, errors)

        for _, preference_ids in valid:
            self.election.add_vote(preference_ids)

        logger.info(f"Loaded {len(valid)} ballots")
        if errors:
            logger.warning(f"Skipped {len(errors)} invalid ballot lines")

        return {
            "total_lines": len(lines),
            "ballots_added": len(valid),
            "blank_lines": blank_lines,
            "rejected_lines": len(errors),
            "errors": errors,
        }


def load_ballots(
    election: Election, path: Union[str, Path], strict: bool = True
) -> Dict:
    """Convenience wrapper around BallotLoader.load()."""
    return BallotLoader(election).load(path, strict=strict)


def format_errors(errors: List[Tuple[int, BallotValidationError]], limit: Optional[int] = 10) -> str:
    """Format per-line errors, one per line, for display."""
    shown = errors if limit is None else errors[:limit]
    lines = [f"  line {line_number}: {error}" for line_number, error in shown]
    if limit is not None and len(errors) > limit:
        lines.append(f"  ... and {len(errors) - limit} more")
    return "\n".join(lines)
