import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

try:
    from .ballot import Ballot
    from .candidate import Candidate
    from .errors import (
        CountingInProgressError,
        CountingNotStartedError,
        DuplicateCandidateError,
        NoPreferencesError,
        TooManyPreferencesError,
        UnknownCandidateError,
    )
except ImportError:
    from tally.ballot import Ballot
    from tally.candidate import Candidate
    from tally.errors import (
        CountingInProgressError,
        CountingNotStartedError,
        DuplicateCandidateError,
        NoPreferencesError,
        TooManyPreferencesError,
        UnknownCandidateError,
    )

logger = logging.getLogger(__name__)

DEFAULT_CANDIDATES = ("Cameron", "Corbyn", "Farron", "Sturgeon")

Listener = Callable[["Election"], None]


@dataclass
class IRVRound:
    """Snapshot of the tally after one counting step."""

    round_number: int
    continuing_candidates: List[int]
    vote_totals: Dict[int, int]
    eliminated_this_round: Optional[int]
    tied_candidates: List[int]
    exhausted_ballots: int
    total_continuing_votes: int
    decided: bool
    notes: List[str] = field(default_factory=list)


class Election:
    """
    Instant-runoff (alternative vote) election for a fixed roster.

    The caller submits ballots with add_vote(), calls start_counting() once
    and then redistribute() while has_started() is true. Each redistribute()
    eliminates one lowest-scoring candidate and moves its ballots on to
    their next surviving preference.

    Eliminated candidates read as a count of 0: the election zeroes the
    count in the same step that eliminates the candidate.
    """

    def __init__(
        self,
        candidate_names: Sequence[str] = DEFAULT_CANDIDATES,
        rng=None,
        seed: Optional[int] = None,
    ):
        """
        Initialize the election.

        Args:
            candidate_names: Roster in id order; position is the candidate id
            rng: Random source for tie-breaks, anything with an integers(high)
                method such as numpy.random.Generator
            seed: Seed for a fresh numpy generator when rng is not given
        """
        if not candidate_names:
            raise ValueError("An election needs at least one candidate")

        self.candidates: List[Candidate] = [
            Candidate(candidate_id, name)
            for candidate_id, name in enumerate(candidate_names)
        ]
        self.votes: List[Ballot] = []
        self.rounds: List[IRVRound] = []
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self._round = 0
        self._listeners: List[Listener] = []

    # Observers

    def subscribe(self, listener: Listener):
        """Register a callable invoked with the election after every change."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener):
        self._listeners.remove(listener)

    def _emit_change(self):
        for listener in list(self._listeners):
            listener(self)

    # Reads

    def get_candidates(self) -> List[Candidate]:
        return self.candidates

    def get_votes(self) -> List[Ballot]:
        return self.votes

    def get_round(self) -> int:
        return self._round

    def continuing_candidates(self) -> List[Candidate]:
        return [c for c in self.candidates if not c.is_eliminated()]

    def total_continuing_votes(self) -> int:
        return sum(c.count for c in self.continuing_candidates())

    def has_started(self) -> bool:
        """
        Whether a tally is in progress and still undecided.

        False before the first count, once a candidate holds a strict
        majority of continuing votes, or when no continuing votes remain.
        """
        total = 0
        highest = 0
        for candidate in self.continuing_candidates():
            total += candidate.count
            highest = max(highest, candidate.count)
        return not (total < 1 or 2 * highest > total)

    def winner(self) -> Optional[Candidate]:
        """The candidate holding a majority once the tally is decided."""
        if not self.rounds or self.has_started():
            return None
        continuing = self.continuing_candidates()
        total = sum(c.count for c in continuing)
        if total < 1:
            return None
        leader = max(continuing, key=lambda c: c.count)
        return leader if 2 * leader.count > total else None

    # Submission

    def validate_preferences(self, preference_ids: Sequence[int]) -> List[Candidate]:
        """
        Check a preference list and resolve it to candidates.

        Leaves the election unchanged.

        Raises:
            TooManyPreferencesError: more preferences than candidates
            NoPreferencesError: empty preference list
            UnknownCandidateError: an id outside the roster
            DuplicateCandidateError: an id given twice
        """
        if len(preference_ids) > len(self.candidates):
            raise TooManyPreferencesError(len(preference_ids), len(self.candidates))
        if len(preference_ids) < 1:
            raise NoPreferencesError()

        preferences = []
        seen = set()
        for candidate_id in preference_ids:
            if (
                isinstance(candidate_id, bool)
                or not isinstance(candidate_id, (int, np.integer))
                or not 0 <= candidate_id < len(self.candidates)
            ):
                raise UnknownCandidateError(candidate_id)
            if candidate_id in seen:
                raise DuplicateCandidateError(int(candidate_id))
            seen.add(candidate_id)
            preferences.append(self.candidates[candidate_id])
        return preferences

    def add_vote(self, preference_ids: Sequence[int]) -> Ballot:
        """
        Submit a ballot as an ordered list of zero-based candidate ids.

        A ballot added while a tally is in progress is not counted until
        the next start_counting().
        """
        ballot = Ballot(self.validate_preferences(preference_ids))
        self.votes.append(ballot)
        logger.debug(f"Added ballot {ballot.preference_ids()}")
        self._emit_change()
        return ballot

    # Counting

    def start_counting(self):
        """
        Reset every candidate and count each ballot for its first preference.

        Raises:
            CountingInProgressError: if a tally is already under way
        """
        if self.has_started() or self._round != 0:
            raise CountingInProgressError(self._round)

        logger.info(
            f"Starting count: {len(self.candidates)} candidates, {len(self.votes)} ballots"
        )
        for candidate in self.candidates:
            candidate.reset_elimination()
            candidate.reset_count()
        for ballot in self.votes:
            ballot.start_count()

        self.rounds = []
        self._round = 1 if self.has_started() else 0
        self._record_round(eliminated=None, tied=[])
        self._emit_change()

    def redistribute(self):
        """
        Eliminate one lowest-scoring candidate and move its ballots on.

        Ties for lowest are broken uniformly at random with the election's
        random source.

        Raises:
            CountingNotStartedError: if no undecided tally is in progress
        """
        if not self.has_started():
            raise CountingNotStartedError()

        eliminated, tied = self._eliminate_lowest()
        for ballot in self.votes:
            ballot.redistribute()

        if (
            not self.has_started()
            or self.total_continuing_votes() == 0
            or self._round >= len(self.candidates) - 1
        ):
            self._round = 0
        else:
            self._round += 1
        self._record_round(eliminated=eliminated, tied=tied)
        self._emit_change()

    def run_to_completion(self) -> List[IRVRound]:
        """Count from first preferences until the tally is decided."""
        self.start_counting()
        while self.has_started():
            self.redistribute()
        return self.rounds

    def _eliminate_lowest(self):
        continuing = self.continuing_candidates()
        if not continuing:
            return None, []

        lowest_count = min(c.count for c in continuing)
        low_scorers = [c for c in continuing if c.count == lowest_count]
        if len(low_scorers) > 1:
            chosen = low_scorers[int(self.rng.integers(len(low_scorers)))]
            logger.warning(
                f"Tie for lowest between {[c.name for c in low_scorers]} "
                f"at {lowest_count} votes; drew {chosen.name}"
            )
        else:
            chosen = low_scorers[0]

        chosen.eliminate()
        chosen.reset_count()
        logger.info(f"Eliminating {chosen.name} with {lowest_count} votes")

        tied = [c.candidate_id for c in low_scorers] if len(low_scorers) > 1 else []
        return chosen.candidate_id, tied

    def _record_round(self, eliminated: Optional[int], tied: List[int]):
        counted = [ballot for ballot in self.votes if ballot.in_count()]
        exhausted = sum(1 for ballot in counted if ballot.is_exhausted())
        decided = not self.has_started()

        notes = []
        if len(self.votes) > len(counted):
            notes.append(f"{len(self.votes) - len(counted)} ballot(s) awaiting recount")

        round_record = IRVRound(
            round_number=len(self.rounds) + 1,
            continuing_candidates=[c.candidate_id for c in self.continuing_candidates()],
            vote_totals={c.candidate_id: c.count for c in self.candidates},
            eliminated_this_round=eliminated,
            tied_candidates=tied,
            exhausted_ballots=exhausted,
            total_continuing_votes=self.total_continuing_votes(),
            decided=decided,
            notes=notes,
        )
        self.rounds.append(round_record)

        if decided:
            winner = self.winner()
            if winner is not None:
                logger.info(
                    f"{winner.name} elected with {winner.count} of "
                    f"{round_record.total_continuing_votes} continuing votes"
                )
            else:
                logger.info("Count finished without a majority winner")

    # Reporting

    def tie_break_used(self) -> bool:
        return any(r.tied_candidates for r in self.rounds)

    def get_round_summary(self) -> pd.DataFrame:
        """
        Get summary of all counting steps as a DataFrame.

        Returns:
            DataFrame with one row per step per candidate
        """
        if not self.rounds:
            return pd.DataFrame()

        summary_data = []
        for round_obj in self.rounds:
            for candidate_id, votes in round_obj.vote_totals.items():
                summary_data.append(
                    {
                        "round": round_obj.round_number,
                        "candidate_id": candidate_id,
                        "candidate_name": self.candidates[candidate_id].name,
                        "votes": votes,
                        "status": self._get_candidate_status(candidate_id, round_obj),
                        "exhausted_ballots": round_obj.exhausted_ballots,
                    }
                )

        return pd.DataFrame(summary_data)

    def _get_candidate_status(self, candidate_id: int, round_obj: IRVRound) -> str:
        if candidate_id == round_obj.eliminated_this_round:
            return "eliminated"
        elif candidate_id not in round_obj.continuing_candidates:
            return "already_eliminated"
        elif round_obj.decided and self._is_majority(candidate_id, round_obj):
            return "elected"
        else:
            return "continuing"

    @staticmethod
    def _is_majority(candidate_id: int, round_obj: IRVRound) -> bool:
        return 2 * round_obj.vote_totals[candidate_id] > round_obj.total_continuing_votes

    def get_final_results(self) -> pd.DataFrame:
        """
        Get final results for all candidates, sorted by final votes.

        Returns:
            DataFrame with candidate, final votes, status and the round
            each eliminated candidate went out
        """
        if not self.rounds:
            return pd.DataFrame()

        elimination_round = {
            r.eliminated_this_round: r.round_number
            for r in self.rounds
            if r.eliminated_this_round is not None
        }
        winner = self.winner()

        results_data = []
        for candidate in self.candidates:
            if winner is not None and candidate is winner:
                status = "elected"
            elif candidate.is_eliminated():
                status = "eliminated"
            else:
                status = "not_elected"
            results_data.append(
                {
                    "candidate_id": candidate.candidate_id,
                    "candidate_name": candidate.name,
                    "final_votes": candidate.count,
                    "status": status,
                    "elimination_round": elimination_round.get(candidate.candidate_id),
                }
            )

        return pd.DataFrame(results_data).sort_values(
            "final_votes", ascending=False, kind="stable"
        )

    def get_ballot_summary(self) -> pd.DataFrame:
        """One row per ballot with its preferences and active choice."""
        rows = []
        for index, ballot in enumerate(self.votes):
            active = ballot.active_choice() if ballot.in_count() else None
            rows.append(
                {
                    "ballot": index,
                    "preferences": ",".join(map(str, ballot.preference_ids())),
                    "choice_index": ballot.get_choice(),
                    "active_candidate_id": active.candidate_id if active else None,
                    "exhausted": ballot.in_count() and ballot.is_exhausted(),
                }
            )
        return pd.DataFrame(
            rows,
            columns=[
                "ballot",
                "preferences",
                "choice_index",
                "active_candidate_id",
                "exhausted",
            ],
        )
