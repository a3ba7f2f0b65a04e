import logging
from typing import Dict, List, Optional

from pyrankvote import Ballot, Candidate, instant_runoff_voting

try:
    from .election import Election
except ImportError:
    from tally.election import Election

logger = logging.getLogger(__name__)


class IRVCrossCheck:
    """
    Cross-checks an election's winner against PyRankVote's instant-runoff
    implementation.

    PyRankVote breaks ties for last place its own way, so a mismatch is only
    conclusive when our tally never needed a random tie-break.
    """

    def __init__(self, election: Election):
        self.election = election
        self.candidates_map: Dict[int, Candidate] = {}
        self.ballots_data: List[Ballot] = []
        self.pyrankvote_result = None

    def _prepare_pyrankvote_data(self):
        """Convert the election's roster and ballots to PyRankVote objects."""
        self.candidates_map = {
            candidate.candidate_id: Candidate(str(candidate.candidate_id))
            for candidate in self.election.get_candidates()
        }
        self.ballots_data = [
            Ballot(
                ranked_candidates=[
                    self.candidates_map[candidate_id]
                    for candidate_id in ballot.preference_ids()
                ]
            )
            for ballot in self.election.get_votes()
        ]
        logger.info(
            f"Prepared {len(self.candidates_map)} candidates and "
            f"{len(self.ballots_data)} ballots for PyRankVote"
        )

    def reference_winner(self) -> Optional[int]:
        """Run PyRankVote over the same ballots and return its winner id."""
        self._prepare_pyrankvote_data()
        if not self.ballots_data:
            logger.error("No ballots to cross-check")
            return None

        self.pyrankvote_result = instant_runoff_voting(
            candidates=list(self.candidates_map.values()),
            ballots=self.ballots_data,
        )
        winners = self.pyrankvote_result.get_winners()
        return int(winners[0].name) if winners else None

    def verify(self) -> Dict:
        """
        Compare our winner with PyRankVote's.

        The election must already have been counted to a decision.

        Returns:
            Verification report dictionary
        """
        our_winner = self.election.winner()
        our_winner_id = our_winner.candidate_id if our_winner else None
        reference_id = self.reference_winner()
        tie_break_used = self.election.tie_break_used()

        winners_match = our_winner_id == reference_id
        report = {
            "our_winner": our_winner_id,
            "reference_winner": reference_id,
            "winners_match": winners_match,
            "tie_break_used": tie_break_used,
            "conclusive": not tie_break_used,
            "verification_passed": winners_match or tie_break_used,
        }

        if winners_match:
            logger.info(f"Cross-check passed: both counts elect {our_winner_id}")
        elif tie_break_used:
            logger.warning(
                f"Winners differ ({our_winner_id} vs {reference_id}) after a random tie-break"
            )
        else:
            logger.error(f"Cross-check failed: {our_winner_id} vs {reference_id}")
        return report

    def generate_verification_report(self, verification_results: Dict) -> str:
        """Format a verification report for printing."""
        names = {c.candidate_id: c.name for c in self.election.get_candidates()}

        def label(candidate_id):
            if candidate_id is None:
                return "none"
            return names.get(candidate_id, f"ID-{candidate_id}")

        report = ["=" * 60, "INSTANT-RUNOFF CROSS-CHECK", "=" * 60]
        if verification_results["winners_match"]:
            report.append("✅ Winner matches PyRankVote")
        elif verification_results["tie_break_used"]:
            report.append("⚠️  Winner differs after a random tie-break (inconclusive)")
        else:
            report.append("❌ Winner does not match PyRankVote")
        report.append(f"Our winner: {label(verification_results['our_winner'])}")
        report.append(
            f"PyRankVote winner: {label(verification_results['reference_winner'])}"
        )
        return "\n".join(report)
