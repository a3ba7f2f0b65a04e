#!/usr/bin/env python3
"""
Run an instant-runoff count over a ballot file.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ballot_io.ballot_loader import BallotLoader, format_errors  # noqa: E402
from tally.election import DEFAULT_CANDIDATES, Election  # noqa: E402
from tally.errors import (  # noqa: E402
    BallotFileEncodingError,
    BallotFileError,
    TallyError,
)
from tally.verification import IRVCrossCheck  # noqa: E402

logger = logging.getLogger(__name__)


def print_rounds(election: Election):
    print("\n=== Round-by-Round Results ===")
    round_summary = election.get_round_summary()

    for round_num in sorted(round_summary["round"].unique()):
        round_data = round_summary[round_summary["round"] == round_num]
        print(f"\nRound {round_num}:")

        for _, row in round_data.sort_values("votes", ascending=False).iterrows():
            status_symbol = {
                "elected": "🏆",
                "eliminated": "❌",
                "continuing": "  ",
                "already_eliminated": "- ",
            }.get(row["status"], "  ")
            print(f"  {status_symbol} {row['candidate_name']:25s}: {row['votes']:6d} votes")

        if round_data.iloc[0]["exhausted_ballots"] > 0:
            print(f"     {'Exhausted':25s}: {round_data.iloc[0]['exhausted_ballots']:6d} ballots")

        record = election.rounds[round_num - 1]
        if record.tied_candidates:
            tied = ", ".join(election.candidates[c].name for c in record.tied_candidates)
            print(f"     Tie for lowest broken by lot between: {tied}")


def main():
    parser = argparse.ArgumentParser(description="Run an instant-runoff count")
    parser.add_argument("ballot_file", help="Ballot file, one comma-separated ballot per line")
    parser.add_argument(
        "--candidates",
        nargs="+",
        default=list(DEFAULT_CANDIDATES),
        help="Candidate names in id order (default: %(default)s)",
    )
    parser.add_argument("--seed", type=int, help="Seed for tie-break draws")
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Skip invalid ballot lines instead of rejecting the file",
    )
    parser.add_argument("--export", help="Export results to CSV file")
    parser.add_argument(
        "--verify", action="store_true", help="Cross-check the winner with PyRankVote"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    ballot_path = Path(args.ballot_file)
    if not ballot_path.exists():
        logger.error(f"Ballot file not found: {ballot_path}")
        sys.exit(1)

    election = Election(args.candidates, seed=args.seed)

    try:
        stats = BallotLoader(election).load(ballot_path, strict=not args.lenient)
    except BallotFileError as e:
        logger.error(str(e))
        print(format_errors(e.errors), file=sys.stderr)
        sys.exit(1)
    except (BallotFileEncodingError, OSError) as e:
        logger.error(f"Cannot read ballot file: {e}")
        sys.exit(1)

    print(f"✓ Loaded {stats['ballots_added']} ballots")
    if stats["rejected_lines"]:
        print(f"⚠️  Skipped {stats['rejected_lines']} invalid lines:")
        print(format_errors(stats["errors"]))

    if not election.get_votes():
        logger.error("No valid ballots to count")
        sys.exit(1)

    try:
        election.run_to_completion()
    except TallyError as e:
        logger.error(f"Error running count: {e}")
        sys.exit(1)

    print_rounds(election)

    print("\n=== Final Results ===")
    final_results = election.get_final_results()
    winner = election.winner()
    if winner is not None:
        print(f"\nElected: {winner.name} ({winner.count} votes)")
    else:
        print("\nNo candidate reached a majority")

    if args.export:
        export_path = Path(args.export)
        final_results.to_csv(export_path.with_suffix(".csv"), index=False)
        print(f"\n✓ Final results exported to: {export_path.with_suffix('.csv')}")

        rounds_path = export_path.with_stem(export_path.stem + "_rounds").with_suffix(".csv")
        election.get_round_summary().to_csv(rounds_path, index=False)
        print(f"✓ Round summary exported to: {rounds_path}")

    if args.verify:
        checker = IRVCrossCheck(election)
        results = checker.verify()
        print()
        print(checker.generate_verification_report(results))
        if not results["verification_passed"]:
            sys.exit(2)

    print("\n✓ Count completed successfully")


if __name__ == "__main__":
    main()
