#!/usr/bin/env python3
"""
Custom pre-commit hooks for instant-runoff-tally.

These hooks perform election-specific validation that runs before commits.
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

REQUIRED_KEYS = ("candidates", "ballots", "tie_break_index", "hand_computed_results")


class _FixedDraw:
    def __init__(self, index):
        self.index = index

    def integers(self, high):
        return self.index % high


def check_golden_datasets():
    """Replay every golden dataset and compare with its hand-computed rounds."""
    print("🗳️  Validating golden datasets...")

    try:
        import json

        from tally.election import Election

        golden_dir = Path(__file__).parent.parent / "tests" / "golden" / "micro"

        for golden_file in sorted(golden_dir.glob("*.json")):
            print(f"   📊 Checking {golden_file.name}...")

            with open(golden_file) as f:
                dataset = json.load(f)

            for key in REQUIRED_KEYS:
                assert key in dataset, f"Missing {key} in {golden_file.name}"

            expected_rounds = dataset["hand_computed_results"]["rounds"]
            for expected in expected_rounds:
                assert sum(expected["counts"]) + expected["exhausted"] == len(
                    dataset["ballots"]
                ), f"Hand-computed round does not conserve ballots in {golden_file.name}"

            election = Election(
                dataset["candidates"], rng=_FixedDraw(dataset["tie_break_index"])
            )
            for ballot in dataset["ballots"]:
                election.add_vote(ballot)
            rounds = election.run_to_completion()

            assert len(rounds) == len(
                expected_rounds
            ), f"Round count mismatch in {golden_file.name}"
            winner = election.winner()
            assert winner is not None and winner.candidate_id == (
                dataset["hand_computed_results"]["winner"]
            ), f"Winner mismatch in {golden_file.name}"

        print("   ✅ All golden datasets valid")
        return True

    except Exception as e:
        print(f"   ❌ Golden dataset validation failed: {e}")
        return False


def check_counting_invariants():
    """Run seeded random elections and check conservation and termination."""
    print("🧮 Testing counting invariants...")

    try:
        import numpy as np

        from tally.election import Election

        for seed in range(5):
            generator = np.random.default_rng(seed)
            election = Election([f"C{i}" for i in range(5)], seed=seed)
            for _ in range(30):
                length = int(generator.integers(1, 6))
                election.add_vote([int(c) for c in generator.permutation(5)[:length]])

            election.start_counting()
            steps = 0
            while election.has_started():
                election.redistribute()
                steps += 1
                live = sum(
                    1
                    for ballot in election.get_votes()
                    if any(not c.is_eliminated() for c in ballot.preferences)
                )
                assert (
                    election.total_continuing_votes() == live
                ), f"Vote conservation violated (seed {seed})"
            assert steps <= 4, f"Count did not terminate in time (seed {seed})"

        print("   ✅ All counting invariants pass")
        return True

    except Exception as e:
        print(f"   ❌ Counting invariant test failed: {e}")
        return False


def check_core_imports():
    """Test that all core modules can be imported."""
    print("📦 Testing core imports...")

    try:
        from ballot_io.ballot_loader import BallotLoader  # noqa: F401
        from tally.election import Election  # noqa: F401
        from tally.verification import IRVCrossCheck  # noqa: F401

        print("   ✅ All core imports successful")
        return True

    except ImportError as e:
        print(f"   ❌ Import test failed: {e}")
        return False


def main():
    """Run all pre-commit election-specific hooks."""
    print("🚀 Running election-specific pre-commit hooks...")

    all_passed = True

    checks = [
        check_core_imports,
        check_counting_invariants,
        check_golden_datasets,
    ]

    for check in checks:
        if not check():
            all_passed = False

    if all_passed:
        print("✅ All election-specific pre-commit hooks passed!")
        return 0
    else:
        print("❌ Some pre-commit hooks failed!")
        return 1


if __name__ == "__main__":
    sys.exit(main())
