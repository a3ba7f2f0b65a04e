import pytest

from ballot_io.ballot_loader import (
    BLANK_PREFERENCE,
    BallotLoader,
    compact_preferences,
    format_errors,
    load_ballots,
)
from tally.election import Election
from tally.errors import (
    BallotFileEncodingError,
    BallotFileError,
    DuplicateCandidateError,
    GapAfterBlankPreferenceError,
    MalformedPreferenceError,
    NoPreferencesError,
    TooManyPreferencesError,
    UnknownCandidateError,
)


@pytest.mark.unit
class TestCompactPreferences:
    """Test conversion of raw preference fields."""

    def test_plain_fields(self):
        assert compact_preferences(["2", "0", "1"]) == [2, 0, 1]

    def test_whitespace_is_ignored(self):
        assert compact_preferences([" 2", "0 "]) == [2, 0]

    def test_trailing_blanks_dropped(self):
        assert compact_preferences(["3", "", ""]) == [3]

    def test_widget_blank_marker(self):
        assert compact_preferences([1, 2, BLANK_PREFERENCE, None]) == [1, 2]

    def test_all_blank(self):
        assert compact_preferences(["", ""]) == []

    def test_gap_after_blank(self):
        with pytest.raises(GapAfterBlankPreferenceError) as exc_info:
            compact_preferences(["1", "", "2"])
        assert exc_info.value.position == 2

    def test_gap_after_widget_blank(self):
        with pytest.raises(GapAfterBlankPreferenceError):
            compact_preferences([BLANK_PREFERENCE, 0])

    def test_malformed_field(self):
        with pytest.raises(MalformedPreferenceError) as exc_info:
            compact_preferences(["1", "x"])
        assert exc_info.value.value == "x"

    @pytest.mark.parametrize("field", ["0_0", "+1", "-1", "\u0661", "1.0"])
    def test_only_plain_decimal_ids(self, field):
        with pytest.raises(MalformedPreferenceError) as exc_info:
            compact_preferences([field])
        assert exc_info.value.value == field


@pytest.mark.unit
class TestBallotLoader:
    """Test loading ballot files into an election."""

    def setup_method(self):
        """Set up a default four-candidate election."""
        self.election = Election(seed=0)
        self.loader = BallotLoader(self.election)

    def ids(self):
        return [ballot.preference_ids() for ballot in self.election.get_votes()]

    def test_load_first_preferences(self, fixtures_dir):
        stats = self.loader.load(fixtures_dir / "test1.csv")

        assert stats["ballots_added"] == 7
        assert stats["rejected_lines"] == 0
        assert self.ids() == [[0], [1], [2], [3], [0], [0], [0]]

    def test_load_full_rankings(self, fixtures_dir):
        self.loader.load(fixtures_dir / "test2.csv")
        assert len(self.ids()) == 8
        assert self.ids()[2] == [1, 2, 3, 0]

    def test_strict_rejects_whole_file(self, fixtures_dir):
        with pytest.raises(BallotFileError) as exc_info:
            self.loader.load(fixtures_dir / "gap.csv")

        assert self.election.get_votes() == []
        assert len(exc_info.value.errors) == 1
        line_number, error = exc_info.value.errors[0]
        assert line_number == 2
        assert isinstance(error, GapAfterBlankPreferenceError)

    def test_lenient_keeps_valid_lines(self, fixtures_dir):
        stats = self.loader.load(fixtures_dir / "gap.csv", strict=False)

        assert self.ids() == [[0, 1], [2, 3]]
        assert stats["ballots_added"] == 2
        assert stats["rejected_lines"] == 1

    def test_every_error_kind_reported(self, fixtures_dir):
        stats = self.loader.load(fixtures_dir / "mixed.csv", strict=False)

        assert stats["total_lines"] == 7
        assert stats["blank_lines"] == 1
        assert stats["ballots_added"] == 2
        assert self.ids() == [[0, 1, 2], [3, 1]]

        kinds = {line: type(error) for line, error in stats["errors"]}
        assert kinds == {
            3: MalformedPreferenceError,
            4: DuplicateCandidateError,
            6: UnknownCandidateError,
            7: TooManyPreferencesError,
        }

    def test_strict_error_lists_all_lines(self, fixtures_dir):
        with pytest.raises(BallotFileError) as exc_info:
            self.loader.load(fixtures_dir / "mixed.csv")

        assert [line for line, _ in exc_info.value.errors] == [3, 4, 6, 7]
        assert "line 3" in str(exc_info.value)
        assert self.election.get_votes() == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            self.loader.load(tmp_path / "missing.csv")
        assert self.election.get_votes() == []

    def test_leading_blank_field_is_empty_ballot(self, tmp_path):
        path = tmp_path / "ballots.csv"
        path.write_text(",\n0\n")

        stats = self.loader.load(path, strict=False)
        assert isinstance(stats["errors"][0][1], NoPreferencesError)
        assert self.ids() == [[0]]

    def test_windows_line_endings(self, tmp_path):
        path = tmp_path / "ballots.csv"
        path.write_bytes(b"0,1\r\n2\r\n")

        self.loader.load(path)
        assert self.ids() == [[0, 1], [2]]

    def test_byte_order_mark_ignored(self, tmp_path):
        path = tmp_path / "ballots.csv"
        path.write_text("0,1\n1,0\n", encoding="utf-8-sig")

        stats = self.loader.load(path)
        assert stats["rejected_lines"] == 0
        assert self.ids() == [[0, 1], [1, 0]]

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "ballots.csv"
        path.write_bytes(b"0,1\n\xe9\n")

        with pytest.raises(BallotFileEncodingError) as exc_info:
            self.loader.load(path, strict=False)
        assert exc_info.value.path == path
        assert "ballots.csv" in str(exc_info.value)
        assert self.election.get_votes() == []

    def test_parse_lines_does_not_mutate(self):
        valid, errors, blank = self.loader.parse_lines(["0,1", "", "5"])

        assert valid == [(1, [0, 1])]
        assert [line for line, _ in errors] == [3]
        assert blank == 1
        assert self.election.get_votes() == []

    def test_listeners_notified_per_ballot(self, fixtures_dir):
        calls = []
        self.election.subscribe(calls.append)
        self.loader.load(fixtures_dir / "test3.csv")
        assert len(calls) == 10


@pytest.mark.unit
def test_load_ballots_wrapper(fixtures_dir):
    election = Election()
    stats = load_ballots(election, fixtures_dir / "test3.csv")
    assert stats["ballots_added"] == 10
    assert len(election.get_votes()) == 10


@pytest.mark.unit
def test_format_errors_truncates():
    errors = [(i, NoPreferencesError()) for i in range(1, 6)]
    text = format_errors(errors, limit=2)

    assert text.splitlines() == [
        "  line 1: No preferences selected",
        "  line 2: No preferences selected",
        "  ... and 3 more",
    ]
