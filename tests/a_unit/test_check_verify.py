"""Unit tests for fibcycle.check.verify module."""

from __future__ import annotations

from fibcycle.check.verify import (
    CheckReport,
    Problem,
    digest_lines,
    expected_cycle,
    hash_output,
    parse_lines,
    split_cycles,
    verify_output,
)

CYCLE = ["0", "1", "1", "2", "3", "5", "8", "13", "21", "34", "55", "89", "144", "233", "377"]


class TestParseLines:
    """Tests for parse_lines function."""

    def test_integers(self) -> None:
        """Test parsing with and without trailing newlines."""
        values, problems = parse_lines(["0\n", "1\n", "377"])
        assert values == [0, 1, 377]
        assert problems == []

    def test_non_integer(self) -> None:
        """Test that non-decimal lines are reported by line number."""
        values, problems = parse_lines(["0", "1.5", "abc", "", " 3"])
        assert values == [0]
        assert [p.line for p in problems] == [2, 3, 4, 5]
        assert all("not an integer" in p.message for p in problems)

    def test_negative(self) -> None:
        """Test that negative values are reported."""
        values, problems = parse_lines(["0", "-8"])
        assert values == [0]
        assert problems == [Problem(2, "negative value: -8")]


class TestSplitCycles:
    """Tests for split_cycles function."""

    def test_split_on_zero(self) -> None:
        """Test that each 0 starts a new cycle."""
        assert split_cycles([0, 1, 1, 0, 1]) == [[0, 1, 1], [0, 1]]

    def test_leading_values_before_zero(self) -> None:
        """Test values seen before the first 0."""
        assert split_cycles([5, 8, 0, 1]) == [[5, 8], [0, 1]]

    def test_empty(self) -> None:
        """Test splitting no values."""
        assert split_cycles([]) == []


class TestVerifyOutput:
    """Tests for verify_output function."""

    def test_two_cycles_and_a_partial(self) -> None:
        """Test that a capture ending mid-cycle passes."""
        lines = CYCLE * 2 + CYCLE[:2]
        report = verify_output(lines)

        assert report.passed
        assert report.lines_checked == 32
        assert report.cycles_complete == 2

    def test_sixteen_lines(self) -> None:
        """Test one full cycle followed by the restart."""
        report = verify_output(CYCLE + ["0"])
        assert report.passed
        assert report.cycles_complete == 1

    def test_missing_threshold_value(self) -> None:
        """An emitter that checks before emitting stops after 233."""
        short = CYCLE[:14]
        report = verify_output(short + short + ["0"])

        assert not report.passed
        assert report.problems[0].line == 15
        assert "restarted after 233" in report.problems[0].message

    def test_no_restart(self) -> None:
        """Test an emitter that keeps going past 377."""
        report = verify_output(CYCLE + ["610"])

        assert not report.passed
        assert report.problems == [Problem(16, "no restart after 377, got 610")]

    def test_wrong_value(self) -> None:
        """Test that a wrong value is reported at its line."""
        lines = list(CYCLE)
        lines[5] = "6"
        report = verify_output(lines)

        assert report.problems == [Problem(6, "expected 5, got 6")]

    def test_does_not_start_with_zero(self) -> None:
        """Test output that does not start with 0."""
        report = verify_output(CYCLE[1:] + ["0"])

        assert not report.passed
        assert report.problems[0] == Problem(1, "expected 0, got 1")

    def test_parse_errors_reported(self) -> None:
        """Test that parse errors alone are reported."""
        report = verify_output(["0", "1", "x"])

        assert not report.passed
        assert report.cycles_complete == 0
        assert report.problems[0].line == 3

    def test_custom_limit(self) -> None:
        """Test verifying against a non-default limit."""
        report = verify_output(["0", "1", "1", "2", "0", "1"], limit=2)
        assert report.passed
        assert report.cycles_complete == 1

    def test_digest_is_stable(self) -> None:
        """Test that the digest ignores captured line endings."""
        first = verify_output(CYCLE + ["0"])
        second = verify_output([line + "\n" for line in CYCLE] + ["0\n"])

        assert first.digest == second.digest
        assert len(first.digest) == 16


class TestHelpers:
    """Tests for small helpers."""

    def test_expected_cycle(self) -> None:
        """Test expected_cycle at the default and a small limit."""
        assert expected_cycle() == tuple(int(v) for v in CYCLE)
        assert expected_cycle(1) == (0, 1)

    def test_hash_output(self) -> None:
        """Test that hash_output is deterministic and content-sensitive."""
        assert hash_output("0\n") == hash_output("0\n")
        assert hash_output("0\n") != hash_output("1\n")

    def test_digest_lines(self) -> None:
        """Test that digest_lines hashes newline-joined lines."""
        assert digest_lines(["0", "1"]) == hash_output("0\n1\n")

    def test_problem_str(self) -> None:
        """Test Problem formatting with and without a line number."""
        assert str(Problem(3, "bad")) == "line 3: bad"
        assert str(Problem(0, "timed out")) == "timed out"

    def test_report_passed(self) -> None:
        """Test that a report passes only without problems."""
        assert CheckReport(lines_checked=0, cycles_complete=0).passed
        assert not CheckReport(
            lines_checked=1, cycles_complete=0, problems=[Problem(1, "x")]
        ).passed
