"""Tests for ApplyEngine — apply, diff, undo."""

from qa_matrix.engines.apply_engine import ApplyEngine
from qa_matrix.schemas.concern import Status
from qa_matrix.schemas.diff import ApplyOutcome, DiffField, UndoOutcome
from qa_matrix.schemas.report import DefectReportEntry, MatchGroup


def _group(s_no: int, repeat_count: int) -> MatchGroup:
    return MatchGroup(
        qa_s_no=s_no,
        entries=[DefectReportEntry(description="x", quantity=repeat_count)],
        repeat_count=repeat_count,
    )


class TestApply:
    """Test committing groups to the ledger."""

    def setup_method(self):
        self.engine = ApplyEngine()

    def test_adds_repeats_to_most_recent_week(self, sample_concerns):
        result = self.engine.apply(sample_concerns, [_group(1, 4)])

        assert result.outcome == ApplyOutcome.APPLIED
        assert result.applied is True
        updated = {c.s_no: c for c in result.ledger}
        assert updated[1].weekly_recurrence == [0, 0, 0, 0, 0, 6]
        assert updated[1].combined_rating == 3 + 6

    def test_week_diff_before_and_after(self, sample_concerns):
        """Concern #1 goes from 2 to 6; its statuses stay NG so no status rows."""
        result = self.engine.apply(sample_concerns, [_group(1, 4)])

        assert len(result.diffs) == 1
        d = result.diffs[0]
        assert d.s_no == 1
        assert d.concern == "Bolt missing door panel"
        assert d.field == DiffField.RECENT_WEEK
        assert (d.before, d.after) == (2, 6)

    def test_status_rows_only_for_flipped_statuses(self, sample_concerns):
        """Concern #2 is all OK; one repeat flips the workstation status only."""
        result = self.engine.apply(sample_concerns, [_group(2, 1)])

        fields = [d.field for d in result.diffs]
        assert fields == [DiffField.RECENT_WEEK, DiffField.WORKSTATION_STATUS]
        ws = result.diffs[1]
        assert (ws.before, ws.after) == (Status.OK.value, Status.NG.value)

        updated = {c.s_no: c for c in result.ledger}
        assert updated[2].mfg_status == Status.OK
        assert updated[2].plant_status == Status.OK

    def test_untouched_concerns_unchanged(self, sample_concerns):
        result = self.engine.apply(sample_concerns, [_group(1, 1)])
        assert [c.model_dump() for c in result.ledger[1:]] == [
            c.model_dump() for c in sample_concerns[1:]
        ]

    def test_group_for_missing_concern_ignored(self, sample_concerns):
        result = self.engine.apply(sample_concerns, [_group(99, 3)])
        assert result.outcome == ApplyOutcome.APPLIED
        assert result.diffs == []
        assert [c.model_dump() for c in result.ledger] == [c.model_dump() for c in sample_concerns]

    def test_input_ledger_not_mutated(self, sample_concerns):
        self.engine.apply(sample_concerns, [_group(1, 4)])
        assert sample_concerns[0].weekly_recurrence[5] == 2

    def test_second_apply_is_blocked(self, sample_concerns):
        first = self.engine.apply(sample_concerns, [_group(1, 4)])
        second = self.engine.apply(first.ledger, [_group(1, 4)])

        assert second.outcome == ApplyOutcome.BLOCKED
        assert second.ledger == []
        assert second.diffs == first.diffs
        assert self.engine.is_applied

    def test_state_flags(self, sample_concerns):
        assert not self.engine.is_applied
        assert not self.engine.can_undo
        self.engine.apply(sample_concerns, [_group(1, 1)])
        assert self.engine.is_applied
        assert self.engine.can_undo
        assert len(self.engine.diffs) == 1


class TestUndo:
    """Test the single-level undo."""

    def setup_method(self):
        self.engine = ApplyEngine()

    def test_round_trip_restores_ledger(self, sample_concerns):
        before = [c.model_dump() for c in sample_concerns]
        self.engine.apply(sample_concerns, [_group(1, 4), _group(2, 2), _group(3, 1)])

        result = self.engine.undo()

        assert result.outcome == UndoOutcome.UNDONE
        assert [c.model_dump() for c in result.ledger] == before

    def test_undo_clears_state(self, sample_concerns):
        self.engine.apply(sample_concerns, [_group(1, 4)])
        self.engine.undo()
        assert not self.engine.is_applied
        assert not self.engine.can_undo
        assert self.engine.diffs == []

    def test_nothing_to_undo(self):
        result = self.engine.undo()
        assert result.outcome == UndoOutcome.NOTHING_TO_UNDO
        assert result.ledger == []

    def test_second_undo_has_nothing(self, sample_concerns):
        self.engine.apply(sample_concerns, [_group(1, 4)])
        self.engine.undo()
        assert self.engine.undo().outcome == UndoOutcome.NOTHING_TO_UNDO

    def test_apply_allowed_again_after_undo(self, sample_concerns):
        self.engine.apply(sample_concerns, [_group(1, 4)])
        self.engine.undo()
        assert self.engine.apply(sample_concerns, [_group(1, 4)]).outcome == ApplyOutcome.APPLIED

    def test_discard_forgets_pending_apply(self, sample_concerns):
        self.engine.apply(sample_concerns, [_group(1, 4)])
        self.engine.discard()
        assert not self.engine.is_applied
        assert self.engine.undo().outcome == UndoOutcome.NOTHING_TO_UNDO
