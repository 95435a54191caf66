"""Tests for RepeatService — the end-to-end repeat-issue workflow."""

import pytest

from qa_matrix.engines.apply_engine import ApplyEngine
from qa_matrix.engines.fuzzy_matcher import FuzzyMatcher
from qa_matrix.engines.reconciliation import ReconciliationStore
from qa_matrix.schemas.concern import Status
from qa_matrix.schemas.diff import ApplyOutcome, DiffField, UndoOutcome
from qa_matrix.schemas.report import DefectReportEntry
from qa_matrix.services.repeat_service import RepeatService, concern_text_for


@pytest.fixture()
def loaded(repeat_service, sample_entries) -> RepeatService:
    repeat_service.load_report(sample_entries, "week-18.xlsx")
    return repeat_service


class TestLoadAndMatch:
    def test_load_report_runs_matching(self, loaded):
        assert loaded.file_name == "week-18.xlsx"
        assert [g.qa_s_no for g in loaded.matched_groups()] == [1, 2]
        assert [u.id for u in loaded.unmatched_entries()] == ["unmatched-2"]

    def test_rematch_discards_pending_apply(self, loaded):
        loaded.apply()
        assert loaded.is_applied

        loaded.run_matching()

        assert not loaded.is_applied
        assert loaded.diffs() == []
        # the applied ledger stays final
        assert loaded.ledger.get(1).weekly_recurrence[5] == 7
        assert loaded.undo().outcome == UndoOutcome.NOTHING_TO_UNDO

    def test_clear(self, loaded):
        loaded.clear()
        assert loaded.matched_groups() == []
        assert loaded.unmatched_entries() == []
        assert loaded.file_name == ""

    def test_threshold_from_service(self, ledger, sample_entries):
        strict = RepeatService(
            ledger=ledger,
            store=ReconciliationStore(FuzzyMatcher()),
            engine=ApplyEngine(),
            threshold=1.01,
        )
        strict.load_report(sample_entries)
        assert strict.matched_groups() == []


class TestCorrections:
    def test_reassign_uses_ledger_description(self, loaded):
        entry = loaded.matched_groups()[1].entries[0]
        assert loaded.reassign(entry, 2, 3) is True
        assert loaded.store.group(3).qa_concern == "Seat belt anchor torque"

    def test_reassign_to_unknown_concern_is_noop(self, loaded):
        entry = loaded.matched_groups()[0].entries[0]
        assert loaded.reassign(entry, 1, 99) is False
        assert loaded.matched_groups()[0].repeat_count == 5

    def test_manual_pair(self, loaded):
        assert loaded.manual_pair("unmatched-2", 3) is True
        assert loaded.store.group(3).qa_concern == "Seat belt anchor torque"
        assert loaded.active_unmatched() == []

    def test_manual_pair_unknown_concern_is_noop(self, loaded):
        assert loaded.manual_pair("unmatched-2", 99) is False
        assert len(loaded.active_unmatched()) == 1

    def test_unpair(self, loaded):
        item = loaded.unpair(1, 0)
        assert item.id == "unmatched-manual-1000"
        assert len(loaded.unmatched_entries()) == 2


class TestCreateConcernFromUnmatched:
    def test_creates_concern_from_entry(self, loaded):
        concern = loaded.create_concern_from_unmatched("unmatched-2")

        assert concern.s_no == 4
        assert concern.station == ""
        assert concern.area == "Trim"  # no POF code on the row
        assert concern.description == "Paint scratch - hood"
        assert concern.defect_rating == 5  # gravity A
        assert concern.weekly_recurrence == [0, 0, 0, 0, 0, 1]
        assert concern.source == "SCA"
        assert concern.resp == "Paint shop"
        assert concern.workstation_status == Status.NG
        assert 4 in loaded.ledger

    def test_entry_suppressed_but_kept(self, loaded):
        loaded.create_concern_from_unmatched("unmatched-2")
        assert loaded.active_unmatched() == []
        assert [u.id for u in loaded.unmatched_entries()] == ["unmatched-2"]

    def test_does_not_rematch(self, loaded):
        before = [g.model_dump() for g in loaded.matched_groups()]
        loaded.create_concern_from_unmatched("unmatched-2")
        assert [g.model_dump() for g in loaded.matched_groups()] == before

    def test_overrides(self, loaded):
        concern = loaded.create_concern_from_unmatched(
            "unmatched-2", area="Final", description="Hood paint scratch", defect_rating=3,
            mfg_action="Protective cover", target="W22",
        )
        assert concern.area == "Final"
        assert concern.description == "Hood paint scratch"
        assert concern.defect_rating == 3
        assert concern.mfg_action == "Protective cover"
        assert concern.target == "W22"

    def test_pof_code_becomes_area(self, loaded):
        item = loaded.unpair(1, 0)
        concern = loaded.create_concern_from_unmatched(item.id)
        assert concern.area == "Chassis"
        assert concern.station == "C80"
        assert concern.defect_rating == 3  # gravity B
        assert concern.weekly_recurrence[5] == 2

    def test_discards_pending_apply(self, loaded):
        loaded.apply()
        loaded.create_concern_from_unmatched("unmatched-2")
        assert not loaded.is_applied
        assert loaded.undo().outcome == UndoOutcome.NOTHING_TO_UNDO

    def test_unknown_id(self, loaded):
        assert loaded.create_concern_from_unmatched("unmatched-77") is None
        assert len(loaded.ledger) == 3

    def test_concern_text_trims_separator(self):
        assert concern_text_for(DefectReportEntry(description="Paint scratch")) == "Paint scratch"
        assert concern_text_for(DefectReportEntry(description="A", description_detail="b")) == "A - b"


class TestApplyUndo:
    def test_apply_updates_ledger(self, loaded):
        result = loaded.apply()

        assert result.outcome == ApplyOutcome.APPLIED
        assert loaded.ledger.get(1).weekly_recurrence[5] == 7
        assert loaded.ledger.get(2).weekly_recurrence[5] == 1
        assert loaded.ledger.get(2).workstation_status == Status.NG
        assert [(d.s_no, d.field) for d in loaded.diffs()] == [
            (1, DiffField.RECENT_WEEK),
            (2, DiffField.RECENT_WEEK),
            (2, DiffField.WORKSTATION_STATUS),
        ]

    def test_double_apply_blocked_and_ledger_untouched(self, loaded):
        loaded.apply()
        again = loaded.apply()
        assert again.outcome == ApplyOutcome.BLOCKED
        assert loaded.ledger.get(1).weekly_recurrence[5] == 7

    def test_undo_restores_ledger_and_storage(self, loaded, ledger_repo):
        before = [c.model_dump() for c in loaded.ledger.concerns()]
        loaded.apply()

        result = loaded.undo()

        assert result.outcome == UndoOutcome.UNDONE
        assert [c.model_dump() for c in loaded.ledger.concerns()] == before
        assert [c.model_dump() for c in ledger_repo.load()] == before

    def test_undo_without_apply(self, loaded):
        assert loaded.undo().outcome == UndoOutcome.NOTHING_TO_UNDO

    def test_corrections_after_apply_keep_apply_state(self, loaded):
        loaded.apply()
        loaded.unpair(1, 0)
        assert loaded.is_applied
        assert loaded.apply().outcome == ApplyOutcome.BLOCKED
