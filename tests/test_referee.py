"""Tests for Referee — violation tracking and turn rulings."""

from xiangqi.core.referee import Referee, Ruling, ViolationKind


class TestReferee:
    def test_default_forfeits_illegal_move(self):
        ref = Referee()
        ruling = ref.record_violation("agent", ViolationKind.ILLEGAL_MOVE, "4,0 -> 4,12")
        assert ruling == Ruling.FORFEIT_TURN

    def test_retry_within_budget(self):
        ref = Referee(illegal_move_retries=2)
        assert ref.record_violation("agent", ViolationKind.ILLEGAL_MOVE) == Ruling.RETRY
        assert ref.record_violation("agent", ViolationKind.MALFORMED_RESPONSE) == Ruling.RETRY
        assert ref.record_violation("agent", ViolationKind.ILLEGAL_MOVE) == Ruling.FORFEIT_TURN

    def test_empty_response_never_retried(self):
        ref = Referee(illegal_move_retries=5)
        ruling = ref.record_violation("agent", ViolationKind.EMPTY_RESPONSE)
        assert ruling == Ruling.FORFEIT_TURN

    def test_agent_error_never_retried(self):
        ref = Referee(illegal_move_retries=5)
        ruling = ref.record_violation("agent", ViolationKind.AGENT_ERROR)
        assert ruling == Ruling.FORFEIT_TURN

    def test_new_turn_resets_budget(self):
        ref = Referee(illegal_move_retries=1)
        ref.record_violation("agent", ViolationKind.ILLEGAL_MOVE)
        ref.new_turn()
        assert ref.record_violation("agent", ViolationKind.ILLEGAL_MOVE) == Ruling.RETRY

    def test_budget_is_per_agent(self):
        ref = Referee(illegal_move_retries=1)
        ref.record_violation("a", ViolationKind.ILLEGAL_MOVE)
        assert ref.record_violation("b", ViolationKind.ILLEGAL_MOVE) == Ruling.RETRY


class TestFidelityReport:
    def test_empty(self):
        assert Referee().get_fidelity_report() == {}

    def test_counts(self):
        ref = Referee(illegal_move_retries=1)
        ref.record_violation("agent", ViolationKind.ILLEGAL_MOVE)
        ref.record_violation("agent", ViolationKind.ILLEGAL_MOVE)
        ref.new_turn()
        ref.record_violation("agent", ViolationKind.EMPTY_RESPONSE)

        report = ref.get_fidelity_report()["agent"]
        assert report == {
            "total_violations": 3,
            "illegal_move": 2,
            "malformed_response": 0,
            "empty_response": 1,
            "agent_error": 0,
            "turn_forfeits": 2,
        }
