"""Referee — tracks the external agent's violations and issues rulings.

One Referee per game session. An absent or failed response is never
retried: the turn is forfeited straight back to the human side. An
illegal or malformed proposal may be retried up to
``illegal_move_retries`` times within the same turn before the turn is
skipped.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum


class ViolationKind(Enum):
    ILLEGAL_MOVE = "illegal_move"
    MALFORMED_RESPONSE = "malformed_response"
    EMPTY_RESPONSE = "empty_response"
    AGENT_ERROR = "agent_error"


class Ruling(Enum):
    RETRY = "retry"
    FORFEIT_TURN = "forfeit_turn"


# Never retried, whatever the configuration says
_NO_RETRY = {ViolationKind.EMPTY_RESPONSE, ViolationKind.AGENT_ERROR}


@dataclass
class _ViolationRecord:
    kind: ViolationKind
    details: str


class Referee:
    """Tracks violations and issues rulings for a single session."""

    def __init__(self, illegal_move_retries: int = 0) -> None:
        self._illegal_move_retries = illegal_move_retries
        self._violations: dict[str, list[_ViolationRecord]] = defaultdict(list)
        self._turn_violations: dict[str, int] = defaultdict(int)
        self._turn_forfeits: dict[str, int] = defaultdict(int)

    def record_violation(
        self, agent_id: str, kind: ViolationKind, details: str = ""
    ) -> Ruling:
        self._violations[agent_id].append(
            _ViolationRecord(kind=kind, details=details)
        )
        self._turn_violations[agent_id] += 1

        if kind in _NO_RETRY:
            ruling = Ruling.FORFEIT_TURN
        elif self._turn_violations[agent_id] <= self._illegal_move_retries:
            ruling = Ruling.RETRY
        else:
            ruling = Ruling.FORFEIT_TURN

        if ruling is Ruling.FORFEIT_TURN:
            self._turn_forfeits[agent_id] += 1
        return ruling

    def new_turn(self) -> None:
        self._turn_violations.clear()

    def get_fidelity_report(self) -> dict:
        report = {}
        for agent_id, violations in self._violations.items():
            counts = {"total_violations": len(violations)}
            for kind in ViolationKind:
                counts[kind.value] = 0
            for v in violations:
                counts[v.kind.value] += 1
            counts["turn_forfeits"] = self._turn_forfeits.get(agent_id, 0)
            report[agent_id] = counts
        return report
