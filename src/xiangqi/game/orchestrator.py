"""TurnOrchestrator — sequences human input and external agent turns.

Phases:
    AWAITING_INPUT  — board clicks are accepted for the side to move
    AWAITING_AGENT  — an agent request is outstanding; input is ignored
    TERMINAL        — a general was captured; everything is ignored

The agent turn is split in two so the request can be asynchronous:
``begin_agent_turn`` hands out an ``AgentTicket`` and
``resolve_agent_turn`` consumes the answer. A restart bumps the session
number, and tickets also record the ply they were issued at, so answers
to an earlier session or an earlier position are discarded.
``play_agent_turn`` runs both halves synchronously.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum

from xiangqi.agents.base import ExternalAgent
from xiangqi.core.referee import Referee, Ruling, ViolationKind
from xiangqi.game.feedback import FeedbackSink, MoveEvent
from xiangqi.game.state import (
    GameState,
    MoveResult,
    execute_move,
    forfeit_turn,
    new_game,
)
from xiangqi.rules.board import Color, Coord, Move, in_bounds
from xiangqi.rules.legality import is_legal, legal_destinations

logger = logging.getLogger(__name__)


class Phase(Enum):
    AWAITING_INPUT = "awaiting_input"
    AWAITING_AGENT = "awaiting_agent"
    TERMINAL = "terminal"


class GameMode(Enum):
    LOCAL_PVP = "local_pvp"
    VS_AGENT = "vs_agent"


@dataclass(frozen=True)
class AgentTicket:
    """An outstanding agent request, valid only for the session and ply
    that issued it."""

    session: int
    ply: int
    color: Color


def _side(color: Color) -> str:
    return color.value.capitalize()


class TurnOrchestrator:
    """Owns the game state and gates every change to it."""

    def __init__(
        self,
        mode: GameMode = GameMode.LOCAL_PVP,
        agent: ExternalAgent | None = None,
        agent_color: Color = Color.BLACK,
        feedback: list[FeedbackSink] | None = None,
        illegal_move_retries: int = 0,
        agent_delay_s: float = 0.0,
    ) -> None:
        if mode is GameMode.VS_AGENT and agent is None:
            raise ValueError("vs_agent mode requires an agent")
        if agent_delay_s < 0:
            raise ValueError("agent_delay_s must be >= 0")
        self._mode = mode
        self._agent = agent
        self._agent_color = agent_color
        self._feedback = list(feedback or [])
        self._illegal_move_retries = illegal_move_retries
        self._agent_delay_s = agent_delay_s

        self._session = 0
        self._state: GameState = new_game()
        self._referee = Referee(illegal_move_retries)
        self._phase = Phase.AWAITING_INPUT
        self.message = ""
        self.restart()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def mode(self) -> GameMode:
        return self._mode

    @property
    def session(self) -> int:
        return self._session

    @property
    def agent_color(self) -> Color | None:
        return self._agent_color if self._mode is GameMode.VS_AGENT else None

    def possible_moves(self) -> list[Coord]:
        """Legal destinations of the selected piece, for highlighting."""
        if self._state.selected is None or self._phase is not Phase.AWAITING_INPUT:
            return []
        return legal_destinations(
            self._state.position, self._state.selected, self._state.turn
        )

    def fidelity_report(self) -> dict:
        return self._referee.get_fidelity_report()

    # ------------------------------------------------------------------
    # Mutating entry points
    # ------------------------------------------------------------------

    def restart(self, mode: GameMode | None = None) -> None:
        """Start a fresh game; outstanding agent tickets become stale."""
        if mode is not None:
            if mode is GameMode.VS_AGENT and self._agent is None:
                raise ValueError("vs_agent mode requires an agent")
            self._mode = mode
        self._session += 1
        self._state = new_game()
        self._referee = Referee(self._illegal_move_retries)
        self._phase = Phase.AWAITING_INPUT
        self.message = f"Game started. {_side(self._state.turn)} to move."
        self._notify("on_restart")
        if self._is_agent_turn():
            self._phase = Phase.AWAITING_AGENT
        logger.info("Session %d started (%s)", self._session, self._mode.value)

    def select_or_move(self, x: int, y: int) -> MoveResult | None:
        """Handle a click on (x, y). Returns the move made, if any."""
        if self._phase is not Phase.AWAITING_INPUT or self._is_agent_turn():
            return None
        clicked = Coord(x, y)
        if not in_bounds(clicked):
            return None

        state = self._state
        piece = state.position.get(clicked)
        if piece is not None and piece.color is state.turn:
            state.selected = clicked
            self._notify("on_select", clicked)
            return None
        if state.selected is None:
            return None

        if not is_legal(state.position, state.selected, clicked, state.turn):
            state.selected = None
            return None

        result = self._apply(state.selected, clicked)
        if self._phase is not Phase.TERMINAL and self._is_agent_turn():
            self._phase = Phase.AWAITING_AGENT
        return result

    # ------------------------------------------------------------------
    # Agent turn
    # ------------------------------------------------------------------

    def begin_agent_turn(self) -> AgentTicket | None:
        """Issue a ticket for the pending agent request, if one is due."""
        if self._phase is not Phase.AWAITING_AGENT:
            return None
        self.message = "Agent is thinking..."
        return AgentTicket(
            session=self._session,
            ply=len(self._state.history),
            color=self._state.turn,
        )

    def resolve_agent_turn(
        self, ticket: AgentTicket, proposal: Move | None
    ) -> MoveResult | None:
        """Apply the agent's answer to *ticket* after re-validating it."""
        if (
            ticket.session != self._session
            or ticket.ply != len(self._state.history)
            or self._phase is not Phase.AWAITING_AGENT
        ):
            logger.warning(
                "Discarding stale agent response (session %d, ply %d)",
                ticket.session, ticket.ply,
            )
            return None

        agent_id = self._agent.name if self._agent else "agent"
        state = self._state

        if proposal is None:
            self._referee.record_violation(
                agent_id, ViolationKind.EMPTY_RESPONSE, "no move returned"
            )
            self._skip_agent_turn("Agent failed to produce a move.")
            return None

        if not is_legal(state.position, proposal.fr, proposal.to, ticket.color):
            ruling = self._referee.record_violation(
                agent_id,
                ViolationKind.ILLEGAL_MOVE,
                f"{proposal.fr} -> {proposal.to}",
            )
            logger.warning(
                "Agent proposed illegal move %s -> %s (%s)",
                proposal.fr, proposal.to, ruling.value,
            )
            if ruling is Ruling.RETRY:
                self.message = "Agent attempted an invalid move. Asking again."
                return None
            self._skip_agent_turn("Agent attempted an invalid move.")
            return None

        self._referee.new_turn()
        result = self._apply(proposal.fr, proposal.to)
        if self._phase is not Phase.TERMINAL:
            self._phase = Phase.AWAITING_INPUT
        return result

    def play_agent_turn(self) -> MoveResult | None:
        """Run the agent's turn to completion, including any retries."""
        while self._phase is Phase.AWAITING_AGENT:
            ticket = self.begin_agent_turn()
            if self._agent_delay_s:
                time.sleep(self._agent_delay_s)
            try:
                proposal = self._agent.propose_move(
                    dict(self._state.position), ticket.color
                )
            except Exception:
                logger.exception("Agent %s raised", self._agent.name)
                self._referee.record_violation(
                    self._agent.name, ViolationKind.AGENT_ERROR, "exception"
                )
                self._skip_agent_turn("Agent is unavailable.")
                return None
            result = self.resolve_agent_turn(ticket, proposal)
            if result is not None:
                return result
        return None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _is_agent_turn(self) -> bool:
        return (
            self._mode is GameMode.VS_AGENT
            and self._state.winner is None
            and self._state.turn is self._agent_color
        )

    def _skip_agent_turn(self, reason: str) -> None:
        self._referee.new_turn()
        forfeit_turn(self._state)
        self._phase = Phase.AWAITING_INPUT
        self.message = f"{reason} Skipping turn; {_side(self._state.turn)} to move."

    def _apply(self, fr: Coord, to: Coord) -> MoveResult:
        result = execute_move(self._state, fr, to)
        if self._state.winner is not None:
            self._phase = Phase.TERMINAL
            self.message = f"{self._state.winner.value.upper()} wins!"
        else:
            self.message = f"{_side(self._state.turn)}'s turn"
        self._notify(
            "on_move",
            MoveEvent(
                piece_type=result.piece.type,
                color=result.piece.color,
                fr=result.move.fr,
                to=result.move.to,
                kind=result.kind,
            ),
        )
        return result

    def _notify(self, hook: str, *args) -> None:
        for sink in self._feedback:
            try:
                getattr(sink, hook)(*args)
            except Exception:
                logger.exception("Feedback sink %s failed in %s", type(sink).__name__, hook)
