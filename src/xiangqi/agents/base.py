"""ExternalAgent — the move-suggestion service behind the computer opponent."""

from abc import ABC, abstractmethod

from xiangqi.rules.board import Color, Move, Position


class ExternalAgent(ABC):
    """Proposes moves. Proposals are untrusted and re-validated by the caller."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def propose_move(self, position: Position, color: Color) -> Move | None:
        """Return a move for *color*, or None if no move could be produced."""
