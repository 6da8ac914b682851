"""Feedback sinks — notified after moves for sound, speech, or display.

Sinks have no return value and cannot influence the game. The
orchestrator isolates every call, so an exception raised here is logged
and dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from xiangqi.game.state import MoveKind
from xiangqi.rules.board import Color, Coord, Piece, PieceType
from xiangqi.rules.notation import traditional_notation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoveEvent:
    piece_type: PieceType
    color: Color
    fr: Coord
    to: Coord
    kind: MoveKind

    @property
    def notation(self) -> str:
        piece = Piece(type=self.piece_type, color=self.color, id="")
        return traditional_notation(piece, self.fr, self.to)


class FeedbackSink:
    """Base class; override only the hooks you need."""

    def on_move(self, event: MoveEvent) -> None:
        pass

    def on_select(self, coord: Coord) -> None:
        pass

    def on_restart(self) -> None:
        pass


class LoggingFeedback(FeedbackSink):
    """Writes every move to the log."""

    def on_move(self, event: MoveEvent) -> None:
        logger.info(
            "%s %s %s -> %s [%s]",
            event.color.value,
            event.piece_type.value,
            event.fr,
            event.to,
            event.kind.value,
        )


class NotationFeedback(FeedbackSink):
    """Announces each move in traditional notation.

    *announce* receives the notation text (a TTS engine, a console
    printer); by default announcements are only collected.
    """

    def __init__(self, announce: Callable[[str], None] | None = None) -> None:
        self._announce = announce
        self.announcements: list[str] = []

    def on_move(self, event: MoveEvent) -> None:
        text = event.notation
        if event.kind is MoveKind.WIN:
            text += f" ({event.color.value.upper()} wins)"
        self.announcements.append(text)
        if self._announce is not None:
            self._announce(text)

    def on_restart(self) -> None:
        self.announcements.clear()
