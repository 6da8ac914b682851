"""CLI entry point: python -m xiangqi [config.yaml]

Plays in the terminal. Commands:
    x y          select a piece or move the selected piece to (x, y)
    x1 y1 x2 y2  select (x1, y1) then move it to (x2, y2)
    r            restart
    h            show move history
    q            quit
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.text import Text

from xiangqi.agents.factory import build_agent
from xiangqi.config import GameConfig, load_config
from xiangqi.game.feedback import FeedbackSink, LoggingFeedback, NotationFeedback
from xiangqi.game.orchestrator import GameMode, Phase, TurnOrchestrator
from xiangqi.rules.board import BOARD_HEIGHT, BOARD_WIDTH, Color, Coord
from xiangqi.rules.notation import PIECE_GLYPHS

PIECE_STYLES = {Color.RED: "bold red", Color.BLACK: "bold white"}


def board_text(orch: TurnOrchestrator) -> Text:
    """Render the board with selection, last move, and legal targets marked."""
    state = orch.state
    targets = set(orch.possible_moves())
    last = {state.last_move.fr, state.last_move.to} if state.last_move else set()

    text = Text()
    text.append("    " + "   ".join(str(x) for x in range(BOARD_WIDTH)) + "\n", style="dim")
    for y in range(BOARD_HEIGHT):
        text.append(f" {y}  ", style="dim")
        for x in range(BOARD_WIDTH):
            coord = Coord(x, y)
            piece = state.position.get(coord)
            if piece is not None:
                style = PIECE_STYLES[piece.color]
                if coord == state.selected:
                    style += " reverse"
                elif coord in targets:
                    style += " underline"
                elif coord in last:
                    style += " on grey23"
                glyph = PIECE_GLYPHS[(piece.color, piece.type)]
                text.append(glyph, style=style)
            elif coord in targets:
                text.append("()", style="bold cyan")
            elif coord in last:
                text.append("[]", style="yellow")
            else:
                text.append("·", style="dim")
                text.append(" ")
            if x < BOARD_WIDTH - 1:
                text.append("  ")
        text.append("\n")
        if y == 4:
            text.append("    " + "楚 河" + " " * 20 + "汉 界" + "\n", style="dim cyan")
    return text


def status_text(orch: TurnOrchestrator) -> Text:
    state = orch.state
    text = Text()
    style = PIECE_STYLES[state.turn] if state.winner is None else "bold yellow"
    text.append(orch.message or f"{state.turn.value.capitalize()} to move", style=style)
    if orch.phase is Phase.AWAITING_AGENT:
        text.append("  (agent)", style="dim")
    return text


def parse_command(line: str) -> tuple[str, list[int]]:
    """Split an input line into (command, integer args)."""
    parts = line.strip().lower().split()
    if not parts:
        return "", []
    if parts[0] in ("r", "h", "q"):
        return parts[0], []
    try:
        nums = [int(p.strip(",")) for p in parts]
    except ValueError:
        return "?", []
    if len(nums) in (2, 4):
        return "click", nums
    return "?", []


def build_orchestrator(config: GameConfig, console: Console | None = None) -> TurnOrchestrator:
    feedback: list[FeedbackSink] = []
    if config.feedback.log_moves:
        feedback.append(LoggingFeedback())
    if config.feedback.notation and console is not None:
        feedback.append(NotationFeedback(
            announce=lambda s: console.print(Text(s, style="bold magenta"))
        ))

    mode = GameMode(config.mode)
    agent = build_agent(config.agent) if mode is GameMode.VS_AGENT else None
    return TurnOrchestrator(
        mode=mode,
        agent=agent,
        agent_color=Color(config.agent_color),
        feedback=feedback,
        illegal_move_retries=config.illegal_move_retries,
        agent_delay_s=config.agent_delay_ms / 1000,
    )


def _play(orch: TurnOrchestrator, console: Console) -> None:
    while True:
        if orch.phase is Phase.AWAITING_AGENT:
            with console.status("Agent is thinking..."):
                orch.play_agent_turn()
            continue

        console.print(Panel(board_text(orch), title="[bold]Xiangqi[/bold]", border_style="green"))
        console.print(status_text(orch))
        if orch.phase is Phase.TERMINAL:
            console.print("[dim]r = restart, h = history, q = quit[/dim]")

        try:
            line = console.input("[bold]> [/bold]")
        except (EOFError, KeyboardInterrupt):
            return

        cmd, nums = parse_command(line)
        if cmd == "q":
            return
        if cmd == "r":
            orch.restart()
        elif cmd == "h":
            for i, record in enumerate(orch.state.history, 1):
                console.print(f"  {i:>3}. {record}")
        elif cmd == "click":
            for i in range(0, len(nums), 2):
                orch.select_or_move(nums[i], nums[i + 1])
        elif cmd == "?":
            console.print("[red]Commands: 'x y', 'x1 y1 x2 y2', r, h, q[/red]")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="xiangqi",
        description="Play Xiangqi (Chinese Chess) in the terminal",
    )
    parser.add_argument(
        "config",
        type=Path,
        nargs="?",
        default=None,
        help="Path to game YAML config file",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in GameMode],
        default=None,
        help="Override the configured game mode",
    )
    parser.add_argument(
        "--agent-color",
        choices=[c.value for c in Color],
        default=None,
        help="Side played by the agent in vs_agent mode",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    console = Console()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    load_dotenv()

    if args.config is not None and not args.config.exists():
        print(f"Error: config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)

    try:
        config = load_config(args.config) if args.config else GameConfig()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if args.mode:
        config.mode = args.mode
    if args.agent_color:
        config.agent_color = args.agent_color

    try:
        orch = build_orchestrator(config, console)
    except (ValueError, ImportError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    console.print(f"Mode: {config.mode}")
    _play(orch, console)


if __name__ == "__main__":
    main()
