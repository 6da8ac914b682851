"""MoveParser — extract and validate a move proposal from raw model output.

Strips control and zero-width characters, finds the last valid JSON
object in the text, validates it against the move schema, and flags
prompt-injection patterns (flagged only, never blocked).

Uses last-wins semantics: a model that self-corrects mid-output
(a second JSON after "wait, that horse is hobbled...") gets its final
answer used, not its first draft.
"""

import json
import re
from dataclasses import dataclass
from pathlib import Path

import jsonschema

from xiangqi.rules.board import Coord, Move

_SCHEMA_PATH = Path(__file__).parent / "move_schema.json"

# Outermost { ... } with at most one level of nesting
_JSON_OBJECT_RE = re.compile(r"\{[^{}]*(?:\{[^{}]*\}[^{}]*)*\}")

# Control chars to strip (keep \t, \n, \r)
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_ZERO_WIDTH_RE = re.compile(r"[\u200b\u200c\u200d\u2060\ufeff\u00ad]")

_INJECTION_PATTERNS = [
    re.compile(r"ignore\s+previous\s+instructions", re.IGNORECASE),
    re.compile(r"<\s*system\s*>", re.IGNORECASE),
    re.compile(r'"role"\s*:\s*"system"', re.IGNORECASE),
    re.compile(r"disregard\s+(all\s+)?previous", re.IGNORECASE),
    re.compile(r"new\s+instructions?\s*:", re.IGNORECASE),
]


def load_move_schema(path: Path = _SCHEMA_PATH) -> dict:
    with open(path) as f:
        return json.load(f)


def sanitize_text(text: str) -> str:
    """Strip control characters and zero-width chars. Preserves normal unicode."""
    text = _CONTROL_RE.sub("", text)
    return _ZERO_WIDTH_RE.sub("", text)


def _square(obj: dict) -> Coord:
    # JSON Schema counts 1.0 as an integer; board keys must be real ints
    return Coord(int(obj["x"]), int(obj["y"]))


def detect_injection(text: str) -> bool:
    return any(p.search(text) for p in _INJECTION_PATTERNS)


@dataclass(frozen=True)
class ParseResult:
    """Result of parsing a model's raw output."""

    success: bool
    move: Move | None
    raw_json: str | None
    error: str | None
    injection_detected: bool
    reasoning: str | None = None


class MoveParser:
    """Extract the last schema-valid move object from model text."""

    def __init__(self, schema: dict | None = None) -> None:
        self._schema = schema if schema is not None else load_move_schema()

    def parse(self, raw_text: str) -> ParseResult:
        text = sanitize_text(raw_text)
        injection = detect_injection(text)
        candidates = _JSON_OBJECT_RE.findall(text)

        if not candidates:
            return ParseResult(
                success=False,
                move=None,
                raw_json=None,
                error="No JSON object found in output",
                injection_detected=injection,
            )

        last_error = None
        best = None

        for candidate in candidates:
            try:
                parsed = json.loads(candidate)
            except json.JSONDecodeError as e:
                last_error = f"JSON parse error: {e}"
                continue

            try:
                jsonschema.validate(parsed, self._schema)
            except jsonschema.ValidationError as e:
                last_error = f"Schema validation: {e.message}"
                continue

            best = (parsed, candidate)

        if best is None:
            return ParseResult(
                success=False,
                move=None,
                raw_json=candidates[0],
                error=last_error,
                injection_detected=injection,
            )

        parsed, candidate = best
        move = Move(fr=_square(parsed["from"]), to=_square(parsed["to"]))
        return ParseResult(
            success=True,
            move=move,
            raw_json=candidate,
            error=None,
            injection_detected=injection,
            reasoning=parsed.get("reasoning"),
        )
