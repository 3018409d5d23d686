"""
Line-clear scoring, combo / back-to-back bookkeeping, and garbage arithmetic.

These are pure functions over the session counters so the exact numbers can
be checked without running a game:

  score  += base(n) * (level + 1)
  T-spin  : score += n * 400 * level, garbage = 2n + BtB bonus
  Tetris  : score += 800 * level,      garbage = 4 + BtB bonus
  2-3 rows: garbage = n - 1
  combo   : garbage += combo - 1 from the second consecutive clear on
"""

from __future__ import annotations

from dataclasses import dataclass

# Base points per number of rows cleared, multiplied by (level + 1).
SCORE_TABLE: dict[int, int] = {
    1: 25,
    2: 100,
    3: 400,
    4: 1600,
}

TSPIN_NAMES: dict[int, str] = {1: "SINGLE", 2: "DOUBLE", 3: "TRIPLE"}

LINES_PER_LEVEL = 10


@dataclass(frozen=True)
class ClearResult:
    """Outcome of one executed line clear.

    Attributes:
        lines: Rows removed.
        is_tspin: Whether the locking move was a T-spin.
        score_gained: Points added to the session score.
        garbage: Attack lines produced, before cancellation.
        combo_count: Combo counter after this clear.
        is_back_to_back: Back-to-back flag after this clear.
        level: Level after adding the rows to the line total.
        label: Action text for the UI ("" when nothing notable happened).
    """

    lines: int
    is_tspin: bool
    score_gained: int
    garbage: int
    combo_count: int
    is_back_to_back: bool
    level: int
    label: str


@dataclass(frozen=True)
class GarbageExchange:
    """Result of cancelling an outgoing attack against pending garbage."""

    sent: int
    pending: int
    cancelled: int


def level_for_lines(total_lines: int) -> int:
    return total_lines // LINES_PER_LEVEL + 1


def score_clear(
    lines: int,
    is_tspin: bool,
    level: int,
    combo_count: int,
    is_back_to_back: bool,
    total_lines: int,
) -> ClearResult:
    """Compute score, attack and streak counters for a clear.

    Args:
        lines: Number of rows removed (n).
        is_tspin: T-spin flag captured before the piece was written.
        level: Level in effect when the clear executes (L).
        combo_count: Combo counter before this clear.
        is_back_to_back: Back-to-back flag before this clear.
        total_lines: Lines cleared before this clear.

    Returns:
        A ClearResult. With lines == 0 the combo resets and nothing else
        changes.
    """
    if lines <= 0:
        return ClearResult(0, is_tspin, 0, 0, 0, is_back_to_back, level, "")

    combo_count += 1
    score = SCORE_TABLE.get(lines, SCORE_TABLE[1]) * (level + 1)
    garbage = 0
    label = ""

    is_difficult = lines == 4 or is_tspin
    btb_bonus = 0
    if is_difficult:
        if is_back_to_back:
            btb_bonus = 1
            label = "BtB "
        is_back_to_back = True
    else:
        is_back_to_back = False

    if is_tspin:
        score += lines * 400 * level
        label += f"T-SPIN {TSPIN_NAMES.get(lines, '')}!"
        garbage = lines * 2 + btb_bonus
    elif lines == 4:
        score += 800 * level
        label += "TETRIS!"
        garbage = 4 + btb_bonus
    elif lines >= 2:
        garbage = lines - 1

    if combo_count >= 2:
        garbage += combo_count - 1
        label = f"{label} {combo_count} REN!" if label else f"{combo_count} REN!"

    new_level = max(level, level_for_lines(total_lines + lines))
    return ClearResult(
        lines=lines,
        is_tspin=is_tspin,
        score_gained=score,
        garbage=garbage,
        combo_count=combo_count,
        is_back_to_back=is_back_to_back,
        level=new_level,
        label=label,
    )


def exchange_garbage(attack: int, pending: int) -> GarbageExchange:
    """Cancel an outgoing attack against garbage owed to this board.

    Pending garbage is offset first. Attack left over after full
    cancellation is sent; defence left over stays pending and nothing is
    sent.
    """
    cancelled = min(attack, pending)
    return GarbageExchange(
        sent=attack - cancelled,
        pending=pending - cancelled,
        cancelled=cancelled,
    )
