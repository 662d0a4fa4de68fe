"""
Question Generator - Builds the question sequence for a run.

Each difficulty has a set of templates. A template restricts operand
ranges and allowed operators. For every position the generator picks one
template and one operator uniformly, then draws operands uniformly.

Guarantees:
- Subtraction never goes negative (operands are swapped first)
- Division is built backward from quotient * divisor, so it is always exact
- Boss questions sit among the last three positions
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import random
import re

from .state import Difficulty, Question


class Operation(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"


@dataclass(frozen=True)
class QuestionTemplate:
    """Operand ranges (inclusive) and the operators allowed between them."""
    num1_range: tuple[int, int]
    num2_range: tuple[int, int]
    operations: tuple[Operation, ...]
    label: str = ""


DIFFICULTY_TEMPLATES: dict[Difficulty, list[QuestionTemplate]] = {
    Difficulty.EASY: [
        QuestionTemplate((10, 99), (1, 99), (Operation.ADD,), "two-digit addition"),
        QuestionTemplate((10, 99), (1, 50), (Operation.SUBTRACT,), "two-digit subtraction"),
        QuestionTemplate((1, 9), (1, 9), (Operation.ADD,), "single-digit addition"),
    ],
    Difficulty.MEDIUM: [
        QuestionTemplate((100, 999), (10, 999), (Operation.ADD,), "three-digit addition"),
        QuestionTemplate((100, 999), (10, 500), (Operation.SUBTRACT,), "three-digit subtraction"),
        QuestionTemplate((2, 12), (2, 12), (Operation.MULTIPLY,), "simple multiplication"),
        QuestionTemplate(
            (10, 99), (10, 99), (Operation.ADD, Operation.SUBTRACT), "two-digit mixed"
        ),
    ],
    Difficulty.HARD: [
        QuestionTemplate((2, 20), (2, 20), (Operation.MULTIPLY,), "larger multiplication"),
        QuestionTemplate(
            (100, 999), (100, 999), (Operation.ADD, Operation.SUBTRACT), "three-digit mixed"
        ),
        QuestionTemplate((2, 12), (2, 12), (Operation.DIVIDE,), "exact division"),
        QuestionTemplate((11, 25), (2, 15), (Operation.MULTIPLY,), "complex multiplication"),
    ],
}

# Boss questions are chosen among this many trailing positions
BOSS_WINDOW = 3


def apply_template(
    template: QuestionTemplate,
    operation: Operation,
    num1: int,
    num2: int,
) -> tuple[str, int]:
    """
    Build (expression, answer) from drawn operands.

    For division, num1 is the quotient and num2 the divisor; the printed
    dividend is their product.
    """
    if operation == Operation.ADD:
        answer = num1 + num2
    elif operation == Operation.SUBTRACT:
        if num1 < num2:
            num1, num2 = num2, num1
        answer = num1 - num2
    elif operation == Operation.MULTIPLY:
        answer = num1 * num2
    elif operation == Operation.DIVIDE:
        num1 = num1 * num2
        answer = num1 // num2
    else:
        raise ValueError(f"Unknown operation: {operation}")

    return f"{num1} {operation.value} {num2}", answer


def generate_expression(
    difficulty: Difficulty,
    rng: random.Random | None = None,
) -> tuple[str, int]:
    """Generate one expression and its exact integer answer."""
    rng = rng or random
    template = rng.choice(DIFFICULTY_TEMPLATES[difficulty])
    operation = rng.choice(template.operations)
    num1 = rng.randint(*template.num1_range)
    num2 = rng.randint(*template.num2_range)
    return apply_template(template, operation, num1, num2)


def pick_boss_indices(
    count: int,
    boss_count: int,
    rng: random.Random | None = None,
) -> set[int]:
    """Distinct boss positions among the last BOSS_WINDOW questions."""
    rng = rng or random
    window = range(max(0, count - BOSS_WINDOW), count)
    k = min(boss_count, BOSS_WINDOW, len(window))
    if k <= 0:
        return set()
    return set(rng.sample(list(window), k))


def generate_questions(
    count: int,
    difficulty: Difficulty,
    boss_count: int = 1,
    rng: random.Random | None = None,
) -> list[Question]:
    """
    Generate an ordered sequence of `count` fresh questions.

    Args:
        count: Number of questions (must be positive)
        difficulty: Template set to draw from
        boss_count: How many boss questions to flag (at most 3)
        rng: Optional random source; the module-level one is used otherwise

    Returns:
        Questions with result=PENDING and all counters zeroed
    """
    if count <= 0:
        raise ValueError(f"Question count must be positive, got {count}")

    rng = rng or random
    boss_indices = pick_boss_indices(count, boss_count, rng)

    questions = []
    for i in range(count):
        expression, answer = generate_expression(difficulty, rng)
        questions.append(
            Question(
                index=i,
                expression=expression,
                answer=answer,
                is_boss=i in boss_indices,
            )
        )
    return questions


# =============================================================================
# Answer parsing
# =============================================================================

_LEADING_INT = re.compile(r"^[+-]?[0-9]+")

CHINESE_NUMERALS: dict[str, int] = {
    "零": 0, "一": 1, "二": 2, "两": 2, "三": 3, "四": 4,
    "五": 5, "六": 6, "七": 7, "八": 8, "九": 9,
    "十": 10, "百": 100, "千": 1000,
}


def parse_chinese_numeral(text: str) -> int:
    """
    Accumulate a simple Chinese numeral.

    A unit (10, 100, 1000) multiplies the pending digit (1 if none) and
    adds it to the total; a digit becomes the pending digit. The last
    pending digit is added at the end. Unknown characters are ignored.
    """
    total = 0
    pending = 0
    for char in text:
        value = CHINESE_NUMERALS.get(char)
        if value is None:
            continue
        if value >= 10:
            total += (pending or 1) * value
            pending = 0
        else:
            pending = value
    return total + pending


def parse_user_input(raw: str | None) -> int | None:
    """
    Parse a player's answer.

    A leading ASCII base-10 integer wins ("12abc" -> 12). Otherwise the input is
    read as a Chinese numeral. Returns None when nothing positive was found.
    """
    if raw is None:
        return None
    cleaned = raw.strip()

    match = _LEADING_INT.match(cleaned)
    if match:
        return int(match.group(0))

    result = parse_chinese_numeral(cleaned)
    return result if result > 0 else None
