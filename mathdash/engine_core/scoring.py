"""
Scoring - Pure functions for combo multiplier and per-question score.
"""

from __future__ import annotations
import math

from ..config import GameConfig, DEFAULT_CONFIG


def combo_multiplier(combo: int, config: GameConfig = DEFAULT_CONFIG) -> float:
    """
    Multiplier for a combo value.

    With the default thresholds (2, 4, 6): below 2 -> 1.0, [2, 4) -> 1.2,
    [4, 6) -> 1.5, 6 and above -> 2.0.
    """
    for threshold, multiplier in zip(config.combo_thresholds, config.combo_multipliers):
        if combo < threshold:
            return multiplier
    return config.combo_multipliers[len(config.combo_thresholds)]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def question_score(
    is_correct: bool,
    combo: int,
    is_boss: bool,
    is_speed_star: bool,
    config: GameConfig = DEFAULT_CONFIG,
) -> int:
    """
    Score for a single answered question.

    The combo is the streak *including* this answer. The product of base
    score and multipliers is rounded half-up, then the flat speed bonus
    is added.
    """
    if not is_correct:
        return 0

    boss_mult = config.boss_multiplier if is_boss else 1.0
    product = config.base_score * combo_multiplier(combo, config) * boss_mult
    speed = config.speed_bonus if is_speed_star else 0
    return round_half_up(product) + speed
