"""
Engine Core - Pure run state management.

The engine core is the part that:
1. Generates question sequences
2. Scores answers
3. Holds GameRun state
4. Applies actions via the reducer
"""

from .state import (
    GameRun,
    Question,
    GameMode,
    Difficulty,
    QuestionResult,
    RunState,
    QuestionState,
    new_run,
    generate_run_id,
)
from .action import Action, ActionType, ActionPayload, ActionResult
from .reducer import Reducer, apply_action
from .scoring import combo_multiplier, question_score
from .question_generator import (
    Operation,
    QuestionTemplate,
    DIFFICULTY_TEMPLATES,
    generate_expression,
    generate_questions,
    parse_user_input,
)

__all__ = [
    "GameRun",
    "Question",
    "GameMode",
    "Difficulty",
    "QuestionResult",
    "RunState",
    "QuestionState",
    "new_run",
    "generate_run_id",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Reducer",
    "apply_action",
    "combo_multiplier",
    "question_score",
    "Operation",
    "QuestionTemplate",
    "DIFFICULTY_TEMPLATES",
    "generate_expression",
    "generate_questions",
    "parse_user_input",
]
