"""
Condition Evaluator Engine

Pure evaluation of showIf/hideIf visibility rules over an answer set.
"""

from .definition import (
    ConditionEvaluatorError,
    UnsupportedConditionError,
    VisibilityMap,
)

from .impl import (
    Resolver,
    VisibilityResolver,
    evaluate_logic,
    evaluate_visibility,
    is_active,
    referenced_keys,
)

__all__ = [
    # Classes
    "VisibilityResolver",
    # Models
    "VisibilityMap",
    # Exceptions
    "ConditionEvaluatorError",
    "UnsupportedConditionError",
    # Functions
    "evaluate_logic",
    "evaluate_visibility",
    "is_active",
    "referenced_keys",
    # Types
    "Resolver",
]
