"""
Form Definition Engine

Explicit, validated models for RIF forms, conditions and answers.
"""

from .definition import (
    Answer,
    AnswerSet,
    AnswerSetFinalizedError,
    AnswerValue,
    Choice,
    CompositeCondition,
    ConditionalLogic,
    ConditionNode,
    EqualsCondition,
    FollowUpPrompt,
    FormDefinition,
    FormDefinitionError,
    FormModelError,
    IncludesAnyCondition,
    IncludesCondition,
    InCondition,
    Question,
    QuestionOptions,
    QuestionType,
    RiskBucket,
    Section,
    CHOICE_TYPES,
    UNSCORED_TYPES,
    BOOLEAN_CHOICE_ALIASES,
)

from .impl import (
    FormDefinitionLoader,
    build_answer_set,
    load_form_definition,
)

__all__ = [
    # Classes
    "FormDefinitionLoader",
    # Models
    "Answer",
    "AnswerSet",
    "AnswerValue",
    "Choice",
    "CompositeCondition",
    "ConditionalLogic",
    "ConditionNode",
    "EqualsCondition",
    "FollowUpPrompt",
    "FormDefinition",
    "IncludesAnyCondition",
    "IncludesCondition",
    "InCondition",
    "Question",
    "QuestionOptions",
    "QuestionType",
    "RiskBucket",
    "Section",
    # Exceptions
    "AnswerSetFinalizedError",
    "FormDefinitionError",
    "FormModelError",
    # Functions
    "build_answer_set",
    "load_form_definition",
    # Constants
    "CHOICE_TYPES",
    "UNSCORED_TYPES",
    "BOOLEAN_CHOICE_ALIASES",
]
