"""
Form Definition - Data Definitions

Pydantic models for the Risk Intake Form (RIF) document shapes.
Every shape is an explicit model validated when the form is loaded,
so malformed definitions fail early instead of during evaluation.

Author: TRACS Risk Team
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


_DEFINITION_CONFIG = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)


def _encode_scalar(value: Any) -> Any:
    """Encode booleans and numbers the way answers are stored (strings)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


class QuestionType(str, Enum):
    """Supported question types."""
    TEXT = "TEXT"
    TEXTAREA = "TEXTAREA"
    SINGLE_CHOICE = "SINGLE_CHOICE"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    DROPDOWN = "DROPDOWN"
    DATE = "DATE"
    BOOLEAN = "BOOLEAN"
    NUMBER = "NUMBER"


CHOICE_TYPES = frozenset({
    QuestionType.SINGLE_CHOICE,
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.DROPDOWN,
    QuestionType.BOOLEAN,
})

UNSCORED_TYPES = frozenset({
    QuestionType.TEXT,
    QuestionType.TEXTAREA,
    QuestionType.DATE,
})

# Boolean answers are stored as "true"/"false" while choices say Yes/No
BOOLEAN_CHOICE_ALIASES: Dict[str, str] = {
    "true": "Yes",
    "false": "No",
}


# =============================================================================
# CONDITIONS
# =============================================================================


class EqualsCondition(BaseModel):
    """Leaf: the answer equals ``value`` exactly."""

    model_config = _DEFINITION_CONFIG

    question_key: str = Field(..., min_length=1, alias="questionKey")
    operator: Literal["EQUALS"] = "EQUALS"
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def encode_value(cls, v: Any) -> Any:
        return _encode_scalar(v)

    def question_keys(self) -> Set[str]:
        return {self.question_key}


class InCondition(BaseModel):
    """Leaf: the answer is one of ``values``."""

    model_config = _DEFINITION_CONFIG

    question_key: str = Field(..., min_length=1, alias="questionKey")
    operator: Literal["IN"] = "IN"
    values: List[str] = Field(..., min_length=1)

    @field_validator("values", mode="before")
    @classmethod
    def encode_values(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [_encode_scalar(item) for item in v]
        return v

    def question_keys(self) -> Set[str]:
        return {self.question_key}


class IncludesCondition(BaseModel):
    """Leaf: the (multi-choice) answer contains ``value``."""

    model_config = _DEFINITION_CONFIG

    question_key: str = Field(..., min_length=1, alias="questionKey")
    operator: Literal["INCLUDES"] = "INCLUDES"
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def encode_value(cls, v: Any) -> Any:
        return _encode_scalar(v)

    def question_keys(self) -> Set[str]:
        return {self.question_key}


class IncludesAnyCondition(BaseModel):
    """Leaf: the (multi-choice) answer shares at least one item with ``values``."""

    model_config = _DEFINITION_CONFIG

    question_key: str = Field(..., min_length=1, alias="questionKey")
    operator: Literal["INCLUDES_ANY"] = "INCLUDES_ANY"
    values: List[str] = Field(..., min_length=1)

    @field_validator("values", mode="before")
    @classmethod
    def encode_values(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [_encode_scalar(item) for item in v]
        return v

    def question_keys(self) -> Set[str]:
        return {self.question_key}


class CompositeCondition(BaseModel):
    """AND / OR over child conditions."""

    model_config = _DEFINITION_CONFIG

    operator: Literal["AND", "OR"]
    conditions: List["ConditionNode"] = Field(..., min_length=1)

    def question_keys(self) -> Set[str]:
        keys: Set[str] = set()
        for child in self.conditions:
            keys |= child.question_keys()
        return keys


ConditionNode = Annotated[
    Union[
        EqualsCondition,
        InCondition,
        IncludesCondition,
        IncludesAnyCondition,
        CompositeCondition,
    ],
    Field(discriminator="operator"),
]

CompositeCondition.model_rebuild()


class ConditionalLogic(BaseModel):
    """
    Visibility rule for a section or question.

    At most one of ``showIf`` / ``hideIf`` may be set; neither means
    the element is always active.
    """

    model_config = _DEFINITION_CONFIG

    show_if: Optional[ConditionNode] = Field(default=None, alias="showIf")
    hide_if: Optional[ConditionNode] = Field(default=None, alias="hideIf")

    @model_validator(mode="after")
    def validate_single_rule(self) -> "ConditionalLogic":
        if self.show_if is not None and self.hide_if is not None:
            raise ValueError("conditionalLogic may carry showIf or hideIf, not both")
        return self

    def question_keys(self) -> Set[str]:
        node = self.show_if if self.show_if is not None else self.hide_if
        return node.question_keys() if node is not None else set()


# =============================================================================
# OPTIONS
# =============================================================================


class Choice(BaseModel):
    """A selectable option with optional risk metadata."""

    model_config = _DEFINITION_CONFIG

    value: str = Field(..., min_length=1)
    label: str = ""
    risk_score: Optional[int] = Field(default=None, ge=0, alias="riskScore")
    control_score: Optional[int] = Field(default=None, ge=0, alias="controlScore")
    subcategories: List[str] = Field(
        default_factory=list,
        description="Presentation-only refinements; never scored.",
    )
    requires_text: bool = Field(default=False, alias="requiresText")


class RiskBucket(BaseModel):
    """Inclusive numeric range mapped to a risk score."""

    model_config = _DEFINITION_CONFIG

    min_value: float = Field(..., alias="min")
    max_value: float = Field(..., alias="max")
    risk_score: int = Field(..., ge=0, alias="riskScore")

    @model_validator(mode="after")
    def validate_range(self) -> "RiskBucket":
        if self.min_value > self.max_value:
            raise ValueError(
                f"risk bucket min ({self.min_value}) exceeds max ({self.max_value})"
            )
        return self

    def contains(self, number: float) -> bool:
        return self.min_value <= number <= self.max_value


class FollowUpPrompt(BaseModel):
    """Free-text follow-up requested when the answer matches ``trigger``."""

    model_config = _DEFINITION_CONFIG

    trigger: Union[str, List[str]]
    prompt: Optional[str] = None

    @field_validator("trigger", mode="before")
    @classmethod
    def encode_trigger(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [_encode_scalar(item) for item in v]
        return _encode_scalar(v)

    def matches(self, value: str) -> bool:
        if isinstance(self.trigger, list):
            return value in self.trigger
        return value == self.trigger


class QuestionOptions(BaseModel):
    """
    Polymorphic option payload of a question.

    Presentation hints of the original payload (placeholder, maxLength...)
    are ignored rather than rejected.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    choices: List[Choice] = Field(default_factory=list)
    risk_scoring: List[RiskBucket] = Field(default_factory=list, alias="riskScoring")
    conditional_text: Optional[FollowUpPrompt] = Field(default=None, alias="conditionalText")

    @field_validator("choices")
    @classmethod
    def validate_unique_choices(cls, v: List[Choice]) -> List[Choice]:
        seen: Set[str] = set()
        for choice in v:
            if choice.value in seen:
                raise ValueError(f"duplicate choice value '{choice.value}'")
            seen.add(choice.value)
        return v

    @field_validator("risk_scoring")
    @classmethod
    def validate_buckets(cls, v: List[RiskBucket]) -> List[RiskBucket]:
        ordered = sorted(v, key=lambda b: (b.min_value, b.max_value))
        for previous, current in zip(ordered, ordered[1:]):
            if current.min_value <= previous.max_value:
                raise ValueError(
                    f"risk buckets overlap: [{previous.min_value}, {previous.max_value}] "
                    f"and [{current.min_value}, {current.max_value}]"
                )
        return v


# =============================================================================
# FORM STRUCTURE
# =============================================================================


class Question(BaseModel):
    """A single RIF question."""

    model_config = _DEFINITION_CONFIG

    id: str = Field(..., min_length=1)
    section_id: Optional[str] = Field(default=None, alias="sectionId")
    question_key: str = Field(..., min_length=1, alias="questionKey")
    question_text: str = Field(..., min_length=1, alias="questionText")
    description: Optional[str] = None
    question_type: QuestionType = Field(..., alias="questionType")
    is_required: bool = Field(default=False, alias="isRequired")
    order: int = Field(..., ge=1)
    max_points: int = Field(default=0, ge=0, alias="maxPoints")
    weightage: float = Field(default=1.0, gt=0)
    conditional_logic: Optional[ConditionalLogic] = Field(default=None, alias="conditionalLogic")
    options: QuestionOptions = Field(default_factory=QuestionOptions)

    @field_validator("weightage", mode="before")
    @classmethod
    def default_weightage(cls, v: Any) -> Any:
        return 1.0 if v is None else v

    @field_validator("options", mode="before")
    @classmethod
    def default_options(cls, v: Any) -> Any:
        return {} if v is None else v

    @model_validator(mode="after")
    def validate_options_for_type(self) -> "Question":
        qtype = self.question_type
        if qtype in CHOICE_TYPES and qtype != QuestionType.BOOLEAN and not self.options.choices:
            raise ValueError(f"question '{self.question_key}' ({qtype.value}) declares no choices")
        if self.options.risk_scoring and qtype != QuestionType.NUMBER:
            raise ValueError(
                f"question '{self.question_key}' ({qtype.value}) cannot declare riskScoring"
            )
        return self

    def find_choice(self, value: str) -> Optional[Choice]:
        for choice in self.options.choices:
            if choice.value == value:
                return choice
        return None

    def canonical_value(self, value: str) -> str:
        """
        Map a stored boolean literal onto the question's Yes/No choice.

        BOOLEAN answers arrive as "true"/"false" while choices and
        conditions use the choice values. Anything else is returned as is.
        """
        if self.question_type != QuestionType.BOOLEAN or self.find_choice(value) is not None:
            return value
        alias = BOOLEAN_CHOICE_ALIASES.get(value)
        if alias is not None and self.find_choice(alias) is not None:
            return alias
        return value


class Section(BaseModel):
    """An ordered group of questions, optionally gated by a condition."""

    model_config = _DEFINITION_CONFIG

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    order: int = Field(..., ge=1)
    is_required: bool = Field(default=False, alias="isRequired")
    conditional_logic: Optional[ConditionalLogic] = Field(default=None, alias="conditionalLogic")
    questions: List[Question] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def attach_section_id(cls, data: Any) -> Any:
        """Fill the back-reference of questions that omit ``sectionId``."""
        if not isinstance(data, dict) or not isinstance(data.get("questions"), list):
            return data
        section_id = data.get("id")
        questions = []
        for item in data["questions"]:
            if isinstance(item, dict) and item.get("sectionId") is None and item.get("section_id") is None:
                item = {**item, "sectionId": section_id}
            questions.append(item)
        return {**data, "questions": questions}

    @field_validator("questions")
    @classmethod
    def sort_questions(cls, v: List[Question]) -> List[Question]:
        return sorted(v, key=lambda q: q.order)

    @model_validator(mode="after")
    def validate_questions(self) -> "Section":
        orders: Set[int] = set()
        for question in self.questions:
            if question.order in orders:
                raise ValueError(
                    f"section '{self.id}' has duplicate question order {question.order}"
                )
            orders.add(question.order)
            if question.section_id != self.id:
                raise ValueError(
                    f"question '{question.id}' references section '{question.section_id}' "
                    f"but belongs to '{self.id}'"
                )
        return self


class FormDefinition(BaseModel):
    """
    Immutable, versioned RIF definition.

    Sections and questions are kept sorted by ``order`` whatever the
    order of the source document.
    """

    model_config = _DEFINITION_CONFIG

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    version: str = "1.0"
    is_active: bool = Field(default=True, alias="isActive")
    sections: List[Section] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, v: Any) -> Any:
        return str(v) if isinstance(v, (int, float)) else v

    @field_validator("sections")
    @classmethod
    def sort_sections(cls, v: List[Section]) -> List[Section]:
        return sorted(v, key=lambda s: s.order)

    @model_validator(mode="after")
    def validate_structure(self) -> "FormDefinition":
        orders: Set[int] = set()
        keys: Set[str] = set()
        ids: Set[str] = set()
        for section in self.sections:
            if section.order in orders:
                raise ValueError(f"duplicate section order {section.order}")
            orders.add(section.order)
            for question in section.questions:
                if question.question_key in keys:
                    raise ValueError(f"duplicate questionKey '{question.question_key}'")
                if question.id in ids:
                    raise ValueError(f"duplicate question id '{question.id}'")
                keys.add(question.question_key)
                ids.add(question.id)

        cycle = self._find_dependency_cycle()
        if cycle:
            raise ValueError("conditional logic forms a cycle: " + " -> ".join(cycle))
        return self

    def _dependencies(self) -> Dict[str, Set[str]]:
        """Map each questionKey to the keys its visibility depends on."""
        graph: Dict[str, Set[str]] = {}
        for section in self.sections:
            section_keys = (
                section.conditional_logic.question_keys()
                if section.conditional_logic else set()
            )
            for question in section.questions:
                own_keys = (
                    question.conditional_logic.question_keys()
                    if question.conditional_logic else set()
                )
                graph[question.question_key] = section_keys | own_keys
        return graph

    def _find_dependency_cycle(self) -> List[str]:
        graph = self._dependencies()
        visiting: List[str] = []
        done: Set[str] = set()

        def visit(key: str) -> List[str]:
            if key in done or key not in graph:
                return []
            if key in visiting:
                return visiting[visiting.index(key):] + [key]
            visiting.append(key)
            for dependency in sorted(graph[key]):
                cycle = visit(dependency)
                if cycle:
                    return cycle
            visiting.pop()
            done.add(key)
            return []

        for key in graph:
            cycle = visit(key)
            if cycle:
                return cycle
        return []

    def iter_questions(self):
        """Yield ``(section, question)`` pairs in form order."""
        for section in self.sections:
            for question in section.questions:
                yield section, question

    def question_by_key(self, question_key: str) -> Optional[Question]:
        for _, question in self.iter_questions():
            if question.question_key == question_key:
                return question
        return None

    def question_by_id(self, question_id: str) -> Optional[Question]:
        for _, question in self.iter_questions():
            if question.id == question_id:
                return question
        return None

    def unresolved_references(self) -> List[str]:
        """List ``owner -> key`` references to unknown question keys."""
        known = {q.question_key for _, q in self.iter_questions()}
        missing: List[str] = []
        for section in self.sections:
            if section.conditional_logic:
                for key in sorted(section.conditional_logic.question_keys() - known):
                    missing.append(f"section:{section.id} -> {key}")
            for question in section.questions:
                if question.conditional_logic:
                    for key in sorted(question.conditional_logic.question_keys() - known):
                        missing.append(f"question:{question.id} -> {key}")
        return missing


# =============================================================================
# ANSWERS
# =============================================================================


AnswerValue = Union[str, List[str]]


class Answer(BaseModel):
    """A respondent's answer to one question."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    question_id: str = Field(..., min_length=1, alias="questionId")
    value: Optional[AnswerValue] = None
    follow_up_text: Optional[str] = Field(default=None, alias="followUpText")

    @field_validator("value", mode="before")
    @classmethod
    def encode_value(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [_encode_scalar(item) for item in v]
        return _encode_scalar(v)

    @property
    def is_empty(self) -> bool:
        if self.value is None:
            return True
        if isinstance(self.value, list):
            return len(self.value) == 0
        return self.value.strip() == ""


class AnswerSet(BaseModel):
    """
    Answers of one submission keyed by question id.

    Mutable while the submission is a draft; ``finalize()`` freezes it.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    submission_id: str = Field(..., min_length=1, alias="submissionId")
    answers: Dict[str, Answer] = Field(default_factory=dict)
    finalized: bool = False

    @field_validator("answers", mode="before")
    @classmethod
    def index_answers(cls, v: Any) -> Any:
        """Accept a list of answers as well as a ``questionId`` mapping."""
        if isinstance(v, list):
            indexed: Dict[str, Any] = {}
            for item in v:
                question_id = (
                    item.question_id if isinstance(item, Answer)
                    else item.get("questionId", item.get("question_id"))
                )
                indexed[question_id] = item
            return indexed
        return v

    def get(self, question_id: str) -> Optional[Answer]:
        return self.answers.get(question_id)

    def record(
        self,
        question_id: str,
        value: Any,
        follow_up_text: Optional[str] = None,
    ) -> Answer:
        """Store (or replace) the answer to ``question_id``."""
        if self.finalized:
            raise AnswerSetFinalizedError(self.submission_id)
        answer = Answer(question_id=question_id, value=value, follow_up_text=follow_up_text)
        self.answers[question_id] = answer
        return answer

    def finalize(self) -> "AnswerSet":
        self.finalized = True
        return self


# Custom Exceptions

class FormModelError(Exception):
    """Base error for the form definition engine."""
    pass


class FormDefinitionError(FormModelError):
    """The form definition document is malformed."""
    def __init__(self, reason: str, form_id: Optional[str] = None):
        self.reason = reason
        self.form_id = form_id
        prefix = f"[{form_id}] " if form_id else ""
        super().__init__(f"{prefix}Invalid form definition: {reason}")


class AnswerSetFinalizedError(FormModelError):
    """The answer set was finalized and can no longer change."""
    def __init__(self, submission_id: str):
        self.submission_id = submission_id
        super().__init__(
            f"Answers of submission '{submission_id}' are finalized and immutable."
        )
