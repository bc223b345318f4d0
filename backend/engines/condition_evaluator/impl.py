"""
Condition Evaluator - Implementation

Evaluates showIf/hideIf expression trees against collected answers:
- Leaf operators EQUALS, IN, INCLUDES, INCLUDES_ANY
- Composite AND / OR
- Unresolved question keys fail the leaf instead of raising
- Hidden sections cascade to all of their questions

Author: TRACS Risk Team
"""

import logging
from typing import Callable, Dict, Optional, Set

from engines.form_definition import (
    AnswerSet,
    AnswerValue,
    CompositeCondition,
    ConditionalLogic,
    ConditionNode,
    EqualsCondition,
    FormDefinition,
    IncludesAnyCondition,
    IncludesCondition,
    InCondition,
    Question,
    Section,
)

from .definition import UnsupportedConditionError, VisibilityMap

logger = logging.getLogger(__name__)


Resolver = Callable[[str], Optional[AnswerValue]]


def is_active(node: Optional[ConditionNode], resolve: Resolver) -> bool:
    """
    Evaluate a condition tree.

    Args:
        node: Validated condition, or None for "always active".
        resolve: Maps a questionKey to its current answer value
                 (None when unanswered or unknown).

    Returns:
        True when the condition holds.
    """
    if node is None:
        return True

    if isinstance(node, CompositeCondition):
        if node.operator == "AND":
            return all(is_active(child, resolve) for child in node.conditions)
        return any(is_active(child, resolve) for child in node.conditions)

    if isinstance(node, EqualsCondition):
        answer = resolve(node.question_key)
        return isinstance(answer, str) and answer == node.value

    if isinstance(node, InCondition):
        answer = resolve(node.question_key)
        return isinstance(answer, str) and answer in node.values

    if isinstance(node, IncludesCondition):
        answer = resolve(node.question_key)
        return isinstance(answer, list) and node.value in answer

    if isinstance(node, IncludesAnyCondition):
        answer = resolve(node.question_key)
        return isinstance(answer, list) and not set(answer).isdisjoint(node.values)

    raise UnsupportedConditionError(node)


def evaluate_logic(logic: Optional[ConditionalLogic], resolve: Resolver) -> bool:
    """Apply showIf (active iff true) or hideIf (active iff false)."""
    if logic is None:
        return True
    if logic.show_if is not None:
        return is_active(logic.show_if, resolve)
    if logic.hide_if is not None:
        return not is_active(logic.hide_if, resolve)
    return True


class VisibilityResolver:
    """
    Resolves question keys to answers, honouring visibility.

    A key resolves to None when the question is unknown, unanswered,
    answered with an empty value, or itself inactive. Boolean literals
    resolve to the question's Yes/No choice value. Activity is computed
    lazily and memoized per instance, so results do not depend on the
    order sections or siblings are visited in.

    Usage:
        resolver = VisibilityResolver(form, answers)
        if resolver.is_section_active(form.sections[5]):
            ...
        visibility = resolver.visibility_map()
    """

    def __init__(self, form: FormDefinition, answers: AnswerSet):
        self.form = form
        self.answers = answers
        self._by_key: Dict[str, Question] = {}
        self._section_of: Dict[str, Section] = {}
        for section, question in form.iter_questions():
            self._by_key[question.question_key] = question
            self._section_of[question.id] = section

        self._section_memo: Dict[str, bool] = {}
        self._question_memo: Dict[str, bool] = {}
        self._pending: Set[str] = set()

    def __call__(self, question_key: str) -> Optional[AnswerValue]:
        question = self._by_key.get(question_key)
        if question is None:
            return None

        answer = self.answers.get(question.id)
        if answer is None or answer.is_empty:
            return None

        if not self.is_question_active(question):
            return None
        if isinstance(answer.value, list):
            return [question.canonical_value(v) for v in answer.value]
        return question.canonical_value(answer.value)

    def is_section_active(self, section: Section) -> bool:
        if section.id in self._section_memo:
            return self._section_memo[section.id]

        marker = f"section:{section.id}"
        if marker in self._pending:
            logger.warning(f"Cyclic visibility rule on section '{section.id}'; treating as inactive")
            return False

        self._pending.add(marker)
        try:
            active = evaluate_logic(section.conditional_logic, self)
        finally:
            self._pending.discard(marker)

        self._section_memo[section.id] = active
        return active

    def is_question_active(self, question: Question) -> bool:
        if question.id in self._question_memo:
            return self._question_memo[question.id]

        marker = f"question:{question.id}"
        if marker in self._pending:
            logger.warning(f"Cyclic visibility rule on question '{question.id}'; treating as inactive")
            return False

        self._pending.add(marker)
        try:
            section = self._section_of[question.id]
            active = (
                self.is_section_active(section)
                and evaluate_logic(question.conditional_logic, self)
            )
        finally:
            self._pending.discard(marker)

        self._question_memo[question.id] = active
        return active

    def visibility_map(self) -> VisibilityMap:
        """Evaluate every section and question of the form."""
        active_sections = []
        active_questions = []
        hidden_questions = []

        for section in self.form.sections:
            section_active = self.is_section_active(section)
            if section_active:
                active_sections.append(section.id)
            for question in section.questions:
                if section_active and self.is_question_active(question):
                    active_questions.append(question.id)
                else:
                    hidden_questions.append(question.id)

        return VisibilityMap(
            active_section_ids=active_sections,
            active_question_ids=active_questions,
            hidden_question_ids=hidden_questions,
        )


def evaluate_visibility(form: FormDefinition, answers: AnswerSet) -> VisibilityMap:
    """
    Compute which sections and questions are active.

    Convenience function for simple use cases.
    """
    return VisibilityResolver(form, answers).visibility_map()


def referenced_keys(node: Optional[ConditionNode]) -> Set[str]:
    """Question keys a condition tree reads."""
    if node is None:
        return set()
    return node.question_keys()
