"""
Unit tests for the Form Definition engine.

Tests cover:
- Loading and ordering of sections/questions
- Load-time rejection of malformed documents
- Condition parsing (discriminated on operator)
- Answer encoding and the draft/finalized lifecycle
"""

import pytest

from engines.form_definition import (
    Answer,
    AnswerSetFinalizedError,
    CompositeCondition,
    EqualsCondition,
    FormDefinitionError,
    FormDefinitionLoader,
    InCondition,
    QuestionType,
    build_answer_set,
    load_form_definition,
)


# =============================================================================
# LOADING
# =============================================================================


class TestFormLoading:
    """Tests for FormDefinitionLoader on valid documents."""

    def test_sections_and_questions_sorted_by_order(self, form_payload):
        """Documents listed out of order are sorted on load."""
        payload = form_payload()
        payload["sections"].reverse()
        payload["sections"][-1]["questions"].reverse()

        form = load_form_definition(payload)

        assert [s.order for s in form.sections] == [1, 2, 3]
        assert [q.order for q in form.sections[0].questions] == [1, 2, 3]

    def test_section_id_backfilled_on_questions(self, mini_form):
        for section, question in mini_form.iter_questions():
            assert question.section_id == section.id

    def test_defaults_applied(self, form_payload):
        payload = form_payload()
        payload["sections"][0]["questions"][1]["weightage"] = None

        form = load_form_definition(payload)
        question = form.question_by_key("country")
        name = form.question_by_key("legal_name")

        assert question.weightage == 1.0
        assert name.max_points == 0
        assert name.options.choices == []
        assert form.is_active is True

    def test_numeric_version_coerced_to_string(self, form_payload):
        payload = form_payload()
        payload["version"] = 2

        assert load_form_definition(payload).version == "2"

    def test_presentation_hints_in_options_ignored(self, form_payload):
        payload = form_payload()
        payload["sections"][0]["questions"][0]["options"] = {"placeholder": "ACME Ltd."}

        form = load_form_definition(payload)

        assert form.question_by_id("q-name").options.choices == []

    def test_lookup_helpers(self, mini_form):
        assert mini_form.question_by_key("country").id == "q-country"
        assert mini_form.question_by_id("q-listed").question_key == "sanctions_listed"
        assert mini_form.question_by_key("missing") is None

    def test_load_json(self, form_payload):
        import json

        form = FormDefinitionLoader().load_json(json.dumps(form_payload()))
        assert form.id == "mini_rif"

    def test_invalid_json_rejected(self):
        with pytest.raises(FormDefinitionError, match="invalid JSON"):
            FormDefinitionLoader().load_json("{not json")

    def test_non_object_rejected(self):
        with pytest.raises(FormDefinitionError, match="expected a JSON object"):
            FormDefinitionLoader().load([1, 2, 3])


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class TestFormValidation:
    """Malformed documents are rejected with FormDefinitionError."""

    def test_duplicate_section_order(self, form_payload):
        payload = form_payload()
        payload["sections"][1]["order"] = 1

        with pytest.raises(FormDefinitionError, match="section order"):
            load_form_definition(payload)

    def test_duplicate_question_order(self, form_payload):
        payload = form_payload()
        payload["sections"][0]["questions"][1]["order"] = 1

        with pytest.raises(FormDefinitionError, match="question order"):
            load_form_definition(payload)

    def test_duplicate_question_key(self, form_payload):
        payload = form_payload()
        payload["sections"][1]["questions"][0]["questionKey"] = "country"

        with pytest.raises(FormDefinitionError, match="country"):
            load_form_definition(payload)

    def test_error_carries_form_id(self, form_payload):
        payload = form_payload()
        payload["sections"][1]["order"] = 1

        with pytest.raises(FormDefinitionError) as exc_info:
            load_form_definition(payload)

        assert exc_info.value.form_id == "mini_rif"
        assert "[mini_rif]" in str(exc_info.value)

    def test_overlapping_buckets(self, form_payload):
        payload = form_payload()
        buckets = payload["sections"][1]["questions"][0]["options"]["riskScoring"]
        buckets[1]["min"] = 25000

        with pytest.raises(FormDefinitionError, match="overlap"):
            load_form_definition(payload)

    def test_bucket_min_above_max(self, form_payload):
        payload = form_payload()
        buckets = payload["sections"][1]["questions"][0]["options"]["riskScoring"]
        buckets[0] = {"min": 10, "max": 5, "riskScore": 1}

        with pytest.raises(FormDefinitionError, match="exceeds max"):
            load_form_definition(payload)

    def test_show_if_and_hide_if_together(self, form_payload):
        payload = form_payload()
        logic = payload["sections"][2]["conditionalLogic"]
        logic["hideIf"] = {"questionKey": "country", "operator": "EQUALS", "value": "USA"}

        with pytest.raises(FormDefinitionError, match="not both"):
            load_form_definition(payload)

    def test_choice_question_without_choices(self, form_payload):
        payload = form_payload()
        payload["sections"][0]["questions"][1]["options"] = {}

        with pytest.raises(FormDefinitionError, match="declares no choices"):
            load_form_definition(payload)

    def test_boolean_question_may_omit_choices(self, form_payload):
        payload = form_payload()
        payload["sections"][1]["questions"][1]["options"] = None

        form = load_form_definition(payload)
        assert form.question_by_id("q-fourth").question_type == QuestionType.BOOLEAN

    def test_buckets_on_choice_question(self, form_payload):
        payload = form_payload()
        payload["sections"][0]["questions"][1]["options"]["riskScoring"] = [
            {"min": 0, "max": 1, "riskScore": 1}
        ]

        with pytest.raises(FormDefinitionError, match="riskScoring"):
            load_form_definition(payload)

    def test_duplicate_choice_values(self, form_payload):
        payload = form_payload()
        payload["sections"][0]["questions"][1]["options"]["choices"].append(
            {"value": "USA", "riskScore": 3}
        )

        with pytest.raises(FormDefinitionError, match="duplicate choice"):
            load_form_definition(payload)

    def test_unknown_operator(self, form_payload):
        payload = form_payload()
        payload["sections"][2]["conditionalLogic"]["showIf"]["operator"] = "STARTS_WITH"

        with pytest.raises(FormDefinitionError):
            load_form_definition(payload)

    def test_unknown_question_type(self, form_payload):
        payload = form_payload()
        payload["sections"][0]["questions"][0]["questionType"] = "SLIDER"

        with pytest.raises(FormDefinitionError):
            load_form_definition(payload)

    def test_dependency_cycle_rejected(self, form_payload):
        payload = form_payload()
        country = payload["sections"][0]["questions"][1]
        country["conditionalLogic"] = {
            "showIf": {"questionKey": "sanctions_listed", "operator": "EQUALS", "value": "No"}
        }

        with pytest.raises(FormDefinitionError, match="cycle"):
            load_form_definition(payload)

    def test_self_reference_rejected(self, form_payload):
        payload = form_payload()
        payload["sections"][0]["questions"][0]["conditionalLogic"] = {
            "hideIf": {"questionKey": "legal_name", "operator": "EQUALS", "value": "x"}
        }

        with pytest.raises(FormDefinitionError, match="cycle"):
            load_form_definition(payload)


# =============================================================================
# CONDITIONS
# =============================================================================


class TestConditionParsing:
    """Tests for the operator-discriminated condition union."""

    def test_composite_condition_parsed(self, form_payload):
        payload = form_payload()
        payload["sections"][2]["conditionalLogic"]["showIf"] = {
            "operator": "OR",
            "conditions": [
                {"questionKey": "country", "operator": "IN", "values": ["Russia"]},
                {"questionKey": "hosting", "operator": "INCLUDES", "value": "Cloud - SaaS"},
            ],
        }

        form = load_form_definition(payload)
        node = form.sections[2].conditional_logic.show_if

        assert isinstance(node, CompositeCondition)
        assert isinstance(node.conditions[0], InCondition)
        assert node.question_keys() == {"country", "hosting"}

    def test_empty_composite_rejected(self, form_payload):
        payload = form_payload()
        payload["sections"][2]["conditionalLogic"]["showIf"] = {
            "operator": "AND",
            "conditions": [],
        }

        with pytest.raises(FormDefinitionError):
            load_form_definition(payload)

    def test_boolean_literal_encoded_as_string(self):
        condition = EqualsCondition(questionKey="renewal", value=True)
        assert condition.value == "true"

    def test_unresolved_references_listed(self, form_payload):
        payload = form_payload()
        payload["sections"][2]["conditionalLogic"]["showIf"]["questionKey"] = "ghost"

        form = load_form_definition(payload)

        assert form.unresolved_references() == ["section:sec-sanctions -> ghost"]

    def test_unresolved_reference_logged(self, form_payload, caplog):
        payload = form_payload()
        payload["sections"][2]["conditionalLogic"]["showIf"]["questionKey"] = "ghost"

        with caplog.at_level("WARNING"):
            FormDefinitionLoader().load(payload)

        assert "ghost" in caplog.text


# =============================================================================
# ANSWERS
# =============================================================================


class TestAnswers:
    """Tests for Answer encoding and the AnswerSet lifecycle."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (True, "true"),
            (False, "false"),
            (25000, "25000"),
            (["A", "B"], ["A", "B"]),
            ("Russia", "Russia"),
        ],
    )
    def test_value_encoding(self, raw, expected):
        assert Answer(questionId="q", value=raw).value == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", []])
    def test_empty_values(self, raw):
        assert Answer(questionId="q", value=raw).is_empty is True

    def test_record_replaces_previous_answer(self):
        answers = build_answer_set("sub-001")
        answers.record("q-country", "USA")
        answers.record("q-country", "China")

        assert answers.get("q-country").value == "China"

    def test_record_after_finalize_raises(self):
        answers = build_answer_set("sub-001", [{"questionId": "q-country", "value": "USA"}])
        answers.finalize()

        with pytest.raises(AnswerSetFinalizedError, match="sub-001"):
            answers.record("q-country", "Russia")

        assert answers.get("q-country").value == "USA"

    def test_answer_list_indexed_by_question_id(self):
        from engines.form_definition import AnswerSet

        answers = AnswerSet.model_validate({
            "submissionId": "sub-002",
            "answers": [
                {"questionId": "q-1", "value": "a"},
                {"questionId": "q-2", "value": ["b"]},
            ],
        })

        assert set(answers.answers) == {"q-1", "q-2"}
        assert answers.finalized is False
