"""
Pytest configuration and shared fixtures.

This module provides common fixtures for testing the risk intake backend.
Collaborators are replaced with AsyncMocks so no storage is touched.

Usage:
    def test_example(form_payload, answer_set_factory):
        form = load_form_definition(form_payload())
        answers = answer_set_factory({"q-country": "Russia"})
"""

import os

# File logging off for test runs (read by Settings on first import)
os.environ.setdefault("LOG_TO_FILE", "false")

import copy
from pathlib import Path

import pytest
from unittest.mock import AsyncMock, MagicMock


# =============================================================================
# FORM FIXTURES
# =============================================================================


_BASE_FORM = {
    "id": "mini_rif",
    "title": "Mini RIF",
    "version": "1.0",
    "sections": [
        {
            "id": "sec-profile",
            "title": "Profile",
            "order": 1,
            "isRequired": True,
            "questions": [
                {
                    "id": "q-name",
                    "questionKey": "legal_name",
                    "questionText": "Legal name",
                    "questionType": "TEXT",
                    "isRequired": True,
                    "order": 1,
                },
                {
                    "id": "q-country",
                    "questionKey": "country",
                    "questionText": "Country of operations",
                    "questionType": "SINGLE_CHOICE",
                    "isRequired": True,
                    "order": 2,
                    "maxPoints": 3,
                    "options": {
                        "choices": [
                            {"value": "USA", "riskScore": 1},
                            {"value": "China", "riskScore": 2},
                            {"value": "Russia", "riskScore": 3},
                        ]
                    },
                },
                {
                    "id": "q-hosting",
                    "questionKey": "hosting",
                    "questionText": "Data hosting",
                    "questionType": "MULTIPLE_CHOICE",
                    "order": 3,
                    "maxPoints": 3,
                    "options": {
                        "choices": [
                            {"value": "On-Prem", "riskScore": 1},
                            {"value": "Cloud - IaaS", "riskScore": 2},
                            {"value": "Cloud - SaaS", "riskScore": 3},
                        ]
                    },
                },
            ],
        },
        {
            "id": "sec-engagement",
            "title": "Engagement",
            "order": 2,
            "questions": [
                {
                    "id": "q-value",
                    "questionKey": "contract_value",
                    "questionText": "Contract value",
                    "questionType": "NUMBER",
                    "order": 1,
                    "maxPoints": 3,
                    "weightage": 1.5,
                    "options": {
                        "riskScoring": [
                            {"min": 0, "max": 25000, "riskScore": 1},
                            {"min": 25001, "max": 100000, "riskScore": 2},
                            {"min": 100001, "max": 999999999, "riskScore": 3},
                        ]
                    },
                },
                {
                    "id": "q-fourth",
                    "questionKey": "fourth_party",
                    "questionText": "Fourth party involved?",
                    "questionType": "BOOLEAN",
                    "isRequired": True,
                    "order": 2,
                    "maxPoints": 2,
                    "options": {
                        "choices": [
                            {"value": "Yes", "riskScore": 2},
                            {"value": "No", "riskScore": 1},
                        ],
                        "conditionalText": {
                            "trigger": "Yes",
                            "prompt": "Name the fourth parties:",
                        },
                    },
                },
                {
                    "id": "q-fourth-name",
                    "questionKey": "fourth_party_name",
                    "questionText": "Fourth party legal name",
                    "questionType": "TEXT",
                    "isRequired": True,
                    "order": 3,
                    "conditionalLogic": {
                        "showIf": {
                            "questionKey": "fourth_party",
                            "operator": "EQUALS",
                            "value": "Yes",
                        }
                    },
                },
            ],
        },
        {
            "id": "sec-sanctions",
            "title": "Sanctions",
            "order": 3,
            "conditionalLogic": {
                "showIf": {
                    "questionKey": "country",
                    "operator": "IN",
                    "values": ["Russia", "China"],
                }
            },
            "questions": [
                {
                    "id": "q-listed",
                    "questionKey": "sanctions_listed",
                    "questionText": "Listed on sanctions lists?",
                    "questionType": "BOOLEAN",
                    "isRequired": True,
                    "order": 1,
                    "maxPoints": 3,
                    "weightage": 3.0,
                    "options": {
                        "choices": [
                            {"value": "Yes", "riskScore": 3},
                            {"value": "No", "riskScore": 1},
                        ]
                    },
                },
            ],
        },
    ],
}


@pytest.fixture
def form_payload():
    """
    Factory fixture returning a fresh copy of a small three-section form.

    The sanctions section is only shown for Russia or China.

    Usage:
        def test_example(form_payload):
            payload = form_payload()
            payload["sections"][0]["order"] = 2
    """
    def _create_payload():
        return copy.deepcopy(_BASE_FORM)
    return _create_payload


@pytest.fixture
def mini_form(form_payload):
    """Validated FormDefinition built from ``form_payload``."""
    from engines.form_definition import load_form_definition

    return load_form_definition(form_payload())


@pytest.fixture
def tracs_form_path():
    """Path of the packaged TRACS RIF document."""
    import riskintake

    return Path(riskintake.__file__).parent / "forms" / "tracs_rif.json"


@pytest.fixture
def tracs_form(tracs_form_path):
    """The packaged TRACS RIF form, validated."""
    from engines.form_definition import FormDefinitionLoader

    return FormDefinitionLoader().load_json(tracs_form_path.read_text(encoding="utf-8"))


# =============================================================================
# ANSWER FIXTURES
# =============================================================================


@pytest.fixture
def answer_set_factory():
    """
    Factory fixture for building answer sets from ``{questionId: value}``.

    Usage:
        def test_example(answer_set_factory):
            answers = answer_set_factory({"q-country": "USA"}, finalized=True)
    """
    from engines.form_definition import build_answer_set

    def _create_answers(
        values: dict = None,
        submission_id: str = "sub-001",
        finalized: bool = False,
        follow_ups: dict = None,
    ):
        follow_ups = follow_ups or {}
        records = [
            {
                "questionId": question_id,
                "value": value,
                "followUpText": follow_ups.get(question_id),
            }
            for question_id, value in (values or {}).items()
        ]
        return build_answer_set(submission_id, records, finalized=finalized)
    return _create_answers


# =============================================================================
# COLLABORATOR MOCK FIXTURES
# =============================================================================


@pytest.fixture
def mock_form_store(mini_form):
    """
    AsyncMock form store returning ``mini_form``.

    Usage:
        async def test_example(mock_form_store):
            mock_form_store.load_form_definition.return_value = other_form
    """
    store = AsyncMock()
    store.load_form_definition.return_value = mini_form
    return store


@pytest.fixture
def mock_answer_store(answer_set_factory):
    """AsyncMock answer store returning an empty finalized answer set."""
    store = AsyncMock()
    store.load_answers.return_value = answer_set_factory(finalized=True)
    return store


@pytest.fixture
def mock_score_sink():
    """AsyncMock score sink recording persisted results."""
    sink = AsyncMock()
    sink.persist_score_result.return_value = None
    return sink


# =============================================================================
# CONTAINER FIXTURES
# =============================================================================


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at an empty temporary forms directory."""
    from riskintake.core.config import Settings

    return Settings(forms_dir=tmp_path, log_to_file=False)


@pytest.fixture
def test_container(test_settings, mock_form_store):
    """
    DependencyContainer with a mocked form store for isolated testing.

    Usage:
        async def test_example(test_container):
            service = test_container.scoring_service
    """
    from riskintake.services.container import DependencyContainer

    container = DependencyContainer(settings=test_settings)
    container.override_form_store(mock_form_store)
    return container


# =============================================================================
# LOGGER FIXTURES
# =============================================================================


@pytest.fixture
def mock_logger():
    """
    Mock ScoringLogger for asserting on run tracing.

    Usage:
        def test_example(mock_logger):
            service = ScoringService(..., logger=mock_logger)
            mock_logger.run_start.assert_called_once()
    """
    logger = MagicMock()
    logger.run_start = MagicMock()
    logger.run_end = MagicMock()
    logger.unresolved_reference = MagicMock()
    logger.review_needed = MagicMock()
    logger.error = MagicMock()
    logger.debug = MagicMock()
    return logger


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
