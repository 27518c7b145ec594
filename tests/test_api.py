"""Tests for the REST API."""

import pytest
from fastapi.testclient import TestClient

from survey_service.api import create_app
from survey_service.api.dependencies import get_response_service, get_survey_repository
from survey_service.services import ResponseService

from conftest import SATISFACTION_MD, make_unit


@pytest.fixture
def client(repository):
    """Test client wired to a temporary database. Startup seeding is not run."""
    service = ResponseService(repository)
    app = create_app(allowed_origins=["*"])
    app.dependency_overrides[get_survey_repository] = lambda: repository
    app.dependency_overrides[get_response_service] = lambda: service
    yield TestClient(app)
    service.close()


@pytest.fixture
def survey(repository):
    return repository.create_survey(make_unit("Customer Satisfaction", SATISFACTION_MD))


def _answers(survey):
    single, text = survey.sections[0].questions
    return [
        {"kind": "single", "question_id": single.id, "option_id": single.options[0].id},
        {"kind": "text", "question_id": text.id, "text": "Nice"},
    ]


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestSurveyEndpoints:
    """Test survey listing and lookup."""

    def test_list_active_surveys(self, client, repository, survey):
        """Test that inactive versions are not listed."""
        hidden = repository.create_survey(make_unit("Hidden", SATISFACTION_MD))
        repository.set_active(hidden.id, False)

        response = client.get("/surveys")

        assert response.status_code == 200
        body = response.json()
        assert [item["id"] for item in body] == [survey.id]
        assert body[0]["title"] == "Customer Satisfaction"
        assert body[0]["is_active"] is True
        assert body[0]["sections"][0]["questions"][1]["type"] == "text"

    def test_get_inactive_survey_by_id(self, client, repository, survey):
        """Test that superseded versions stay readable by id."""
        repository.set_active(survey.id, False)

        response = client.get(f"/surveys/{survey.id}")

        assert response.status_code == 200
        assert response.json()["is_active"] is False

    def test_get_unknown_survey(self, client):
        response = client.get("/surveys/missing")

        assert response.status_code == 404
        assert response.json()["detail"] == "Survey not found"


class TestResponseEndpoints:
    """Test response submission and reporting."""

    def test_submit_response(self, client, survey):
        """Test a valid submission."""
        response = client.post(
            "/responses",
            json={"survey_id": survey.id, "email": "user@example.com", "answers": _answers(survey)},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Response submitted successfully"
        assert body["response"]["survey_id"] == survey.id
        assert body["response"]["answers"][0]["kind"] == "single"

        print(f"Submitted response: {body['response']['id']}")

    def test_submit_to_unknown_survey(self, client, survey):
        response = client.post(
            "/responses",
            json={"survey_id": "missing", "email": "user@example.com", "answers": _answers(survey)},
        )

        assert response.status_code == 404

    def test_submit_invalid_answers(self, client, survey):
        """Test that validation problems are returned to the client."""
        answers = _answers(survey)[:1]

        response = client.post(
            "/responses",
            json={"survey_id": survey.id, "email": "user@example.com", "answers": answers},
        )

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["message"] == "Invalid response data"
        assert len(detail["errors"]) == 1

    def test_submit_malformed_payload(self, client, survey):
        """Test that payloads failing model validation are rejected."""
        response = client.post(
            "/responses",
            json={"survey_id": survey.id, "email": "nope", "answers": _answers(survey)},
        )

        assert response.status_code == 422

    def test_list_responses(self, client, survey):
        client.post(
            "/responses",
            json={"survey_id": survey.id, "email": "user@example.com", "answers": _answers(survey)},
        )

        response = client.get(f"/responses/survey/{survey.id}")

        assert response.status_code == 200
        assert len(response.json()) == 1
        assert response.json()[0]["email"] == "user@example.com"

    def test_formatted_responses(self, client, survey):
        """Test the human-readable report with pagination."""
        for _ in range(3):
            client.post(
                "/responses",
                json={
                    "survey_id": survey.id,
                    "email": "user@example.com",
                    "name": "Ada",
                    "answers": _answers(survey),
                },
            )

        response = client.get(f"/responses/survey/{survey.id}/formatted", params={"page": 2, "limit": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {
            "total_items": 3,
            "total_pages": 2,
            "current_page": 2,
            "page_size": 2,
        }
        assert len(body["responses"]) == 1
        formatted = body["responses"][0]
        assert formatted["name"] == "Ada"
        assert formatted["answers"][0] == {
            "question": "How satisfied are you?",
            "question_type": "single",
            "answer": "Very satisfied",
        }

    def test_formatted_responses_unknown_survey(self, client):
        response = client.get("/responses/survey/missing/formatted")

        assert response.status_code == 404

    def test_formatted_responses_rejects_bad_page(self, client, survey):
        response = client.get(f"/responses/survey/{survey.id}/formatted", params={"page": 0})

        assert response.status_code == 422
