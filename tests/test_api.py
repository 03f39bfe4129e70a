from unittest.mock import patch

import pytest
from bson import ObjectId
from flask_jwt_extended import create_access_token

from app import create_app
from onboarding.exceptions.exceptions import NotFoundError, ValidationError


@pytest.fixture
def app():
    flask_app = create_app(init_indexes=False)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth(app):
    def headers(role, user_id="64b000000000000000000001"):
        with app.app_context():
            token = create_access_token(identity=user_id, additional_claims={"userType": role, "id": user_id})
        return {"Authorization": f"Bearer {token}"}
    return headers


def test_health_check(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "running" in response.get_json()["message"]


def test_missing_token_is_rejected(client):
    with patch("onboarding.api.users_api.UserAdminService"):
        response = client.get("/api/v1/users")

    assert response.status_code == 401
    assert response.get_json()["error"] == "NO_AUTH_HEADER"


def test_garbage_token_is_rejected(client):
    with patch("onboarding.api.users_api.UserAdminService"):
        response = client.get("/api/v1/users", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401


def test_wrong_role_is_forbidden(client, auth):
    with patch("onboarding.api.report_upload_api.BulkUploadService") as service:
        response = client.post("/api/v1/candidate-reports/bulk-upload", json={}, headers=auth("trainee"))

    assert response.status_code == 403
    assert response.get_json()["error"] == "INSUFFICIENT_PERMISSIONS"
    service.return_value.bulk_upload.assert_not_called()


def test_user_listing_is_serialised(client, auth):
    user_id = ObjectId()
    with patch("onboarding.api.users_api.UserAdminService") as service:
        service.return_value.list_users.return_value = {
            "success": True, "users": [{"_id": user_id, "name": "Asha"}], "pagination": {"page": 2},
        }
        response = client.get("/api/v1/users?role=trainee&page=2", headers=auth("master_trainer"))

    assert response.status_code == 200
    assert response.get_json()["users"][0]["_id"] == str(user_id)
    service.return_value.list_users.assert_called_once_with("trainee", "active", 2, 50)


def test_bulk_upload_passes_actor_id(client, auth):
    body = {"spread_sheet_name": "Nov", "data_sets_to_be_loaded": "all", "candidate_reports_data": []}
    with patch("onboarding.api.report_upload_api.BulkUploadService") as service:
        service.return_value.bulk_upload.return_value = {"success": True, "createdCount": 0}
        response = client.post("/api/v1/candidate-reports/bulk-upload", json=body, headers=auth("boa", "boa-user"))

    assert response.status_code == 200
    service.return_value.bulk_upload.assert_called_once_with(body, "boa-user")


def test_service_errors_map_to_status_codes(client, auth):
    with patch("onboarding.api.report_upload_api.BulkUploadService") as service:
        service.return_value.validate_author_id.side_effect = NotFoundError("User not found with author_id Z9")
        missing = client.post("/api/v1/candidate-reports/validate-author", json={"author_id": "Z9"}, headers=auth("boa"))
        blank = client.post("/api/v1/candidate-reports/validate-author", json={}, headers=auth("boa"))

    assert missing.status_code == 404
    assert missing.get_json() == {"success": False, "message": "User not found with author_id Z9"}
    assert blank.status_code == 400
    assert blank.get_json()["message"] == "Author ID is required"


def test_report_upsert_requires_report_data(client, auth):
    with patch("onboarding.api.report_upload_api.BulkUploadService") as service:
        response = client.put("/api/v1/candidate-reports/A1/learning", json={}, headers=auth("admin"))

    assert response.status_code == 400
    assert response.get_json()["message"] == "Missing required fields: reportData"
    service.return_value.upsert_report.assert_not_called()


def test_performers_validation_error(client, auth):
    with patch("onboarding.api.performers_api.PerformersService") as service:
        service.return_value.learning_phase.side_effect = ValidationError("Valid phase is required (fast, average, or slow)")
        response = client.get("/api/v1/performers/learning-phase?phase=x", headers=auth("admin"))

    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_unexpected_errors_are_hidden(client, auth):
    with patch("onboarding.api.joiners_api.JoinerService") as service:
        service.return_value.get.side_effect = RuntimeError("connection string mongodb://secret")
        response = client.get("/api/v1/joiners/A1", headers=auth("boa"))

    assert response.status_code == 500
    assert response.get_json() == {"success": False, "message": "Server error"}


def test_joiner_create_returns_201(client, auth):
    with patch("onboarding.api.joiners_api.JoinerService") as service:
        service.return_value.create.return_value = {"message": "Joiner added successfully", "joiner": {}}
        response = client.post("/api/v1/joiners", json={"name": "Asha", "email": "a@example.com"}, headers=auth("boa"))

    assert response.status_code == 201
