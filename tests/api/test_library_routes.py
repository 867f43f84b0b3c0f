from unittest.mock import MagicMock

import pytest

from src.dependencies import get_library_service
from src.exceptions import AuthorizationError, NotFoundError
from src.models.schemas import UserFileListResponse, UserFileResponse, SuccessResponse
from src.services import LibraryService


@pytest.fixture
def library_service(app):
    service = MagicMock(spec=LibraryService)
    app.dependency_overrides[get_library_service] = lambda: service
    return service


def test_list_my_drops(client, library_service, auth_headers, sample_user_file):
    library_service.list_files.return_value = UserFileListResponse(
        files=[UserFileResponse.from_document(sample_user_file)]
    )

    response = client.get("/api/mydrops", params={"user_id": "tg_42"}, headers=auth_headers)

    assert response.status_code == 200
    files = response.json()["files"]
    assert files[0]["slug"] == "AbCdEf12"
    assert files[0]["type"] == "file"
    assert files[0]["created_at"] == "2026-01-15T12:30:00.000Z"

    user_id, claims = library_service.list_files.await_args.args
    assert user_id == "tg_42"
    assert claims.user_id == "tg_42"


def test_list_my_drops_without_token(client, library_service):
    library_service.list_files.return_value = UserFileListResponse()

    response = client.get("/api/mydrops", params={"user_id": "tg_42"})

    assert response.status_code == 200
    assert response.json() == {"files": []}
    assert library_service.list_files.await_args.args == ("tg_42", None)


def test_list_my_drops_of_another_user(client, library_service, auth_headers):
    library_service.list_files.side_effect = AuthorizationError("Access denied")

    response = client.get("/api/mydrops", params={"user_id": "tg_7"}, headers=auth_headers)

    assert response.status_code == 403
    assert response.json()["error"] == "Access denied"


def test_delete_my_drop(client, library_service, auth_headers):
    library_service.delete_file.return_value = SuccessResponse()

    response = client.delete("/api/mydrops/AbCdEf12", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True}
    claims, slug = library_service.delete_file.await_args.args
    assert claims.channel_id == 1001
    assert slug == "AbCdEf12"


def test_delete_unknown_drop(client, library_service, auth_headers):
    library_service.delete_file.side_effect = NotFoundError("File not found")

    response = client.delete("/api/mydrops/missing", headers=auth_headers)

    assert response.status_code == 404
