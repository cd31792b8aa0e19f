import contextlib

import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from conftest import create_token, make_hit, make_search_output

from oer_search.main import app
from oer_search.api.dependencies import get_search_service
from oer_search.index.client import DocumentNotFoundError, IndexClient, IndexRequestError
from oer_search.providers.images import ImageSearchClient, ImageSearchError
from oer_search.search.languages import LanguageCache
from oer_search.search.service import SearchService


@pytest.fixture
def mock_index():
    mock = AsyncMock(spec=IndexClient)
    mock.search.return_value = make_search_output([make_hit(1), make_hit(2)], total=2)
    return mock


@pytest.fixture
def mock_images():
    return AsyncMock(spec=ImageSearchClient)


@pytest.fixture
def client(mock_index, mock_images):
    service = SearchService(
        index=mock_index,
        images=mock_images,
        languages=LanguageCache(),
        search_base_url="https://platform.x5gon.org/api/v2/search",
        recommend_base_url="https://platform.x5gon.org/api/v1/recommend/materials",
    )
    app.dependency_overrides[get_search_service] = lambda: service

    # Mock lifespan to avoid contacting the index engine
    @contextlib.asynccontextmanager
    async def mock_lifespan(app):
        yield

    app.router.lifespan_context = mock_lifespan

    with TestClient(app) as c:
        yield c

    app.dependency_overrides = {}


def auth(token):
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------

def test_search(client, mock_index):
    response = client.get(
        "/api/v1/oer_materials",
        params={"text": "  Machine Learning ", "licenses": "BY,cc", "limit": "abc", "wikipedia": "true"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["query"] == {
        "text": "Machine Learning",
        "licenses": ["by", "cc"],
        "wikipedia": True,
        "limit": 20,
        "page": 1,
    }
    assert [r["material_id"] for r in data["rec_materials"]] == [1, 2]
    assert "wikipedia" in data["rec_materials"][0]
    assert data["metadata"]["total_hits"] == 2
    assert data["metadata"]["total_pages"] == 1


def test_search_without_text(client, mock_index):
    response = client.get("/api/v1/oer_materials", params={"types": "video"})

    assert response.status_code == 400
    assert response.json() == {
        "message": "query parameter 'text' not available",
        "query": {"types": "video"},
    }
    mock_index.search.assert_not_awaited()


def test_search_index_failure_is_generic(client, mock_index):
    mock_index.search.side_effect = IndexRequestError("Index request failed: ConnectError")

    response = client.get("/api/v1/oer_materials", params={"text": "x"})

    assert response.status_code == 500
    assert response.json() == {"error": "internal_server_error", "detail": "Internal server error"}


def test_image_provider_failure_is_generic(client, mock_images):
    mock_images.search.side_effect = ImageSearchError("Image provider responded with status 503")

    response = client.get("/api/v1/oer_materials", params={"text": "cat", "types": "image"})

    assert response.status_code == 500
    assert response.json()["error"] == "internal_server_error"


def test_search_with_unusable_types(client, mock_index):
    response = client.get("/api/v1/oer_materials", params={"text": "x", "types": "*.*"})

    assert response.status_code == 400
    assert response.json()["query"]["types"] == "*.*"
    mock_index.search.assert_not_awaited()


def test_recommend(client, mock_index):
    mock_index.search.side_effect = [
        make_search_output([make_hit(1)]),
        make_search_output([make_hit(8)]),
    ]

    response = client.get("/api/v1/recommend/materials", params={"url": "http://videolectures.net/lecture_1/"})

    assert response.status_code == 200
    assert [r["material_id"] for r in response.json()["rec_materials"]] == [8]


def test_recommend_without_text_or_url(client):
    response = client.get("/api/v1/recommend/materials")

    assert response.status_code == 400
    assert response.json()["query"] == {}


# ---------------------------------------------------------------------
# Materials
# ---------------------------------------------------------------------

def test_get_material(client, mock_index):
    mock_index.search.return_value = make_search_output([make_hit(7)])

    response = client.get("/api/v1/oer_materials/7", params={"wikipedia": "true", "wikipedia_limit": "3"})

    assert response.status_code == 200
    record = response.json()["rec_materials"]
    assert record["material_id"] == 7
    assert len(record["wikipedia"]) == 3


def test_get_missing_material(client, mock_index):
    mock_index.search.return_value = make_search_output([])

    response = client.get("/api/v1/oer_materials/404")

    assert response.status_code == 404
    assert response.json() == {"error": "not_found", "detail": "material 404 not found"}


def test_create_requires_token(client, mock_index):
    response = client.post("/api/v1/oer_materials", json={"record": {"material_id": 9}})

    assert response.status_code in (401, 403)
    mock_index.index_document.assert_not_awaited()


def test_create_with_expired_token(client):
    response = client.post(
        "/api/v1/oer_materials",
        json={"record": {"material_id": 9}},
        headers=auth(create_token(expired=True)),
    )
    assert response.status_code == 401


def test_create_without_write_scope(client, mock_index):
    response = client.post(
        "/api/v1/oer_materials",
        json={"record": {"material_id": 9}},
        headers=auth(create_token(scopes=["read"])),
    )

    assert response.status_code == 403
    mock_index.index_document.assert_not_awaited()


def test_create_material(client, mock_index, write_token):
    response = client.post(
        "/api/v1/oer_materials",
        json={"record": {"material_id": 9, "title": "Graphs", "license": None}},
        headers=auth(write_token),
    )

    assert response.status_code == 200
    assert response.json() == {"message": "record pushed to the index", "material_id": 9}
    mock_index.refresh.assert_awaited_once()


def test_create_material_with_bad_license(client, write_token):
    response = client.post(
        "/api/v1/oer_materials",
        json={"record": {"material_id": 9, "license": "http://example.org/terms"}},
        headers=auth(write_token),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_record"


def test_create_material_without_id(client, write_token):
    response = client.post(
        "/api/v1/oer_materials",
        json={"record": {"title": "Graphs"}},
        headers=auth(write_token),
    )

    assert response.status_code == 400
    assert "material_id" in response.json()["message"]


def test_create_material_with_non_integer_id(client, mock_index, write_token):
    response = client.post(
        "/api/v1/oer_materials",
        json={"record": {"material_id": "abc"}},
        headers=auth(write_token),
    )

    assert response.status_code == 400
    assert "integer" in response.json()["message"]
    mock_index.index_document.assert_not_awaited()


def test_update_material(client, mock_index, write_token):
    response = client.patch(
        "/api/v1/oer_materials/9",
        json={"record": {"title": "Graphs"}},
        headers=auth(write_token),
    )

    assert response.status_code == 200
    assert response.json() == {"message": "record updated in the index"}
    mock_index.update_document.assert_awaited_once_with(9, {"title": "Graphs"})


def test_update_missing_material(client, mock_index, write_token):
    mock_index.update_document.side_effect = DocumentNotFoundError(9)

    response = client.patch(
        "/api/v1/oer_materials/9",
        json={"record": {"title": "Graphs"}},
        headers=auth(write_token),
    )

    assert response.status_code == 404


def test_delete_material(client, mock_index, write_token):
    response = client.delete("/api/v1/oer_materials/9", headers=auth(write_token))

    assert response.status_code == 200
    assert response.json() == {"message": "record deleted in the index"}
    mock_index.delete_document.assert_awaited_once_with(9)


# ---------------------------------------------------------------------
# Languages and health
# ---------------------------------------------------------------------

def test_refresh_languages_requires_admin(client, write_token):
    response = client.post("/api/v1/languages/refresh", headers=auth(write_token))
    assert response.status_code == 403


def test_refresh_and_list_languages(client, mock_index):
    mock_index.search.return_value = {
        "aggregations": {"languages": {"buckets": [{"key": "en", "doc_count": 3}]}},
    }

    response = client.post("/api/v1/languages/refresh", headers=auth(create_token(scopes=["admin"])))
    assert response.status_code == 200
    assert response.json()["languages"] == ["en"]

    listed = client.get("/api/v1/languages").json()
    assert listed["languages"] == ["en"]
    assert listed["refreshed_at"] is not None


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
