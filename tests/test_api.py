"""
Tests for API endpoints
"""

import pytest
from fastapi.testclient import TestClient

import sys
sys.path.insert(0, '.')

from src.api.main import app
from src.core.config import settings
from src.database import connection


REPORT_FORM = {
    "severity": "2",
    "animal_type": "deer",
    "description": "Grazing on the lawn",
    "date_reported": "2025-05-01",
}


@pytest.fixture
def api_db(tmp_path, monkeypatch):
    monkeypatch.setattr(connection, "_db", None)
    monkeypatch.setattr(settings, "images_dir", str(tmp_path / "images"))
    db = connection.init_db(f"sqlite:///{tmp_path}/test.db")
    yield db
    db.close()


@pytest.fixture
def client(api_db):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signed_in(client, api_db, add_user):
    user_id, token = add_user(db=api_db)
    client.cookies.set("auth_token", token)
    client.cookies.set("userId", user_id)
    return user_id


def create(client, **overrides):
    form = dict(REPORT_FORM, **overrides)
    response = client.post("/reports/create", data=form)
    assert response.status_code == 201, response.text
    return response.json()["report_id"]


class TestSystemEndpoints:
    """Test suite for system routes."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "OK"
        assert response.json()["database"] is True

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "/docs" in response.text


class TestReportEndpoints:
    """Test suite for report routes."""

    def test_create_and_get(self, client):
        report_id = create(client, location_lat="47.6062", location_lon="-122.3321")

        response = client.get(f"/reports/get/{report_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["report_id"] == report_id
        assert data["animal_type"] == "deer"
        assert data["location_lat"] == 47.6062
        assert data["image"] is None

    def test_create_with_image(self, client, png_bytes):
        response = client.post(
            "/reports/create",
            data=REPORT_FORM,
            files={"image": ("photo.png", png_bytes, "image/png")},
        )
        assert response.status_code == 201
        report_id = response.json()["report_id"]

        image = client.get(f"/reports/image/{report_id}")
        assert image.status_code == 200
        assert image.headers["content-type"] == "image/jpeg"
        assert image.content.startswith(b"\xff\xd8")

        report = client.get(f"/reports/get/{report_id}").json()
        assert report["image"].startswith("data:image/jpeg;base64,")

    def test_create_rejects_non_image(self, client):
        response = client.post(
            "/reports/create",
            data=REPORT_FORM,
            files={"image": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Only image files are allowed"
        assert client.get("/reports/page?page=1").json()["reports"] == []

    def test_create_missing_fields(self, client):
        response = client.post("/reports/create", data={"animal_type": "deer"})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required report data"

    def test_create_records_user_cookie(self, client):
        client.cookies.set("userId", "000000000007")
        report_id = create(client)

        assert client.get(f"/reports/get/{report_id}").json()["user_id"] == "000000000007"

    def test_get_unknown_report(self, client):
        response = client.get("/reports/get/12345678")

        assert response.status_code == 404
        assert response.json() == {"error": "Report not found"}

    def test_page(self, client):
        for _ in range(12):
            create(client)

        first = client.get("/reports/page", params={"page": 1}).json()
        second = client.get("/reports/page", params={"page": 2}).json()

        assert len(first["reports"]) == 10
        assert first["hasMore"] is True
        assert first["totalPages"] == 2
        assert len(second["reports"]) == 2
        assert second["hasMore"] is False

        ids = [r["report_id"] for r in first["reports"] + second["reports"]]
        assert ids == sorted(ids, reverse=True)

    def test_page_errors(self, client):
        create(client)

        for page in ("0", "abc", ""):
            response = client.get("/reports/page", params={"page": page})
            assert response.status_code == 400
            assert response.json()["error"] == "Invalid page number"

        response = client.get("/reports/page", params={"page": 2})
        assert response.status_code == 400
        assert response.json()["error"] == "Page number exceeds total pages"

    def test_latest(self, client):
        for _ in range(3):
            create(client)
        create(client, animal_type="Bear")

        assert len(client.get("/reports/latest").json()["reports"]) == 4
        assert len(client.get("/reports/latest?report_count=2").json()["reports"]) == 2

        bears = client.get("/reports/latest?animal_type=bear").json()["reports"]
        assert [r["animal_type"] for r in bears] == ["Bear"]
        padded = client.get("/reports/latest", params={"animal_type": " bear "}).json()["reports"]
        assert [r["animal_type"] for r in padded] == ["Bear"]

        for count in ("0", "101"):
            response = client.get(f"/reports/latest?report_count={count}")
            assert response.status_code == 400

    def test_nearby(self, client):
        deer = create(client, location_lat="47.6062", location_lon="-122.3321")
        create(client, animal_type="bear", severity="1", location_lat="47.65", location_lon="-122.35")
        create(client)

        response = client.get("/reports/nearby", params={"lat": 47.6062, "lon": -122.3321})

        assert response.status_code == 200
        data = response.json()
        assert data["total_found"] == 1
        assert data["reports"][0]["report_id"] == deer
        assert data["reports"][0]["distance_miles"] == 0.0
        assert data["search_center"] == {"lat": 47.6062, "lon": -122.3321}
        assert data["search_radius_miles"] == 0.5

    def test_nearby_filters_and_cap(self, client):
        create(client, animal_type="bear", location_lat="47.65", location_lon="-122.35")

        bears = client.get(
            "/reports/nearby",
            params={"lat": 47.65, "lon": -122.35, "animal_type": "BEAR", "report_count": 500},
        ).json()
        assert bears["total_found"] == 1

        none = client.get(
            "/reports/nearby",
            params={"lat": 47.65, "lon": -122.35, "severity": 5},
        ).json()
        assert none["total_found"] == 0

    def test_nearby_non_ascii_animal(self, client):
        elk = create(client, animal_type="Élan", location_lat="47.6062", location_lon="-122.3321")

        data = client.get(
            "/reports/nearby",
            params={"lat": 47.6062, "lon": -122.3321, "animal_type": "élan"},
        ).json()

        assert [r["report_id"] for r in data["reports"]] == [elk]

    def test_nearby_bad_coordinates(self, client):
        for params in ({"lat": 91, "lon": 0}, {"lat": "north", "lon": 0}, {"lon": 0}):
            response = client.get("/reports/nearby", params=params)
            assert response.status_code == 400
            assert "error" in response.json()

    def test_personal_requires_session(self, client):
        response = client.get("/reports/personal")

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_personal(self, client, signed_in):
        mine = create(client)
        client.cookies.set("userId", "someone-else")
        create(client)
        client.cookies.set("userId", signed_in)

        response = client.get("/reports/personal")

        assert response.status_code == 200
        assert [r["report_id"] for r in response.json()["reports"]] == [mine]

    def test_download(self, client):
        create(client)
        create(client)

        response = client.get("/reports/download")

        assert response.status_code == 200
        assert "attachment" in response.headers["content-disposition"]
        assert response.headers["content-encoding"] == "gzip"
        # httpx decodes the gzip body transparently
        assert len(response.json()) == 2

    def test_image_errors(self, client):
        assert client.get("/reports/image/abc").status_code == 400
        assert client.get("/reports/image/12345678").status_code == 404


class TestDiscussionEndpoints:
    """Test suite for discussion routes."""

    def test_create_requires_session(self, client):
        response = client.post("/discussion/create", json={"postData": {"title": "t", "message": "m"}})

        assert response.status_code == 401

    def test_create_get_page(self, client, signed_in):
        response = client.post(
            "/discussion/create",
            json={"postData": {"title": "Coyotes", "message": "Two near the lake"}},
        )
        assert response.status_code == 201
        post_id = response.json()["post_id"]

        post = client.get("/discussion/get", params={"post_id": post_id}).json()
        assert post["title"] == "Coyotes"
        assert post["user_id"] == signed_in

        page = client.get("/discussion/page", params={"page": 1}).json()
        assert [p["post_id"] for p in page["posts"]] == [post_id]
        assert page["hasMore"] is False

    def test_create_missing_data(self, client, signed_in):
        response = client.post("/discussion/create", json={"postData": {"title": "t"}})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required post data"

    def test_get_unknown_post(self, client):
        response = client.get("/discussion/get", params={"post_id": 12345678})

        assert response.status_code == 404
        assert response.json() == {"error": "Post not found"}

    def test_page_errors(self, client):
        assert client.get("/discussion/page").status_code == 400
        assert client.get("/discussion/page?page=0").status_code == 400
