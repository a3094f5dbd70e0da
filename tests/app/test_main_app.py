from fastapi.testclient import TestClient

from careerflow.app.main import create_app


def test_health_check():
    with TestClient(create_app()) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_routers_registered():
    paths = {route.path for route in create_app().routes}

    for path in (
        "/api/users/login",
        "/api/users/settings",
        "/api/posts/generate",
        "/api/resumes/upload",
        "/api/analyses",
        "/api/roadmaps",
        "/api/interviews/{interview_id}/turns",
        "/api/interviews/{interview_id}/record",
        "/api/history",
    ):
        assert path in paths


def test_protected_route_requires_authentication():
    with TestClient(create_app()) as client:
        response = client.get("/api/history")

    assert response.status_code == 401
