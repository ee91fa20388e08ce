# tests/test_health.py
import inspect

from fastapi import status
from fastapi.routing import APIRoute


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


def test_root(client) -> None:
    data = client.get("/").json()
    assert data["name"] == "Threadline"
    assert data["docs"] == "/docs"


def test_database_routes_run_in_the_threadpool(app) -> None:
    api_routes = [
        route for route in app.routes
        if isinstance(route, APIRoute) and route.path.startswith("/api/")
    ]
    assert api_routes
    for route in api_routes:
        assert not inspect.iscoroutinefunction(route.endpoint), route.path
