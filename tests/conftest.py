from __future__ import annotations

import os
import uuid
from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine

from client_registry.api.deps import get_db, get_geocoder
from client_registry.db import session as db_session_module
from client_registry.main import app
from client_registry.services.geocoding import GeocodingClient

TORONTO = (43.6532, -79.3832)


class FakeGeocodingProvider:
    """Stands in for the provider behind an httpx.MockTransport."""

    def __init__(self) -> None:
        self.status = "OK"
        self.results: list[dict[str, Any]] = [
            {"geometry": {"location": {"lat": TORONTO[0], "lng": TORONTO[1]}}},
        ]
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(200, json={"status": self.status, "results": self.results})


@pytest.fixture()
def db_engine(tmp_path):
    test_database_url = os.getenv("TEST_DATABASE_URL")
    if not test_database_url:
        db_path = tmp_path / f"test_{uuid.uuid4().hex}.db"
        test_database_url = f"sqlite:///{db_path}"

    connect_args = {"check_same_thread": False} if test_database_url.startswith("sqlite") else {}
    engine = create_engine(test_database_url, connect_args=connect_args)
    SQLModel.metadata.create_all(bind=engine)

    original_engine = db_session_module.engine
    db_session_module.engine = engine

    yield engine

    db_session_module.engine = original_engine
    SQLModel.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(db_engine) -> Session:
    with Session(db_engine) as session:
        yield session


@pytest.fixture()
def geocoding_provider() -> FakeGeocodingProvider:
    return FakeGeocodingProvider()


@pytest.fixture()
def geocoder(geocoding_provider: FakeGeocodingProvider) -> GeocodingClient:
    return GeocodingClient(
        "https://geocoding.test/maps/api/geocode",
        api_key="test-key",
        timeout_seconds=5.0,
        transport=httpx.MockTransport(geocoding_provider.handler),
    )


@pytest.fixture()
def client(db_engine, geocoder: GeocodingClient) -> TestClient:
    def override_db():
        with Session(db_engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_geocoder] = lambda: geocoder
    yield TestClient(app)
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_geocoder, None)


@pytest.fixture()
def make_payload() -> Callable[..., dict[str, Any]]:
    def _make(**overrides: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": "Jane Doe",
            "address": "100 Queen St W",
            "city": "Toronto",
            "province": "ON",
            "postal_code": "M5H 2N2",
            "country": "Canada",
            "dial_code_1": "+1",
            "phone_number_1": "4165550100",
            "dial_code_2": None,
            "phone_number_2": None,
            "email": "jane@example.com",
            "sin_number": "046454286",
            "notes": "Prefers mornings",
            "alternative_contacts": [
                {
                    "name": "John Doe",
                    "dial_code": "+1",
                    "phone_number": "4165550101",
                    "email": "john@example.com",
                    "notes": "Spouse",
                },
            ],
        }
        payload.update(overrides)
        return payload

    return _make
