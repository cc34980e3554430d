import os

# Environnement de test, posé avant tout import de travel_checkout.config
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")
os.environ["API_BASE_URL"] = "http://backend.test"
os.environ["FALLBACK_API_BASE_URL"] = ""
os.environ["PROCESSED_STORE_REDIS_URL"] = ""

import httpx
import pytest
import respx
from typing import Generator
from fastapi.testclient import TestClient

from travel_checkout.app_setup.factory import create_app
from travel_checkout.bookings.models import CheckoutSession
from travel_checkout.config import API_BASE_URL
from travel_checkout.infra.backend_client import BackendClient
from travel_checkout.utils.security import get_checkout_session

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture(scope="session")
def app():
    return create_app()

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture()
def session() -> CheckoutSession:
    return CheckoutSession(access_token="fake-token", user_id=7, role="customer")

# Simuler un utilisateur connecté pour les endpoints protégés
@pytest.fixture()
def logged_in(app, session):
    app.dependency_overrides[get_checkout_session] = lambda: session
    try:
        yield session
    finally:
        app.dependency_overrides.pop(get_checkout_session, None)

@pytest.fixture()
def backend() -> BackendClient:
    """Client backend sur un httpx.AsyncClient neuf (intercepté par respx)."""
    return BackendClient(
        base_url=API_BASE_URL,
        access_token="fake-token",
        http=httpx.AsyncClient(base_url=API_BASE_URL),
    )

@pytest.fixture()
def backend_mock():
    with respx.mock(base_url=API_BASE_URL, assert_all_called=False) as mock:
        yield mock
