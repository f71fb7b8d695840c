import os

# Pas de Redis réel pour le limiteur pendant les tests
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from typing import Any, Dict, Generator
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from storefront.app_setup.dependencies import (
    get_autofill_service,
    get_order_repository,
    get_profile_repository,
)
from storefront.app_setup.factory import create_app
from storefront.orders.repository import OrderRepository
from storefront.profiles.repository import ProfileRepository
from storefront.profiles.service import ProfileAutofillService
from storefront.utils.security import require_admin, require_user
from tests.fakes import InMemoryDataRepository

TEST_USER: Dict[str, Any] = {
    "id": "test-user",
    "email": "test@example.com",
    "role": "user",
    "user_metadata": {"full_name": "Test User"},
}

ADMIN_USER: Dict[str, Any] = {
    "id": "admin-user-id",
    "email": "admin@example.com",
    "role": "admin",
    "user_metadata": {"full_name": "Admin User"},
}


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


# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_user(app):
    app.dependency_overrides[require_user] = lambda: dict(TEST_USER)
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_user, None)


@pytest.fixture
def admin_client(app, client):
    app.dependency_overrides[require_admin] = lambda: dict(ADMIN_USER)
    try:
        yield client
    finally:
        app.dependency_overrides.pop(require_admin, None)


@pytest.fixture
def data_repo() -> InMemoryDataRepository:
    return InMemoryDataRepository()


@pytest.fixture
def order_repo(data_repo) -> OrderRepository:
    return OrderRepository(data_repo)


@pytest.fixture
def profile_repo(data_repo) -> ProfileRepository:
    return ProfileRepository(data_repo)


@pytest.fixture
def autofill_service(profile_repo, order_repo) -> ProfileAutofillService:
    return ProfileAutofillService.default(profile_repo, order_repo)


@pytest.fixture
def api_repos(app, order_repo, profile_repo, autofill_service):
    """Branche les repositories en mémoire sur les dépendances FastAPI."""
    app.dependency_overrides[get_order_repository] = lambda: order_repo
    app.dependency_overrides[get_profile_repository] = lambda: profile_repo
    app.dependency_overrides[get_autofill_service] = lambda: autofill_service
    try:
        yield
    finally:
        for dep in (get_order_repository, get_profile_repository, get_autofill_service):
            app.dependency_overrides.pop(dep, None)


# Aucun accès réseau à Supabase
@pytest.fixture(scope="function", autouse=True)
def mock_supabase(monkeypatch):
    monkeypatch.setattr("storefront.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("storefront.infra.supabase_client.get_service_supabase", lambda: MagicMock())
