import pytest
from fastapi.testclient import TestClient

from stageflow.api.deps import get_scheduling_services
from stageflow.core.config import Settings
from stageflow.main import create_app


@pytest.fixture
def client(services, repository) -> TestClient:
    """Client whose routes use the test's in-memory services and fixed clock."""
    app = create_app(settings=Settings(_env_file=None), repository=repository)
    app.dependency_overrides[get_scheduling_services] = lambda: services
    return TestClient(app)
