# tests/conftest.py
import os

# Settings are read at import time; give them something to read.
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.test")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "service-key-for-tests")

import pytest
from fastapi.testclient import TestClient

from docbook.main import app
from tests._stubs import FakeIdentityProvider


@pytest.fixture
def provider():
    return FakeIdentityProvider()


@pytest.fixture
def client(provider):
    app.state.identity_provider = provider
    with TestClient(app) as c:
        yield c
    app.state.identity_provider = None
