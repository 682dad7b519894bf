import os
import tempfile

# Settings are read at import time, so they must be in place before the app loads
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["MONGO_URI"] = ""
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="hub-uploads-")
os.environ["LOG_TO_FILE"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["APP_ENV"] = "test"

import pytest
from fastapi.testclient import TestClient

from app.database.store import memory_store, use_store
from main import app


@pytest.fixture
def store():
    """A fresh in-memory store installed as the active one."""
    return use_store(memory_store())


@pytest.fixture
def client():
    # Entering the client runs the lifespan, which installs an empty in-memory store
    with TestClient(app) as c:
        yield c


@pytest.fixture
def register(client):
    """Register an account over HTTP and return ``(token, user)``."""
    counter = {"n": 0}

    def _register(role="student", email=None, password="secret123", name=None, faculty="Engineering"):
        counter["n"] += 1
        payload = {
            "name": name or f"{role.capitalize()} {counter['n']}",
            "email": email or f"{role}{counter['n']}@hub.edu",
            "password": password,
            "role": role,
            "faculty": faculty,
        }
        resp = client.post("/api/auth/register", json=payload)
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return body["token"], body["user"]

    return _register
