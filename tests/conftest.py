import os
import sys
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

# SQLite pour les tests, AVANT d'importer taskflow
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import uuid
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///./test.db"
test_engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

# PATCH: remplacer le engine et SessionLocal du core.database AVANT d'importer l'app
import taskflow.core.database
taskflow.core.database.engine = test_engine
taskflow.core.database.SessionLocal = TestingSessionLocal

from taskflow.core.database import Base, get_db
from taskflow.core.security import issue_session_token
from taskflow.main import app
from taskflow.models.user import User
from taskflow.realtime.broadcaster import broadcaster

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

# Override la dépendance
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_teardown():
    """Crée et nettoie la DB avant/après chaque test"""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    broadcaster.connections.clear()
    yield
    broadcaster.connections.clear()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client():
    """Client de test FastAPI.

    Utilisé en context manager : HTTP et websockets partagent la même boucle,
    les événements publiés par une requête arrivent sur les sockets ouverts.
    """
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    """Session DB pour les tests"""
    db = TestingSessionLocal()
    yield db
    db.close()


def create_test_user(username=None, email=None, password="password123", display_name=None):
    unique_id = str(uuid.uuid4())[:8]
    db = TestingSessionLocal()
    user = User(
        username=username or f"user_{unique_id}",
        email=email or f"user_{unique_id}@example.com",
        display_name=display_name
    )
    user.set_password(password)
    db.add(user)
    db.commit()
    db.refresh(user)
    db.close()
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {issue_session_token(user.id, user.email)}"}


@pytest.fixture
def alice():
    return create_test_user(username="alice", email="alice@example.com", display_name="Alice")


@pytest.fixture
def bob():
    return create_test_user(username="bob", email="bob@example.com", display_name="Bob")


@pytest.fixture
def live_server():
    """Vrai serveur uvicorn sur un port libre, dans un thread"""
    import socket
    import threading
    import time
    import uvicorn

    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]

    server = uvicorn.Server(uvicorn.Config(app, host="127.0.0.1", port=port, log_config=None, log_level="warning"))
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    deadline = time.monotonic() + 10
    while not server.started:
        if time.monotonic() > deadline or not thread.is_alive():
            raise RuntimeError("uvicorn did not start")
        time.sleep(0.05)

    yield f"http://127.0.0.1:{port}"

    server.should_exit = True
    thread.join(timeout=10)
