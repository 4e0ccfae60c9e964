import os
import tempfile

import pytest

# The engine is built at import time, so the database must be chosen first
_DB_DIR = tempfile.mkdtemp(prefix="aula-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_DB_DIR, "test.db")
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("OPENROUTER_API_KEY", None)

from fastapi.testclient import TestClient  # noqa: E402

from aula.db import Base, SessionLocal, engine  # noqa: E402
from aula.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """Register a teacher (if needed) and return bearer headers for them."""

    def _login(email="ana@example.com", password="secreto1", **profile):
        client.post("/auth/register", json={"email": email, "password": password, **profile})
        r = client.post("/auth/token", data={"username": email, "password": password})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _login


@pytest.fixture
def headers(login):
    return login()


@pytest.fixture
def catalog(client, headers):
    """Two barriers, three styles and three tagged activities."""

    def create(path, payload):
        r = client.post(path, json=payload, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()["id"]

    b1 = create("/barriers", {"name": "Dislexia", "description": "Dificultad lectora"})
    b2 = create("/barriers", {"name": "Déficit de atención", "description": "Dificultad para mantener el foco"})
    s1 = create("/learning-styles", {"name": "Visual", "description": "Imágenes", "color": "#10b981"})
    s2 = create("/learning-styles", {"name": "Auditivo", "description": "Sonido"})
    s3 = create("/learning-styles", {"name": "Kinestésico", "description": "Movimiento"})
    a1 = create("/activities", {
        "name": "Mapa Visual",
        "objective": "Organizar ideas",
        "materials": ["Papel", "Marcadores"],
        "development": {"description": "", "steps": [{"description": "Dibujar", "duration": "10 minutos"}]},
        "barrier_ids": [b1],
        "learning_style_ids": [s1, s2],
    })
    a2 = create("/activities", {
        "name": "Cuento sonoro",
        "barrier_ids": [b1, b2],
        "learning_style_ids": [s2],
    })
    a3 = create("/activities", {
        "name": "Circuito",
        "barrier_ids": [b2],
        "learning_style_ids": [s1, s3],
    })
    return {"b1": b1, "b2": b2, "s1": s1, "s2": s2, "s3": s3, "a1": a1, "a2": a2, "a3": a3}
