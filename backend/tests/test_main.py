from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from conftest import STRONG_PASSWORD
from eventauth.api import deps
from eventauth.database import Base
from eventauth.main import app


def test_app_serves_signups_after_a_restart():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[deps.get_db] = override_get_db
    try:
        with TestClient(app) as client:
            first = client.post(
                "/api/auth/signup",
                json={"email": "first@example.com", "password": STRONG_PASSWORD},
            )
            assert first.status_code == 201

        with TestClient(app) as client:
            assert client.get("/health").json()["status"] == "healthy"
            second = client.post(
                "/api/auth/signup",
                json={"email": "second@example.com", "password": STRONG_PASSWORD},
            )
            assert second.status_code == 201
            signin = client.post(
                "/api/auth/signin",
                json={"email": "first@example.com", "password": STRONG_PASSWORD},
            )
            assert signin.status_code == 200
    finally:
        app.dependency_overrides.clear()
        engine.dispose()
