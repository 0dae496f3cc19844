from __future__ import annotations
import pytest
import requests
from app import create_app
from app.config import Config
from app.extensions import db, temp_assets
from app.models import Account


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    PUBLIC_URL = None
    OBJECT_STORAGE_ENDPOINT = None
    OBJECT_STORAGE_BUCKET = None
    AI_API_KEY = "test-key"
    AI_BASE_URL = "http://asr.test"
    AI_MODEL_BASE_URL = "http://llm.test"
    ASR_MAX_ATTEMPTS = 3
    ASR_RETRY_BACKOFF = 0


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """按顺序返回预设响应，记录每次 post 调用。"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeStorage:
    def __init__(self):
        self.objects = {}

    def upload_bytes(self, data, object_name, content_type):
        self.objects[object_name] = (data, content_type)
        return object_name

    def presigned_url(self, object_name, expires):
        return f"https://bucket.test/{object_name}?expires={int(expires.total_seconds())}"


@pytest.fixture(scope="session")
def app():
    app = create_app(TestConfig())
    with app.app_context():
        db.drop_all()
        db.create_all()
    yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def clean_state(app):
    yield
    with app.app_context():
        db.session.query(Account).delete()
        db.session.commit()
    temp_assets.clear()


@pytest.fixture()
def fake_storage(app, monkeypatch):
    storage = FakeStorage()
    monkeypatch.setitem(app.extensions, "object_storage", storage)
    return storage


@pytest.fixture()
def fake_response():
    return FakeResponse


@pytest.fixture()
def fake_session():
    return FakeSession
