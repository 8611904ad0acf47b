"""Shared fixtures: an in-memory Firestore stand-in and an authenticated client."""

import copy
import uuid

import pytest
from fastapi.testclient import TestClient
from firebase_admin import firestore

from habit_tracker.auth.dependencies import get_current_user
from habit_tracker.main import app


class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = copy.deepcopy(data) if data is not None else None

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocumentReference:
    def __init__(self, store, collection, doc_id):
        self._store = store
        self._collection = collection
        self.id = doc_id

    def _docs(self):
        return self._store.setdefault(self._collection, {})

    def get(self):
        return FakeSnapshot(self, self._docs().get(self.id))

    def set(self, data, merge=False):
        docs = self._docs()
        if merge and self.id in docs:
            docs[self.id].update(copy.deepcopy(data))
        else:
            docs[self.id] = copy.deepcopy(data)

    def update(self, data):
        docs = self._docs()
        if self.id not in docs:
            raise KeyError(f"No document to update: {self._collection}/{self.id}")
        docs[self.id].update(copy.deepcopy(data))

    def delete(self):
        self._docs().pop(self.id, None)


class FakeQuery:
    def __init__(self, store, collection, filters=None, limit_count=None):
        self._store = store
        self._collection = collection
        self._filters = filters or []
        self._limit = limit_count

    def where(self, field, op, value):
        assert op == "==", f"unsupported operator {op}"
        return FakeQuery(self._store, self._collection, self._filters + [(field, value)], self._limit)

    def limit(self, count):
        return FakeQuery(self._store, self._collection, self._filters, count)

    def stream(self):
        docs = self._store.get(self._collection, {})
        results = []
        for doc_id, data in list(docs.items()):
            if all(data.get(field) == value for field, value in self._filters):
                ref = FakeDocumentReference(self._store, self._collection, doc_id)
                results.append(FakeSnapshot(ref, data))
        if self._limit is not None:
            results = results[:self._limit]
        return iter(results)


class FakeCollection(FakeQuery):
    def document(self, doc_id=None):
        return FakeDocumentReference(self._store, self._collection, doc_id or str(uuid.uuid4()))


class FakeFirestore:
    """Just enough of google.cloud.firestore.Client for the routers."""

    def __init__(self):
        self.store = {}

    def collection(self, name):
        return FakeCollection(self.store, name)

    def docs(self, name):
        return self.store.get(name, {})


USER = {
    "uid": "user-1",
    "email": "ada@habits.io",
    "email_verified": True,
    "name": "Ada",
}


@pytest.fixture
def db(monkeypatch):
    fake = FakeFirestore()
    monkeypatch.setattr(firestore, "client", lambda *args, **kwargs: fake)
    return fake


@pytest.fixture
def current_user():
    return dict(USER)


@pytest.fixture
def client(db, current_user):
    app.dependency_overrides[get_current_user] = lambda: current_user
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def create_habit(client):
    def _create(name="Read", **fields):
        payload = {"name": name, **fields}
        response = client.post("/api/v1/habits", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["habit"]
    return _create
