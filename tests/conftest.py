"""Pytest configuration and fixtures for the classroom points tests.

The Firestore fake implements the slice of the client API the helpers use:
collection/document references, get/set(merge)/delete, stream, write
batches (with Increment transforms) and on_snapshot listeners that fire
synchronously on attach and after every write.
"""

import copy
import os

# Keep test runs from writing rotating log files
os.environ.setdefault("LOG_DIR", "")

import pytest
from firebase_admin import firestore

MAX_WRITES_PER_COMMIT = 500


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "api: Flask route tests")


def _apply(existing, data, merge):
    """Apply a write payload to an existing document dict."""
    result = copy.deepcopy(existing) if (merge and existing) else {}
    for key, value in data.items():
        current = result.get(key)
        if isinstance(value, firestore.Increment):
            if isinstance(current, (int, float)) and not isinstance(current, bool):
                result[key] = current + value.value
            else:
                result[key] = value.value
        elif isinstance(value, dict):
            base = current if (merge and isinstance(current, dict)) else {}
            result[key] = _apply(base, value, True)
        else:
            result[key] = copy.deepcopy(value)
    return result


class FakeSnapshot:
    def __init__(self, ref, data):
        self.reference = ref
        self.id = ref.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeWatch:
    def __init__(self, db, entry):
        self._db = db
        self._entry = entry
        self.unsubscribe_calls = 0

    def unsubscribe(self):
        self.unsubscribe_calls += 1
        if self._entry in self._db.listeners:
            self._db.listeners.remove(self._entry)


class FakeDocumentReference:
    def __init__(self, db, path):
        self._db = db
        self.path = path
        self.id = path[-1]

    def collection(self, name):
        return FakeCollectionReference(self._db, self.path + (name,))

    def get(self):
        self._db.reads += 1
        return FakeSnapshot(self, self._db.docs.get(self.path))

    def set(self, data, merge=False):
        self._db.write([("set", self, data, merge)])

    def delete(self):
        self._db.write([("delete", self, None, False)])

    def on_snapshot(self, callback):
        return self._db.listen("doc", self.path, callback)


class FakeCollectionReference:
    def __init__(self, db, path):
        self._db = db
        self.path = path
        self.id = path[-1]

    def document(self, doc_id):
        return FakeDocumentReference(self._db, self.path + (doc_id,))

    def stream(self):
        self._db.reads += 1
        return iter(self._db.snapshots_under(self.path))

    def on_snapshot(self, callback):
        return self._db.listen("collection", self.path, callback)


class FakeWriteBatch:
    def __init__(self, db):
        self._db = db
        self._ops = []

    def set(self, ref, data, merge=False):
        self._ops.append(("set", ref, data, merge))

    def delete(self, ref):
        self._ops.append(("delete", ref, None, False))

    def commit(self):
        if len(self._ops) > MAX_WRITES_PER_COMMIT:
            raise ValueError(f"maximum {MAX_WRITES_PER_COMMIT} writes allowed per request")
        if self._db.fail_next_commit:
            self._db.fail_next_commit = False
            raise RuntimeError("commit failed")
        self._db.commit_sizes.append(len(self._ops))
        self._db.write(self._ops)
        return []


class FakeFirestore:
    def __init__(self):
        self.docs = {}
        self.listeners = []
        self.commit_sizes = []
        self.writes = 0
        self.reads = 0
        self.fail_next_commit = False
        self.log = []

    # Client API

    def collection(self, name):
        return FakeCollectionReference(self, (name,))

    def batch(self):
        return FakeWriteBatch(self)

    # Helpers for the fake and for assertions

    def snapshots_under(self, collection_path):
        depth = len(collection_path) + 1
        paths = sorted(p for p in self.docs if len(p) == depth and p[:-1] == collection_path)
        return [FakeSnapshot(FakeDocumentReference(self, p), self.docs[p]) for p in paths]

    def write(self, ops):
        for kind, ref, data, merge in ops:
            self.writes += 1
            self.log.append((kind, ref.path))
            if kind == "delete":
                self.docs.pop(ref.path, None)
            else:
                self.docs[ref.path] = _apply(self.docs.get(ref.path), data, merge)
        self.notify()

    def listen(self, kind, path, callback):
        entry = (kind, path, callback)
        self.listeners.append(entry)
        self._fire(entry)
        return FakeWatch(self, entry)

    def _fire(self, entry):
        kind, path, callback = entry
        if kind == "doc":
            ref = FakeDocumentReference(self, path)
            callback([FakeSnapshot(ref, self.docs.get(path))], [], None)
        else:
            callback(self.snapshots_under(path), [], None)

    def notify(self):
        for entry in list(self.listeners):
            self._fire(entry)

    def get_doc(self, *path):
        return self.docs.get(tuple(path))

    def put(self, data, *path):
        self.docs[tuple(path)] = copy.deepcopy(data)


class FakeAuth:
    """Stands in for FirebaseAuth: same listener contract, no network."""

    def __init__(self, user=None):
        self.current_user = user
        self._listeners = []
        self.next_user = None
        self.error = None

    def add_listener(self, listener):
        self._listeners.append(listener)
        listener(self.current_user)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, user):
        self.current_user = user
        for listener in list(self._listeners):
            listener(user)

    def sign_in_with_popup(self, provider):
        if self.error is not None:
            raise self.error
        self._set(self.next_user)
        return self.next_user

    def sign_out(self):
        self._set(None)


@pytest.fixture
def db():
    """Empty in-memory Firestore."""
    return FakeFirestore()


@pytest.fixture
def roster_db(db):
    """Firestore with one class (Class 2A) and three students."""
    db.put({"displayName": "Class 2A", "idPrefix": "2A"}, "classes", "Class 2A")
    db.put({"name": "Ada", "points": {"daily": 2, "total": 10}}, "classes", "Class 2A", "students", "s1")
    db.put({"name": "Bo", "points": {"daily": 0, "total": 3}, "petName": "Rex"},
           "classes", "Class 2A", "students", "s2")
    db.put({"name": "Cy"}, "classes", "Class 2A", "students", "s3")
    return db


@pytest.fixture
def fake_auth():
    return FakeAuth()


@pytest.fixture
def context(db, fake_auth):
    from classpoints.bootstrap import FirebaseContext
    from classpoints.session import GoogleAuthProvider

    return FirebaseContext(app=None, db=db, auth=fake_auth, provider=GoogleAuthProvider())


@pytest.fixture
def service(context):
    from classpoints.service import ClassroomService

    return ClassroomService(context)
