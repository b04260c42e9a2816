"""Shared fixtures: one fresh store per test, for either adapter."""

import copy

import pytest
from google.api_core.exceptions import NotFound

from aspirelink.database import create_session_factory
from aspirelink.storage.document_storage import DocumentStorage
from aspirelink.storage.sql_storage import SqlStorage


class InMemorySnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class InMemoryDocument:
    def __init__(self, documents: dict, doc_id: str):
        self._documents = documents
        self.id = doc_id

    def get(self):
        return InMemorySnapshot(self, self._documents.get(self.id))

    def set(self, data: dict, merge: bool = False) -> None:
        current = self._documents.get(self.id) if merge else None
        self._documents[self.id] = {**(current or {}), **copy.deepcopy(data)}

    def update(self, data: dict) -> None:
        if self.id not in self._documents:
            raise NotFound(f'No document to update: {self.id}')
        self._documents[self.id].update(copy.deepcopy(data))

    def delete(self) -> None:
        self._documents.pop(self.id, None)


class InMemoryQuery:
    def __init__(self, documents: dict, filters=()):
        self._documents = documents
        self._filters = filters

    def where(self, *, filter):
        assert filter.op_string == '=='
        return InMemoryQuery(self._documents, (*self._filters, (filter.field_path, filter.value)))

    def stream(self):
        for doc_id, data in list(self._documents.items()):
            if all(data.get(field) == value for field, value in self._filters):
                yield InMemorySnapshot(InMemoryDocument(self._documents, doc_id), data)


class InMemoryCollection(InMemoryQuery):
    def document(self, doc_id: str) -> InMemoryDocument:
        return InMemoryDocument(self._documents, doc_id)


class InMemoryFirestoreClient:
    """Stands in for ``google.cloud.firestore.Client`` with equality queries only."""

    def __init__(self):
        self._collections: dict[str, dict] = {}

    def collection(self, name: str) -> InMemoryCollection:
        return InMemoryCollection(self._collections.setdefault(name, {}))


@pytest.fixture
def firestore_client():
    return InMemoryFirestoreClient()


@pytest.fixture
def document_storage(firestore_client):
    return DocumentStorage(firestore_client)


@pytest.fixture
def sql_storage():
    session_factory = create_session_factory('sqlite://')
    storage = SqlStorage(session_factory)
    storage.init_schema()
    try:
        yield storage
    finally:
        session_factory.kw['bind'].dispose()


@pytest.fixture(params=['document', 'sql'])
def storage(request):
    """Run the test once against each storage adapter."""
    return request.getfixturevalue(f'{request.param}_storage')
