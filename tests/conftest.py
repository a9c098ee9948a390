"""
Shared fixtures for the blog backend tests.

`FakeCollection` mimics the subset of the Motor collection API that
`PostRepository` uses, backed by a plain list, so the service and route tests
run without a MongoDB server.
"""
import copy
import os
import random
from types import SimpleNamespace

import httpx
import pytest
from bson import ObjectId

TEST_SECRET = "test-secret-key"

# The module-level settings object is built on import and needs a signing key.
os.environ["SECRET_KEY"] = TEST_SECRET

from blog_backend.config import Settings
from blog_backend.context import AppContext
from blog_backend.database.post_repository import PostRepository
from blog_backend.main import create_app
from blog_backend.managers.upload_manager import UploadManager
from blog_backend.models.post_models import PostUser
from blog_backend.routes.auth_dependencies import create_access_token
from blog_backend.services.post_service import PostService


def _resolve(document, dotted_key):
    value = document
    for part in dotted_key.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def _matches(document, query):
    for key, expected in query.items():
        value = _resolve(document, key)
        if isinstance(value, list):
            if expected not in value:
                return False
        elif value != expected:
            return False
    return True


class FakeCursor:
    def __init__(self, documents):
        self._documents = documents
        self._skip = 0
        self._limit = 0

    def sort(self, key, direction):
        self._documents.sort(key=lambda doc: doc[key], reverse=direction < 0)
        return self

    def skip(self, count):
        self._skip = count
        return self

    def limit(self, count):
        self._limit = count
        return self

    async def to_list(self, length=None):
        documents = self._documents[self._skip:]
        if self._limit:
            documents = documents[: self._limit]
        return [copy.deepcopy(doc) for doc in documents]


class FakeCollection:
    """In-memory stand-in for an `AsyncIOMotorCollection`."""

    def __init__(self):
        self.documents = []

    async def insert_one(self, document):
        stored = copy.deepcopy(document)
        stored.setdefault("_id", ObjectId())
        self.documents.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    async def find_one(self, query):
        for document in self.documents:
            if _matches(document, query):
                return copy.deepcopy(document)
        return None

    def find(self, query):
        return FakeCursor([doc for doc in self.documents if _matches(doc, query)])

    async def count_documents(self, query):
        return sum(1 for doc in self.documents if _matches(doc, query))

    async def find_one_and_update(self, query, update, return_document=False):
        for document in self.documents:
            if _matches(document, query):
                before = copy.deepcopy(document)
                document.update(update.get("$set", {}))
                for key, amount in update.get("$inc", {}).items():
                    document[key] = document.get(key, 0) + amount
                return copy.deepcopy(document) if return_document else before
        return None

    async def delete_one(self, query):
        for index, document in enumerate(self.documents):
            if _matches(document, query):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        SECRET_KEY=TEST_SECRET,
        METRICS_ENABLED=False,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        UPLOAD_RESIZE_IN_BACKGROUND=False,
        THUMBNAIL_BASE_URL="http://localhost:4000/",
    )


@pytest.fixture
def collection():
    return FakeCollection()


@pytest.fixture
def context(settings, collection):
    post_service = PostService(
        PostRepository(collection),
        page_size=settings.POSTS_PAGE_SIZE,
        excerpt_length=settings.EXCERPT_LENGTH,
        thumbnail_base_url=settings.THUMBNAIL_BASE_URL,
        rng=random.Random(7),
    )
    upload_manager = UploadManager(
        settings.UPLOAD_DIR,
        resize_width=settings.UPLOAD_RESIZE_WIDTH,
        resize_in_background=settings.UPLOAD_RESIZE_IN_BACKGROUND,
    )
    return AppContext(settings, post_service=post_service, upload_manager=upload_manager)


@pytest.fixture
def post_service(context):
    return context.post_service


@pytest.fixture
def app(context):
    return create_app(context=context)


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def alice():
    return PostUser(id=str(ObjectId()), username="alice")


@pytest.fixture
def bob():
    return PostUser(id=str(ObjectId()), username="bob")


@pytest.fixture
def auth_headers(settings):
    def _headers(user: PostUser):
        token = create_access_token(user.id, user.username, settings)
        return {"Authorization": f"Bearer {token}"}

    return _headers
