"""Test configuration for the MongoDB helper."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from mongo_helper import MongoConnectionManager, MongoHelper

pytest_plugins = ["pytest_asyncio"]

# Seed data for behavioural tests; mirrors a small "persons" collection.
PERSONS_JSON = [
    '{"name": "Colin", "age": 15}',
    '{"name": "Robin", "age": 20}',
    '{"name": "Jim", "age": 25}',
    '{"name": "Tom", "age": 16}',
    '{"name": "Bob", "age": 25}',
    '{"name": "Jerry", "age": 28}',
    '{"name": "Chris", "age": 28}',
]


def make_cursor(docs: list[dict] | None = None) -> MagicMock:
    """Motor-like cursor mock: async-iterable with an awaitable close()."""
    cursor = MagicMock()
    cursor.__aiter__.return_value = list(docs or [])
    cursor.close = AsyncMock()
    return cursor


@pytest.fixture
def cursor_factory():
    return make_cursor


@pytest.fixture
def mock_collection() -> MagicMock:
    """Motor collection mock whose coroutine methods are AsyncMocks."""
    coll = MagicMock()
    coll.insert_many = AsyncMock(
        side_effect=lambda docs: MagicMock(inserted_ids=[d.get("_id") for d in docs])
    )
    coll.update_many = AsyncMock(return_value=MagicMock(modified_count=2))
    coll.delete_many = AsyncMock(return_value=MagicMock(deleted_count=3))
    coll.count_documents = AsyncMock(return_value=7)
    coll.create_index = AsyncMock(return_value="name_1_age_-1")
    coll.create_indexes = AsyncMock(return_value=["name_1", "age_-1"])
    coll.find = MagicMock(return_value=make_cursor())
    return coll


@pytest.fixture
def mock_client(mock_collection: MagicMock) -> MagicMock:
    client = MagicMock()
    db = client.get_database.return_value
    db.get_collection.return_value = mock_collection
    db.drop_collection = AsyncMock()
    client.drop_database = AsyncMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    return client


@pytest.fixture
def mock_helper(mock_client: MagicMock) -> MongoHelper:
    """MongoHelper bound to ``test_db`` on a mocked Motor client."""
    connection = MongoConnectionManager(url="mongodb://mock:27017", database="test_db")
    connection._client = mock_client
    return MongoHelper(connection)


@pytest.fixture
async def mongo_connection():
    """In-memory MongoDB connection backed by mongomock-motor."""
    # Use mongomock for unit tests to avoid real database dependency
    try:
        from mongomock_motor import AsyncMongoMockClient
    except ImportError:
        pytest.skip("mongomock-motor not installed")

    connection = MongoConnectionManager(url="mongodb://mock:27017", database="test_db")
    connection._client = AsyncMongoMockClient()
    yield connection
    connection.close()


@pytest.fixture
async def helper(mongo_connection: MongoConnectionManager) -> MongoHelper:
    return MongoHelper(mongo_connection)


@pytest.fixture
async def persons(helper: MongoHelper) -> str:
    """Seed the ``persons`` collection and return its name."""
    await helper.insert_json("persons", PERSONS_JSON)
    return "persons"


def start_mongo_container(image: str = "mongo:7.0"):
    """Start a MongoDB container; skip the requesting test when Docker is down."""
    from docker.errors import DockerException
    from testcontainers.mongodb import MongoDbContainer

    try:
        container = MongoDbContainer(image)
        container.start()
    except DockerException as e:
        pytest.skip(f"MongoDB container unavailable: {e}")
    return container


@pytest.fixture
def container_starter():
    """Return the container start function (tests patch the Docker side)."""
    pytest.importorskip("testcontainers")
    return start_mongo_container


@pytest.fixture(scope="module")
def mongo_container():
    """Create a MongoDB container using testcontainers."""
    pytest.importorskip("testcontainers")

    container = start_mongo_container()
    try:
        yield container
    finally:
        container.stop()


@pytest.fixture
async def real_helper(mongo_container):
    """
    MongoHelper on a real MongoDB instance.

    Function scope avoids "Event loop is closed" when tests run in different
    loops. The test database is dropped before and after each test.
    """
    helper = await MongoHelper.from_url(
        mongo_container.get_connection_url(), "helper_test_db"
    )
    await helper.drop_database("helper_test_db")
    yield helper
    await helper.drop_database("helper_test_db")
    helper.close()


@pytest.fixture
async def seeded_helper(real_helper: MongoHelper) -> MongoHelper:
    """Real-server helper with the ``persons`` collection seeded."""
    await real_helper.insert_json("persons", PERSONS_JSON)
    return real_helper
