import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from spotlight_data_client.db.base import Base
from spotlight_data_client.client import DataClient
from spotlight_data_client.exceptions import DocumentNotFoundError
from spotlight_data_client.models.exhibit import ExhibitCreate
from spotlight_data_client.repositories import (
    ExhibitRepository,
    SearchRepository,
    SidecarRepository,
    TagLedger,
)


class InMemoryIndex:
    """Двойник ElasticsearchRepository: записи в словаре, частичные обновления."""

    def __init__(self, docs=None):
        self.docs = {doc_id: dict(src) for doc_id, src in (docs or {}).items()}
        self.writes = []

    async def check_connection(self):
        return True

    async def ensure_index(self):
        return False

    async def close(self):
        pass

    async def find(self, doc_id):
        if doc_id not in self.docs:
            raise DocumentNotFoundError(doc_id)
        return dict(self.docs[doc_id])

    async def write(self, doc_id, projection):
        if doc_id not in self.docs:
            raise DocumentNotFoundError(doc_id)
        self.writes.append((doc_id, dict(projection)))
        self.docs[doc_id].update({k: v for k, v in projection.items() if k != "id"})

    async def delete(self, doc_id):
        return self.docs.pop(doc_id, None) is not None

    async def search_by_field(self, field, value, limit=None):
        hits = []
        for doc_id, src in self.docs.items():
            current = src.get(field)
            if current == value or (isinstance(current, list) and value in current):
                hits.append(doc_id)
        return hits[:limit] if limit else hits


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """
    Движок SQLite на временном файле; все таблицы создаются перед тестом
    и удаляются после него.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'spotlight.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(bind=db_engine, expire_on_commit=False)


@pytest.fixture
def index():
    return InMemoryIndex({
        "abc123": {"id": "abc123", "full_title_tesim": ["L'AMERIQUE"]},
        "dq287tq6352": {"id": "dq287tq6352"},
    })


@pytest.fixture
def exhibit_repo(session_factory):
    return ExhibitRepository(session_factory)


@pytest.fixture
def sidecar_repo(session_factory):
    return SidecarRepository(session_factory)


@pytest.fixture
def tag_ledger(session_factory):
    return TagLedger(session_factory)


@pytest.fixture
def data_client(exhibit_repo, sidecar_repo, tag_ledger, index, session_factory) -> DataClient:
    return DataClient(
        exhibit_repo=exhibit_repo,
        sidecar_repo=sidecar_repo,
        tag_ledger=tag_ledger,
        elastic_repo=index,
        search_repo=SearchRepository(session_factory),
    )


@pytest_asyncio.fixture
async def exhibits(exhibit_repo):
    """Две выставки: id 1 и 2."""
    first = await exhibit_repo.create(ExhibitCreate(title="Maps of the Americas"))
    second = await exhibit_repo.create(ExhibitCreate(title="Rare Books"))
    return first, second
