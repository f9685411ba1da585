import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from spotlight_data_client.exceptions import DatabaseError
from spotlight_data_client.models.search import SearchCreate, SearchUpdate
from spotlight_data_client.repositories import SearchRepository

pytestmark = pytest.mark.asyncio


@pytest.fixture
def search_repo(session_factory):
    return SearchRepository(session_factory)


async def test_create_and_get(search_repo: SearchRepository, exhibits):
    first, _ = exhibits

    search = await search_repo.create(first.id, SearchCreate(title="Maps", query_params={"q": "map"}))

    fetched = await search_repo.get(search.id)
    assert fetched.query_params == {"q": "map"}
    assert fetched.exhibit_id == first.id
    assert fetched.featured_image is None
    assert search.to_pydantic().title == "Maps"


async def test_list_orders_by_weight_and_filters_landing_page(search_repo: SearchRepository, exhibits):
    first, second = exhibits
    await search_repo.create(first.id, SearchCreate(title="Late", weight=5, on_landing_page=True))
    await search_repo.create(first.id, SearchCreate(title="Early", weight=1))
    await search_repo.create(first.id, SearchCreate(title="Also early", weight=1, on_landing_page=True))
    await search_repo.create(second.id, SearchCreate(title="Elsewhere"))

    titles = [s.title for s in await search_repo.list_for_exhibit(first.id)]
    landing = [s.title for s in await search_repo.list_for_exhibit(first.id, on_landing_page=True)]

    assert titles == ["Early", "Also early", "Late"]
    assert landing == ["Also early", "Late"]


async def test_partial_update(search_repo: SearchRepository, exhibits):
    first, _ = exhibits
    search = await search_repo.create(first.id, SearchCreate(title="Maps", short_description="old"))

    updated = await search_repo.update(search.id, SearchUpdate(weight=3))

    assert updated.weight == 3
    assert updated.short_description == "old"
    assert await search_repo.update(999, SearchUpdate(weight=1)) is None


async def test_delete(search_repo: SearchRepository, exhibits):
    first, _ = exhibits
    search = await search_repo.create(first.id, SearchCreate(title="Maps"))

    assert await search_repo.delete(search.id) is True
    assert await search_repo.delete(search.id) is False
    assert await search_repo.get(search.id) is None


async def test_delete_failure_is_wrapped(search_repo: SearchRepository, exhibits, monkeypatch):
    first, _ = exhibits
    search = await search_repo.create(first.id, SearchCreate(title="Maps"))

    def failing_commit(*args, **kwargs):
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(AsyncSession, "commit", failing_commit)
    with pytest.raises(DatabaseError):
        await search_repo.delete(search.id)
    monkeypatch.undo()

    assert await search_repo.get(search.id) is not None
