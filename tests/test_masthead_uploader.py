from unittest.mock import AsyncMock, MagicMock

import pytest

from spotlight_data_client.client import DataClient
from spotlight_data_client.config import UploaderConfig
from spotlight_data_client.exceptions import MinioError, NotFoundError
from spotlight_data_client.models.search import SearchCreate
from spotlight_data_client.uploaders import MastheadUploader


@pytest.fixture
def storage():
    storage = MagicMock()
    storage.put_object = AsyncMock()
    storage.remove_object = AsyncMock()
    storage.get_presigned_url = AsyncMock(return_value="https://minio.local/signed")
    return storage


@pytest.fixture
def uploader(storage):
    return MastheadUploader(storage, UploaderConfig(asset_host="/assets"))


class _Model:
    model_path = "spotlight/exhibit"
    id = 7


def test_store_dir(uploader):
    assert uploader.store_dir(_Model(), "masthead") == "uploads/spotlight/exhibit/masthead/7"


def test_default_url(uploader):
    assert uploader.default_url() == "/assets/fallback/default.png"
    assert uploader.default_url("thumb") == "/assets/fallback/thumb_default.png"


@pytest.mark.asyncio
async def test_store_keeps_only_the_file_name(uploader, storage):
    path = await uploader.store(_Model(), "masthead", "../../etc/banner.png", b"img", "image/png")

    assert path == "uploads/spotlight/exhibit/masthead/7/banner.png"
    storage.put_object.assert_awaited_once_with(path, b"img", "image/png")


@pytest.mark.asyncio
async def test_store_rejects_empty_name(uploader):
    with pytest.raises(ValueError):
        await uploader.store(_Model(), "masthead", "", b"img")


@pytest.mark.asyncio
async def test_url_falls_back_to_default(uploader, storage):
    assert await uploader.url(None) == "/assets/fallback/default.png"
    assert await uploader.url("uploads/x.png") == "https://minio.local/signed"
    storage.get_presigned_url.assert_awaited_once_with("uploads/x.png", 3600)


@pytest.fixture
def uploading_client(data_client: DataClient, uploader):
    data_client.uploader = uploader
    return data_client


@pytest.mark.asyncio
async def test_exhibit_masthead_replaces_previous_object(uploading_client: DataClient, storage, exhibits):
    first, _ = exhibits

    await uploading_client.upload_exhibit_masthead(first.id, "a.png", b"1")
    updated = await uploading_client.upload_exhibit_masthead(first.id, "b.png", b"2")

    assert updated.masthead == "uploads/spotlight/exhibit/masthead/1/b.png"
    storage.remove_object.assert_awaited_once_with("uploads/spotlight/exhibit/masthead/1/a.png")
    assert await uploading_client.masthead_url(first.id) == "https://minio.local/signed"


@pytest.mark.asyncio
async def test_search_featured_image(uploading_client: DataClient, exhibits):
    first, _ = exhibits
    search = await uploading_client.searches.create(first.id, SearchCreate(title="Maps"))

    updated = await uploading_client.upload_search_image(search.id, "cover.jpg", b"jpg", "image/jpeg")

    assert updated.featured_image == f"uploads/spotlight/search/featured_image/{search.id}/cover.jpg"
    with pytest.raises(NotFoundError):
        await uploading_client.upload_search_image(999, "cover.jpg", b"jpg")


@pytest.mark.asyncio
async def test_upload_without_storage(data_client: DataClient, exhibits):
    first, _ = exhibits
    with pytest.raises(MinioError):
        await data_client.upload_exhibit_masthead(first.id, "a.png", b"1")
