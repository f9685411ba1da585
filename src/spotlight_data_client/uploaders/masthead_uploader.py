# spotlight_data_client/uploaders/masthead_uploader.py

import logging
import posixpath
from pathlib import PurePosixPath
from typing import Any, Optional

from spotlight_data_client.config import UploaderConfig
from spotlight_data_client.repositories.minio_repository import MinioRepository

logger = logging.getLogger(__name__)


class MastheadUploader:
    """
    Собственные masthead-изображения выставок и категорий просмотра.
    Объекты лежат по пути uploads/<модель>/<поле>/<id модели>/<имя файла>.
    """

    def __init__(self, storage: MinioRepository, cfg: UploaderConfig | None = None):
        self._storage = storage
        self._cfg = cfg or UploaderConfig()

    def store_dir(self, model: Any, mounted_as: str) -> str:
        return f"{self._cfg.store_prefix}/{model.model_path}/{mounted_as}/{model.id}"

    def default_url(self, version_name: Optional[str] = None) -> str:
        name = "_".join(part for part in (version_name, "default.png") if part)
        return posixpath.join(self._cfg.asset_host, "fallback", name)

    async def store(
        self,
        model: Any,
        mounted_as: str,
        file_name: str,
        content: bytes,
        content_type: str | None = None,
    ) -> str:
        # Имя файла без каталогов: путь задаёт только store_dir
        base_name = PurePosixPath(file_name.replace("\\", "/")).name
        if not base_name:
            raise ValueError(f"Invalid upload file name: {file_name!r}")
        object_path = f"{self.store_dir(model, mounted_as)}/{base_name}"
        await self._storage.put_object(object_path, content, content_type)
        logger.info("Stored %s for %s %s at %s", mounted_as, model.model_path, model.id, object_path)
        return object_path

    async def remove(self, object_path: str):
        await self._storage.remove_object(object_path)

    async def url(self, object_path: Optional[str], version_name: Optional[str] = None) -> str:
        if not object_path:
            return self.default_url(version_name)
        return await self._storage.get_presigned_url(object_path, self._cfg.url_expires_in)
