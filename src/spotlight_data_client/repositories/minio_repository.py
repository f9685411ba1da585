import asyncio
import logging
from datetime import timedelta
from functools import partial
from io import BytesIO
from typing import Any, Callable

from minio import Minio
from minio.error import S3Error
from spotlight_data_client.exceptions import MinioError
from spotlight_data_client.config import MinioConfig

logger = logging.getLogger(__name__)


async def run_io_bound(func: Callable[..., Any], *args, **kwargs):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(func, *args, **kwargs))


class MinioRepository:
    """Объектное хранилище для загруженных изображений (masthead, featured image)."""

    def __init__(self, settings: MinioConfig, client: Minio | None = None):
        self._client = client or Minio(
            endpoint=settings.endpoint,
            access_key=settings.accesskey,
            secret_key=settings.secretkey,
            secure=settings.secure,
        )
        self._bucket = settings.bucket

    @property
    def bucket(self) -> str:
        return self._bucket

    async def _ensure_bucket(self):
        try:
            exists = await run_io_bound(self._client.bucket_exists, self._bucket)
            if not exists:
                await run_io_bound(self._client.make_bucket, self._bucket)
        except S3Error as e:
            raise MinioError(str(e)) from e

    async def check_connection(self):
        """Проверяет соединение с MinIO и наличие бакета."""
        logger.debug(f"Checking MinIO connection and bucket '{self._bucket}' existence...")
        try:
            await self._ensure_bucket()
            logger.debug("MinIO connection and bucket presence confirmed.")
        except MinioError as e:
            logger.error(f"MinIO connection failed: {e}")
            raise

    async def put_object(self, object_name: str, data: bytes, content_type: str | None = None):
        await self._ensure_bucket()
        try:
            await run_io_bound(
                self._client.put_object,
                self._bucket,
                object_name,
                BytesIO(data),
                len(data),
                content_type=content_type or "application/octet-stream",
            )
        except S3Error as e:
            raise MinioError(str(e)) from e

    async def remove_object(self, object_name: str):
        try:
            await run_io_bound(self._client.remove_object, self._bucket, object_name)
        except S3Error as e:
            raise MinioError(str(e)) from e

    async def get_presigned_url(self, object_name: str, expires_in_seconds: int = 3600) -> str:
        """Генерирует временную ссылку для скачивания объекта."""
        try:
            return await run_io_bound(
                self._client.presigned_get_object,
                self._bucket,
                object_name,
                expires=timedelta(seconds=expires_in_seconds),
            )
        except S3Error as e:
            raise MinioError(str(e)) from e
