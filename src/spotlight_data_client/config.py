# Файл: src/spotlight_data_client/config.py

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

# --- 1. PostgreSQL: exhibits, sidecars, tags, saved searches ---
class PostgresConfig(BaseModel):
    user: str = "postgres"
    password: str = "postgres"
    host: str = "localhost"
    port: int = 5432
    db: str = "spotlight"

    pool_size: int = 5
    max_overflow: int = 5
    pool_timeout: int = 30
    pool_recycle: int = 1800
    pool_pre_ping: bool = True
    application_name: str = "spotlight_data_client"

    def get_pg_dsn(self) -> str:
        """Собирает DSN для SQLAlchemy из полей этого объекта."""
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db}"

# --- 2. MinIO: masthead and featured images ---
class MinioConfig(BaseModel):
    endpoint: str = "localhost:9000"
    accesskey: str = "minioadmin"
    secretkey: str = "minioadmin"
    bucket: str = "spotlight"
    secure: bool = False


class ElasticsearchConfig(BaseModel):
    endpoint: str = Field("http://localhost:9200", description="http(s)://host:port")
    username: str | None = "elastic"
    password: str | None = "elastic"
    api_key: str | None = None
    verify_certs: bool = True
    index_docs: str = "spotlight_docs_v1"
    request_timeout: float = 10.0
    max_page_size: int = 1000


class TaggingConfig(BaseModel):
    # same knobs acts-as-taggable exposes
    delimiter: str = ","
    force_lowercase: bool = False
    strip_hash: bool = False


class UploaderConfig(BaseModel):
    store_prefix: str = "uploads"
    asset_host: str = "/assets"
    url_expires_in: int = 3600

# --- 3. Единый объект конфигурации ---
class DataClientConfig(BaseModel):
    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    minio: MinioConfig = Field(default_factory=MinioConfig)
    elastic: ElasticsearchConfig = Field(default_factory=ElasticsearchConfig)
    tagging: TaggingConfig = Field(default_factory=TaggingConfig)
    uploader: UploaderConfig = Field(default_factory=UploaderConfig)

# --- 4. Settings читает .env с вложенной структурой ---
class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter='__',
        extra='ignore'
    )

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    minio: MinioConfig = Field(default_factory=MinioConfig)
    elastic: ElasticsearchConfig = Field(default_factory=ElasticsearchConfig)
    tagging: TaggingConfig = Field(default_factory=TaggingConfig)
    uploader: UploaderConfig = Field(default_factory=UploaderConfig)

    def to_client_config(self) -> DataClientConfig:
        return DataClientConfig(
            postgres=self.postgres,
            minio=self.minio,
            elastic=self.elastic,
            tagging=self.tagging,
            uploader=self.uploader,
        )

# --- Ленивая инициализация ---
_cached_settings: Optional[Settings] = None

def get_settings() -> Settings:
    """
    Возвращает синглтон-экземпляр настроек, создавая его при первом вызове.
    Это предотвращает ошибки валидации при импорте.
    """
    global _cached_settings
    if _cached_settings is None:
        _cached_settings = Settings()
    return _cached_settings
