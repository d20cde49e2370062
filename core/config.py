import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    UPLOAD_DIR: str = "./uploads"
    MAX_FILE_SIZE: int = 100_000_000
    FILES_URL_PATH: str = "/files"
    HEIC_JPEG_QUALITY: int = 92

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()

logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(asctime)s | %(levelname)s | %(message)s")
logger = logging.getLogger("livephoto")
