import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SERVICE_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    APP_NAME: str = "GLB Generator"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Credentials (required in production)
    GEMINI_API_KEY: str = ""
    TRIPO_API_KEY: str = ""

    # Upstream APIs
    GEMINI_IMAGE_MODEL: str = "gemini-2.5-flash-image"
    TRIPO_BASE_URL: str = "https://api.tripo3d.ai/v2/openapi"
    HTTP_TIMEOUT: float = 120.0  # seconds, 0 disables

    # Output files, overwritten on every request
    PUBLIC_DIR: Path = Field(default=SERVICE_ROOT / "public")
    IMAGE_FILENAME: str = "room.png"
    MODEL_FILENAME: str = "model.glb"

    ENABLE_TRACING: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def image_path(self) -> str:
        """Public URL path of the generated image."""
        return f"/{self.IMAGE_FILENAME}"

    @property
    def model_path(self) -> str:
        """Public URL path of the generated model."""
        return f"/{self.MODEL_FILENAME}"

    @property
    def http_timeout(self) -> float | None:
        return self.HTTP_TIMEOUT or None


class LocalSettings(Settings):
    ENV: str = "dev"
    LOG_LEVEL: str = "DEBUG"


class ProductionSettings(Settings):
    ENV: str = "production"
    GEMINI_API_KEY: str = Field(..., validation_alias="GEMINI_API_KEY")
    TRIPO_API_KEY: str = Field(..., validation_alias="TRIPO_API_KEY")


# Factory to choose the right config
def get_settings() -> Settings:
    env = os.getenv("ENV", "local")
    if env == "production":
        return ProductionSettings()  # type: ignore
    return LocalSettings()


settings = get_settings()
