from functools import lru_cache

from connections.gemini_connection_provider import GeminiImageGenerator
from connections.local_storage_provider import LocalFileStorage
from connections.tripo_connection_provider import TripoAPIGenerator
from core.config import settings
from domain.interfaces import FileStorage, ImageGenerator, ModelGenerator
from services.generation_service import GenerationService


@lru_cache()
def get_storage() -> FileStorage:
    """
    Dependency Factory: Returns the local storage rooted in the public dir.
    """
    return LocalFileStorage(settings.PUBLIC_DIR)


@lru_cache()
def get_image_generator() -> ImageGenerator:
    return GeminiImageGenerator(settings)


@lru_cache()
def get_model_generator() -> ModelGenerator:
    return TripoAPIGenerator(settings)


@lru_cache()
def get_generation_service() -> GenerationService:
    """
    Dependency Factory: Wires the orchestration service.
    Cached so clients are built once per process; tests override this.
    """
    return GenerationService(
        image_generator=get_image_generator(),
        model_generator=get_model_generator(),
        storage=get_storage(),
        settings=settings,
    )
