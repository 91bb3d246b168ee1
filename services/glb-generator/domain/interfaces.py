from abc import ABC, abstractmethod
from pathlib import Path

from domain.models import TripoTaskData


class ImageGenerator(ABC):
    @abstractmethod
    async def generate_image(self, prompt: str) -> bytes:
        """Returns raw image bytes (PNG) for the prompt"""
        pass


class ModelGenerator(ABC):
    @abstractmethod
    async def upload_image(self, image_data: bytes, filename: str) -> str:
        """Uploads an image and returns the provider's file token"""
        pass

    @abstractmethod
    async def create_task(self, file_token: str, file_type: str) -> str:
        """Starts an image-to-model task and returns its id"""
        pass

    @abstractmethod
    async def get_task(self, task_id: str) -> TripoTaskData:
        """Returns the latest known state of a task"""
        pass

    @abstractmethod
    async def download_model(self, url: str) -> bytes:
        """Fetches the finished model binary (e.g. GLB)"""
        pass


class FileStorage(ABC):
    @abstractmethod
    async def save(self, filename: str, file_data: bytes) -> Path:
        """Writes (overwrites) a file and returns its path"""
        pass

    @abstractmethod
    async def load(self, filename: str) -> bytes:
        pass
