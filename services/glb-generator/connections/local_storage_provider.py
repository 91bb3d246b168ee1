from pathlib import Path
from typing import Optional

import aiofiles
from core.config import settings
from core.exceptions import StorageError
from domain.interfaces import FileStorage


class LocalFileStorage(FileStorage):
    def __init__(self, base_path: Optional[Path] = None):
        # Ensure the directory exists
        self.base_path = Path(base_path or settings.PUBLIC_DIR)
        self.base_path.mkdir(parents=True, exist_ok=True)

    async def save(self, filename: str, file_data: bytes) -> Path:
        """
        Writes bytes to the public directory, replacing any previous file.
        The file is then served by the static mount (e.g. /room.png).
        """
        file_path = self.base_path / filename

        try:
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(file_data)
        except OSError as e:
            raise StorageError(f"Failed to write {filename}", original_error=e) from e

        return file_path

    async def load(self, filename: str) -> bytes:
        file_path = self.base_path / filename

        try:
            async with aiofiles.open(file_path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise StorageError(f"Failed to read {filename}", original_error=e) from e
