from pathlib import PurePath
from typing import Optional

import httpx
import structlog
from core.config import Settings
from core.exceptions import (
    DownloadError,
    TaskCreationError,
    TaskStatusError,
    UploadError,
)
from domain.interfaces import ModelGenerator
from domain.models import (
    TripoCreateTaskResponse,
    TripoTaskData,
    TripoTaskResponse,
    TripoUploadResponse,
)

logger = structlog.get_logger()


class TripoAPIGenerator(ModelGenerator):
    """
    Thin client for the Tripo3D v2 OpenAPI.
    One request per call, no retries and no polling: the caller owns the cadence.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.TRIPO_API_KEY
        self.base_url = settings.TRIPO_BASE_URL.rstrip("/")
        self.timeout = settings.http_timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def upload_image(self, image_data: bytes, filename: str) -> str:
        content_type = "image/png" if PurePath(filename).suffix.lower() == ".png" else "image/jpeg"
        files = {"file": (filename, image_data, content_type)}

        async with self._client() as client:
            logger.info("tripo_upload_started", filename=filename, size_bytes=len(image_data))
            resp = await client.post(f"{self.base_url}/upload/sts", files=files, headers=self._headers)

        if not resp.is_success:
            raise UploadError(f"Upload failed: {resp.text}")

        payload = TripoUploadResponse.model_validate(resp.json())
        file_token = payload.data.image_token if payload.data else None
        if not file_token:
            raise UploadError("No fileToken returned")

        logger.info("tripo_upload_complete", filename=filename)
        return file_token

    async def create_task(self, file_token: str, file_type: str) -> str:
        payload = {
            "type": "image_to_model",
            "file": {"type": file_type, "file_token": file_token},
        }

        async with self._client() as client:
            resp = await client.post(f"{self.base_url}/task", json=payload, headers=self._headers)

        if not resp.is_success:
            raise TaskCreationError(f"Task creation failed: {resp.text}")

        data = TripoCreateTaskResponse.model_validate(resp.json()).data
        task_id = data.task_id if data else None
        if not task_id:
            raise TaskCreationError("No taskId returned")

        logger.info("tripo_task_created", task_id=task_id)
        return task_id

    async def get_task(self, task_id: str) -> TripoTaskData:
        async with self._client() as client:
            resp = await client.get(f"{self.base_url}/task/{task_id}", headers=self._headers)

        if not resp.is_success:
            raise TaskStatusError(f"Failed to fetch task status: {resp.text}")

        task = TripoTaskResponse.model_validate(resp.json()).data or TripoTaskData()
        logger.debug("tripo_task_polled", task_id=task_id, status=task.status, progress=task.progress)
        return task

    async def download_model(self, url: str) -> bytes:
        # Output URLs are pre-signed, so no auth header here
        async with self._client() as client:
            logger.info("downloading_model", url=url)
            resp = await client.get(url, follow_redirects=True)

        if not resp.is_success:
            raise DownloadError(f"Model download failed: {resp.text}")

        return resp.content
