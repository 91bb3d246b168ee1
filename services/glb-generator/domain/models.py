from typing import Literal, Optional

from pydantic import BaseModel


# --- API Models (client facing, camelCase on the wire) ---


class GenerationRequest(BaseModel):
    prompt: Optional[str] = None


class StartGenerationResponse(BaseModel):
    success: Literal[True] = True
    taskId: str
    imagePath: str


class TaskStatusResponse(BaseModel):
    status: Optional[str] = None
    glbUrl: Optional[str] = None
    glbPath: str


class ErrorResponse(BaseModel):
    error: str


# --- Tripo Payloads (unknown fields are ignored) ---


class TripoUploadData(BaseModel):
    image_token: Optional[str] = None


class TripoUploadResponse(BaseModel):
    code: Optional[int] = None
    data: Optional[TripoUploadData] = None


class TripoCreateTaskData(BaseModel):
    task_id: Optional[str] = None


class TripoCreateTaskResponse(BaseModel):
    code: Optional[int] = None
    data: Optional[TripoCreateTaskData] = None


class TripoTaskOutput(BaseModel):
    model: Optional[str] = None
    base_model: Optional[str] = None
    pbr_model: Optional[str] = None
    rendered_image: Optional[str] = None


class TripoTaskData(BaseModel):
    task_id: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None  # queued, running, success, failed, ...
    progress: Optional[int] = None
    output: Optional[TripoTaskOutput] = None

    @property
    def model_url(self) -> Optional[str]:
        """Prefer the PBR textured model, fall back to the plain one."""
        if self.output is None:
            return None
        return self.output.pbr_model or self.output.model or None

    @property
    def is_success(self) -> bool:
        return self.status == "success"


class TripoTaskResponse(BaseModel):
    code: Optional[int] = None
    data: Optional[TripoTaskData] = None
