from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from fastmcp import Client

from connections.local_storage_provider import LocalFileStorage
from core.config import LocalSettings
from core.dependencies import get_generation_service
from core.exceptions import ImageGenerationError, TaskCreationError, TaskStatusError, UploadError
from domain.models import TripoTaskData, TripoTaskOutput
import main
from main import app
from services.generation_service import GenerationService


# --- Fixtures ---


@pytest.fixture
def image_generator():
    generator = AsyncMock()
    generator.generate_image.return_value = b"png-bytes"
    return generator


@pytest.fixture
def model_generator():
    generator = AsyncMock()
    generator.upload_image.return_value = "image-token-1"
    generator.create_task.return_value = "task-123"
    generator.get_task.return_value = TripoTaskData(task_id="task-123", status="running", progress=10)
    generator.download_model.return_value = b"glb-bytes"
    return generator


@pytest.fixture
def service(tmp_path, image_generator, model_generator):
    return GenerationService(
        image_generator=image_generator,
        model_generator=model_generator,
        storage=LocalFileStorage(tmp_path),
        settings=LocalSettings(PUBLIC_DIR=tmp_path),
    )


@pytest.fixture
def client(service):
    app.dependency_overrides[get_generation_service] = lambda: service
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


# --- POST /api/start-glb ---


@pytest.mark.parametrize("body", [{}, {"prompt": ""}, {"prompt": None}])
def test_start_missing_prompt_returns_400(client, image_generator, model_generator, body):
    response = client.post("/api/start-glb", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Prompt is required"}
    image_generator.generate_image.assert_not_called()
    model_generator.upload_image.assert_not_called()


def test_start_without_body_returns_400(client, image_generator):
    response = client.post("/api/start-glb")

    assert response.status_code == 400
    assert response.json() == {"error": "Prompt is required"}
    image_generator.generate_image.assert_not_called()


def test_start_malformed_body_returns_400(client, image_generator):
    response = client.post("/api/start-glb", json={"prompt": ["not", "a", "string"]})

    assert response.status_code == 400
    assert "error" in response.json()
    image_generator.generate_image.assert_not_called()


def test_start_happy_path(client, tmp_path):
    response = client.post("/api/start-glb", json={"prompt": "a minimalist bedroom"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "taskId": "task-123", "imagePath": "/room.png"}
    assert (tmp_path / "room.png").read_bytes() == b"png-bytes"


def test_start_repeated_calls_overwrite_image(client, image_generator, tmp_path):
    image_generator.generate_image.return_value = b"first"
    client.post("/api/start-glb", json={"prompt": "room one"})
    image_generator.generate_image.return_value = b"second"
    client.post("/api/start-glb", json={"prompt": "room two"})

    assert sorted(p.name for p in tmp_path.iterdir()) == ["room.png"]
    assert (tmp_path / "room.png").read_bytes() == b"second"


@pytest.mark.parametrize(
    "target, error",
    [
        ("image", ImageGenerationError("Image generation failed: 429 RESOURCE_EXHAUSTED")),
        ("upload", UploadError("Upload failed: invalid api key")),
        ("task", TaskCreationError("Task creation failed: insufficient credit")),
    ],
)
def test_start_upstream_failure_returns_500(client, image_generator, model_generator, target, error):
    mocks = {
        "image": image_generator.generate_image,
        "upload": model_generator.upload_image,
        "task": model_generator.create_task,
    }
    mocks[target].side_effect = error

    response = client.post("/api/start-glb", json={"prompt": "a room"})

    assert response.status_code == 500
    assert response.json() == {"error": str(error)}


def test_unexpected_error_returns_500(client, image_generator):
    image_generator.generate_image.side_effect = RuntimeError("boom")

    response = client.post("/api/start-glb", json={"prompt": "a room"})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}


# --- GET /api/check-task/{task_id} ---


@pytest.mark.parametrize("path", ["/api/check-task/", "/api/check-task"])
def test_check_missing_task_id_returns_400(client, model_generator, path):
    response = client.get(path)

    assert response.status_code == 400
    assert response.json() == {"error": "taskId required"}
    model_generator.get_task.assert_not_called()


def test_check_running_task(client, model_generator, tmp_path):
    response = client.get("/api/check-task/task-123")

    assert response.status_code == 200
    assert response.json() == {"status": "running", "glbUrl": None, "glbPath": "/model.glb"}
    model_generator.get_task.assert_awaited_once_with("task-123")
    model_generator.download_model.assert_not_called()
    assert not (tmp_path / "model.glb").exists()


def test_check_finished_task_saves_model(client, model_generator, tmp_path):
    model_generator.get_task.return_value = TripoTaskData(
        task_id="task-123",
        status="success",
        output=TripoTaskOutput(pbr_model="https://cdn.test/task-123.glb"),
    )

    response = client.get("/api/check-task/task-123")

    assert response.status_code == 200
    assert response.json() == {
        "status": "success",
        "glbUrl": "https://cdn.test/task-123.glb",
        "glbPath": "/model.glb",
    }
    model_generator.download_model.assert_awaited_once_with("https://cdn.test/task-123.glb")
    assert (tmp_path / "model.glb").read_bytes() == b"glb-bytes"


def test_check_upstream_failure_returns_500(client, model_generator):
    model_generator.get_task.side_effect = TaskStatusError("Failed to fetch task status: task not found")

    response = client.get("/api/check-task/task-123")

    assert response.status_code == 500
    assert "task not found" in response.json()["error"]


# --- Misc ---


def test_index_page_is_served(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


# --- MCP tools ---


@pytest.mark.asyncio
async def test_mcp_start_tool_submits_task(monkeypatch, service, image_generator):
    monkeypatch.setattr(main, "get_generation_service", lambda: service)

    async with Client(main.mcp) as mcp_client:
        result = await mcp_client.call_tool("start_glb_generation", {"prompt": "a reading nook"})

    assert "task-123" in result.content[0].text
    image_generator.generate_image.assert_awaited_once_with("a reading nook")


@pytest.mark.asyncio
async def test_mcp_check_tool_reports_status(monkeypatch, service, model_generator):
    monkeypatch.setattr(main, "get_generation_service", lambda: service)

    async with Client(main.mcp) as mcp_client:
        result = await mcp_client.call_tool("check_glb_task", {"task_id": "task-123"})

    assert "running" in result.content[0].text
    model_generator.get_task.assert_awaited_once_with("task-123")
