from pathlib import PurePath

import httpx
import structlog
from core.config import Settings
from core.exceptions import AgentError, GenerationError, ValidationException
from core.telemetry import tracer
from domain.interfaces import FileStorage, ImageGenerator, ModelGenerator
from domain.models import StartGenerationResponse, TaskStatusResponse

logger = structlog.get_logger()


class GenerationService:
    """
    Prompt -> image -> Tripo task orchestration.

    Stateless between calls: the task id is handed to the client, and both
    output files live at fixed paths that every request overwrites.
    """

    def __init__(
        self,
        image_generator: ImageGenerator,
        model_generator: ModelGenerator,
        storage: FileStorage,
        settings: Settings,
    ):
        self.image_generator = image_generator
        self.model_generator = model_generator
        self.storage = storage
        self.settings = settings

    async def start_generation(self, prompt: str | None) -> StartGenerationResponse:
        """
        Generates the image, uploads it and creates the image-to-model task.
        Returns as soon as the remote task exists.
        """
        if not prompt or not prompt.strip():
            raise ValidationException("Prompt is required")

        image_filename = self.settings.IMAGE_FILENAME

        with tracer.start_as_current_span("start_glb_generation"):
            try:
                # 1. Prompt -> image
                image = await self.image_generator.generate_image(prompt)
                image_path = await self.storage.save(image_filename, image)
                logger.info("image_saved", path=str(image_path))

                # 2. Upload what is on disk
                image_data = await self.storage.load(image_filename)
                file_token = await self.model_generator.upload_image(image_data, image_filename)

                # 3. Create remote task
                file_type = PurePath(image_filename).suffix.lstrip(".").lower() or "png"
                task_id = await self.model_generator.create_task(file_token, file_type)

            except AgentError:
                raise
            except (httpx.HTTPError, OSError, ValueError) as e:
                logger.error("start_generation_failed", error=str(e))
                raise GenerationError("Failed to start GLB generation", original_error=e) from e

        logger.info("generation_started", task_id=task_id)
        return StartGenerationResponse(taskId=task_id, imagePath=self.settings.image_path)

    async def check_task(self, task_id: str | None) -> TaskStatusResponse:
        """
        Fetches task status once. Downloads the model when the task is done.
        """
        if not task_id or not task_id.strip():
            raise ValidationException("taskId required")

        with tracer.start_as_current_span("check_glb_task"):
            try:
                task = await self.model_generator.get_task(task_id)
                glb_url = task.model_url

                if task.is_success and glb_url:
                    model = await self.model_generator.download_model(glb_url)
                    glb_path = await self.storage.save(self.settings.MODEL_FILENAME, model)
                    logger.info("glb_saved", task_id=task_id, path=str(glb_path))

            except AgentError:
                raise
            except (httpx.HTTPError, OSError, ValueError) as e:
                logger.error("check_task_failed", task_id=task_id, error=str(e))
                raise GenerationError("Failed to check task", original_error=e) from e

        return TaskStatusResponse(status=task.status, glbUrl=glb_url, glbPath=self.settings.model_path)
