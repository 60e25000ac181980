"""Generation service client: wraps the Gemini multimodal API.

Four operations back the visualization wizard:
- analyze: suggest renovation changes for a before-photo (text, best effort)
- smart_describe: expand rough notes into a scope of work (text, best effort)
- generate: render an "after" image from a before-photo and a prompt
- refine: edit an existing generated image

Text operations degrade to a placeholder string so they never block the
wizard. Image operations raise GenerationError so the caller keeps its
previous image and can retry.
"""
import asyncio
import base64
import time
from enum import Enum
from loguru import logger
from google import genai
from google.genai import types
from renovatepro.config import get_settings

ANALYZE_INSTRUCTION = (
    "Suggest a renovation plan for this area to modernize it and increase value. "
    "Focus ONLY on the suggested changes (materials, colors, fixtures, style). "
    "Do NOT describe the current condition of the room."
)
SMART_DESCRIBE_TEMPLATE = (
    "Draft a professional renovation project scope of work based on these notes: "
    "{notes}. Include estimated timelines and trade requirements."
)
GENERATE_PREFIX = "A photorealistic renovation after photo based on the input image. "
REFINE_TEMPLATE = "Edit this image: {instruction}. Maintain photorealism."

ANALYZE_FAILED = "Error analyzing image."
ANALYZE_EMPTY = "Could not analyze image."
DESCRIBE_FAILED = "Error generating smart description."
DESCRIBE_EMPTY = "Could not generate description."
DEFAULT_NOTES = "Renovation project"


class Resolution(str, Enum):
    """Output resolution tier; also selects the backing image model."""
    R1K = "1K"
    R2K = "2K"
    R4K = "4K"


class ConfigurationError(RuntimeError):
    """The generation service credential is missing."""


class GenerationError(RuntimeError):
    """An image-producing call failed after all retries."""


def select_model(resolution: Resolution | str) -> str:
    """Pick the image model for a resolution tier: 1K standard, 2K/4K high-res."""
    settings = get_settings()
    if Resolution(resolution) == Resolution.R1K:
        return settings.image_model_standard
    return settings.image_model_high_res


def strip_data_url(image: str) -> str:
    """Return the base64 payload of a data URL (or the input if it has no header)."""
    if image.startswith("data:") and "," in image:
        return image.split(",", 1)[1]
    return image


def _get_client() -> genai.Client:
    settings = get_settings()
    if not settings.gemini_api_key:
        raise ConfigurationError("GEMINI_API_KEY is missing. Set it in the environment or .env file.")
    return genai.Client(api_key=settings.gemini_api_key)


def _image_part(image_base64: str, mime_type: str = "image/jpeg") -> types.Part:
    return types.Part.from_bytes(
        data=base64.b64decode(strip_data_url(image_base64)),
        mime_type=mime_type,
    )


def _extract_image(response) -> str | None:
    """Return the first inline image in a response as a data URL."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates or not candidates[0].content:
        return None

    for part in candidates[0].content.parts or []:
        inline = getattr(part, "inline_data", None)
        if inline is None or not inline.data:
            continue
        mime_type = inline.mime_type or "image/png"
        data = inline.data
        if isinstance(data, bytes):
            # The SDK hands back decoded bytes whatever the image format
            encoded = base64.b64encode(data).decode("utf-8")
        else:
            encoded = str(data)
        return f"data:{mime_type};base64,{encoded}"
    return None


class GenerationClient:
    """Async client for the vendor generation API."""

    async def _call(self, model: str, contents, config: types.GenerateContentConfig | None = None):
        settings = get_settings()
        client = _get_client()
        return await asyncio.wait_for(
            client.aio.models.generate_content(model=model, contents=contents, config=config),
            timeout=settings.generation_timeout_seconds,
        )

    async def _call_with_retries(self, label: str, model: str, contents, config=None):
        settings = get_settings()
        attempts = max(1, settings.generation_max_retries + 1)
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                return await self._call(model, contents, config)
            except ConfigurationError:
                raise
            except Exception as e:
                last_error = e
                logger.warning(f"{label} attempt {attempt + 1}/{attempts} failed on {model}: {e}")
                if attempt < attempts - 1:
                    await asyncio.sleep(settings.generation_retry_backoff_seconds * (2 ** attempt))

        raise GenerationError(f"{label} failed after {attempts} attempts: {last_error}") from last_error

    async def analyze(self, image_base64: str) -> str:
        """Suggest renovation changes for a before-photo.

        Never raises for service failures; returns a readable placeholder instead.
        Missing credentials still raise ConfigurationError.
        """
        settings = get_settings()
        start_time = time.time()
        try:
            response = await self._call(
                settings.text_model,
                [_image_part(image_base64), types.Part.from_text(text=ANALYZE_INSTRUCTION)],
            )
        except ConfigurationError:
            raise
        except Exception as e:
            logger.error(f"Image analysis failed: {e}")
            return ANALYZE_FAILED

        elapsed_ms = int((time.time() - start_time) * 1000)
        text = (response.text or "").strip()
        logger.info(f"Image analyzed with {settings.text_model} ({len(text)} chars, time={elapsed_ms}ms)")
        return text or ANALYZE_EMPTY

    async def smart_describe(self, notes: str) -> str:
        """Expand free-text notes into a structured scope of work (best effort)."""
        settings = get_settings()
        prompt = SMART_DESCRIBE_TEMPLATE.format(notes=notes.strip() or DEFAULT_NOTES)
        config = types.GenerateContentConfig(
            thinking_config=types.ThinkingConfig(thinking_budget=settings.thinking_budget),
        )
        start_time = time.time()
        try:
            response = await self._call(settings.text_model, prompt, config)
        except ConfigurationError:
            raise
        except Exception as e:
            logger.error(f"Smart description failed: {e}")
            return DESCRIBE_FAILED

        elapsed_ms = int((time.time() - start_time) * 1000)
        text = (response.text or "").strip()
        logger.info(
            f"Smart description drafted with {settings.text_model} "
            f"(budget={settings.thinking_budget}, time={elapsed_ms}ms)"
        )
        return text or DESCRIBE_EMPTY

    async def generate(
        self,
        image_base64: str,
        prompt: str,
        resolution: Resolution | str = Resolution.R1K,
    ) -> str | None:
        """Render an after-image. Raises GenerationError on failure."""
        settings = get_settings()
        resolution = Resolution(resolution)
        model = select_model(resolution)

        image_config = types.ImageConfig(aspect_ratio=settings.image_aspect_ratio)
        if resolution != Resolution.R1K:
            # Only the high-res model accepts an explicit output size
            image_config = types.ImageConfig(
                aspect_ratio=settings.image_aspect_ratio,
                image_size=resolution.value,
            )

        try:
            contents = [types.Part.from_text(text=GENERATE_PREFIX + prompt), _image_part(image_base64)]
        except ValueError as e:
            raise GenerationError(f"Invalid source image: {e}") from e

        start_time = time.time()
        response = await self._call_with_retries(
            "Generation",
            model,
            contents,
            types.GenerateContentConfig(image_config=image_config),
        )
        elapsed_ms = int((time.time() - start_time) * 1000)

        image = _extract_image(response)
        if image is None:
            logger.warning(f"Generation with {model} returned no image (time={elapsed_ms}ms)")
        else:
            logger.info(f"Generated {resolution.value} image with {model} (time={elapsed_ms}ms)")
        return image

    async def refine(self, image_base64: str, instruction: str) -> str | None:
        """Edit an existing image. Raises GenerationError on failure."""
        settings = get_settings()
        model = settings.image_model_standard

        try:
            contents = [
                _image_part(image_base64),
                types.Part.from_text(text=REFINE_TEMPLATE.format(instruction=instruction)),
            ]
        except ValueError as e:
            raise GenerationError(f"Invalid source image: {e}") from e

        start_time = time.time()
        response = await self._call_with_retries("Refinement", model, contents)
        elapsed_ms = int((time.time() - start_time) * 1000)

        image = _extract_image(response)
        if image is None:
            logger.warning(f"Refinement with {model} returned no image (time={elapsed_ms}ms)")
        else:
            logger.info(f"Refined image with {model} (time={elapsed_ms}ms)")
        return image


_client: GenerationClient | None = None


def get_generation_client() -> GenerationClient:
    """Get or create the shared generation client."""
    global _client
    if _client is None:
        _client = GenerationClient()
    return _client
