"""Kid-safe image generation endpoint."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from playground.api.deps import require_allowed_origin
from playground.core.errors import ConfigurationError, GenerationError
from playground.core.llm import generate_image
from playground.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


class ImageRequest(BaseModel):
    """Request to generate an illustration."""

    prompt: str = ""


class ImageResponse(BaseModel):
    """Generated image as a data URL."""

    image: str


@router.post("/generate-image", response_model=ImageResponse)
async def generate_illustration(
    request: ImageRequest,
    _origin: str = Depends(require_allowed_origin),
) -> ImageResponse:
    """Generate an image for the prompt, wrapped in a kid-safe preamble."""
    if not request.prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required")

    try:
        image_b64 = await generate_image(request.prompt)
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=f"Missing configuration: {e}") from e
    except GenerationError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"message": str(e), "details": e.details},
        ) from e

    logger.info("Generated image")
    return ImageResponse(image=f"data:image/png;base64,{image_b64}")
