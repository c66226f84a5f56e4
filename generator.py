"""
Script generation: one screenshot + URL + notes in, one GeneratedResult out.

generate() is atomic from the caller's point of view: it returns a fully
validated GeneratedResult or raises GenerationFailed. The provider-level
cause (NetworkError, MalformedResponseError, ...) is chained and logged but
never shown to the user.
"""
import logging
from dataclasses import dataclass

from pydantic import BaseModel, ValidationError

from ai_client import call_ai
from errors import GenerationError, GenerationFailed, MalformedResponseError
from prompts import build_prompt

logger = logging.getLogger(__name__)


class GeneratedResult(BaseModel):
    script:       str   # full Colab script
    instructions: str   # step-by-step guide for running it
    explanation:  str   # how the script deals with content-blocking elements


@dataclass(frozen=True)
class GenerationRequest:
    encoded_image: str
    target_url:    str
    user_notes:    str = ""
    mime_type:     str = "image/jpeg"

    @property
    def prompt(self) -> str:
        return build_prompt(self.target_url, self.user_notes)


def _parse_result(raw: dict) -> GeneratedResult:
    try:
        return GeneratedResult.model_validate(raw)
    except ValidationError as e:
        raise MalformedResponseError(f"AI response is missing expected fields: {e}") from e


def send(request: GenerationRequest) -> GeneratedResult:
    """Issue one request and parse the answer, raising the specific error kind."""
    raw = call_ai(request.encoded_image, request.mime_type, request.prompt, GeneratedResult)
    model_name = raw.get("_model", "") if isinstance(raw, dict) else ""
    result = _parse_result(raw)
    logger.info("Generated script for %s (model=%s, %d chars)",
                request.target_url, model_name or "?", len(result.script))
    return result


def generate(encoded_image: str, target_url: str, notes: str = "",
             mime_type: str = "image/jpeg") -> GeneratedResult:
    if not encoded_image:
        raise ValueError("encoded_image must not be empty")
    if not target_url:
        raise ValueError("target_url must not be empty")

    request = GenerationRequest(
        encoded_image=encoded_image,
        target_url=target_url,
        user_notes=notes or "",
        mime_type=mime_type,
    )
    try:
        return send(request)
    except (GenerationError, RuntimeError) as e:
        logger.error("Generation failed for %s: %s: %s", target_url, type(e).__name__, e)
        raise GenerationFailed() from e
