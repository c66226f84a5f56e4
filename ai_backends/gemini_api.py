"""
AI backend: Google Gemini
Uses GEMINI_MODEL (default gemini-3-pro-preview) with JSON output.
Requires GEMINI_API_KEY (or API_KEY) in environment.
"""
import os
import json
import base64
import logging

from google import genai
from google.genai import types

from errors import NetworkError, MalformedResponseError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-3-pro-preview"
# Must fit a full Colab script plus instructions in one JSON object
DEFAULT_MAX_OUTPUT_TOKENS = 16384


def _api_key() -> str | None:
    return os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")


def _quota_message(msg: str) -> str:
    retry = ""
    try:
        data = json.loads(msg[msg.index("{"):])
        details = data.get("error", {}).get("details", [])
        for d in details:
            if d.get("@type", "").endswith("RetryInfo"):
                retry = f" Retry after: {d['retryDelay']}."
    except (ValueError, AttributeError, KeyError):
        pass
    return (
        f"Gemini API quota exceeded.{retry} "
        "Generate a new key at https://aistudio.google.com/apikey "
        "or wait and try again."
    )


def call(image_b64: str, mime_type: str, prompt: str, response_schema) -> dict:
    """Send a base64 image + prompt to Gemini and return the parsed JSON response.

    Args:
        image_b64:       Base64-encoded image payload.
        mime_type:       MIME type of the image.
        prompt:          Text prompt to send alongside the image.
        response_schema: Pydantic model class used as the structured output schema.

    Returns:
        Parsed JSON response as a dict.

    Raises:
        NetworkError:           the request failed or was rejected.
        MalformedResponseError: the response body was empty or not JSON.
    """
    api_key = _api_key()
    if not api_key:
        raise RuntimeError(
            "GEMINI_API_KEY is not set. Copy .env.example to .env and add your key."
        )

    model = os.environ.get("GEMINI_MODEL", DEFAULT_MODEL)
    max_output_tokens = int(os.environ.get("GEMINI_MAX_OUTPUT_TOKENS", DEFAULT_MAX_OUTPUT_TOKENS))
    client = genai.Client(api_key=api_key)

    try:
        response = client.models.generate_content(
            model=model,
            contents=[
                types.Part.from_bytes(data=base64.b64decode(image_b64), mime_type=mime_type),
                prompt,
            ],
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=response_schema,
                max_output_tokens=max_output_tokens,
            ),
        )
    except Exception as e:
        msg = str(e)
        logger.warning("Gemini request failed (model=%s): %s", model, msg)
        if "429" in msg or "RESOURCE_EXHAUSTED" in msg:
            raise NetworkError(_quota_message(msg)) from e
        raise NetworkError(f"Gemini request failed: {msg}") from e

    # Prefer response.parsed (SDK-parsed Pydantic object); it is None when the
    # JSON did not match the schema, in which case the raw text is returned as-is
    # and left for the caller to validate.
    parsed = getattr(response, "parsed", None)
    if parsed is not None and hasattr(parsed, "model_dump"):
        result = parsed.model_dump()
    else:
        raw_text = response.text or ""
        if not raw_text.strip():
            raise MalformedResponseError("No response from Gemini")
        try:
            result = json.loads(raw_text)
        except json.JSONDecodeError as parse_err:
            logger.warning("Gemini returned non-JSON text: %.500s", raw_text)
            raise MalformedResponseError(
                f"AI returned a response that could not be parsed as JSON. (Detail: {parse_err})"
            ) from parse_err

    if not isinstance(result, dict):
        raise MalformedResponseError(
            f"AI returned JSON of type {type(result).__name__}, expected an object."
        )

    logger.info("Gemini response received (model=%s)", model)
    result["_model"] = model
    return result
