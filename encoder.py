"""
Screenshot encoder.

Turns an uploaded screenshot into an UploadedImage: the raw bytes (after
the preprocessor pipeline), a base64 payload for the JSON request and a
data: URL used as the preview on the form.
"""
import io
import base64
import importlib
from functools import cached_property

from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from errors import ImageReadError

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "webp"}

# Pillow format name → MIME type sent to the provider
_FORMAT_MIME = {
    "JPEG": "image/jpeg",
    "PNG":  "image/png",
    "WEBP": "image/webp",
}


def allowed(filename: str) -> bool:
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS


class UploadedImage:
    """A selected screenshot, held in memory for one form session."""

    def __init__(self, data: bytes, filename: str, mime_type: str):
        self.data      = data
        self.filename  = filename
        self.mime_type = mime_type

    def __repr__(self) -> str:
        return f"UploadedImage({self.filename!r}, {self.mime_type}, {len(self.data)} bytes)"

    @cached_property
    def encoded(self) -> str:
        """Base64 text of the image bytes, computed on first access."""
        if not self.data:
            raise ImageReadError(f"The file {self.filename!r} is empty.")
        return base64.b64encode(self.data).decode("ascii")

    @property
    def preview_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.encoded}"

    # ── Constructors ─────────────────────────────────────────────────────────

    @classmethod
    def from_bytes(cls, data: bytes, filename: str, preprocessors: list | None = None) -> "UploadedImage":
        """Validate raw bytes as an image and run the preprocessor pipeline.

        Raises ImageReadError for empty data, a disallowed extension or
        anything Pillow cannot decode.
        """
        if not filename or not allowed(filename):
            raise ImageReadError("Unsupported file type. Please upload a JPG, PNG or WEBP image.")
        if not data:
            raise ImageReadError(f"The file {filename!r} is empty.")

        try:
            probe = PILImage.open(io.BytesIO(data))
            fmt   = probe.format
            probe.verify()  # raises on corrupt / non-image files
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise ImageReadError("The uploaded file does not appear to be a valid image.") from e

        if fmt not in _FORMAT_MIME:
            raise ImageReadError("Unsupported file type. Please upload a JPG, PNG or WEBP image.")

        data = _run_preprocessors(data, fmt, preprocessors or [])
        return cls(data, filename, _FORMAT_MIME[fmt])

    @classmethod
    def from_upload(cls, file, preprocessors: list | None = None) -> "UploadedImage":
        """Build from a werkzeug FileStorage received by the form."""
        if not file or not file.filename:
            raise ImageReadError("No file received.")
        mimetype = file.mimetype or ""
        if mimetype and mimetype != "application/octet-stream" and not mimetype.startswith("image/"):
            raise ImageReadError("Only image files can be uploaded.")
        try:
            data = file.read()
        except OSError as e:
            raise ImageReadError(f"Could not read {file.filename!r}.") from e
        return cls.from_bytes(data, file.filename, preprocessors)


def _run_preprocessors(data: bytes, fmt: str, preprocessor_names: list) -> bytes:
    """Run the image through the preprocessor pipeline, re-encoding only if it changed."""
    if not preprocessor_names:
        return data

    original = PILImage.open(io.BytesIO(data))
    image    = original
    for name in preprocessor_names:
        mod   = importlib.import_module(f"preprocessors.{name}")
        image = mod.process(image)
    if image is original:
        return data

    if fmt == "JPEG" and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    buf = io.BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()
