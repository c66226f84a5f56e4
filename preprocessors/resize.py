"""
Preprocessor: Resize

Proportionally shrinks screenshots to fit within MAX_WIDTH × MAX_HEIGHT
so the inline image stays well under the provider's request limit.
Smaller screenshots are NOT upscaled: they are returned unchanged.
Uses LANCZOS resampling to keep sidebar text legible.
"""
from PIL import Image

MAX_WIDTH  = 2048
MAX_HEIGHT = 2048


def process(image: Image.Image) -> Image.Image:
    """
    Return a proportionally resized copy if the screenshot exceeds the limit.
    If it already fits, the original object is returned unchanged.
    """
    w, h = image.size
    if w <= MAX_WIDTH and h <= MAX_HEIGHT:
        return image

    ratio    = min(MAX_WIDTH / w, MAX_HEIGHT / h)
    new_size = (max(1, int(w * ratio)), max(1, int(h * ratio)))
    return image.resize(new_size, Image.LANCZOS)
