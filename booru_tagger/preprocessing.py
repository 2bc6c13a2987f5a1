"""
Image preprocessing for WD-14 style taggers.

Images are padded to a white square, resized to the model input size and
flattened to BGR float32 samples in row-major order.
"""

from typing import Sequence
import numpy as np
from PIL import Image


def _to_rgb(image: Image.Image) -> Image.Image:
    """Flatten any alpha channel and return an RGB image."""
    if image.mode == "RGB":
        return image
    if image.mode.startswith("I"):
        # 16-bit samples keep their high byte
        samples = np.clip(np.asarray(image, dtype=np.int64), 0, 0xFFFF) >> 8
        return Image.fromarray(samples.astype(np.uint8), "L").convert("RGB")
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        # Samples are read premultiplied by alpha, i.e. composited over black
        rgba = image.convert("RGBA")
        background = Image.new("RGBA", rgba.size, (0, 0, 0, 255))
        return Image.alpha_composite(background, rgba).convert("RGB")
    return image.convert("RGB")


def prepare_image(image: Image.Image, target_size: int) -> np.ndarray:
    """
    Convert one decoded image into a flat float32 buffer.

    The image is centered on a white square canvas of side max(width, height),
    resized with Lanczos when that side differs from target_size, and emitted
    as y-major, x-minor pixels with channels in B, G, R order.

    Returns:
        Array of shape (3 * target_size * target_size,)
    """
    if target_size <= 0:
        raise ValueError(f"target_size must be positive, got {target_size}")

    source = _to_rgb(image)
    w, h = source.size
    max_dim = max(w, h)

    padded = Image.new("RGB", (max_dim, max_dim), (255, 255, 255))
    padded.paste(source, ((max_dim - w) // 2, (max_dim - h) // 2))

    if max_dim != target_size:
        padded = padded.resize((target_size, target_size), Image.Resampling.LANCZOS)

    img_array = np.asarray(padded, dtype=np.float32)
    img_array = img_array[:, :, ::-1]  # RGB to BGR

    return np.ascontiguousarray(img_array).reshape(-1)


def prepare_batch(images: Sequence[Image.Image], target_size: int) -> np.ndarray:
    """Concatenate prepare_image over images, in order."""
    if not images:
        return np.empty(0, dtype=np.float32)
    return np.concatenate([prepare_image(image, target_size) for image in images])
