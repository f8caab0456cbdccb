"""Image export utilities for rendered images.

This module turns the linear averaged image of a render into 8-bit color
and writes it to disk.

Quantization applies gamma 2 (a square root), clamps to [0, 0.999] and
scales by 256 before truncating, so every channel value maps to 0..255.

Supported formats:
    - PPM (plain-text P3)
    - PNG (8-bit via Pillow)

Example:
    >>> from spheretracer.output.export import save_image
    >>> from spheretracer.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(400, 266)
    >>> renderer.render(100)
    >>> save_image(renderer.get_image_numpy(), "output.png")
"""

from __future__ import annotations

import logging
from os import PathLike
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Upper clamp applied before scaling by 256 so 1.0 maps to 255
MAX_INTENSITY = 0.999

SUPPORTED_SUFFIXES = (".ppm", ".png")


def gamma_correct(
    image: npt.NDArray[np.floating],
    gamma: float = 2.0,
) -> npt.NDArray[np.float32]:
    """Apply gamma correction to a linear image.

    Negative values are clamped to zero first.

    Args:
        image: Linear image array.
        gamma: Display gamma. Default 2.0 (square root).

    Returns:
        Gamma-corrected float32 array.
    """
    linear = np.maximum(np.asarray(image, dtype=np.float32), 0.0)
    return np.power(linear, 1.0 / gamma).astype(np.float32)


def image_to_uint8(
    image: npt.NDArray[np.floating],
    *,
    gamma: float = 2.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to 8-bit color.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Display gamma. Default 2.0.

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    corrected = np.clip(gamma_correct(image, gamma), 0.0, MAX_INTENSITY)
    return (corrected * 256.0).astype(np.uint8)


def format_ppm(image: npt.NDArray[np.uint8]) -> str:
    """Format an 8-bit image as plain-text PPM (P3).

    The header is "P3", then "<width> <height>", then "255", followed by one
    "<r> <g> <b>" line per pixel, row-major from the first row.

    Args:
        image: 8-bit image array of shape (H, W, 3).

    Returns:
        The PPM document, ending with a newline.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    height, width, _ = image.shape
    lines = ["P3", f"{width} {height}", "255"]
    lines.extend(f"{r} {g} {b}" for r, g, b in image.reshape(-1, 3).tolist())
    return "\n".join(lines) + "\n"


def write_ppm(image: npt.NDArray[np.uint8], filepath: str | PathLike[str]) -> None:
    """Write an 8-bit image to a plain-text PPM file."""
    Path(filepath).write_text(format_ppm(image), encoding="ascii")


def save_png_from_array(
    image: npt.NDArray[np.floating],
    filepath: str | PathLike[str],
    *,
    gamma: float = 2.0,
) -> None:
    """Save a linear NumPy image as a PNG file.

    Args:
        image: Linear image array of shape (H, W, 3).
        filepath: Output file path (should end in .png).
        gamma: Display gamma. Default 2.0.
    """
    image_uint8 = image_to_uint8(image, gamma=gamma)
    PILImage.fromarray(image_uint8).save(filepath)


def save_image(
    image: npt.NDArray[np.floating],
    filepath: str | PathLike[str],
    *,
    gamma: float = 2.0,
) -> None:
    """Save a linear image, picking the format from the file suffix.

    Raises:
        ValueError: If the suffix is not .ppm or .png.
    """
    suffix = Path(filepath).suffix.lower()
    if suffix == ".ppm":
        write_ppm(image_to_uint8(image, gamma=gamma), filepath)
    elif suffix == ".png":
        save_png_from_array(image, filepath, gamma=gamma)
    else:
        raise ValueError(
            f"Unsupported image format {suffix!r}; expected one of {SUPPORTED_SUFFIXES}"
        )
    logger.info("Wrote %dx%d image to %s", image.shape[1], image.shape[0], filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
