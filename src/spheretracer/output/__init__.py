"""Output module for image quantization and file export.

Components:
    export: Gamma correction, 8-bit quantization, PPM and PNG writers

Example:
    >>> from spheretracer.output import save_image
    >>> save_image(linear_image, "output.ppm")
"""

from spheretracer.output.export import (
    compute_rmse,
    format_ppm,
    gamma_correct,
    image_to_uint8,
    save_image,
    save_png_from_array,
    write_ppm,
)

__all__ = [
    "gamma_correct",
    "image_to_uint8",
    "format_ppm",
    "write_ppm",
    "save_png_from_array",
    "save_image",
    "compute_rmse",
]
