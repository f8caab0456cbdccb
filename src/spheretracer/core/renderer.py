"""Batched renderer with progress reporting.

This module provides a convenient wrapper around the core integrator that supports:
- Accumulating samples over several calls
- Batch rendering (multiple samples per kernel launch)
- Progress callbacks and a generator interface
- Conversion and saving of the final image

The Renderer class owns the render target dimensions, path depth and seed.
Sample numbering continues across calls, so rendering 10 samples at once or
in two calls of 5 produces the same image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.core.renderer import Renderer
    >>> from spheretracer.scene.presets import create_random_spheres_scene
    >>> from spheretracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=7)
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(400, 266, max_depth=50, seed=0)
    >>> renderer.render(100, batch_size=10)
    >>> renderer.save_image("random_spheres.png")
"""

import logging
import time
from collections.abc import Callable, Generator
from os import PathLike
from typing import Any

import numpy as np
import numpy.typing as npt

from spheretracer.core.integrator import (
    MAX_DEPTH,
    clear_render_target,
    get_averaged_image_numpy,
    get_image,
    get_total_samples,
    render_image,
    setup_render_target,
)
from spheretracer.output.export import image_to_uint8, save_image, save_png_from_array, write_ppm

logger = logging.getLogger(__name__)

# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Accumulating renderer over the global render target.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum path depth.
        seed: Render seed; together with the sample numbering it fixes
            every random number drawn.
    """

    def __init__(
        self,
        width: int,
        height: int,
        max_depth: int = MAX_DEPTH,
        seed: int = 0,
    ) -> None:
        """Initialize the renderer and its render target.

        Raises:
            ValueError: If dimensions are out of range, max_depth is negative
                or the seed is negative.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth = {max_depth} must be non-negative")
        if seed < 0:
            raise ValueError(f"seed = {seed} must be non-negative")

        self._width = width
        self._height = height
        self.max_depth = max_depth
        self.seed = seed
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Discard all accumulated samples, keeping the dimensions."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset accumulator.

        Raises:
            ValueError: If dimensions exceed maximum supported size.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples in batches, yielding progress after each batch.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples per kernel launch.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Example:
            >>> for current, target in renderer.render_progressive(100, batch_size=10):
            ...     print(f"Progress: {current}/{target} samples")
        """
        if num_samples <= 0:
            return
        if batch_size < 1:
            raise ValueError(f"batch_size = {batch_size} must be at least 1")

        start_samples = self.sample_count
        target_samples = start_samples + num_samples
        start_time = time.perf_counter()

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, max_depth=self.max_depth, seed=self.seed)
            remaining -= batch

            current = self.sample_count
            logger.debug("Rendered %d/%d samples per pixel", current, target_samples)
            yield (current, target_samples)

        elapsed = time.perf_counter() - start_time
        logger.info(
            "Rendered %dx%d image: %d samples per pixel in %.2fs",
            self._width,
            self._height,
            num_samples,
            elapsed,
        )

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples with an optional progress callback.

        Accumulates the specified number of samples into the existing buffer.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples per kernel launch.
            callback: Optional callback called after each batch with
                (current_total_samples, target_total_samples).

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} samples")
            >>> renderer.render(100, batch_size=10, callback=progress)
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def get_image(self) -> Any:
        """Get the raw Taichi color-sum field (full preallocated buffer)."""
        return get_image()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the averaged linear image, shape (height, width, 3), top row first."""
        return get_averaged_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the gamma-corrected 8-bit image, shape (height, width, 3)."""
        return image_to_uint8(self.get_image_numpy())

    def save_ppm(self, filepath: str | PathLike[str]) -> None:
        write_ppm(self.get_image_uint8(), filepath)

    def save_png(self, filepath: str | PathLike[str]) -> None:
        save_png_from_array(self.get_image_numpy(), filepath)

    def save_image(self, filepath: str | PathLike[str]) -> None:
        """Save the image as PPM or PNG depending on the file suffix.

        Raises:
            ValueError: If the suffix is not supported.
        """
        save_image(self.get_image_numpy(), filepath)

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"max_depth={self.max_depth}, seed={self.seed}, samples={self.sample_count})"
        )
