"""Render settings shared by scene files and the command line."""

from dataclasses import asdict, dataclass
from typing import Any

# Maximum supported image dimensions (the render buffers are preallocated)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048


@dataclass
class RenderSettings:
    """Image size and sampling parameters of a render.

    Attributes:
        image_width: Output width in pixels.
        aspect_ratio: Width divided by height; the height is derived.
        samples_per_pixel: Number of samples averaged per pixel.
        max_depth: Maximum number of bounces per path.
        seed: Render seed.

    Example:
        >>> settings = RenderSettings(image_width=1200)
        >>> settings.image_height
        800
    """

    image_width: int = 400
    aspect_ratio: float = 3.0 / 2.0
    samples_per_pixel: int = 20
    max_depth: int = 5
    seed: int = 0

    def __post_init__(self) -> None:
        if self.image_width < 1:
            raise ValueError(f"image_width = {self.image_width} must be positive")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel = {self.samples_per_pixel} must be at least 1"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must be non-negative")
        if self.seed < 0:
            raise ValueError(f"seed = {self.seed} must be non-negative")
        if self.image_height < 1:
            raise ValueError(
                f"image_width {self.image_width} with aspect ratio "
                f"{self.aspect_ratio} gives an empty image"
            )
        if self.image_width > MAX_IMAGE_WIDTH or self.image_height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.image_width}x{self.image_height}) exceed "
                f"maximum supported ({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )

    @property
    def image_height(self) -> int:
        return int(self.image_width / self.aspect_ratio)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderSettings":
        """Build settings from a mapping; missing keys keep their defaults.

        Raises:
            ValueError: On unknown keys or invalid values.
        """
        known = {"image_width", "aspect_ratio", "samples_per_pixel", "max_depth", "seed"}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown render settings: {sorted(unknown)}")

        kwargs: dict[str, Any] = {}
        for key in ("image_width", "samples_per_pixel", "max_depth", "seed"):
            if key in data:
                kwargs[key] = int(data[key])
        if "aspect_ratio" in data:
            kwargs["aspect_ratio"] = float(data["aspect_ratio"])
        return cls(**kwargs)
