"""Configuration objects for density mesh generation."""

from __future__ import annotations

import numbers
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, Mapping, Sequence

from densitymesh.exceptions import ConfigurationError


def _require_real(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def _require_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


class DensitySource(str, Enum):
    """Image channel used as density source.

    Only meaningful to the image reader; the generation core ignores it.
    """

    LUMA = "luma"
    LUMA_ALPHA = "luma-alpha"
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    ALPHA = "alpha"


@dataclass(frozen=True)
class PointsSeparation:
    """Minimal distance between mesh points.

    A constant separation has ``minimum == maximum``. Otherwise separation
    depends on local steepness: steepness 0 maps to ``maximum`` and
    steepness 1 (or more) maps to ``minimum``.

    Example:
        >>> PointsSeparation.parse("2..8").at(0.5)
        5.0
        >>> PointsSeparation.constant(10).at(0.9)
        10.0
    """

    minimum: float
    maximum: float

    @classmethod
    def constant(cls, value: float) -> PointsSeparation:
        return cls(float(value), float(value))

    @classmethod
    def steepness_mapping(cls, minimum: float, maximum: float) -> PointsSeparation:
        return cls(float(minimum), float(maximum))

    @classmethod
    def parse(cls, text: str) -> PointsSeparation:
        """Parse ``"10"`` or an inclusive ``"MIN..MAX"`` range."""
        text = text.strip()
        try:
            if ".." in text:
                low, high = text.split("..", 1)
                return cls.steepness_mapping(float(low), float(high))
            return cls.constant(float(text))
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid points separation: {text!r}"
            ) from e

    @classmethod
    def coerce(
        cls, value: PointsSeparation | float | str | Sequence[float]
    ) -> PointsSeparation:
        """Build a separation from a number, a (min, max) pair or a string."""
        if isinstance(value, PointsSeparation):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, numbers.Real) and not isinstance(value, bool):
            return cls.constant(value)
        try:
            values = list(value)
        except TypeError as e:
            raise ConfigurationError(
                f"Invalid points separation: {value!r}"
            ) from e
        if len(values) != 2:
            raise ConfigurationError(
                f"Points separation range needs 2 values, got {len(values)}"
            )
        for bound in values:
            _require_real("points_separation", bound)
        return cls.steepness_mapping(values[0], values[1])

    @property
    def is_constant(self) -> bool:
        return self.minimum == self.maximum

    def at(self, steepness: float) -> float:
        """Required separation at a location with the given steepness."""
        if self.is_constant:
            return self.maximum
        factor = min(max(float(steepness), 0.0), 1.0)
        return self.maximum + (self.minimum - self.maximum) * factor

    def __str__(self) -> str:
        if self.is_constant:
            return repr(self.maximum)
        return f"{self.minimum!r}..{self.maximum!r}"


@dataclass(frozen=True)
class GenerationSettings:
    """Settings of a single density mesh generation.

    Args:
        points_separation: Minimal distance between sampled points, a
            constant or a steepness range. Accepts anything
            :meth:`PointsSeparation.coerce` does.
        visibility_threshold: Minimal coverage score for a triangle to be
            kept.
        steepness_threshold: Minimal steepness that justifies inserting an
            extra point.
        max_iterations: Placement attempts per candidate target before
            giving up on it.
        extrude_size: Border skirt size. ``None`` or 0 disables extrusion.
        keep_invisible_triangles: Skip visibility pruning entirely.
        density_source: Image channel metadata for the image reader.
        scale: Image downscale factor metadata for the image reader.
        update_region_margin: Reserved. Has no effect on generation.

    Raises:
        ConfigurationError: If a value has the wrong type or is out of range.
    """

    points_separation: PointsSeparation = field(
        default_factory=lambda: PointsSeparation.constant(10.0)
    )
    visibility_threshold: float = 0.01
    steepness_threshold: float = 0.01
    max_iterations: int = 32
    extrude_size: float | None = None
    keep_invisible_triangles: bool = False
    density_source: DensitySource = DensitySource.LUMA_ALPHA
    scale: int = 1
    update_region_margin: float = 0.0

    def __post_init__(self):
        object.__setattr__(
            self,
            "points_separation",
            PointsSeparation.coerce(self.points_separation),
        )
        try:
            source = DensitySource(self.density_source)
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown density source: {self.density_source!r}"
            ) from e
        object.__setattr__(self, "density_source", source)
        self.validate()

    def validate(self) -> None:
        """Raise ConfigurationError if any value has the wrong type or range."""
        for name in ("visibility_threshold", "steepness_threshold",
                     "update_region_margin"):
            _require_real(name, getattr(self, name))
        for name in ("max_iterations", "scale"):
            _require_int(name, getattr(self, name))
        if self.extrude_size is not None:
            _require_real("extrude_size", self.extrude_size)

        sep = self.points_separation
        if sep.minimum <= 0 or sep.maximum <= 0:
            raise ConfigurationError("Points separation must be positive")
        if sep.minimum > sep.maximum:
            raise ConfigurationError(
                f"Points separation range is reversed: {sep}"
            )
        if self.visibility_threshold < 0:
            raise ConfigurationError("Visibility threshold must be >= 0")
        if self.steepness_threshold < 0:
            raise ConfigurationError("Steepness threshold must be >= 0")
        if self.max_iterations < 1:
            raise ConfigurationError("max_iterations must be >= 1")
        if self.extrude_size is not None and self.extrude_size < 0:
            raise ConfigurationError("Extrude size must be >= 0")
        if self.scale < 1:
            raise ConfigurationError("Scale must be >= 1")

    @property
    def extrusion_enabled(self) -> bool:
        return bool(self.extrude_size)

    def with_changes(self, **changes: Any) -> GenerationSettings:
        """Return a copy with the given fields replaced (validated)."""
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GenerationSettings:
        """Create settings from a plain mapping, rejecting unknown keys."""
        known = {f for f in cls.__dataclass_fields__}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown settings: {', '.join(sorted(unknown))}"
            )
        return cls(**dict(data))

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible dictionary."""
        data = asdict(self)
        data["points_separation"] = str(self.points_separation)
        data["density_source"] = self.density_source.value
        return data
