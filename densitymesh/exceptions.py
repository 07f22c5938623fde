"""Custom exceptions for the densitymesh package."""


class DensityMeshError(Exception):
    """Base exception for densitymesh package."""

    pass


class InvalidRegionError(DensityMeshError):
    """Region lies outside the density field or sample count mismatches it."""

    pass


class DegenerateGeometryError(DensityMeshError):
    """Too few usable points to build any triangle."""

    pass


class ConfigurationError(DensityMeshError):
    """Generation settings outside their valid ranges."""

    pass


class DataLoadError(DensityMeshError):
    """Failed to load data from file."""

    pass
