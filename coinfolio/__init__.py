"""Top level package for the coinfolio project."""
from importlib import metadata


def get_version() -> str:
    """Return the installed package version.

    Falls back to ``0.0.0`` when the distribution metadata is missing, which
    is the case when the package is imported straight from a source checkout.
    """

    try:
        return metadata.version("coinfolio")
    except metadata.PackageNotFoundError:  # pragma: no cover - during tests
        return "0.0.0"


__all__ = ["get_version"]
