"""Layer 4: Workflows - Public entry points.

Workflows provide the public entry points users call with plain points and
values instead of problems and per-variable options.
"""

from geokriging.workflows.geostatistics import (
    GeostatisticalModel,
    GeostatisticalResult,
)

__all__ = [
    "GeostatisticalModel",
    "GeostatisticalResult",
]
