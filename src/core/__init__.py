"""Core utilities: settings, logging, coercion, location and financial math.

Only dependency-free helpers are re-exported here; import ``financial`` and
``location`` from their modules.
"""

from .coercion import pick_first, to_number, to_text
from .exceptions import (
    ConfigurationError,
    DataLoadError,
    ExtractionError,
    InvalidParameterError,
    ListingFileNotFoundError,
    RoiAnalyzerError,
)

__all__ = [
    "to_number",
    "to_text",
    "pick_first",
    # Exceptions
    "RoiAnalyzerError",
    "DataLoadError",
    "ListingFileNotFoundError",
    "ExtractionError",
    "InvalidParameterError",
    "ConfigurationError",
]
