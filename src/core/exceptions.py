"""Custom exceptions for the ROI analyzer.

Malformed cell values never raise (they coerce to None); these types are for
structural failures the caller must be able to tell apart from "no results".
"""

from __future__ import annotations

from typing import Any


class RoiAnalyzerError(Exception):
    """Base exception for all ROI analyzer errors."""
    pass


# --- Data Errors ---

class DataLoadError(RoiAnalyzerError):
    """Failed to read or parse the listings spreadsheet."""
    pass


class ListingFileNotFoundError(DataLoadError, FileNotFoundError):
    """The configured listings spreadsheet does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Listings file not found: {path}")


# --- Scraping Errors ---

class ExtractionError(RoiAnalyzerError):
    """A listing page could not be fetched or parsed."""
    pass


# --- Request Errors ---

class InvalidParameterError(RoiAnalyzerError):
    """A constructor or request argument is out of its accepted range."""

    def __init__(self, param_name: str, value: Any, reason: str = ""):
        self.param_name = param_name
        self.value = value
        self.reason = reason
        detail = f" ({reason})" if reason else ""
        super().__init__(f"{param_name}={value!r} is invalid{detail}")


# --- Configuration Errors ---

class ConfigurationError(RoiAnalyzerError):
    """Settings name something that does not exist (e.g. an unknown market)."""
    pass
