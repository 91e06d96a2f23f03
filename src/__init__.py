"""
src - Real-estate ROI analyzer

Loads a spreadsheet of property listings, derives investor metrics and serves
filtered, sorted, paginated result sets to a Streamlit UI.

Modules:
    - core: settings, logging, field coercion, location parsing, financial math
    - domain: Pydantic models for listings, assumptions and queries
    - services: normalizer, listing store, query engine, page extractor, endpoints
    - ui: Streamlit state, controller, components and pages
"""

__version__ = "1.4.0"
