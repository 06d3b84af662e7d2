"""
SVG Holder — Gallery Client
=============================

What:  The consuming side of the API.
    - api_client.py: SvgApiClient, an async httpx client that parses every
      response envelope into typed models and rejects malformed payloads
    - gallery.py:    GalleryState, the view-model mirroring the record list
      with search, selection, delete and date grouping
"""

from app.client.api_client import ApiError, MalformedResponseError, SvgApiClient, check_svg_file
from app.client.gallery import DateGroup, GalleryState, format_file_size, relative_day_label

__all__ = [
    "ApiError",
    "DateGroup",
    "GalleryState",
    "MalformedResponseError",
    "SvgApiClient",
    "check_svg_file",
    "format_file_size",
    "relative_day_label",
]
