"""Ingestion layer.

This package turns raw registry payloads into normalized marker objects.
"""

__all__: list[str] = []
