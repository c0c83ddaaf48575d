"""Extração heurística de lugares mencionados em texto."""
from .locations import COMMON_PLACES, extract_location_mentions, extract_place_names

__all__ = ["COMMON_PLACES", "extract_location_mentions", "extract_place_names"]
