"""Routing — поиск пути и котировки коннекторов."""

from .path_finder import PathFinder
from .quoting import QuoteComparator, cheaper_quote, get_quote_from_connector

__all__ = [
    "PathFinder",
    "QuoteComparator",
    "cheaper_quote",
    "get_quote_from_connector",
]
