"""
Catalog browsing for squeezecloud.

    - models: EntryKind, MenuEntry, Page
    - parsers: API responses to menu entries, one parser per browse kind
    - paginator: CatalogPaginator (request -> resource -> fetch -> parse -> Page)
    - menu: top-level menu and catalog URL helpers

Usage:
    from squeezecloud.browse import CatalogPaginator, top_level_menu
"""

from squeezecloud.browse.menu import (
    is_catalog_page_url,
    normalize_catalog_url,
    top_level_menu,
)
from squeezecloud.browse.models import EntryKind, MenuEntry, Page
from squeezecloud.browse.paginator import CatalogPaginator
from squeezecloud.browse.parsers import PARSERS, parser_for

__all__ = [
    "CatalogPaginator",
    "EntryKind",
    "MenuEntry",
    "PARSERS",
    "Page",
    "is_catalog_page_url",
    "normalize_catalog_url",
    "parser_for",
    "top_level_menu",
]
