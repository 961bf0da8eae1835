"""
Dashboard catalog: BI session, paginated loading, search and rendering.
"""
from .loader import CatalogLoader, CatalogStore, VIEWS_PAGE_SIZE
from .renderer import ViewRenderer
from .search import search
from .session import SessionManager

__all__ = [
    'CatalogLoader',
    'CatalogStore',
    'SessionManager',
    'ViewRenderer',
    'VIEWS_PAGE_SIZE',
    'search',
]
