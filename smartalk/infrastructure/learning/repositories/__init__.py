from .item_catalog_repository import ItemCatalogRepository
from .progress_repository import ProgressRepository

__all__ = ["ItemCatalogRepository", "ProgressRepository"]
