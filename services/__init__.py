"""
Business logic services.

Each service handles one stage of the catalog import or one store.
"""

from services.product_service import ProductService, get_product_service
from services.dimension_service import DimensionService, DimensionMap, get_dimension_service
from services.duplicate_check_service import DuplicateCheckService
from services.row_mapper_service import RowMapperService, ValidationProfile, get_profile
from services.catalog_import_service import CatalogImportService, get_catalog_import_service

__all__ = [
    "ProductService",
    "get_product_service",
    "DimensionService",
    "DimensionMap",
    "get_dimension_service",
    "DuplicateCheckService",
    "RowMapperService",
    "ValidationProfile",
    "get_profile",
    "CatalogImportService",
    "get_catalog_import_service",
]
