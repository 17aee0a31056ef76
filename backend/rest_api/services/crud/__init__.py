"""
CRUD Services - Generic operations for entity management.

Provides:
- EntityDescriptor: Static description of an entity type (model + schemas)
- EntityRepository: Data access with soft-delete filtering
- GenericViewSet: List/Retrieve/Create/Update/Delete routes plus custom actions
- Query helpers: filter/order extraction, sanitizing and statement building
"""

from .params import FilterParams, OrderParams, extract_filters, extract_order
from .sanitizer import resolve_field, sanitize_order_field
from .query_builder import apply_filters, apply_order, apply_search, count_total
from .entity import EntityDescriptor
from .soft_delete import filter_active, soft_delete
from .repository import EntityRepository
from .viewset import (
    Action,
    GenericViewSet,
    OperationContext,
    ViewSetHooks,
    ViewSetOperations,
    create_object,
    delete_object,
    list_objects,
    retrieve_object,
    save_new_object,
    update_object,
)

__all__ = [
    # Params
    "FilterParams",
    "OrderParams",
    "extract_filters",
    "extract_order",
    # Sanitizer
    "resolve_field",
    "sanitize_order_field",
    # Query builder
    "apply_filters",
    "apply_order",
    "apply_search",
    "count_total",
    # Entity / repository
    "EntityDescriptor",
    "EntityRepository",
    "filter_active",
    "soft_delete",
    # ViewSet
    "Action",
    "GenericViewSet",
    "OperationContext",
    "ViewSetHooks",
    "ViewSetOperations",
    "create_object",
    "delete_object",
    "list_objects",
    "retrieve_object",
    "save_new_object",
    "update_object",
]
