"""
Generic ViewSet: List / Retrieve / Create / Update / Delete for any entity
described by an ``EntityDescriptor``, plus custom named actions.

The five standard operations live in a strategy table (``ViewSetOperations``).
Each entry defaults to the generic function in this module and can be swapped
individually, so a specialization replaces only what it needs:

    operations = ViewSetOperations(create=create_user, list=list_users)
    viewset = GenericViewSet(USER, operations=operations, actions=[...])
    router = viewset.build_router("/api/users", tags=["users"])

Routes mounted by ``register_routes``:

    GET     /              list
    GET     /{object_id}   retrieve
    POST    /              create
    PUT     /{object_id}   update (partial merge)
    DELETE  /{object_id}   delete
    <any>   <action.path>  custom action (mounted first)

Errors are raised as ``AppException`` subclasses and rendered as a single
envelope by the registered exception handlers. Storage faults are rolled back
and surface as ``DatabaseError`` (500); any other unexpected error becomes an
``InternalError`` (500).
"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Callable, Iterable, Sequence

from fastapi import APIRouter, Body, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.config.constants import Messages, QueryParams
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.utils.exceptions import DatabaseError, InternalError, NotFoundError
from shared.utils.schemas import Envelope
from rest_api.routers._common.pagination import apply_pagination, extract_pagination
from rest_api.routers._common.query import first_value, query_multidict
from rest_api.routers._common.response import success, success_with_pagination
from rest_api.services.crud.entity import EntityDescriptor
from rest_api.services.crud.params import extract_filters
from rest_api.services.crud.query_builder import (
    apply_filters,
    apply_order,
    apply_search,
    count_total,
)
from rest_api.services.crud.repository import EntityRepository

logger = get_logger(__name__)

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")

# Documented error envelopes, per route kind
LIST_RESPONSES = {400: {"model": Envelope}, 500: {"model": Envelope}}
OBJECT_RESPONSES = {**LIST_RESPONSES, 404: {"model": Envelope}}

# Prefix of the DatabaseError message per operation
OPERATION_LABELS = {
    "list": "Query",
    "retrieve": "Query",
    "create": "Create",
    "update": "Update",
    "delete": "Delete",
}


# =============================================================================
# Operation context
# =============================================================================


@dataclass
class OperationContext:
    """Everything an operation or action needs for one request."""

    viewset: "GenericViewSet"
    db: Session
    request: Request | None = None
    object_id: str | None = None
    payload: Any = None

    @property
    def descriptor(self) -> EntityDescriptor:
        return self.viewset.descriptor

    @cached_property
    def repo(self) -> EntityRepository:
        return EntityRepository(self.descriptor, self.db)

    @property
    def query(self) -> Any:
        """Query parameters of the request (empty when there is no request)."""
        if self.request is None:
            return {}
        return self.request.query_params

    def get_object(self) -> Any:
        """Live entity addressed by ``object_id``; raises InvalidIdError / NotFoundError."""
        return self.viewset.get_object_or_404(self.db, self.object_id)


class ViewSetHooks:
    """
    Lifecycle hooks called right before the storage write of
    create, update and delete. Subclass and override what you need.
    """

    def perform_create(self, ctx: OperationContext, instance: Any) -> None:
        pass

    def perform_update(self, ctx: OperationContext, instance: Any) -> None:
        pass

    def perform_destroy(self, ctx: OperationContext, instance: Any) -> None:
        pass


# =============================================================================
# Generic operations
# =============================================================================


def save_new_object(ctx: OperationContext, instance: Any) -> Any:
    """Run the create hook, then insert ``instance`` and reload generated columns."""
    ctx.viewset.hooks.perform_create(ctx, instance)
    ctx.repo.add(instance)
    logger.info(
        "Entity created",
        entity=ctx.descriptor.name,
        entity_id=getattr(instance, ctx.descriptor.pk_name),
    )
    return instance


def list_objects(
    ctx: OperationContext,
    *,
    exclude_keys: Iterable[str] = (),
    base_query: Select | None = None,
) -> Response:
    """
    Filtered, ordered, paginated list.

    ``exclude_keys`` are query keys the caller handles itself and that must not
    become equality filters. ``base_query`` lets a specialization pre-filter.
    """
    descriptor = ctx.descriptor
    params = query_multidict(ctx.query)

    pagination = extract_pagination(
        params,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )

    excluded = set(exclude_keys)
    if descriptor.search_fields:
        excluded.add(QueryParams.SEARCH)
    filter_params = extract_filters(params, excluded)

    stmt = base_query if base_query is not None else ctx.repo.base_query()
    if descriptor.search_fields:
        stmt = apply_search(stmt, descriptor.search_columns, first_value(params, QueryParams.SEARCH))
    stmt = apply_filters(
        stmt, descriptor, filter_params.filters, strict=ctx.viewset.strict_filter_fields
    )

    total = count_total(ctx.db, stmt)

    stmt = apply_order(stmt, descriptor, filter_params.order, strict=ctx.viewset.strict_filter_fields)
    stmt = apply_pagination(stmt, pagination)
    rows = ctx.repo.find_all(stmt)

    return success_with_pagination(descriptor.serialize_many(rows), pagination.to_info(total))


def retrieve_object(ctx: OperationContext) -> Response:
    return success(ctx.descriptor.serialize(ctx.get_object()))


def create_object(ctx: OperationContext) -> Response:
    """Bind the body, insert, respond with the stored row (generated fields included)."""
    descriptor = ctx.descriptor
    data = descriptor.bind_create(ctx.payload)

    # Unset fields are left to the column defaults
    values = {
        key: value
        for key, value in data.model_dump(exclude_none=True).items()
        if key in descriptor.columns
    }
    instance = save_new_object(ctx, descriptor.new_instance(**values))
    return success(descriptor.serialize(instance))


def update_object(ctx: OperationContext) -> Response:
    """
    Partial update: only non-empty payload fields overwrite the stored row.

    The row is re-read after the commit so the response reflects what the
    database holds.
    """
    descriptor = ctx.descriptor
    instance = ctx.get_object()
    data = descriptor.bind_update(ctx.payload)

    changed = descriptor.merge(instance, data)
    ctx.viewset.hooks.perform_update(ctx, instance)
    ctx.repo.save(instance)

    pk = getattr(instance, descriptor.pk_name)
    refreshed = ctx.repo.find_by_pk(pk, populate_existing=True)
    if refreshed is None:
        raise NotFoundError(descriptor.name, pk)

    logger.info("Entity updated", entity=descriptor.name, entity_id=pk, fields=changed)
    return success(descriptor.serialize(refreshed))


def delete_object(ctx: OperationContext) -> Response:
    """Soft delete; the acknowledgment carries no entity payload."""
    descriptor = ctx.descriptor
    instance = ctx.get_object()

    ctx.viewset.hooks.perform_destroy(ctx, instance)
    ctx.repo.delete(instance)

    logger.info(
        "Entity deleted",
        entity=descriptor.name,
        entity_id=getattr(instance, descriptor.pk_name),
    )
    return success({"message": Messages.DELETED})


Operation = Callable[[OperationContext], Response]


@dataclass(frozen=True)
class ViewSetOperations:
    """Strategy table of the five standard operations."""

    list: Operation = list_objects
    retrieve: Operation = retrieve_object
    create: Operation = create_object
    update: Operation = update_object
    delete: Operation = delete_object


@dataclass(frozen=True)
class Action:
    """
    Custom named operation mounted next to the standard routes.

    ``method`` is one of GET/POST/PUT/DELETE/PATCH; anything else mounts the
    action for all of them. A path containing ``{object_id}`` receives the
    identifier in ``ctx.object_id``.
    """

    method: str
    path: str
    handler: Operation
    name: str | None = None
    summary: str | None = None

    @property
    def methods(self) -> list[str]:
        method = self.method.upper()
        if method in HTTP_METHODS:
            return [method]
        return list(HTTP_METHODS)

    @property
    def operation_name(self) -> str:
        return self.name or self.handler.__name__


# =============================================================================
# ViewSet
# =============================================================================


class GenericViewSet:
    """Dispatches HTTP requests for one entity type to its operation table."""

    def __init__(
        self,
        descriptor: EntityDescriptor,
        *,
        operations: ViewSetOperations | None = None,
        hooks: ViewSetHooks | None = None,
        actions: Sequence[Action] = (),
        strict_filter_fields: bool | None = None,
    ):
        self.descriptor = descriptor
        self.operations = operations or ViewSetOperations()
        self.hooks = hooks or ViewSetHooks()
        self.actions = list(actions)
        if strict_filter_fields is None:
            strict_filter_fields = settings.strict_filter_fields
        self.strict_filter_fields = strict_filter_fields

    def dispatch(self, operation: str, ctx: OperationContext) -> Response:
        """Run a standard operation by name."""
        return self._run(operation, getattr(self.operations, operation), ctx)

    def _run(self, operation: str, handler: Operation, ctx: OperationContext) -> Response:
        try:
            return handler(ctx)
        except SQLAlchemyError as exc:
            ctx.db.rollback()
            label = OPERATION_LABELS.get(operation, operation)
            raise DatabaseError(f"{label} {self.descriptor.name}", exc) from exc
        except (StarletteHTTPException, RequestValidationError):
            raise
        except Exception as exc:
            # Rendered inside the middleware stack so the response keeps
            # its request id and CORS headers
            ctx.db.rollback()
            logger.error(
                "Unhandled error in operation",
                entity=self.descriptor.name,
                operation=operation,
                error=repr(exc),
                exc_info=exc,
            )
            raise InternalError(operation=operation) from exc

    def get_object_or_404(self, db: Session, raw_id: str | None) -> Any:
        """
        Live entity for a raw path identifier.

        Raises:
            InvalidIdError: missing or unparsable identifier (400)
            NotFoundError: no live row with that key (404)
        """
        pk = self.descriptor.parse_pk(raw_id)
        instance = EntityRepository(self.descriptor, db).find_by_pk(pk)
        if instance is None:
            raise NotFoundError(self.descriptor.name, pk)
        return instance

    # =========================================================================
    # Route registration
    # =========================================================================

    def build_router(self, prefix: str = "", tags: list[str] | None = None) -> APIRouter:
        router = APIRouter(prefix=prefix, tags=tags)
        self.register_routes(router)
        return router

    def register_routes(self, router: APIRouter) -> APIRouter:
        """
        Mount custom actions, then the five standard routes.

        Actions go first so static paths such as ``/stats`` are matched before
        ``/{object_id}``.
        """
        for action in self.actions:
            self.register_action(router, action)

        viewset = self
        table = self.descriptor.table_name

        def list_endpoint(request: Request, db: Session = Depends(get_db)):
            return viewset.dispatch("list", OperationContext(viewset, db, request))

        def retrieve_endpoint(object_id: str, request: Request, db: Session = Depends(get_db)):
            ctx = OperationContext(viewset, db, request, object_id=object_id)
            return viewset.dispatch("retrieve", ctx)

        def create_endpoint(
            request: Request,
            payload: Any = Body(None),
            db: Session = Depends(get_db),
        ):
            ctx = OperationContext(viewset, db, request, payload=payload)
            return viewset.dispatch("create", ctx)

        def update_endpoint(
            object_id: str,
            request: Request,
            payload: Any = Body(None),
            db: Session = Depends(get_db),
        ):
            ctx = OperationContext(viewset, db, request, object_id=object_id, payload=payload)
            return viewset.dispatch("update", ctx)

        def delete_endpoint(object_id: str, request: Request, db: Session = Depends(get_db)):
            ctx = OperationContext(viewset, db, request, object_id=object_id)
            return viewset.dispatch("delete", ctx)

        routes = [
            ("/", list_endpoint, "GET", "list", LIST_RESPONSES),
            ("/{object_id}", retrieve_endpoint, "GET", "retrieve", OBJECT_RESPONSES),
            ("/", create_endpoint, "POST", "create", LIST_RESPONSES),
            ("/{object_id}", update_endpoint, "PUT", "update", OBJECT_RESPONSES),
            ("/{object_id}", delete_endpoint, "DELETE", "delete", OBJECT_RESPONSES),
        ]
        for path, endpoint, method, operation, responses in routes:
            router.add_api_route(
                path,
                endpoint,
                methods=[method],
                name=f"{table}-{operation}",
                responses=responses,
            )
        return router

    def register_action(self, router: APIRouter, action: Action) -> None:
        """Mount one custom action."""
        viewset = self
        operation = action.operation_name

        if "{object_id}" in action.path:

            def endpoint(
                object_id: str,
                request: Request,
                payload: Any = Body(None),
                db: Session = Depends(get_db),
            ):
                ctx = OperationContext(viewset, db, request, object_id=object_id, payload=payload)
                return viewset._run(operation, action.handler, ctx)

        else:

            def endpoint(
                request: Request,
                payload: Any = Body(None),
                db: Session = Depends(get_db),
            ):
                ctx = OperationContext(viewset, db, request, payload=payload)
                return viewset._run(operation, action.handler, ctx)

        router.add_api_route(
            action.path,
            endpoint,
            methods=action.methods,
            name=f"{self.descriptor.table_name}-{operation}",
            summary=action.summary,
            responses=OBJECT_RESPONSES,
        )
