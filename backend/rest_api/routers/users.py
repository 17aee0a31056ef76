"""
Users resource: the generic viewset specialized for ``User``.

Differences from the generic behaviour:
- create pre-checks email uniqueness (400 instead of a storage-level 500)
  and defaults ``status`` to ``inactive``
- list accepts ``keyword``, matched against name, email and phone
- actions: activate, deactivate, reset_password, stats

Endpoints (mounted under ``{api_prefix}/users``):
    GET    /                      list
    GET    /stats                 counts by status
    GET    /{id}                  retrieve
    POST   /                      create
    PUT    /{id}                  update
    DELETE /{id}                  delete
    POST   /{id}/activate
    POST   /{id}/deactivate
    POST   /{id}/reset_password
"""

from fastapi.responses import Response

from shared.config.constants import Messages, UserStatus
from shared.config.logging import get_logger, mask_email
from shared.config.settings import settings
from shared.utils.exceptions import DuplicateEntityError
from shared.utils.schemas import UserCreate, UserOutput, UserStats, UserUpdate
from rest_api.models import User
from rest_api.routers._common.query import first_value
from rest_api.routers._common.response import success
from rest_api.services.crud import (
    Action,
    EntityDescriptor,
    GenericViewSet,
    OperationContext,
    ViewSetOperations,
    apply_search,
    list_objects,
    save_new_object,
)

logger = get_logger(__name__)

KEYWORD_FIELDS = ("name", "email", "phone")

USER = EntityDescriptor(
    model=User,
    create_schema=UserCreate,
    update_schema=UserUpdate,
    output_schema=UserOutput,
    name="User",
)


# =============================================================================
# Overridden operations
# =============================================================================


def create_user(ctx: OperationContext) -> Response:
    """
    Create with an email pre-check; the unique index still guards races.

    Soft-deleted rows keep their email in the unique index, so they count too.
    """
    data = USER.bind_create(ctx.payload)

    if ctx.repo.count_where(User.email == data.email, include_deleted=True):
        raise DuplicateEntityError(
            "User", "email", mask_email(data.email), detail=Messages.EMAIL_TAKEN
        )

    values = data.model_dump(exclude_none=True)
    if not values.get("status"):
        values["status"] = UserStatus.INACTIVE.value

    user = save_new_object(ctx, USER.new_instance(**values))
    return success(USER.serialize(user))


def list_users(ctx: OperationContext) -> Response:
    """Generic list with a ``keyword`` OR-match in front of the equality filters."""
    stmt = apply_search(
        ctx.repo.base_query(),
        [USER.columns[name] for name in KEYWORD_FIELDS],
        first_value(ctx.query, "keyword"),
    )
    return list_objects(ctx, exclude_keys={"keyword"}, base_query=stmt)


# =============================================================================
# Actions
# =============================================================================


def _set_status(ctx: OperationContext, status: UserStatus, message: str) -> Response:
    user = ctx.get_object()
    user.status = status.value
    ctx.repo.save(user)
    logger.info("User status changed", user_id=user.id, status=status.value)
    return success({"message": message, "user": USER.serialize(user)})


def activate(ctx: OperationContext) -> Response:
    return _set_status(ctx, UserStatus.ACTIVE, Messages.USER_ACTIVATED)


def deactivate(ctx: OperationContext) -> Response:
    return _set_status(ctx, UserStatus.INACTIVE, Messages.USER_DEACTIVATED)


def reset_password(ctx: OperationContext) -> Response:
    """Acknowledge a password reset request. No mail is sent."""
    user = ctx.get_object()
    logger.info("Password reset requested", user_id=user.id, email=mask_email(user.email))
    return success({
        "message": Messages.PASSWORD_RESET_SENT,
        "user_id": user.id,
        "email": user.email,
    })


def user_stats(ctx: OperationContext) -> Response:
    """Counts of live users, total and per status."""
    stats = UserStats(
        total=ctx.repo.count_where(),
        active=ctx.repo.count_where(User.status == UserStatus.ACTIVE.value),
        inactive=ctx.repo.count_where(User.status == UserStatus.INACTIVE.value),
    )
    return success(stats.model_dump())


USER_ACTIONS = [
    Action("POST", "/{object_id}/activate", activate, summary="Activate a user"),
    Action("POST", "/{object_id}/deactivate", deactivate, summary="Deactivate a user"),
    Action("POST", "/{object_id}/reset_password", reset_password, summary="Request a password reset"),
    Action("GET", "/stats", user_stats, name="stats", summary="User counts by status"),
]


def build_user_viewset(**kwargs) -> GenericViewSet:
    """Users viewset; keyword arguments are forwarded to GenericViewSet."""
    kwargs.setdefault("operations", ViewSetOperations(create=create_user, list=list_users))
    kwargs.setdefault("actions", USER_ACTIONS)
    return GenericViewSet(USER, **kwargs)


user_viewset = build_user_viewset()
router = user_viewset.build_router(f"{settings.api_prefix}/users", tags=["users"])
