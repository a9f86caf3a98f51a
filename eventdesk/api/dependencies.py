"""API dependencies."""

from typing import Annotated, Callable

import redis.asyncio as redis
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.auth import Principal, Role
from eventdesk.clock import Clock, get_clock
from eventdesk.database import get_db
from eventdesk.errors import AuthenticationError, AuthorizationError
from eventdesk.redis_client import get_redis
from eventdesk.services.auditorium_service import AuditoriumService
from eventdesk.services.report_service import ReportService
from eventdesk.services.utilization_service import UtilizationService
from eventdesk.services.waiting_list_service import WaitingListService

# Type aliases
DBSession = Annotated[AsyncSession, Depends(get_db)]
RedisClient = Annotated[redis.Redis | None, Depends(get_redis)]
ClockDep = Annotated[Clock, Depends(get_clock)]


async def get_principal(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Principal:
    """
    Build the caller's principal from identity headers.

    The identity provider sits in front of this service and forwards the
    verified user id and role.
    """
    if not x_user_id:
        raise AuthenticationError("X-User-ID header is required")

    try:
        role = Role(x_user_role) if x_user_role else Role.USER
    except ValueError:
        raise AuthorizationError(f"Unknown role: {x_user_role}")

    return Principal(user_id=x_user_id, role=role)


CurrentPrincipal = Annotated[Principal, Depends(get_principal)]


def require_roles(*roles: Role) -> Callable[[Principal], Principal]:
    """Dependency factory admitting only the given roles."""

    async def check(principal: CurrentPrincipal) -> Principal:
        if principal.role not in roles:
            raise AuthorizationError(
                f"Role {principal.role.value} is not authorized to access this route"
            )
        return principal

    return check


ReportViewer = Annotated[
    Principal, Depends(require_roles(Role.EVENT_ORGANIZER, Role.ADMIN))
]
AdminUser = Annotated[Principal, Depends(require_roles(Role.ADMIN))]


def get_report_service(db: DBSession, clock: ClockDep) -> ReportService:
    """Get report service."""
    return ReportService(db, clock)


def get_utilization_service(
    db: DBSession,
    redis_client: RedisClient,
    clock: ClockDep,
) -> UtilizationService:
    """Get utilization service."""
    return UtilizationService(db, redis_client, clock)


def get_auditorium_service(db: DBSession) -> AuditoriumService:
    """Get auditorium service."""
    return AuditoriumService(db)


def get_waiting_list_service(db: DBSession) -> WaitingListService:
    """Get waiting list service."""
    return WaitingListService(db)


# Annotated dependencies
ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]
UtilizationServiceDep = Annotated[UtilizationService, Depends(get_utilization_service)]
AuditoriumServiceDep = Annotated[AuditoriumService, Depends(get_auditorium_service)]
WaitingListServiceDep = Annotated[WaitingListService, Depends(get_waiting_list_service)]
