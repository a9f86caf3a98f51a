"""Waiting list endpoints."""

from fastapi import APIRouter, Query, status

from eventdesk.api.dependencies import AdminUser, WaitingListServiceDep
from eventdesk.errors import ValidationError
from eventdesk.models.waiting_list import WaitingListStatus as ModelWaitingListStatus
from eventdesk.schemas.common import DataResponse, ListResponse, SuccessResponse
from eventdesk.schemas.waiting_list import (
    WaitingListCreate,
    WaitingListDelete,
    WaitingListResponse,
    WaitingListStatus,
    WaitingListStatusUpdate,
)

router = APIRouter()


@router.post(
    "/waiting-list",
    response_model=DataResponse[WaitingListResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register to waiting list",
)
async def register_to_waiting_list(
    data: WaitingListCreate,
    waiting_list_service: WaitingListServiceDep,
) -> DataResponse[WaitingListResponse]:
    """Register an email for an event's waiting list. Public."""
    entry = await waiting_list_service.register(data)
    return DataResponse[WaitingListResponse](
        data=WaitingListResponse.from_model(entry),
        message="Registered on the waiting list",
    )


@router.get(
    "/waiting-list",
    response_model=ListResponse[WaitingListResponse],
    summary="Get own waiting list entries",
)
async def get_own_waiting_list(
    waiting_list_service: WaitingListServiceDep,
    email: str | None = None,
) -> ListResponse[WaitingListResponse]:
    """Entries registered with the given email."""
    if not email:
        raise ValidationError("Email is required to look up waiting list entries")

    entries = await waiting_list_service.list_for_email(email)
    return ListResponse[WaitingListResponse](
        count=len(entries),
        data=[WaitingListResponse.from_model(entry) for entry in entries],
    )


@router.delete(
    "/waiting-list/{entry_id}",
    response_model=SuccessResponse,
    summary="Withdraw from waiting list",
)
async def withdraw_from_waiting_list(
    entry_id: int,
    data: WaitingListDelete,
    waiting_list_service: WaitingListServiceDep,
) -> SuccessResponse:
    """Delete an entry; the email must match the registration."""
    await waiting_list_service.delete_own_entry(entry_id, data.email)
    return SuccessResponse(message="Waiting list entry deleted")


@router.get(
    "/admin/waiting-list",
    response_model=ListResponse[WaitingListResponse],
    summary="List waiting list entries",
)
async def list_waiting_list(
    admin: AdminUser,
    waiting_list_service: WaitingListServiceDep,
    event: int | None = None,
    status_filter: WaitingListStatus | None = Query(None, alias="status"),
) -> ListResponse[WaitingListResponse]:
    """All entries, optionally filtered by event and status."""
    db_status = None
    if status_filter:
        db_status = ModelWaitingListStatus(status_filter.value)

    entries = await waiting_list_service.list_entries(event_id=event, status=db_status)
    return ListResponse[WaitingListResponse](
        count=len(entries),
        data=[WaitingListResponse.from_model(entry) for entry in entries],
    )


@router.get(
    "/admin/waiting-list/{entry_id}",
    response_model=DataResponse[WaitingListResponse],
    summary="Get waiting list entry",
)
async def get_waiting_list_entry(
    entry_id: int,
    admin: AdminUser,
    waiting_list_service: WaitingListServiceDep,
) -> DataResponse[WaitingListResponse]:
    entry = await waiting_list_service.get_entry(entry_id)
    return DataResponse[WaitingListResponse](data=WaitingListResponse.from_model(entry))


@router.put(
    "/admin/waiting-list/{entry_id}",
    response_model=DataResponse[WaitingListResponse],
    summary="Update waiting list entry status",
)
async def update_waiting_list_status(
    entry_id: int,
    data: WaitingListStatusUpdate,
    admin: AdminUser,
    waiting_list_service: WaitingListServiceDep,
) -> DataResponse[WaitingListResponse]:
    entry = await waiting_list_service.update_status(entry_id, data)
    return DataResponse[WaitingListResponse](
        data=WaitingListResponse.from_model(entry),
        message=f"Status changed to {entry.status.value}",
    )


@router.delete(
    "/admin/waiting-list/{entry_id}",
    response_model=SuccessResponse,
    summary="Delete waiting list entry",
)
async def delete_waiting_list_entry(
    entry_id: int,
    admin: AdminUser,
    waiting_list_service: WaitingListServiceDep,
) -> SuccessResponse:
    await waiting_list_service.delete_entry(entry_id)
    return SuccessResponse(message="Waiting list entry deleted")
