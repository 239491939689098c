"""Notification Routes — the caller's pull-based inbox.

Invariants:
    - Listing is always scoped to the session email, newest first
    - Unknown ids answer 200 with zero counts (no existence oracle for other users' ids)
"""

from fastapi import APIRouter, Depends

from loanlink.api.dependencies import get_fanout
from loanlink.api.session_guard import get_caller
from loanlink.core.access_policy import authorize
from loanlink.core.domain_types import Caller, DeleteResult, Operation, UpdateResult
from loanlink.services.notification_fanout import NotificationFanout

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    caller: Caller = Depends(get_caller),
    fanout: NotificationFanout = Depends(get_fanout),
):
    notifications = await fanout.list_for_user(caller.email)
    return {
        "notifications": notifications,
        "unread": sum(1 for n in notifications if not n["read"]),
    }


@router.patch("/read-all")
async def mark_all_read(
    caller: Caller = Depends(get_caller),
    fanout: NotificationFanout = Depends(get_fanout),
):
    result = await fanout.mark_all_read(caller.email)
    return result.to_response()


@router.patch("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    caller: Caller = Depends(get_caller),
    fanout: NotificationFanout = Depends(get_fanout),
):
    notification = await fanout.get(notification_id)
    if notification is None:
        return UpdateResult(matched_count=0, modified_count=0).to_response()
    authorize(Operation.READ_NOTIFICATION, caller, notification)
    result = await fanout.mark_read(notification_id)
    return result.to_response()


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    caller: Caller = Depends(get_caller),
    fanout: NotificationFanout = Depends(get_fanout),
):
    notification = await fanout.get(notification_id)
    if notification is None:
        return DeleteResult(deleted_count=0).to_response()
    authorize(Operation.DELETE_NOTIFICATION, caller, notification)
    result = await fanout.delete(notification_id)
    return result.to_response()
