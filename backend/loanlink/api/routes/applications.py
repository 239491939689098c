"""Application Routes — submission, review decisions and cancellation.

Invariants:
    - The applicant email always comes from the session, never from the body
    - PATCH /{id}/status accepts only a status; unknown ids answer 200 with zero counts
    - DELETE answers 200 with deleted_count 0 for unknown ids
"""

from fastapi import APIRouter, Depends, Query, status

from loanlink.api.dependencies import get_lifecycle
from loanlink.api.session_guard import get_caller
from loanlink.core.access_policy import authorize
from loanlink.core.domain_types import ApplicationStatus, Caller, Operation
from loanlink.schemas.application import ApplicationCreate, StatusUpdate
from loanlink.services.application_lifecycle import ApplicationLifecycle

router = APIRouter(prefix="/api/v1/applications", tags=["applications"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_application(
    body: ApplicationCreate,
    caller: Caller = Depends(get_caller),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
):
    authorize(Operation.SUBMIT_APPLICATION, caller)
    application = await lifecycle.create_application(
        caller.email, body.loan_id, body.loan_title, details=body.details(),
    )
    return {"application": application, "inserted_id": application["id"]}


@router.get("/mine")
async def list_my_applications(
    caller: Caller = Depends(get_caller),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
):
    return {"applications": await lifecycle.list_for_applicant(caller.email)}


@router.get("")
async def list_applications(
    status_filter: ApplicationStatus | None = Query(None, alias="status"),
    caller: Caller = Depends(get_caller),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
):
    authorize(Operation.LIST_ALL_APPLICATIONS, caller)
    return {"applications": await lifecycle.list_all(status_filter)}


@router.get("/{application_id}")
async def get_application(
    application_id: str,
    caller: Caller = Depends(get_caller),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
):
    application = await lifecycle.get_application(application_id)
    authorize(Operation.READ_APPLICATION, caller, application)
    return application


@router.patch("/{application_id}/status")
async def update_application_status(
    application_id: str,
    body: StatusUpdate,
    caller: Caller = Depends(get_caller),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
):
    """Approve or reject a pending application; notifies the applicant on change."""
    authorize(Operation.UPDATE_APPLICATION_STATUS, caller)
    result = await lifecycle.update_status(application_id, body.status)
    return result.to_response()


@router.delete("/{application_id}")
async def cancel_application(
    application_id: str,
    caller: Caller = Depends(get_caller),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
):
    result = await lifecycle.cancel_application(application_id, caller)
    return result.to_response()
