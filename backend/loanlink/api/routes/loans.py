"""Loan Routes — public catalog reads, staff-only writes with new-loan fan-out.

Invariants:
    - GET /{id} answers 404 for unknown ids; PATCH and DELETE answer 200 with zero counts
"""

from fastapi import APIRouter, Depends, Query, status

from loanlink.api.dependencies import get_loan_catalog
from loanlink.api.session_guard import get_caller
from loanlink.core.access_policy import authorize
from loanlink.core.domain_types import Caller, DeleteResult, Operation, UpdateResult
from loanlink.schemas.loan import LoanCreate, LoanUpdate
from loanlink.services.loan_catalog import LoanCatalog

router = APIRouter(prefix="/api/v1/loans", tags=["loans"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_loan(
    body: LoanCreate,
    caller: Caller = Depends(get_caller),
    catalog: LoanCatalog = Depends(get_loan_catalog),
):
    """Publish a loan; every known user receives a notification (best-effort)."""
    authorize(Operation.CREATE_LOAN, caller)
    loan, notified = await catalog.create_loan(body.model_dump(), added_by=caller.email)
    return {"loan": loan, "inserted_id": loan["id"], "notified": notified}


@router.get("")
async def list_loans(
    category: str | None = Query(None, max_length=100),
    home: bool = Query(False),
    catalog: LoanCatalog = Depends(get_loan_catalog),
):
    return {"loans": await catalog.list_loans(category=category, home_only=home)}


@router.get("/{loan_id}")
async def get_loan(loan_id: str, catalog: LoanCatalog = Depends(get_loan_catalog)):
    return await catalog.get_loan(loan_id)


@router.patch("/{loan_id}")
async def update_loan(
    loan_id: str,
    body: LoanUpdate,
    caller: Caller = Depends(get_caller),
    catalog: LoanCatalog = Depends(get_loan_catalog),
):
    loan = await catalog.find_loan(loan_id)
    if loan is None:
        return UpdateResult(matched_count=0, modified_count=0).to_response()
    authorize(Operation.UPDATE_LOAN, caller, loan)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    result = await catalog.update_loan(loan_id, changes)
    return result.to_response()


@router.delete("/{loan_id}")
async def delete_loan(
    loan_id: str,
    caller: Caller = Depends(get_caller),
    catalog: LoanCatalog = Depends(get_loan_catalog),
):
    loan = await catalog.find_loan(loan_id)
    if loan is None:
        return DeleteResult(deleted_count=0).to_response()
    authorize(Operation.DELETE_LOAN, caller, loan)
    result = await catalog.delete_loan(loan_id)
    return result.to_response()
