"""Domain Types — closed enums and the count-carrying result types.

Tests:
    - Enums have exactly the expected members and serialize to string
    - Result types render the {matched,modified,deleted}_count response bodies
    - Caller defaults to the borrower role
"""

import dataclasses

import pytest

from loanlink.core.domain_types import (
    ApplicationStatus, Caller, DeleteResult, FeeStatus, NotificationType, Role, UpdateResult,
)


def test_application_status_has_three_states():
    assert {s.value for s in ApplicationStatus} == {"pending", "approved", "rejected"}


def test_roles():
    assert {r.value for r in Role} == {"borrower", "manager", "admin"}


def test_enums_are_strings():
    assert ApplicationStatus.APPROVED == "approved"
    assert FeeStatus.PAID == "paid"
    assert NotificationType.ERROR == "error"


def test_update_result_response():
    assert UpdateResult(1, 0).to_response() == {"matched_count": 1, "modified_count": 0}


def test_delete_result_response():
    assert DeleteResult(0).to_response() == {"deleted_count": 0}


def test_caller_defaults_to_borrower_and_is_frozen():
    caller = Caller("a@x.io")
    assert caller.role is Role.BORROWER
    with pytest.raises(dataclasses.FrozenInstanceError):
        caller.role = Role.ADMIN
