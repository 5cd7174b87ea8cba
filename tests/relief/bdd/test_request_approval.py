"""BDD tests for the supply request approval workflow."""

import json

import pytest
from pytest_bdd import given, parsers, scenarios, then, when
from relief.errors import LedgerError
from relief.locking import dispatch
from relief.request.review import ReviewSupplyRequest, load_request
from relief.request.submission import SubmitSupplyRequest

scenarios("features/request_approval.feature")


@pytest.fixture()
def request_id():
    return {"value": None}


def _review(request_id, decision, notes=None):
    dispatch(
        ReviewSupplyRequest(
            request_id=request_id["value"],
            decision=decision,
            reviewed_by="admin-1",
            admin_notes=notes,
        )
    )


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.re(r'shelter "(?P<shelter_id>[^"]+)" requested (?P<lines>.+)'))
def _(shelter_id, lines, request_id):
    items = []
    for part in lines.split(" and "):
        quantity, item_name = part.split(" ", 1)
        items.append({"item_name": item_name.strip('"'), "requested_quantity": int(quantity), "reason": "Evacuees"})

    request_id["value"] = dispatch(
        SubmitSupplyRequest(shelter_id=shelter_id, requested_by="staff-1", items=json.dumps(items))
    )


@given("the admin approved the request")
def _(request_id):
    _review(request_id, "approved")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the admin approves the request")
def _(request_id, error):
    try:
        _review(request_id, "approved")
    except LedgerError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the admin rejects the request with "{notes}"'))
def _(request_id, notes, error):
    try:
        _review(request_id, "rejected", notes)
    except LedgerError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the request is "{status}"'))
def _(request_id, status):
    assert load_request(request_id["value"]).status == status
