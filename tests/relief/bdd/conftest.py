"""Shared BDD fixtures and step definitions for the Relief domain."""

import pytest
from pytest_bdd import given, parsers, then
from relief.errors import LedgerError
from relief.locking import dispatch
from relief.stock import ledger
from relief.stock.initialization import InitializeStock
from relief.stock.location import Location


@pytest.fixture()
def error():
    """Container for capturing errors raised in When steps."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the provincial warehouse holds {quantity:d} "{item_name}"'))
def _(quantity, item_name):
    dispatch(
        InitializeStock(
            item_name=item_name,
            initial_quantity=quantity,
            location_type="provincial",
            location_id=Location.provincial().id,
        )
    )


@given(parsers.cfparse('shelter "{shelter_id}" holds {quantity:d} "{item_name}"'))
def _(shelter_id, quantity, item_name):
    dispatch(
        InitializeStock(
            item_name=item_name,
            initial_quantity=quantity,
            location_type="shelter",
            location_id=shelter_id,
        )
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the provincial warehouse has {quantity:d} "{item_name}"'))
def _(quantity, item_name):
    assert ledger.find(item_name, Location.provincial()).quantity == quantity


@then(parsers.cfparse('shelter "{shelter_id}" has {quantity:d} "{item_name}"'))
def _(shelter_id, quantity, item_name):
    assert ledger.find(item_name, Location.shelter(shelter_id)).quantity == quantity


@then(parsers.cfparse('shelter "{shelter_id}" has no "{item_name}"'))
def _(shelter_id, item_name):
    assert ledger.find(item_name, Location.shelter(shelter_id)) is None


@then(parsers.cfparse('the "{item_name}" status at the provincial warehouse is "{status}"'))
def _(item_name, status):
    assert ledger.find(item_name, Location.provincial()).status.value == status


@then(parsers.cfparse("the action fails with {kind}"))
def _(error, kind):
    assert isinstance(error["exc"], LedgerError)
    assert error["exc"].kind == kind
