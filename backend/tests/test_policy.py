import pytest

from freightdesk.services.policy import RoleTransitionPolicy
from freightdesk.statuses import OrderStatus

policy = RoleTransitionPolicy()


@pytest.mark.parametrize("current", list(OrderStatus))
def test_admin_may_set_any_status_and_field(current):
    decision = policy.evaluate("ADMIN", current, OrderStatus.CANCELED, {"status", "name", "usd_price"})
    assert decision.allowed


@pytest.mark.parametrize("current", list(OrderStatus))
def test_purchase_officer_never_changes_status(current):
    target = OrderStatus.ARRIVED_TO_CHINA if current != OrderStatus.ARRIVED_TO_CHINA else OrderStatus.PURCHASED
    decision = policy.evaluate("PURCHASE_OFFICER", current, target, {"status"})
    assert not decision.allowed


def test_purchase_officer_edits_commercial_fields():
    decision = policy.evaluate(
        "PURCHASE_OFFICER",
        OrderStatus.PURCHASED,
        None,
        {"name", "usd_price", "cny_price", "product_url", "notes"},
    )
    assert decision.allowed


def test_purchase_officer_resending_current_status_is_not_a_change():
    decision = policy.evaluate("PURCHASE_OFFICER", OrderStatus.PURCHASED, OrderStatus.PURCHASED, {"status", "notes"})
    assert decision.allowed


def test_china_warehouse_moves_within_its_statuses():
    assert policy.evaluate(
        "CHINA_WAREHOUSE", OrderStatus.PURCHASED, OrderStatus.ARRIVED_TO_CHINA, {"status", "weight"}
    ).allowed
    assert policy.evaluate(
        "CHINA_WAREHOUSE", OrderStatus.ARRIVED_TO_CHINA, OrderStatus.SHIPPING_TO_LIBYA, {"status"}
    ).allowed


def test_china_warehouse_cannot_reach_libya_statuses_or_cancel():
    assert not policy.evaluate(
        "CHINA_WAREHOUSE", OrderStatus.SHIPPING_TO_LIBYA, OrderStatus.ARRIVED_LIBYA, {"status"}
    ).allowed
    assert not policy.evaluate(
        "CHINA_WAREHOUSE", OrderStatus.PURCHASED, OrderStatus.CANCELED, {"status"}
    ).allowed


@pytest.mark.parametrize("field", ["name", "usd_price", "cny_price", "product_url"])
@pytest.mark.parametrize("role", ["CHINA_WAREHOUSE", "LIBYA_WAREHOUSE"])
def test_warehouses_cannot_edit_commercial_fields(role, field):
    decision = policy.evaluate(role, OrderStatus.SHIPPING_TO_LIBYA, None, {field})
    assert not decision.allowed
    assert field in decision.reason


def test_libya_warehouse_moves_within_its_statuses():
    assert policy.evaluate(
        "LIBYA_WAREHOUSE", OrderStatus.SHIPPING_TO_LIBYA, OrderStatus.ARRIVED_LIBYA, {"status", "notes"}
    ).allowed
    assert policy.evaluate(
        "LIBYA_WAREHOUSE", OrderStatus.READY_FOR_PICKUP, OrderStatus.DELIVERED, {"status"}
    ).allowed
    assert not policy.evaluate(
        "LIBYA_WAREHOUSE", OrderStatus.PURCHASED, OrderStatus.ARRIVED_TO_CHINA, {"status"}
    ).allowed


@pytest.mark.parametrize("role", ["CUSTOMER", "GUEST", ""])
def test_unknown_roles_are_denied(role):
    decision = policy.evaluate(role, OrderStatus.PURCHASED, None, {"notes"})
    assert not decision.allowed
    assert decision.reason == "unrecognized role"
