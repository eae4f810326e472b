import pytest
from agromarket.core.errors import NotAuthenticated, NotAuthorized
from agromarket.models.order import OrderStatus
from agromarket.models.user import Role
from agromarket.services.order_status import update_status
from agromarket.services.orders import place_order
from agromarket.services.reporting import get_dashboard_stats, list_transactions
from tests.utils import identity_for


def advance(db, farmer, order, *statuses):
    for status in statuses:
        update_status(db, identity_for(farmer), order.id, status)


@pytest.fixture
def marketplace(db, farmer, buyer, make_user, make_product):
    other_farmer = make_user(Role.FARMER)
    carrots = make_product(farmer, name="Carrots", price=2.0, quantity=50)
    roses = make_product(other_farmer, name="Roses", price=5.0, quantity=50)
    identity = identity_for(buyer)

    completed_carrots = place_order(db, identity, [(carrots.id, 5)])
    completed_roses = place_order(db, identity, [(roses.id, 2)])
    delivered_carrots = place_order(db, identity, [(carrots.id, 1)])
    pending_mixed = place_order(db, identity, [(carrots.id, 1), (roses.id, 1)])

    advance(db, farmer, completed_carrots, OrderStatus.CONFIRMED, OrderStatus.COMPLETED)
    advance(db, farmer, completed_roses, OrderStatus.CONFIRMED, OrderStatus.COMPLETED)
    advance(db, farmer, delivered_carrots, OrderStatus.CONFIRMED, OrderStatus.SHIPPED, OrderStatus.DELIVERED)

    return {
        "other_farmer": other_farmer,
        "completed": [completed_carrots.id, completed_roses.id],
        "delivered_carrots": delivered_carrots.id,
        "pending_mixed": pending_mixed.id,
    }


def test_dashboard_counts_only_completed_orders(db, buyer, marketplace):
    stats = get_dashboard_stats(db, identity_for(buyer))

    assert stats.total_orders == 2
    assert stats.total_revenue == 20.0
    assert stats.active_listings == 2
    assert [order.id for order in stats.recent_transactions] == list(reversed(marketplace["completed"]))
    assert all(order.status == OrderStatus.COMPLETED for order in stats.recent_transactions)


def test_dashboard_limits_recent_transactions(db, buyer, marketplace):
    stats = get_dashboard_stats(db, identity_for(buyer), recent_limit=1)

    assert stats.total_orders == 2
    assert [order.id for order in stats.recent_transactions] == [marketplace["completed"][1]]


def test_dashboard_on_empty_store(db, buyer):
    stats = get_dashboard_stats(db, identity_for(buyer))

    assert stats.total_orders == 0
    assert stats.total_revenue == 0.0
    assert stats.active_listings == 0
    assert stats.recent_transactions == []


def test_dashboard_requires_authentication(db):
    with pytest.raises(NotAuthenticated):
        get_dashboard_stats(db, None)


def test_transactions_cover_completed_and_delivered_orders_of_the_farmer(db, farmer, marketplace):
    transactions = list_transactions(db, identity_for(farmer))

    assert {order.id for order in transactions} == {marketplace["completed"][0], marketplace["delivered_carrots"]}


def test_transactions_for_other_farmer(db, marketplace):
    transactions = list_transactions(db, identity_for(marketplace["other_farmer"]))

    assert [order.id for order in transactions] == [marketplace["completed"][1]]


def test_transactions_are_farmer_only(db, buyer):
    with pytest.raises(NotAuthorized):
        list_transactions(db, identity_for(buyer))
    with pytest.raises(NotAuthenticated):
        list_transactions(db, None)
