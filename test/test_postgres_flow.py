"""
End-to-end against a real Postgres (DATABASE_URL). Exercises the conditional
UPDATEs themselves rather than the in-memory stand-ins. Skipped when Postgres
is not reachable.
"""
import asyncio
from datetime import datetime
from decimal import Decimal

import pytest

from _helper import connect_or_skip, unique_email
from fueldrop.actors import ActorKind, CustomerRepository, DealerRepository, DeliveryAgentRepository
from fueldrop.analytics import AnalyticsRepository
from fueldrop.errors import Forbidden, InvalidState, NotFound, PriceNotFound, ValidationError
from fueldrop.feedback import FeedbackRepository
from fueldrop.lifecycle import OrderLifecycle
from fueldrop.models import Identity
from fueldrop.order_state import FuelType, OrderStatus
from fueldrop.orders import OrderRepository
from fueldrop.stations import StationRepository


async def _setup(pool):
    dealers = DealerRepository(pool)
    customers = CustomerRepository(pool)
    agents = DeliveryAgentRepository(pool)
    stations = StationRepository(pool)

    dealer_id = await dealers.register(
        {"name": "Dealer", "email": unique_email("dealer"), "password": "pw", "phone": "111"}
    )
    customer_id = await customers.register(
        {
            "name": "Customer",
            "email": unique_email("customer"),
            "password": "pw",
            "phone": "222",
            "address": "12 MG Road",
            "city": "Pune",
            "state": "MH",
            "pincode": "411001",
        }
    )
    agent_id = await agents.register(
        {"name": "Agent", "email": unique_email("agent"), "password": "pw", "phone": "333"}
    )
    station_id = await stations.register(
        dealer_id,
        {"name": "Station", "address": "Highway 4", "city": "Pune", "state": "MH", "pincode": "411001"},
    )
    await stations.update_prices(dealer_id, station_id, Decimal("100.50"), Decimal("90.00"), Decimal("75.00"))

    lifecycle = OrderLifecycle(OrderRepository(pool), stations, agents)
    return (
        lifecycle,
        Identity(user_id=dealer_id, user_type=ActorKind.DEALER),
        Identity(user_id=customer_id, user_type=ActorKind.CUSTOMER),
        Identity(user_id=agent_id, user_type=ActorKind.DELIVERY_BOY),
        station_id,
    )


async def _available_ids(pool) -> set[int]:
    return {a["id"] for a in await DeliveryAgentRepository(pool).available()}


@pytest.mark.asyncio
async def test_order_lifecycle_against_postgres():
    pool = await connect_or_skip()
    try:
        lifecycle, dealer, customer, agent, station_id = await _setup(pool)

        order = await lifecycle.place_order(customer, FuelType.PETROL, Decimal("10"), "12 MG Road", station_id)
        assert order.total_amount == Decimal("1005.00")
        assert order.status == OrderStatus.PENDING

        # Concurrent accepts on one pending order: one row comes back, the other loses
        results = await asyncio.gather(
            lifecycle.dealer_accept(dealer, order.id),
            lifecycle.dealer_accept(dealer, order.id),
            return_exceptions=True,
        )
        assert sum(1 for r in results if not isinstance(r, Exception)) == 1
        assert sum(1 for r in results if isinstance(r, InvalidState)) == 1

        assert agent.user_id in await _available_ids(pool)
        await lifecycle.assign_agent(dealer, order.id, agent.user_id)
        assert agent.user_id not in await _available_ids(pool)

        await lifecycle.agent_accept(agent, order.id)
        rejected = await lifecycle.agent_reject(agent, order.id)
        assert rejected.status == OrderStatus.ACCEPTED and rejected.delivery_boy_id is None

        await lifecycle.assign_agent(dealer, order.id, agent.user_id)
        await lifecycle.agent_accept(agent, order.id)
        delivered = await lifecycle.agent_update_status(agent, order.id, "delivered")
        assert delivered.status == OrderStatus.DELIVERED
        assert delivered.delivery_boy_id == agent.user_id
        assert delivered.total_amount == Decimal("1005.00")
        assert agent.user_id in await _available_ids(pool)

        with pytest.raises(InvalidState):
            await lifecycle.customer_cancel(customer, order.id)

        sales = await AnalyticsRepository(pool).dealer_sales(dealer.user_id, datetime.now())
        assert sales == {"today": Decimal("1005.00"), "week": Decimal("1005.00"), "month": Decimal("1005.00")}

        details = await AnalyticsRepository(pool).agent_details(agent.user_id)
        assert details["stats"]["completedDeliveries"] == 1
        assert details["stats"]["successRate"] == 100
        assert details["stats"]["activeOrders"] == 0
    finally:
        await pool.close()


@pytest.mark.asyncio
async def test_ownership_and_missing_rows_against_postgres():
    pool = await connect_or_skip()
    try:
        lifecycle, dealer, customer, agent, station_id = await _setup(pool)
        other_dealer = Identity(user_id=dealer.user_id + 100000, user_type=ActorKind.DEALER)

        with pytest.raises(PriceNotFound):
            await lifecycle.place_order(customer, FuelType.DIESEL, Decimal("5"), "12 MG Road", station_id + 100000)

        order = await lifecycle.place_order(customer, FuelType.DIESEL, Decimal("5"), "12 MG Road", station_id)
        with pytest.raises(Forbidden):
            await lifecycle.dealer_accept(other_dealer, order.id)
        with pytest.raises(NotFound):
            await lifecycle.dealer_accept(dealer, order.id + 100000)

        stations = StationRepository(pool)
        with pytest.raises(NotFound):
            await stations.update_prices(other_dealer.user_id, station_id, Decimal("1"), Decimal("1"), Decimal("1"))

        cancelled = await lifecycle.customer_cancel(customer, order.id)
        assert cancelled.status == OrderStatus.CANCELLED
        with pytest.raises(InvalidState):
            await lifecycle.customer_cancel(customer, order.id)
    finally:
        await pool.close()


@pytest.mark.asyncio
async def test_accounts_stations_and_feedback_against_postgres():
    pool = await connect_or_skip()
    try:
        dealers = DealerRepository(pool)
        email = unique_email("dealer")
        dealer_id = await dealers.register({"name": "D", "email": email, "password": "pw", "phone": "1"})
        with pytest.raises(ValidationError):
            await dealers.register({"name": "D", "email": email, "password": "pw", "phone": "1"})

        user = await dealers.authenticate(email, "pw")
        assert user["id"] == dealer_id and "password" not in user
        assert await dealers.authenticate(email, "wrong") is None

        assert await dealers.update_profile(dealer_id, {"name": "Renamed", "phone": "9"})
        assert (await dealers.profile(dealer_id))["name"] == "Renamed"

        with pytest.raises(ValidationError):
            await CustomerRepository(pool).register({"name": "C", "email": unique_email("c"), "password": "pw", "phone": "2"})

        stations = StationRepository(pool)
        pincode = unique_email("pin")[:20]
        station_id = await stations.register(
            dealer_id, {"name": "S", "address": "A", "city": "Nashik", "state": "MH", "pincode": pincode}
        )
        assert await stations.prices(station_id) == {
            "petrol": Decimal("0.00"),
            "diesel": Decimal("0.00"),
            "cng": Decimal("0.00"),
        }
        found = await stations.by_address("Nashik", "MH", pincode)
        assert [s["id"] for s in found] == [station_id]
        assert found[0]["dealer_phone"] == "9"
        assert await stations.for_dealer(dealer_id) == [{"id": station_id, "name": "S"}]

        customer_id = await CustomerRepository(pool).register(
            {
                "name": "C",
                "email": unique_email("c"),
                "password": "pw",
                "phone": "2",
                "address": "x",
                "city": "Nashik",
                "state": "MH",
                "pincode": "422001",
            }
        )
        feedback = FeedbackRepository(pool)
        feedback_id = await feedback.submit(customer_id, "Quick delivery")
        listed = {f["id"]: f for f in await feedback.list_all()}
        assert listed[feedback_id]["customer_name"] == "C"
    finally:
        await pool.close()
