"""
Order persistence. transition() is the only way an order's status changes:
one UPDATE whose WHERE clause checks both ownership and current status, so it
acts as a compare-and-swap on the row.
"""
from collections.abc import Iterable
from decimal import Decimal

import asyncpg

from fueldrop.actors import ActorKind
from fueldrop.models import Identity, Order
from fueldrop.order_state import FuelType, OrderStatus

# Sentinel for transition(): leave delivery_boy_id as it is
KEEP = object()

# Actor kind -> ownership predicate on orders; $3 is the actor id
_OWNERSHIP: dict[ActorKind, str] = {
    ActorKind.DEALER: "station_id IN (SELECT id FROM fuel_stations WHERE dealer_id = $3)",
    ActorKind.CUSTOMER: "customer_id = $3",
    ActorKind.DELIVERY_BOY: "delivery_boy_id = $3",
}


def _transition_sql(kind: ActorKind, set_agent: bool) -> str:
    assignments = "status = $4, delivery_boy_id = $5" if set_agent else "status = $4"
    return f"""
        UPDATE orders SET {assignments}
        WHERE id = $1 AND status = ANY($2::varchar[]) AND {_OWNERSHIP[kind]}
        RETURNING *;
    """


_TRANSITION_SQL: dict[tuple[ActorKind, bool], str] = {
    (kind, set_agent): _transition_sql(kind, set_agent)
    for kind in ActorKind
    for set_agent in (False, True)
}


def owns(order: Order, actor: Identity) -> bool:
    """Same ownership rule as the transition predicates, applied to a row already read."""
    if actor.user_type == ActorKind.DEALER:
        return order.dealer_id == actor.user_id
    if actor.user_type == ActorKind.CUSTOMER:
        return order.customer_id == actor.user_id
    return order.delivery_boy_id == actor.user_id


class OrderRepository:
    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def insert(
        self,
        customer_id: int,
        station_id: int,
        fuel_type: FuelType,
        quantity: Decimal,
        unit_price: Decimal,
        total_amount: Decimal,
        delivery_address: str,
    ) -> Order:
        row = await self.pool.fetchrow(
            """
            INSERT INTO orders (customer_id, station_id, fuel_type, quantity, unit_price,
                                total_amount, delivery_address, status)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING *;
            """,
            customer_id,
            station_id,
            fuel_type.value,
            quantity,
            unit_price,
            total_amount,
            delivery_address,
            OrderStatus.PENDING.value,
        )
        return Order.from_record(row)

    async def get(self, order_id: int) -> Order | None:
        row = await self.pool.fetchrow(
            """
            SELECT o.*, fs.dealer_id
            FROM orders o
            JOIN fuel_stations fs ON o.station_id = fs.id
            WHERE o.id = $1;
            """,
            order_id,
        )
        return Order.from_record(row) if row else None

    async def transition(
        self,
        order_id: int,
        expected: Iterable[OrderStatus],
        actor: Identity,
        new_status: OrderStatus,
        delivery_boy_id=KEEP,
    ) -> Order | None:
        """
        Move the order to new_status if it is still in one of the expected
        states and still belongs to actor. Returns the updated order, or None
        when no row matched.
        """
        set_agent = delivery_boy_id is not KEEP
        args = [order_id, [s.value for s in expected], actor.user_id, new_status.value]
        if set_agent:
            args.append(delivery_boy_id)
        row = await self.pool.fetchrow(_TRANSITION_SQL[(actor.user_type, set_agent)], *args)
        return Order.from_record(row) if row else None

    async def for_dealer(self, dealer_id: int) -> list[dict]:
        rows = await self.pool.fetch(
            """
            SELECT o.*, c.name AS customer_name, fs.name AS station_name, db.name AS delivery_boy_name
            FROM orders o
            JOIN customers c ON o.customer_id = c.id
            JOIN fuel_stations fs ON o.station_id = fs.id
            LEFT JOIN delivery_boys db ON o.delivery_boy_id = db.id
            WHERE fs.dealer_id = $1
            ORDER BY o.created_at DESC;
            """,
            dealer_id,
        )
        return [dict(r) for r in rows]

    async def for_customer(self, customer_id: int) -> list[dict]:
        rows = await self.pool.fetch(
            """
            SELECT o.*, fs.name AS station_name, db.name AS delivery_boy_name, db.phone AS delivery_boy_phone
            FROM orders o
            JOIN fuel_stations fs ON o.station_id = fs.id
            LEFT JOIN delivery_boys db ON o.delivery_boy_id = db.id
            WHERE o.customer_id = $1
            ORDER BY o.created_at DESC;
            """,
            customer_id,
        )
        return [dict(r) for r in rows]

    async def for_agent(self, agent_id: int) -> list[dict]:
        rows = await self.pool.fetch(
            """
            SELECT o.*, c.name AS customer_name, c.phone AS customer_phone,
                   fs.name AS station_name, fs.address AS station_address
            FROM orders o
            JOIN customers c ON o.customer_id = c.id
            JOIN fuel_stations fs ON o.station_id = fs.id
            WHERE o.delivery_boy_id = $1 AND o.status <> $2
            ORDER BY o.created_at DESC;
            """,
            agent_id,
            OrderStatus.PENDING.value,
        )
        return [dict(r) for r in rows]
