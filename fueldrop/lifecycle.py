"""
Order lifecycle engine.

    pending     -> accepted      dealer accepts
    pending     -> cancelled     customer cancels, or dealer rejects
    accepted    -> accepted      dealer assigns a delivery boy
    accepted    -> cancelled     dealer rejects
    accepted    -> in-progress   assigned delivery boy accepts (idempotent from in-progress)
    in-progress -> accepted      assigned delivery boy rejects; assignment cleared
    in-progress -> delivered     assigned delivery boy delivers

Every operation is one OrderRepository.transition() call. When it matches no
row the order is re-read to tell the caller whether the order is missing, is
not theirs, or is in the wrong state. Nothing is locked and nothing is
retried; a caller that lost a race gets InvalidState and may re-submit.
"""
import logging
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from fueldrop.errors import Forbidden, InvalidState, InvalidStatusTarget, NotFound, PriceNotFound, ValidationError
from fueldrop.metrics import order_transitions_total, orders_placed_total
from fueldrop.models import Identity, Order
from fueldrop.order_state import FuelType, OrderStatus, is_valid_transition
from fueldrop.orders import KEEP, owns

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
# Largest values orders.quantity NUMERIC(10, 2) and orders.total_amount NUMERIC(12, 2) hold
MAX_QUANTITY = Decimal("99999999.99")
MAX_TOTAL = Decimal("9999999999.99")


def order_total(unit_price: Decimal, quantity: Decimal) -> Decimal:
    return (unit_price * quantity).quantize(CENTS, rounding=ROUND_HALF_UP)


class OrderLifecycle:
    def __init__(self, orders, stations, agents):
        self.orders = orders
        self.stations = stations
        self.agents = agents

    async def transition(
        self,
        operation: str,
        order_id: int,
        expected: Iterable[OrderStatus],
        actor: Identity,
        new_status: OrderStatus,
        delivery_boy_id=KEEP,
    ) -> Order:
        """
        Compare-and-swap one order from one of the expected states to
        new_status on behalf of actor. Raises NotFound, Forbidden or
        InvalidState when the swap does not apply.
        """
        expected = tuple(expected)
        if not all(is_valid_transition(state, new_status) for state in expected):
            raise ValueError(f"{operation}: {new_status.value} is not reachable from {[s.value for s in expected]}")
        order = await self.orders.transition(order_id, expected, actor, new_status, delivery_boy_id)
        if order is not None:
            order_transitions_total.labels(operation=operation, outcome="ok").inc()
            logger.info(
                "%s: order_id=%d -> %s by %s %d",
                operation, order_id, new_status.value, actor.user_type.value, actor.user_id,
            )
            return order

        current = await self.orders.get(order_id)
        if current is None:
            order_transitions_total.labels(operation=operation, outcome="not_found").inc()
            raise NotFound("Order not found")
        if not owns(current, actor):
            order_transitions_total.labels(operation=operation, outcome="forbidden").inc()
            raise Forbidden("You do not have permission to change this order.")
        order_transitions_total.labels(operation=operation, outcome="invalid_state").inc()
        logger.info(
            "%s rejected: order_id=%d is %s, expected one of %s",
            operation, order_id, current.status.value, [s.value for s in expected],
        )
        raise InvalidState(current.status.value)

    async def place_order(
        self,
        customer: Identity,
        fuel_type: FuelType,
        quantity: Decimal,
        delivery_address: str,
        station_id: int,
    ) -> Order:
        if not quantity.is_finite():
            raise ValidationError("Quantity must be a number")
        # Stored as NUMERIC(10, 2); the total must be computed on the stored value
        try:
            quantity = quantity.quantize(CENTS, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            raise ValidationError("Quantity is too large")
        if quantity <= 0:
            raise ValidationError("Quantity must be positive")
        if quantity > MAX_QUANTITY:
            raise ValidationError("Quantity is too large")
        if not delivery_address or not delivery_address.strip():
            raise ValidationError("Delivery address is required")

        unit_price = await self.stations.unit_price(station_id, fuel_type)
        if unit_price is None:
            raise PriceNotFound()
        total_amount = order_total(unit_price, quantity)
        if total_amount > MAX_TOTAL:
            raise ValidationError("Order total is too large")

        order = await self.orders.insert(
            customer_id=customer.user_id,
            station_id=station_id,
            fuel_type=fuel_type,
            quantity=quantity,
            unit_price=unit_price,
            total_amount=total_amount,
            delivery_address=delivery_address,
        )
        orders_placed_total.labels(fuel_type=fuel_type.value).inc()
        logger.info(
            "Order placed: order_id=%d customer=%d station=%d %s x %s = %s",
            order.id, customer.user_id, station_id, fuel_type.value, quantity, order.total_amount,
        )
        return order

    async def dealer_accept(self, dealer: Identity, order_id: int) -> Order:
        return await self.transition(
            "dealer_accept", order_id, (OrderStatus.PENDING,), dealer, OrderStatus.ACCEPTED,
        )

    async def dealer_reject(self, dealer: Identity, order_id: int) -> Order:
        """
        Cancel a pending or accepted order. In-progress and terminal orders are
        refused: cancelled is only reachable from those two states.
        """
        return await self.transition(
            "dealer_reject", order_id, (OrderStatus.PENDING, OrderStatus.ACCEPTED), dealer, OrderStatus.CANCELLED,
        )

    async def assign_agent(self, dealer: Identity, order_id: int, delivery_boy_id: int) -> Order:
        if not await self.agents.exists(delivery_boy_id):
            raise NotFound("Delivery boy not found")
        return await self.transition(
            "assign_delivery_boy",
            order_id,
            (OrderStatus.ACCEPTED,),
            dealer,
            OrderStatus.ACCEPTED,
            delivery_boy_id=delivery_boy_id,
        )

    async def agent_accept(self, agent: Identity, order_id: int) -> Order:
        return await self.transition(
            "agent_accept", order_id, (OrderStatus.ACCEPTED, OrderStatus.IN_PROGRESS), agent, OrderStatus.IN_PROGRESS,
        )

    async def agent_reject(self, agent: Identity, order_id: int) -> Order:
        # Back to the dealer's pool: status accepted, no agent
        return await self.transition(
            "agent_reject",
            order_id,
            (OrderStatus.IN_PROGRESS,),
            agent,
            OrderStatus.ACCEPTED,
            delivery_boy_id=None,
        )

    async def agent_update_status(self, agent: Identity, order_id: int, status: str) -> Order:
        if status != OrderStatus.DELIVERED.value:
            raise InvalidStatusTarget()
        return await self.transition(
            "deliver", order_id, (OrderStatus.IN_PROGRESS,), agent, OrderStatus.DELIVERED,
        )

    async def customer_cancel(self, customer: Identity, order_id: int) -> Order:
        return await self.transition(
            "customer_cancel", order_id, (OrderStatus.PENDING,), customer, OrderStatus.CANCELLED,
        )
