from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from fueldrop.actors import ActorKind
from fueldrop.order_state import FuelType, OrderStatus


class Identity(BaseModel):
    """Who is calling: the {userId, userType} pair stored in the session."""
    user_id: int
    user_type: ActorKind


class Order(BaseModel):
    id: int
    customer_id: int
    station_id: int
    delivery_boy_id: int | None = None
    fuel_type: FuelType
    quantity: Decimal
    unit_price: Decimal
    total_amount: Decimal
    delivery_address: str
    status: OrderStatus
    created_at: datetime | None = None
    # Owner of the order's station; filled in by reads that join fuel_stations
    dealer_id: int | None = None

    @classmethod
    def from_record(cls, record) -> "Order":
        return cls.model_validate(dict(record))
