from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from fueldrop.auth import customer_only
from fueldrop.deps import get_feedback, get_lifecycle, get_orders
from fueldrop.feedback import FeedbackRepository
from fueldrop.lifecycle import OrderLifecycle
from fueldrop.models import Identity
from fueldrop.order_state import FuelType
from fueldrop.orders import OrderRepository

router = APIRouter(prefix="/api", tags=["customer"])


class PlaceOrderBody(BaseModel):
    fuel_type: FuelType = Field(..., alias="fuelType")
    quantity: Decimal = Field(
        ..., gt=0, max_digits=10, decimal_places=2, description="Litres (kg for CNG); must be positive"
    )
    delivery_address: str = Field(..., alias="deliveryAddress")
    station_id: int = Field(..., alias="stationId")


class CancelOrderBody(BaseModel):
    order_id: int = Field(..., alias="orderId")


class FeedbackBody(BaseModel):
    feedback_message: str = Field(..., alias="feedbackMessage")


@router.post("/place-order")
async def place_order(
    body: PlaceOrderBody,
    customer: Identity = Depends(customer_only),
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
) -> dict:
    order = await lifecycle.place_order(
        customer,
        fuel_type=body.fuel_type,
        quantity=body.quantity,
        delivery_address=body.delivery_address,
        station_id=body.station_id,
    )
    return {
        "success": True,
        "message": "Order placed successfully",
        "order": order.model_dump(exclude={"dealer_id"}),
    }


@router.post("/customer/cancel-order")
async def cancel_order(
    body: CancelOrderBody,
    customer: Identity = Depends(customer_only),
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
) -> dict:
    await lifecycle.customer_cancel(customer, body.order_id)
    return {"success": True, "message": "Order cancelled successfully!"}


@router.post("/customer/submit-feedback")
async def submit_feedback(
    body: FeedbackBody,
    customer: Identity = Depends(customer_only),
    feedback: FeedbackRepository = Depends(get_feedback),
) -> dict:
    await feedback.submit(customer.user_id, body.feedback_message)
    return {"success": True, "message": "Feedback submitted successfully!"}


@router.get("/customer/get-orders")
async def customer_orders(
    customer: Identity = Depends(customer_only),
    orders: OrderRepository = Depends(get_orders),
) -> dict:
    return {"success": True, "orders": await orders.for_customer(customer.user_id)}
