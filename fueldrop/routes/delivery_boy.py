from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from fueldrop.auth import delivery_boy_only
from fueldrop.deps import get_lifecycle, get_orders
from fueldrop.lifecycle import OrderLifecycle
from fueldrop.models import Identity
from fueldrop.orders import OrderRepository

router = APIRouter(prefix="/api/delivery-boy", tags=["delivery-boy"])


class OrderActionBody(BaseModel):
    order_id: int = Field(..., alias="orderId")


class UpdateStatusBody(BaseModel):
    order_id: int = Field(..., alias="orderId")
    status: str = Field(..., description="Only 'delivered' is accepted")


@router.get("/get-orders")
async def assigned_orders(
    agent: Identity = Depends(delivery_boy_only),
    orders: OrderRepository = Depends(get_orders),
) -> dict:
    return {"success": True, "orders": await orders.for_agent(agent.user_id)}


@router.post("/accept-order")
async def accept_order(
    body: OrderActionBody,
    agent: Identity = Depends(delivery_boy_only),
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
) -> dict:
    await lifecycle.agent_accept(agent, body.order_id)
    return {"success": True, "message": "Order accepted"}


@router.post("/reject-order")
async def reject_order(
    body: OrderActionBody,
    agent: Identity = Depends(delivery_boy_only),
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
) -> dict:
    """Hand an in-progress order back to the dealer, who can assign someone else."""
    await lifecycle.agent_reject(agent, body.order_id)
    return {"success": True, "message": "Order rejected"}


@router.post("/update-order-status")
async def update_order_status(
    body: UpdateStatusBody,
    agent: Identity = Depends(delivery_boy_only),
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
) -> dict:
    await lifecycle.agent_update_status(agent, body.order_id, body.status)
    return {"success": True, "message": "Order status updated successfully"}
