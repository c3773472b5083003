from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from fueldrop.actors import DeliveryAgentRepository
from fueldrop.analytics import AnalyticsRepository
from fueldrop.auth import dealer_only
from fueldrop.deps import get_agents, get_analytics, get_feedback, get_lifecycle, get_orders, get_stations
from fueldrop.feedback import FeedbackRepository
from fueldrop.lifecycle import OrderLifecycle
from fueldrop.models import Identity
from fueldrop.orders import OrderRepository
from fueldrop.stations import StationRepository

router = APIRouter(prefix="/api", tags=["dealer"])


class RegisterStationBody(BaseModel):
    name: str
    address: str
    city: str
    state: str
    pincode: str
    contact_number: str | None = Field(default=None, alias="contactNumber")


class UpdatePricesBody(BaseModel):
    station_id: int = Field(..., alias="stationId")
    petrol: Decimal
    diesel: Decimal
    cng: Decimal


class OrderActionBody(BaseModel):
    order_id: int = Field(..., alias="orderId")


class AssignDeliveryBoyBody(BaseModel):
    order_id: int = Field(..., alias="orderId")
    delivery_boy_id: int = Field(..., alias="deliveryBoyId")


@router.post("/register-station")
async def register_station(
    body: RegisterStationBody,
    dealer: Identity = Depends(dealer_only),
    stations: StationRepository = Depends(get_stations),
) -> dict:
    station_id = await stations.register(dealer.user_id, body.model_dump())
    return {"success": True, "message": "Station registered successfully", "stationId": station_id}


@router.post("/update-prices")
async def update_prices(
    body: UpdatePricesBody,
    dealer: Identity = Depends(dealer_only),
    stations: StationRepository = Depends(get_stations),
) -> dict:
    await stations.update_prices(dealer.user_id, body.station_id, body.petrol, body.diesel, body.cng)
    return {"success": True, "message": "Prices updated successfully"}


@router.get("/get-analytics")
async def get_analytics_totals(
    dealer: Identity = Depends(dealer_only),
    analytics: AnalyticsRepository = Depends(get_analytics),
) -> dict:
    """Delivered sales for today, the trailing 7 days and the trailing 30 days."""
    totals = await analytics.dealer_sales(dealer.user_id, datetime.now())
    return {"success": True, **totals}


@router.get("/dealer/get-stations")
async def dealer_stations(
    dealer: Identity = Depends(dealer_only),
    stations: StationRepository = Depends(get_stations),
) -> dict:
    return {"success": True, "stations": await stations.for_dealer(dealer.user_id)}


@router.get("/dealer/get-orders")
async def dealer_orders(
    dealer: Identity = Depends(dealer_only),
    orders: OrderRepository = Depends(get_orders),
) -> dict:
    return {"success": True, "orders": await orders.for_dealer(dealer.user_id)}


@router.post("/dealer/accept-order")
async def accept_order(
    body: OrderActionBody,
    dealer: Identity = Depends(dealer_only),
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
) -> dict:
    await lifecycle.dealer_accept(dealer, body.order_id)
    return {"success": True, "message": "Order accepted"}


@router.post("/dealer/reject-order")
async def reject_order(
    body: OrderActionBody,
    dealer: Identity = Depends(dealer_only),
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
) -> dict:
    await lifecycle.dealer_reject(dealer, body.order_id)
    return {"success": True, "message": "Order rejected"}


@router.get("/dealer/get-delivery-boys")
async def available_delivery_boys(
    dealer: Identity = Depends(dealer_only),
    agents: DeliveryAgentRepository = Depends(get_agents),
) -> dict:
    return {"success": True, "deliveryBoys": await agents.available()}


@router.post("/dealer/assign-delivery-boy")
async def assign_delivery_boy(
    body: AssignDeliveryBoyBody,
    dealer: Identity = Depends(dealer_only),
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
) -> dict:
    await lifecycle.assign_agent(dealer, body.order_id, body.delivery_boy_id)
    return {"success": True, "message": "Delivery boy assigned successfully (awaiting delivery boy acceptance)"}


@router.get("/dealer/get-feedback")
async def dealer_feedback(
    dealer: Identity = Depends(dealer_only),
    feedback: FeedbackRepository = Depends(get_feedback),
) -> dict:
    return {"success": True, "feedback": await feedback.list_all()}


@router.get("/dealer/get-delivery-boy-details/{delivery_boy_id}")
async def delivery_boy_details(
    delivery_boy_id: int,
    dealer: Identity = Depends(dealer_only),
    analytics: AnalyticsRepository = Depends(get_analytics),
) -> dict:
    return {"success": True, **await analytics.agent_details(delivery_boy_id)}
