"""FastAPI dependency providers wiring repositories to the shared Postgres pool."""
import asyncpg
from fastapi import Depends

from fueldrop.actors import DeliveryAgentRepository
from fueldrop.analytics import AnalyticsRepository
from fueldrop.db import get_pool
from fueldrop.feedback import FeedbackRepository
from fueldrop.lifecycle import OrderLifecycle
from fueldrop.orders import OrderRepository
from fueldrop.stations import StationRepository


async def get_stations(pool: asyncpg.Pool = Depends(get_pool)) -> StationRepository:
    return StationRepository(pool)


async def get_orders(pool: asyncpg.Pool = Depends(get_pool)) -> OrderRepository:
    return OrderRepository(pool)


async def get_agents(pool: asyncpg.Pool = Depends(get_pool)) -> DeliveryAgentRepository:
    return DeliveryAgentRepository(pool)


async def get_analytics(pool: asyncpg.Pool = Depends(get_pool)) -> AnalyticsRepository:
    return AnalyticsRepository(pool)


async def get_feedback(pool: asyncpg.Pool = Depends(get_pool)) -> FeedbackRepository:
    return FeedbackRepository(pool)


async def get_lifecycle(
    orders: OrderRepository = Depends(get_orders),
    stations: StationRepository = Depends(get_stations),
    agents: DeliveryAgentRepository = Depends(get_agents),
) -> OrderLifecycle:
    return OrderLifecycle(orders, stations, agents)
