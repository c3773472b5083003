"""
Read-only aggregates for dealers: sales windows and per-delivery-boy statistics.
"""
from datetime import date, datetime, timedelta

import asyncpg

from fueldrop.errors import NotFound
from fueldrop.order_state import ACTIVE_STATES, OrderStatus


def sales_windows(now: datetime) -> tuple[date, date, date]:
    """(today, start of trailing 7 days, start of trailing 30 days), by calendar date."""
    return now.date(), (now - timedelta(days=7)).date(), (now - timedelta(days=30)).date()


def success_rate(completed: int, total: int) -> int:
    return round(completed / total * 100) if total else 0


class AnalyticsRepository:
    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def dealer_sales(self, dealer_id: int, now: datetime) -> dict:
        today, week_start, month_start = sales_windows(now)
        row = await self.pool.fetchrow(
            """
            SELECT
                SUM(CASE WHEN o.created_at::date = $1 THEN o.total_amount ELSE 0 END) AS today,
                SUM(CASE WHEN o.created_at::date >= $2 THEN o.total_amount ELSE 0 END) AS week,
                SUM(CASE WHEN o.created_at::date >= $3 THEN o.total_amount ELSE 0 END) AS month
            FROM orders o
            JOIN fuel_stations fs ON o.station_id = fs.id
            WHERE fs.dealer_id = $4 AND o.status = $5;
            """,
            today,
            week_start,
            month_start,
            dealer_id,
            OrderStatus.DELIVERED.value,
        )
        return {key: row[key] or 0 for key in ("today", "week", "month")}

    async def agent_details(self, agent_id: int) -> dict:
        agent = await self.pool.fetchrow(
            "SELECT name, email, phone FROM delivery_boys WHERE id = $1;",
            agent_id,
        )
        if agent is None:
            raise NotFound("Delivery boy not found")
        stats = await self.pool.fetchrow(
            """
            SELECT
                COUNT(*) AS total_deliveries,
                COUNT(*) FILTER (WHERE status = $2) AS completed_deliveries,
                MAX(created_at) FILTER (WHERE status = $2) AS last_delivery,
                COUNT(*) FILTER (WHERE status = ANY($3::varchar[])) AS active_orders
            FROM orders
            WHERE delivery_boy_id = $1;
            """,
            agent_id,
            OrderStatus.DELIVERED.value,
            [s.value for s in ACTIVE_STATES],
        )
        return {
            "deliveryBoy": dict(agent),
            "stats": {
                "totalDeliveries": stats["total_deliveries"],
                "completedDeliveries": stats["completed_deliveries"],
                "successRate": success_rate(stats["completed_deliveries"], stats["total_deliveries"]),
                "lastDelivery": stats["last_delivery"],
                "activeOrders": stats["active_orders"],
            },
        }
