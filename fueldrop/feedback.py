import asyncpg

from fueldrop.errors import ValidationError


class FeedbackRepository:
    """Append-only customer feedback, readable by dealers."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def submit(self, customer_id: int, message: str) -> int:
        if not message or not message.strip():
            raise ValidationError("Feedback message is required.")
        return await self.pool.fetchval(
            "INSERT INTO feedback (customer_id, feedback_text) VALUES ($1, $2) RETURNING id;",
            customer_id,
            message,
        )

    async def list_all(self) -> list[dict]:
        rows = await self.pool.fetch(
            """
            SELECT f.*, c.name AS customer_name
            FROM feedback f
            JOIN customers c ON f.customer_id = c.id
            ORDER BY f.created_at DESC;
            """
        )
        return [dict(r) for r in rows]
