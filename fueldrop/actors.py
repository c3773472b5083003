"""
Actor kinds and their repositories. Each kind maps to one fixed table through
ACTOR_REPOSITORIES; request data never selects a table or column name.
"""
import logging
from enum import Enum

import asyncpg
from asyncpg.exceptions import UniqueViolationError

from fueldrop.errors import ValidationError
from fueldrop.order_state import ACTIVE_STATES

logger = logging.getLogger(__name__)


class ActorKind(str, Enum):
    DEALER = "dealer"
    CUSTOMER = "customer"
    DELIVERY_BOY = "delivery_boy"


class ActorRepository:
    kind: ActorKind
    # Fields a registration must carry, in INSERT order
    register_fields: tuple[str, ...] = ("name", "email", "password", "phone")
    # Fields a profile update must carry, in UPDATE order
    profile_fields: tuple[str, ...] = ("name", "phone")

    authenticate_sql: str
    insert_sql: str
    profile_sql: str
    update_profile_sql: str
    exists_sql: str

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    @staticmethod
    def _require(fields: dict, names: tuple[str, ...]) -> list:
        missing = [name for name in names if not fields.get(name)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        return [fields[name] for name in names]

    async def authenticate(self, email: str, password: str) -> dict | None:
        row = await self.pool.fetchrow(self.authenticate_sql, email, password)
        return dict(row) if row else None

    async def register(self, fields: dict) -> int:
        """Insert a new actor and return its id. Duplicate email -> ValidationError."""
        values = self._require(fields, self.register_fields)
        try:
            actor_id = await self.pool.fetchval(self.insert_sql, *values)
        except UniqueViolationError:
            raise ValidationError("Email already registered.")
        logger.info("Registered %s id=%d", self.kind.value, actor_id)
        return actor_id

    async def profile(self, actor_id: int) -> dict | None:
        row = await self.pool.fetchrow(self.profile_sql, actor_id)
        return dict(row) if row else None

    async def update_profile(self, actor_id: int, fields: dict) -> bool:
        values = self._require(fields, self.profile_fields)
        status = await self.pool.execute(self.update_profile_sql, *values, actor_id)
        return status != "UPDATE 0"

    async def exists(self, actor_id: int) -> bool:
        return await self.pool.fetchval(self.exists_sql, actor_id) is not None


class DealerRepository(ActorRepository):
    kind = ActorKind.DEALER
    authenticate_sql = "SELECT id, name, email, phone FROM dealers WHERE email = $1 AND password = $2;"
    insert_sql = "INSERT INTO dealers (name, email, password, phone) VALUES ($1, $2, $3, $4) RETURNING id;"
    profile_sql = "SELECT name, email, phone FROM dealers WHERE id = $1;"
    update_profile_sql = "UPDATE dealers SET name = $1, phone = $2 WHERE id = $3;"
    exists_sql = "SELECT 1 FROM dealers WHERE id = $1;"


class CustomerRepository(ActorRepository):
    kind = ActorKind.CUSTOMER
    register_fields = ("name", "email", "password", "phone", "address", "city", "state", "pincode")
    profile_fields = ("name", "phone", "address", "city", "state", "pincode")
    authenticate_sql = """
        SELECT id, name, email, phone, address, city, state, pincode
        FROM customers WHERE email = $1 AND password = $2;
    """
    insert_sql = """
        INSERT INTO customers (name, email, password, phone, address, city, state, pincode)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8) RETURNING id;
    """
    profile_sql = "SELECT name, email, phone, address, city, state, pincode FROM customers WHERE id = $1;"
    update_profile_sql = """
        UPDATE customers SET name = $1, phone = $2, address = $3, city = $4, state = $5, pincode = $6
        WHERE id = $7;
    """
    exists_sql = "SELECT 1 FROM customers WHERE id = $1;"


class DeliveryAgentRepository(ActorRepository):
    kind = ActorKind.DELIVERY_BOY
    authenticate_sql = "SELECT id, name, email, phone FROM delivery_boys WHERE email = $1 AND password = $2;"
    insert_sql = "INSERT INTO delivery_boys (name, email, password, phone) VALUES ($1, $2, $3, $4) RETURNING id;"
    profile_sql = "SELECT name, email, phone FROM delivery_boys WHERE id = $1;"
    update_profile_sql = "UPDATE delivery_boys SET name = $1, phone = $2 WHERE id = $3;"
    exists_sql = "SELECT 1 FROM delivery_boys WHERE id = $1;"

    async def available(self) -> list[dict]:
        """Agents holding no accepted or in-progress order. Recomputed on every call."""
        rows = await self.pool.fetch(
            """
            SELECT id, name
            FROM delivery_boys db
            WHERE NOT EXISTS (
                SELECT 1 FROM orders o
                WHERE o.delivery_boy_id = db.id AND o.status = ANY($1::varchar[])
            )
            ORDER BY id;
            """,
            [s.value for s in ACTIVE_STATES],
        )
        return [dict(r) for r in rows]


ACTOR_REPOSITORIES: dict[ActorKind, type[ActorRepository]] = {
    ActorKind.DEALER: DealerRepository,
    ActorKind.CUSTOMER: CustomerRepository,
    ActorKind.DELIVERY_BOY: DeliveryAgentRepository,
}


def repository_for(kind: ActorKind, pool: asyncpg.Pool) -> ActorRepository:
    return ACTOR_REPOSITORIES[kind](pool)
