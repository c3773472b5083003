"""
Fuel stations and their price rows. Ownership is checked inside the UPDATE
predicate, never by a separate read.
"""
import logging
from decimal import Decimal

import asyncpg

from fueldrop.errors import NotFound, StoreError, ValidationError
from fueldrop.order_state import FuelType

logger = logging.getLogger(__name__)

STATION_FIELDS = ("name", "address", "city", "state", "pincode")

# Fuel type -> price lookup; the column is fixed per statement
_UNIT_PRICE_SQL: dict[FuelType, str] = {
    FuelType.PETROL: "SELECT petrol_price FROM fuel_prices WHERE station_id = $1;",
    FuelType.DIESEL: "SELECT diesel_price FROM fuel_prices WHERE station_id = $1;",
    FuelType.CNG: "SELECT cng_price FROM fuel_prices WHERE station_id = $1;",
}


class StationRepository:
    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def register(self, dealer_id: int, fields: dict) -> int:
        """
        Insert the station, then its zero-priced price row. The two statements
        are not wrapped in a transaction: if the second fails the station stays
        without prices and the caller gets StoreError.
        """
        missing = [name for name in STATION_FIELDS if not fields.get(name)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        station_id = await self.pool.fetchval(
            """
            INSERT INTO fuel_stations (dealer_id, name, address, city, state, pincode, contact_number)
            VALUES ($1, $2, $3, $4, $5, $6, $7) RETURNING id;
            """,
            dealer_id,
            fields["name"],
            fields["address"],
            fields["city"],
            fields["state"],
            fields["pincode"],
            fields.get("contact_number"),
        )
        try:
            await self.pool.execute(
                """
                INSERT INTO fuel_prices (station_id, petrol_price, diesel_price, cng_price)
                VALUES ($1, 0.00, 0.00, 0.00);
                """,
                station_id,
            )
        except asyncpg.PostgresError:
            logger.exception("Failed to initialize prices for station_id=%d", station_id)
            raise StoreError("Failed to initialize prices")
        logger.info("Dealer %d registered station_id=%d", dealer_id, station_id)
        return station_id

    async def update_prices(
        self,
        dealer_id: int,
        station_id: int,
        petrol: Decimal,
        diesel: Decimal,
        cng: Decimal,
    ) -> None:
        if min(petrol, diesel, cng) < 0:
            raise ValidationError("Prices must not be negative")
        status = await self.pool.execute(
            """
            UPDATE fuel_prices
            SET petrol_price = $1, diesel_price = $2, cng_price = $3, updated_at = NOW()
            WHERE station_id = $4
              AND EXISTS (SELECT 1 FROM fuel_stations WHERE id = $4 AND dealer_id = $5);
            """,
            petrol,
            diesel,
            cng,
            station_id,
            dealer_id,
        )
        if status == "UPDATE 0":
            raise NotFound("Station not found or you do not have permission to update prices for this station.")

    async def prices(self, station_id: int) -> dict:
        row = await self.pool.fetchrow(
            "SELECT petrol_price, diesel_price, cng_price FROM fuel_prices WHERE station_id = $1;",
            station_id,
        )
        if row is None:
            raise NotFound("No prices found for this station")
        return {"petrol": row["petrol_price"], "diesel": row["diesel_price"], "cng": row["cng_price"]}

    async def unit_price(self, station_id: int, fuel_type: FuelType) -> Decimal | None:
        """Current price of one fuel at one station, or None if the station has no price row."""
        return await self.pool.fetchval(_UNIT_PRICE_SQL[fuel_type], station_id)

    async def list_all(self) -> list[dict]:
        rows = await self.pool.fetch(
            """
            SELECT fs.id, fs.name, fs.address, fs.city, fs.state, fs.pincode,
                   fp.petrol_price, fp.diesel_price, fp.cng_price
            FROM fuel_stations fs
            JOIN fuel_prices fp ON fs.id = fp.station_id
            ORDER BY fs.id;
            """
        )
        return [dict(r) for r in rows]

    async def by_address(self, city: str, state: str, pincode: str) -> list[dict]:
        if not (city and state and pincode):
            raise ValidationError("City, state, and pincode are required for station search.")
        rows = await self.pool.fetch(
            """
            SELECT fs.id, fs.name, fs.address, fs.city, fs.state, fs.pincode,
                   fp.petrol_price, fp.diesel_price, fp.cng_price, d.phone AS dealer_phone
            FROM fuel_stations fs
            JOIN fuel_prices fp ON fs.id = fp.station_id
            JOIN dealers d ON fs.dealer_id = d.id
            WHERE fs.city = $1 AND fs.state = $2 AND fs.pincode = $3
            ORDER BY fs.id;
            """,
            city,
            state,
            pincode,
        )
        return [dict(r) for r in rows]

    async def for_dealer(self, dealer_id: int) -> list[dict]:
        rows = await self.pool.fetch(
            "SELECT id, name FROM fuel_stations WHERE dealer_id = $1 ORDER BY id;",
            dealer_id,
        )
        return [dict(r) for r in rows]
