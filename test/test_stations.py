from decimal import Decimal

import asyncpg
import pytest

from _helper import ScriptedPool
from fueldrop.errors import NotFound, StoreError, ValidationError
from fueldrop.order_state import FuelType
from fueldrop.stations import StationRepository

STATION = {"name": "Highway Fuels", "address": "NH 48", "city": "Pune", "state": "MH", "pincode": "411001"}


@pytest.mark.asyncio
async def test_register_station_adds_zero_price_row():
    pool = ScriptedPool(fetchval=[41], execute=["INSERT 0 1"])
    assert await StationRepository(pool).register(3, STATION) == 41

    (_, station_sql, station_args), (_, price_sql, price_args) = pool.calls
    assert "INSERT INTO fuel_stations" in station_sql
    assert station_args[0] == 3
    assert "INSERT INTO fuel_prices" in price_sql
    assert price_args == (41,)


@pytest.mark.asyncio
async def test_price_row_failure_leaves_station_behind():
    pool = ScriptedPool(fetchval=[41], execute=[asyncpg.PostgresError("prices unavailable")])
    with pytest.raises(StoreError):
        await StationRepository(pool).register(3, STATION)

    # The station insert ran and nothing tried to undo it
    assert [method for method, _, _ in pool.calls] == ["fetchval", "execute"]
    assert "INSERT INTO fuel_stations" in pool.calls[0][1]
    assert not any("DELETE" in sql for _, sql, _ in pool.calls)


@pytest.mark.asyncio
async def test_register_station_requires_address_fields():
    pool = ScriptedPool()
    with pytest.raises(ValidationError):
        await StationRepository(pool).register(3, {**STATION, "pincode": ""})
    assert pool.calls == []


@pytest.mark.asyncio
async def test_update_prices_checks_ownership_in_the_update():
    pool = ScriptedPool(execute=["UPDATE 0"])
    with pytest.raises(NotFound):
        await StationRepository(pool).update_prices(3, 41, Decimal("101"), Decimal("92"), Decimal("80"))
    sql = pool.calls[0][1]
    assert "dealer_id = $5" in sql
    assert pool.calls[0][2][3:] == (41, 3)


@pytest.mark.asyncio
async def test_update_prices_rejects_negative():
    pool = ScriptedPool()
    with pytest.raises(ValidationError):
        await StationRepository(pool).update_prices(3, 41, Decimal("-1"), Decimal("92"), Decimal("80"))
    assert pool.calls == []


@pytest.mark.asyncio
async def test_unit_price_selects_column_for_fuel_type():
    pool = ScriptedPool(fetchval=[Decimal("75.25")])
    assert await StationRepository(pool).unit_price(41, FuelType.CNG) == Decimal("75.25")
    assert "cng_price" in pool.calls[0][1]
