from fastapi import APIRouter, Depends, Query

from fueldrop.deps import get_stations
from fueldrop.errors import ValidationError
from fueldrop.stations import StationRepository

router = APIRouter(prefix="/api", tags=["stations"])


@router.get("/get-prices")
async def get_prices(
    station_id: int | None = Query(default=None, alias="stationId"),
    stations: StationRepository = Depends(get_stations),
) -> dict:
    if station_id is None:
        raise ValidationError("Station ID is required")
    return {"success": True, "prices": await stations.prices(station_id)}


@router.get("/get-all-stations")
async def get_all_stations(stations: StationRepository = Depends(get_stations)) -> dict:
    return {"success": True, "stations": await stations.list_all()}


@router.get("/get-stations-by-address")
async def get_stations_by_address(
    city: str | None = None,
    state: str | None = None,
    pincode: str | None = None,
    stations: StationRepository = Depends(get_stations),
) -> dict:
    return {"success": True, "stations": await stations.by_address(city, state, pincode)}
