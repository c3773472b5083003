import asyncpg
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from fueldrop.actors import ActorKind, repository_for
from fueldrop.auth import role_guard
from fueldrop.db import get_pool
from fueldrop.errors import NotFound
from fueldrop.models import Identity

# URL segment per actor kind
PROFILE_PREFIXES: dict[ActorKind, str] = {
    ActorKind.DEALER: "/api/dealer",
    ActorKind.CUSTOMER: "/api/customer",
    ActorKind.DELIVERY_BOY: "/api/delivery-boy",
}

_LABELS: dict[ActorKind, str] = {
    ActorKind.DEALER: "Dealer",
    ActorKind.CUSTOMER: "Customer",
    ActorKind.DELIVERY_BOY: "Delivery boy",
}


class ProfileBody(BaseModel):
    name: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None


def make_profile_router(kind: ActorKind) -> APIRouter:
    """GET profile and PUT update-profile for one actor kind; the id always comes from the session."""
    router = APIRouter(prefix=PROFILE_PREFIXES[kind], tags=["profiles"])
    label = _LABELS[kind]

    @router.get("/profile")
    async def get_profile(
        identity: Identity = Depends(role_guard(kind)),
        pool: asyncpg.Pool = Depends(get_pool),
    ) -> dict:
        profile = await repository_for(kind, pool).profile(identity.user_id)
        if profile is None:
            raise NotFound(f"{label} not found.")
        return {"success": True, "profile": profile}

    @router.put("/update-profile")
    async def update_profile(
        body: ProfileBody,
        identity: Identity = Depends(role_guard(kind)),
        pool: asyncpg.Pool = Depends(get_pool),
    ) -> dict:
        updated = await repository_for(kind, pool).update_profile(identity.user_id, body.model_dump())
        if not updated:
            raise NotFound(f"{label} not found.")
        return {"success": True, "message": f"{label} profile updated successfully!"}

    return router
