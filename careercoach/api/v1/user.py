import asyncio
import logging

from fastapi import APIRouter, Depends, Request

from careercoach.api.deps import get_dashboard_composer, get_store
from careercoach.core.errors import NotFoundError
from careercoach.core.rate_limit import rate_limit
from careercoach.core.security import get_current_user_id, get_optional_user_id
from careercoach.schemas.dashboard import DashboardView
from careercoach.schemas.user import ProfilePatch, ProfileResponse
from careercoach.services.dashboard import DashboardComposer
from careercoach.store.db import Store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/user/dashboard", response_model=DashboardView)
async def user_dashboard(
    user_id: str | None = Depends(get_optional_user_id),
    composer: DashboardComposer = Depends(get_dashboard_composer),
):
    return await composer.dashboard(user_id)


@router.get("/user/profile", response_model=ProfileResponse)
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    profile = await asyncio.to_thread(store.get_profile, user_id)
    if profile is None:
        raise NotFoundError("User not found")
    return ProfileResponse(**profile.model_dump())


@router.put("/user/profile", response_model=ProfileResponse)
@rate_limit()
async def update_profile(
    request: Request,
    payload: ProfilePatch,
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    changes = payload.model_dump(exclude_unset=True)
    if changes:
        profile = await asyncio.to_thread(store.update_profile, user_id, changes)
        logger.info("profile_updated user=%s fields=%s", user_id, ",".join(sorted(changes)))
    else:
        profile = await asyncio.to_thread(store.get_profile, user_id)
    if profile is None:
        raise NotFoundError("User not found")
    return ProfileResponse(**profile.model_dump())
