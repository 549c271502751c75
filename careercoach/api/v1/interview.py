from fastapi import APIRouter, Depends

from careercoach.api.deps import get_dashboard_composer
from careercoach.core.security import get_current_user_id
from careercoach.schemas.quiz import PerformanceResponse
from careercoach.services.dashboard import DashboardComposer

router = APIRouter()


@router.get("/interview/performance", response_model=PerformanceResponse)
async def interview_performance(
    user_id: str = Depends(get_current_user_id),
    composer: DashboardComposer = Depends(get_dashboard_composer),
):
    return await composer.performance(user_id)
