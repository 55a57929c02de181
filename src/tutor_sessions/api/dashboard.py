'''

'''
from typing import Annotated
from fastapi import APIRouter, Depends

from ..models import dashboard as dashboard_models
from ..services.security import get_approved_user
from ..services.dashboard_service import DashboardService


class DashboardAPI:
    def __init__(self):
        self.router = APIRouter(
            prefix="/dashboard",
            tags=["Dashboard"],
            dependencies=[Depends(get_approved_user)]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
                "/stats",
                self.get_stats,
                methods=["GET"],
                response_model=dashboard_models.DashboardStats)

    async def get_stats(
        self,
        dashboard_service: Annotated[DashboardService, Depends(DashboardService)]
    ):
        return await dashboard_service.get_stats()

# Instantiate the class and export its router
dashboard_api = DashboardAPI()
router = dashboard_api.router
