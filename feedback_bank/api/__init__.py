from fastapi import APIRouter

from feedback_bank.api.elements import router as elements_router
from feedback_bank.api.modules import router as modules_router
from feedback_bank.api.questions import router as questions_router
from feedback_bank.api.site_settings import router as site_settings_router

api_router = APIRouter()
api_router.include_router(modules_router, prefix="/feedback", tags=["modules"])
api_router.include_router(questions_router, prefix="/feedback", tags=["questions"])
api_router.include_router(elements_router, prefix="/feedback", tags=["elements"])
api_router.include_router(site_settings_router, prefix="/site-settings", tags=["site-settings"])
