from fastapi import APIRouter

from preview_edge.api.logs.routes import router as logs_router
from preview_edge.api.redirect.routes import router as redirect_router

router = APIRouter()
router.include_router(logs_router)
# catch-all, keep last
router.include_router(redirect_router)
