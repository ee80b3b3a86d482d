from fastapi import APIRouter
from app.api.v1.endpoints import preorders, waitlist, billing, dashboard, webhooks

api_router = APIRouter()

api_router.include_router(preorders.router, prefix="/preorders", tags=["preorders"])
api_router.include_router(waitlist.router, prefix="/waitlist", tags=["waitlist"])
api_router.include_router(billing.router, prefix="/billing", tags=["billing"])
api_router.include_router(dashboard.router)
api_router.include_router(webhooks.router)
