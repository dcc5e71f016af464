from fastapi import APIRouter
from apis.v1.route_playground import router as playground_router
from apis.v1.route_image import router as image_router
from apis.v1.route_judge import router as judge_router

api_router = APIRouter()
api_router.include_router(playground_router, prefix="/api/playground", tags=["playground"])
api_router.include_router(image_router, prefix="/api/image", tags=["image"])
api_router.include_router(judge_router, prefix="/api/judge", tags=["judge"])
