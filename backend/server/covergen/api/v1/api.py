"""
Main API router for v1 endpoints
"""
from fastapi import APIRouter
from covergen.api.v1.endpoints import auth, projects, generation, storage

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(projects.router, tags=["Projects & Assets"])
api_router.include_router(generation.router, tags=["Generation"])
api_router.include_router(storage.router, tags=["Storage"])


@api_router.get("/")
async def api_info():
    return {"message": "CoverGen API v1", "status": "active"}
