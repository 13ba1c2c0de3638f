from fastapi import APIRouter

from sqlpatch.api.routes import patch, queries, utils

api_router = APIRouter()
api_router.include_router(queries.router)
api_router.include_router(patch.router)
api_router.include_router(utils.router)
