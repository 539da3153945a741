"""
API router - aggregates all route modules.
"""
from fastapi import APIRouter
from smsledger.api.webhooks import router as webhooks_router

api_router = APIRouter()
api_router.include_router(webhooks_router)
