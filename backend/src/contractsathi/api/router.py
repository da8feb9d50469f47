"""Main API router aggregating all v1 routes."""

from fastapi import APIRouter

from contractsathi.api.routes import chat, contracts, health, reports

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(contracts.router)
api_router.include_router(reports.router)
api_router.include_router(chat.router)
