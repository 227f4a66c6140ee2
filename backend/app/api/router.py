"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from app.api.routes import moods, support_contacts, journal, notifications

api_router = APIRouter()

# Include all route modules
api_router.include_router(moods.router)
api_router.include_router(support_contacts.router)
api_router.include_router(journal.router)
api_router.include_router(notifications.router)
