"""
API Version 1 Router.

Aggregates all v1 endpoint routers. Optional surfaces are mounted
according to the feature flags.
"""

from fastapi import APIRouter

from notekeeper.backend.api.v1.endpoints import auth, notes, public, tasks, trash
from notekeeper.backend.core.config_schema import FeaturesSchema


def build_router(features: FeaturesSchema) -> APIRouter:
    router = APIRouter()

    router.include_router(auth.router, prefix="/auth", tags=["auth"])
    router.include_router(notes.router, prefix="/notes", tags=["notes"])
    router.include_router(trash.router, prefix="/trash", tags=["trash"])

    if features.public_sharing_enabled:
        router.include_router(public.router, prefix="/public", tags=["public"])

    if features.tasks_enabled:
        router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])

    return router
