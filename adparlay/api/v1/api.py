from fastapi import APIRouter
from adparlay.api.v1.endpoints import (
    users, forms, templates, drafts, exports, submissions, analytics,
    integrations, notifications, payments, public
)

# Create main API router
api_router = APIRouter()

api_router.include_router(
    users.router,
    prefix="/users",
    tags=["users"]
)

# Export routes share the /forms/{id}/submissions prefix and must win over /{submission_id}
api_router.include_router(
    exports.router,
    tags=["exports"]
)

api_router.include_router(
    forms.router,
    prefix="/forms",
    tags=["forms"]
)

api_router.include_router(
    submissions.router,
    prefix="/forms",
    tags=["submissions"]
)

api_router.include_router(
    analytics.router,
    tags=["analytics"]
)

api_router.include_router(
    templates.router,
    prefix="/templates",
    tags=["templates"]
)

api_router.include_router(
    drafts.router,
    prefix="/drafts",
    tags=["drafts"]
)

api_router.include_router(
    integrations.router,
    prefix="/integrations",
    tags=["integrations"]
)

api_router.include_router(
    notifications.router,
    prefix="/notifications",
    tags=["notifications"]
)

api_router.include_router(
    payments.router,
    prefix="/payments",
    tags=["payments"]
)

api_router.include_router(
    public.router,
    prefix="/public",
    tags=["public"]
)
