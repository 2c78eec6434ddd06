"""API router aggregating all endpoint routers.

Authentication:
  /api/auth/login, /logout, /me
  /api/api-keys (issue, list, revoke)

Health Data Import (API key):
  /api/health-import, /health-import/batch
  /api/shortcuts/sync

Tracking (session):
  /api/logs/{metric}
  /api/workouts, /workouts/today
  /api/habits
  /api/milestones
  /api/reviews
"""

from fastapi import APIRouter

from fittrack.api.v1.endpoints import (
    api_keys,
    auth,
    habits,
    health_import,
    logs,
    milestones,
    reviews,
    shortcuts,
    workouts,
)

api_router = APIRouter()

# -------------------------------------------------------------------------
# Authentication
# -------------------------------------------------------------------------
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(api_keys.router, prefix="/api-keys", tags=["api-keys"])

# -------------------------------------------------------------------------
# Health Data Import
# -------------------------------------------------------------------------
api_router.include_router(health_import.router, prefix="/health-import", tags=["import"])
api_router.include_router(shortcuts.router, prefix="/shortcuts", tags=["import"])

# -------------------------------------------------------------------------
# Tracking
# -------------------------------------------------------------------------
api_router.include_router(logs.router, prefix="/logs", tags=["logs"])
api_router.include_router(workouts.router, prefix="/workouts", tags=["workouts"])
api_router.include_router(habits.router, prefix="/habits", tags=["habits"])
api_router.include_router(milestones.router, prefix="/milestones", tags=["milestones"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
