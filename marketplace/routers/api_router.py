from fastapi import APIRouter
from marketplace.routers import auth, jobs, bids, notifications, projects

# Centralized API router hub: routers are aggregated here,
# and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(jobs.router, tags=["Jobs"])
api_router.include_router(bids.router, tags=["Bids"])
api_router.include_router(notifications.router, tags=["Notifications"])
api_router.include_router(projects.router, tags=["Projects"])
