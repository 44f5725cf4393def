from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.database import get_db
from marketplace.models.user import User
from marketplace.routers.auth_deps import get_current_user
from marketplace.schemas.job import RecentProjects
from marketplace.services.job_service import JobService

router = APIRouter(prefix="/projects", tags=["Projects"])

@router.get("/recent-projects", response_model=RecentProjects)
def get_recent_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Jobs awarded to the caller that are in progress or closed, latest activity first."""
    projects = JobService(db, current_user).recent_projects(current_user.id)
    return {"recent_projects": projects}
