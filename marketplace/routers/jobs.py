from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from marketplace.database import get_db
from marketplace.models.user import User
from marketplace.routers.auth_deps import get_current_user, require_employer
from marketplace.schemas.bid import BidCreate, BidCreated
from marketplace.schemas.job import (
    JobCreate,
    JobEnvelope,
    JobListEnvelope,
    JobPage,
    JobResponse,
    JobStatusUpdate,
)
from marketplace.services.bid_service import BidService
from marketplace.services.job_service import JobFilter, JobService

router = APIRouter(prefix="/jobs", tags=["Jobs"])

@router.post("/create", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
def create_job(
    job_in: JobCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_employer)
):
    """
    Post a new job. Employers and hybrids only.
    Invalid forms come back as 422 with a field-keyed error map.
    """
    return JobService(db, current_user).create_job(job_in)

@router.get("/marketplace", response_model=list[JobResponse])
def get_marketplace_jobs(db: Session = Depends(get_db)):
    """Open jobs, newest first. Public."""
    return list(JobService(db).list_jobs(JobFilter.marketplace()))

@router.get("/jobs/filtered", response_model=JobListEnvelope)
def get_filtered_jobs(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Open jobs the caller can bid on (their own postings excluded)."""
    jobs = JobService(db, current_user).list_jobs(JobFilter.for_user(current_user))
    return {"jobs": list(jobs)}

@router.get("/employer/{user_id}", response_model=JobPage)
def get_jobs_by_employer(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    jobs = list(JobService(db, current_user).list_jobs(JobFilter(employer_id=user_id)))
    return {"success": True, "count": len(jobs), "data": jobs}

@router.get("/user/{job_id}", response_model=JobEnvelope)
def get_job_auth_check(
    job_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"job": JobService(db, current_user).get_job(job_id)}

@router.get("/{job_id}", response_model=JobResponse)
def get_job(job_id: int, db: Session = Depends(get_db)):
    return JobService(db).get_job(job_id)

@router.put("/{job_id}", response_model=JobResponse)
def update_job_status(
    job_id: int,
    update: JobStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Move a job along its lifecycle. Only the posting employer may do this.
    """
    return JobService(db, current_user).update_job_status(job_id, update.status)

@router.post("/{job_id}/bid", response_model=BidCreated, status_code=status.HTTP_201_CREATED)
def place_bid(
    job_id: int,
    bid_in: BidCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    bid = BidService(db, current_user).create_bid(job_id, bid_in.amount, bid_in.proposal_text)
    return {"message": "Bid placed successfully", "bid": bid}
