from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime

from marketplace.models.job import JobStatus
from marketplace.schemas.base import CamelModel

class Budget(BaseModel):
    min: float = Field(allow_inf_nan=False)
    max: float = Field(allow_inf_nan=False)

class JobCreate(CamelModel):
    # Length and range rules are applied by lifecycle.validate_job_input so the
    # caller receives a field-keyed error map rather than a schema error.
    title: str
    description: str
    budget: Budget
    categories: List[str] = Field(default_factory=list)
    skills_required: List[str] = Field(default_factory=list)

class JobStatusUpdate(CamelModel):
    status: JobStatus

class JobResponse(CamelModel):
    id: int
    title: str
    description: str
    budget: Budget
    categories: List[str]
    skills_required: List[str]
    status: JobStatus
    employer_id: int
    freelancer_id: Optional[int] = None
    bid_accepted: bool
    created_at: datetime
    updated_at: datetime

class JobEnvelope(CamelModel):
    job: JobResponse

class JobListEnvelope(CamelModel):
    jobs: List[JobResponse]

class JobPage(CamelModel):
    success: bool = True
    count: int
    data: List[JobResponse]

class JobSummary(CamelModel):
    id: int
    title: str

class RecentProjects(CamelModel):
    recent_projects: List[JobResponse]
