from typing import List, Optional
from pydantic import Field
from datetime import datetime

from marketplace.models.bid import BidStatus
from marketplace.schemas.base import CamelModel
from marketplace.schemas.auth import UserSummary
from marketplace.schemas.job import JobResponse, JobSummary

class BidCreate(CamelModel):
    amount: float = Field(allow_inf_nan=False)
    proposal_text: Optional[str] = Field(default=None, max_length=5000)

class BidStatusUpdate(CamelModel):
    status: BidStatus

class BidResponse(CamelModel):
    id: int
    job_id: int
    freelancer_id: int
    amount: float
    proposal_text: Optional[str] = None
    status: BidStatus
    created_at: datetime
    updated_at: datetime

class BidDetail(BidResponse):
    """A bid with its bidder and job filled in."""
    freelancer: UserSummary
    job: JobSummary

class BidDetailEnvelope(CamelModel):
    bid: BidDetail

class BidCreated(CamelModel):
    message: str
    bid: BidResponse

class BidAccepted(CamelModel):
    message: str
    job: JobResponse

class BidRejected(CamelModel):
    message: str
    bid: BidResponse

class RecentBids(CamelModel):
    recent_bids: List[BidResponse]

class BidEnvelope(CamelModel):
    success: bool = True
    data: BidResponse

class BidPage(CamelModel):
    success: bool = True
    count: int
    data: List[BidResponse]
