from typing import List, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.database import get_db
from marketplace.models.bid import BidStatus
from marketplace.models.user import User
from marketplace.routers.auth_deps import get_current_user
from marketplace.schemas.bid import (
    BidAccepted,
    BidDetailEnvelope,
    BidEnvelope,
    BidPage,
    BidRejected,
    BidResponse,
    BidStatusUpdate,
    RecentBids,
)
from marketplace.services.bid_service import SORT_ASC, BidService

router = APIRouter(prefix="/bids", tags=["Bids"])

# Two-segment routes are declared before "/{job_id}" so they are matched first.

@router.get("/recent/bid", response_model=RecentBids)
def get_recent_bids(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """The caller's own bids, newest first."""
    bids = BidService(db, current_user).list_bids_for_user(current_user.id)
    return {"recent_bids": bids}

@router.get("/user/{user_id}", response_model=BidPage)
def get_bids_by_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    bids = BidService(db, current_user).list_bids_for_user(user_id)
    return {"success": True, "count": len(bids), "data": bids}

@router.get("/bid/{bid_id}", response_model=BidEnvelope)
def get_bid(
    bid_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": True, "data": BidService(db, current_user).get_bid(bid_id)}

@router.get("/{bid_id}/details", response_model=BidDetailEnvelope)
def get_bid_details(
    bid_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """The bid with the bidder's name and the job's title."""
    return {"bid": BidService(db, current_user).get_bid(bid_id)}

@router.put("/accept/{bid_id}", response_model=BidAccepted)
def accept_bid(
    bid_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Accept a bid. The job moves to in-progress and every other pending bid
    on it is rejected in the same transaction.
    """
    bid = BidService(db, current_user).set_bid_status(bid_id, BidStatus.ACCEPTED)
    return {"message": "Bid accepted", "job": bid.job}

@router.put("/reject/{bid_id}", response_model=BidRejected)
def reject_bid(
    bid_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    bid = BidService(db, current_user).set_bid_status(bid_id, BidStatus.REJECTED)
    return {"message": "Bid rejected", "bid": bid}

@router.put("/{bid_id}/status", response_model=BidResponse)
def set_bid_status(
    bid_id: int,
    update: BidStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return BidService(db, current_user).set_bid_status(bid_id, update.status)

@router.delete("/{bid_id}")
def delete_bid(
    bid_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    BidService(db, current_user).delete_bid(bid_id)
    return {"message": "Bid deleted successfully"}

@router.get("/{job_id}", response_model=List[BidResponse])
def get_bids_for_job(
    job_id: int,
    order: Literal["asc", "desc"] = Query(SORT_ASC, description="Sort by creation time"),
    db: Session = Depends(get_db)
):
    return BidService(db).list_bids_for_job(job_id, order)
