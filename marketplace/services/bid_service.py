from datetime import datetime, timezone
from typing import List, Optional

from marketplace.core.exceptions import AccessDeniedError, InvalidStateError, NotFoundError
from marketplace.core.security import sanitize_input
from marketplace.models.bid import Bid, BidStatus
from marketplace.models.job import Job, JobStatus
from marketplace.models.notification import NotificationType
from marketplace.services.audit import AuditService
from marketplace.services.base import BaseService
from marketplace.services.job_service import JobService
from marketplace.services.lifecycle import (
    check_bid_amount,
    check_bid_transition,
    ensure_open_for_bids,
)
from marketplace.services.notification import NotificationService

SORT_ASC = "asc"
SORT_DESC = "desc"


class BidService(BaseService):
    """
    Bids on jobs.

    Accepting a bid is the one multi-row write in the marketplace: the bid,
    its job and the job's other pending bids change together in a single
    transaction. Each guarded UPDATE re-checks the status it expects, so a
    second acceptance racing the first matches no rows and is rolled back.
    Rejecting and withdrawing are guarded the same way, so neither can
    overwrite a bid that was accepted after it was read.
    """

    def create_bid(self, job_id: int, amount: float, proposal_text: Optional[str] = None) -> Bid:
        job = JobService(self.db, self.actor).get_job(job_id)

        if self.actor is None or not self.actor.is_freelancer:
            raise AccessDeniedError("Only freelancers can place bids")
        if job.employer_id == self.actor.id:
            raise AccessDeniedError("You cannot bid on your own job")

        ensure_open_for_bids(job.status)
        check_bid_amount(amount, job.budget_min, job.budget_max)

        bid = Bid(
            job_id=job.id,
            freelancer_id=self.actor.id,
            amount=amount,
            proposal_text=sanitize_input(proposal_text) if proposal_text else None,
            status=BidStatus.PENDING.value,
        )
        self.db.add(bid)
        self.db.flush()

        NotificationService.notify_user(
            self.db,
            job.employer_id,
            title="New Bid Received",
            message=f"A new bid of ${amount:g} has been placed on your job: {job.title}",
            type=NotificationType.BID,
            related_id=bid.id,
            on_model="Bid",
            link=f"/jobs/{job.id}",
        )
        AuditService(self.db, self.actor).log_action(
            action="create_bid",
            entity_type="bid",
            entity_id=bid.id,
            details={"job_id": job.id, "amount": amount},
            after_state={"status": bid.status},
        )
        self.commit()
        self.db.refresh(bid)

        self.log_info(f"Bid {bid.id} placed on job {job.id} by user {self.actor.id}", bid_id=bid.id)
        return bid

    def get_bid(self, bid_id: int) -> Bid:
        bid = self.db.get(Bid, bid_id)
        if not bid:
            raise NotFoundError("Bid", bid_id)
        return bid

    def list_bids_for_job(self, job_id: int, order: str = SORT_ASC) -> List[Bid]:
        JobService(self.db, self.actor).get_job(job_id)
        query = self.db.query(Bid).filter(Bid.job_id == job_id)
        if order == SORT_DESC:
            query = query.order_by(Bid.created_at.desc(), Bid.id.desc())
        else:
            query = query.order_by(Bid.created_at.asc(), Bid.id.asc())
        return query.all()

    def list_bids_for_user(self, freelancer_id: int) -> List[Bid]:
        return (
            self.db.query(Bid)
            .filter(Bid.freelancer_id == freelancer_id)
            .order_by(Bid.created_at.desc(), Bid.id.desc())
            .all()
        )

    def set_bid_status(self, bid_id: int, new_status: BidStatus) -> Bid:
        bid = self.get_bid(bid_id)
        job = bid.job
        if self.actor is None or job.employer_id != self.actor.id:
            raise AccessDeniedError("Only the job's employer can decide on its bids")

        target = check_bid_transition(bid.status, new_status)
        if target == BidStatus.ACCEPTED:
            self._accept(bid, job)
        else:
            self._reject(bid, job)
        return bid

    def _accept(self, bid: Bid, job: Job) -> None:
        if job.status != JobStatus.OPEN:
            raise InvalidStateError(
                "Job is no longer accepting bids",
                details={"status": job.status},
            )

        before_job = job.snapshot()
        now = datetime.now(timezone.utc)
        try:
            claimed = self.db.query(Bid).filter(
                Bid.id == bid.id,
                Bid.status == BidStatus.PENDING.value,
            ).update(
                {Bid.status: BidStatus.ACCEPTED.value, Bid.updated_at: now},
                synchronize_session=False,
            )
            if claimed != 1:
                raise InvalidStateError("Bid has already been decided")

            flipped = self.db.query(Job).filter(
                Job.id == job.id,
                Job.status == JobStatus.OPEN.value,
            ).update(
                {
                    Job.status: JobStatus.IN_PROGRESS.value,
                    Job.bid_accepted: True,
                    Job.freelancer_id: bid.freelancer_id,
                    Job.updated_at: now,
                },
                synchronize_session=False,
            )
            if flipped != 1:
                raise InvalidStateError("Job already has an accepted bid")

            sibling_rows = self.db.query(Bid.id, Bid.freelancer_id).filter(
                Bid.job_id == job.id,
                Bid.id != bid.id,
                Bid.status == BidStatus.PENDING.value,
            ).all()
            sibling_ids = [row.id for row in sibling_rows]
            if sibling_ids:
                self.db.query(Bid).filter(Bid.id.in_(sibling_ids)).update(
                    {Bid.status: BidStatus.REJECTED.value, Bid.updated_at: now},
                    synchronize_session=False,
                )

            NotificationService.notify_user(
                self.db,
                bid.freelancer_id,
                title="Bid Accepted",
                message=f"Your bid has been accepted for the job: {job.title}",
                type=NotificationType.JOB_AWARD,
                related_id=job.id,
                on_model="Job",
                link=f"/jobs/{job.id}",
            )
            for row in sibling_rows:
                NotificationService.notify_user(
                    self.db,
                    row.freelancer_id,
                    title="Bid Not Selected",
                    message=f"Another bid was accepted for the job: {job.title}",
                    type=NotificationType.BID,
                    related_id=row.id,
                    on_model="Bid",
                )

            audit = AuditService(self.db, self.actor)
            audit.log_action(
                action="accept_bid",
                entity_type="bid",
                entity_id=bid.id,
                details={"job_id": job.id, "rejected_bid_ids": sibling_ids},
                before_state={"status": BidStatus.PENDING.value},
                after_state={"status": BidStatus.ACCEPTED.value},
            )
            audit.log_action(
                action="assign_job",
                entity_type="job",
                entity_id=job.id,
                details={"bid_id": bid.id},
                before_state=before_job,
                after_state={
                    "status": JobStatus.IN_PROGRESS.value,
                    "bid_accepted": True,
                    "freelancer_id": bid.freelancer_id,
                },
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(bid)
        self.db.refresh(job)
        self.log_info(
            f"Bid {bid.id} accepted; job {job.id} in progress, {len(sibling_ids)} sibling bids rejected",
            bid_id=bid.id,
            job_id=job.id,
        )

    def _reject(self, bid: Bid, job: Job) -> None:
        try:
            rejected = self.db.query(Bid).filter(
                Bid.id == bid.id,
                Bid.status == BidStatus.PENDING.value,
            ).update(
                {Bid.status: BidStatus.REJECTED.value, Bid.updated_at: datetime.now(timezone.utc)},
                synchronize_session=False,
            )
            if rejected != 1:
                raise InvalidStateError("Bid has already been decided")

            NotificationService.notify_user(
                self.db,
                bid.freelancer_id,
                title="Bid Rejected",
                message=f"Your bid on '{job.title}' was not accepted",
                type=NotificationType.BID,
                related_id=bid.id,
                on_model="Bid",
            )
            AuditService(self.db, self.actor).log_action(
                action="reject_bid",
                entity_type="bid",
                entity_id=bid.id,
                details={"job_id": job.id},
                before_state={"status": BidStatus.PENDING.value},
                after_state={"status": BidStatus.REJECTED.value},
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(bid)
        self.log_info(f"Bid {bid.id} rejected", bid_id=bid.id)

    def delete_bid(self, bid_id: int) -> None:
        bid = self.get_bid(bid_id)
        if self.actor is None or bid.freelancer_id != self.actor.id:
            raise AccessDeniedError("Not authorized to delete this bid")
        if bid.status != BidStatus.PENDING:
            raise InvalidStateError("Only pending bids can be withdrawn", details={"status": bid.status})

        try:
            # The employer may have decided on the bid since it was loaded
            deleted = self.db.query(Bid).filter(
                Bid.id == bid.id,
                Bid.status == BidStatus.PENDING.value,
            ).delete(synchronize_session=False)
            if deleted != 1:
                raise InvalidStateError("Only pending bids can be withdrawn")

            AuditService(self.db, self.actor).log_action(
                action="delete_bid",
                entity_type="bid",
                entity_id=bid.id,
                details={"job_id": bid.job_id},
                before_state={"status": BidStatus.PENDING.value, "amount": bid.amount},
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.expunge(bid)
        self.log_info(f"Bid {bid_id} withdrawn by user {self.actor.id}", bid_id=bid_id)
