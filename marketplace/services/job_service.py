from dataclasses import dataclass
from datetime import datetime, timezone
from typing import FrozenSet, Iterator, List, Optional

from sqlalchemy.orm import Query

from marketplace.core.exceptions import AccessDeniedError, NotFoundError, ValidationError
from marketplace.core.security import sanitize_payload
from marketplace.models.job import Job, JobStatus
from marketplace.models.notification import NotificationType
from marketplace.models.user import User, UserRole
from marketplace.schemas.job import JobCreate
from marketplace.services.audit import AuditService
from marketplace.services.base import BaseService
from marketplace.services.lifecycle import (
    check_job_transition,
    is_terminal_job_status,
    validate_job_input,
)
from marketplace.services.notification import NotificationService

RECENT_PROJECTS_LIMIT = 10


@dataclass(frozen=True)
class JobFilter:
    employer_id: Optional[int] = None
    freelancer_id: Optional[int] = None
    status: Optional[JobStatus] = None
    statuses: Optional[FrozenSet[JobStatus]] = None
    exclude_employer_id: Optional[int] = None

    @classmethod
    def marketplace(cls) -> "JobFilter":
        return cls(status=JobStatus.OPEN)

    @classmethod
    def for_user(cls, user: User) -> "JobFilter":
        """Open jobs a user may browse; freelancers and hybrids don't see their own postings."""
        if user.is_freelancer:
            return cls(status=JobStatus.OPEN, exclude_employer_id=user.id)
        return cls(status=JobStatus.OPEN)

    @classmethod
    def projects_of(cls, freelancer_id: int) -> "JobFilter":
        """Jobs awarded to a freelancer that are under way or closed."""
        return cls(
            freelancer_id=freelancer_id,
            statuses=frozenset({JobStatus.IN_PROGRESS, JobStatus.CLOSED}),
        )


class JobService(BaseService):
    """Job postings: creation, listing and employer-driven status changes."""

    def create_job(self, job_in: JobCreate) -> Job:
        if self.actor is None or not self.actor.is_employer:
            raise AccessDeniedError("Only employers can post jobs")

        # Lengths are checked on what the user typed, then again after script
        # blocks are stripped; the escaped form is what gets stored
        raw = job_in.model_dump(by_alias=True)
        form = sanitize_payload(raw)
        errors = validate_job_input(raw) or validate_job_input(form)
        if errors:
            self.log_warning("Job creation rejected", fields=sorted(errors))
            raise ValidationError(errors)

        job = Job(
            title=form["title"],
            description=form["description"],
            budget_min=form["budget"]["min"],
            budget_max=form["budget"]["max"],
            categories=[c for c in form["categories"] if c],
            skills_required=[s for s in form["skillsRequired"] if s],
            status=JobStatus.OPEN.value,
            bid_accepted=False,
            employer_id=self.actor.id,
        )
        self.db.add(job)
        self.db.flush()

        AuditService(self.db, self.actor).log_action(
            action="create_job",
            entity_type="job",
            entity_id=job.id,
            details={"title": job.title},
            after_state=job.snapshot(),
        )
        self._notify_matching_freelancers(job)
        self.commit()
        self.db.refresh(job)

        self.log_info(f"Job {job.id} created by user {self.actor.id}", job_id=job.id)
        return job

    def _notify_matching_freelancers(self, job: Job) -> None:
        wanted = {s.lower() for s in job.skills_required}
        candidates = self.db.query(User).filter(
            User.role.in_([UserRole.FREELANCER, UserRole.HYBRID]),
            User.is_active == True,  # noqa: E712
            User.id != job.employer_id,
        ).all()
        # Skills live in a JSON column, so the overlap test runs here rather than in SQL
        matching = [u.id for u in candidates if wanted & {s.lower() for s in (u.skills or [])}]
        if not matching:
            return
        NotificationService.notify_many(
            self.db,
            matching,
            title="New Job Matching Your Skills",
            message=f"New job posted: {job.title} - Budget: ${job.budget_min:g}-${job.budget_max:g}",
            type=NotificationType.JOB,
            related_id=job.id,
            on_model="Job",
            link=f"/jobs/{job.id}",
        )
        self.log_info(f"Notified {len(matching)} matching freelancers about job {job.id}")

    def _query(self, job_filter: JobFilter) -> Query:
        query = self.db.query(Job)
        if job_filter.employer_id is not None:
            query = query.filter(Job.employer_id == job_filter.employer_id)
        if job_filter.freelancer_id is not None:
            query = query.filter(Job.freelancer_id == job_filter.freelancer_id)
        if job_filter.status is not None:
            query = query.filter(Job.status == JobStatus(job_filter.status).value)
        if job_filter.statuses:
            query = query.filter(Job.status.in_([JobStatus(s).value for s in job_filter.statuses]))
        if job_filter.exclude_employer_id is not None:
            query = query.filter(Job.employer_id != job_filter.exclude_employer_id)
        return query

    def list_jobs(self, job_filter: Optional[JobFilter] = None) -> Iterator[Job]:
        """
        Yield jobs matching `job_filter`, most recent first.

        The query runs on first iteration and the result is a snapshot; each
        call returns a fresh one-shot iterator.
        """
        query = self._query(job_filter or JobFilter())
        yield from query.order_by(Job.created_at.desc(), Job.id.desc()).all()

    def recent_projects(self, freelancer_id: int, limit: int = RECENT_PROJECTS_LIMIT) -> List[Job]:
        """The freelancer's awarded jobs, most recently changed first."""
        return (
            self._query(JobFilter.projects_of(freelancer_id))
            .order_by(Job.updated_at.desc(), Job.id.desc())
            .limit(limit)
            .all()
        )

    def get_job(self, job_id: int) -> Job:
        job = self.db.get(Job, job_id)
        if not job:
            raise NotFoundError("Job", job_id)
        return job

    def update_job_status(self, job_id: int, new_status: JobStatus) -> Job:
        job = self.get_job(job_id)
        if self.actor is None or job.employer_id != self.actor.id:
            raise AccessDeniedError("Only the job's employer can change its status")

        before_state = job.snapshot()
        target = check_job_transition(job.status, new_status)

        job.status = target.value
        job.updated_at = datetime.now(timezone.utc)
        final = is_terminal_job_status(target.value)

        AuditService(self.db, self.actor).log_action(
            action="update_job_status",
            entity_type="job",
            entity_id=job.id,
            details={"status": target.value, "final": final},
            before_state=before_state,
            after_state=job.snapshot(),
        )
        self.commit()
        self.db.refresh(job)

        self.log_info(
            f"Job {job.id} moved {before_state['status']} -> {target.value}",
            job_id=job.id,
            final=final,
        )
        return job
