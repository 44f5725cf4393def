"""
Job and bid lifecycle rules.

Pure functions only: nothing here touches the database, so the same rules
back the services, the request handlers and the unit tests.

Job:  open -> in-progress -> completed
      open | in-progress -> closed
Bid:  pending -> accepted | rejected
"""
import math
from typing import Any, Dict, FrozenSet, Mapping

from marketplace.core.exceptions import (
    InvalidStateError,
    InvalidTransitionError,
    OutOfRangeError,
    ValidationError,
)
from marketplace.models.bid import BidStatus
from marketplace.models.job import JobStatus

MIN_TITLE_LENGTH = 5
MIN_DESCRIPTION_LENGTH = 20

JOB_TRANSITIONS: Mapping[JobStatus, FrozenSet[JobStatus]] = {
    JobStatus.OPEN: frozenset({JobStatus.IN_PROGRESS, JobStatus.CLOSED}),
    JobStatus.IN_PROGRESS: frozenset({JobStatus.COMPLETED, JobStatus.CLOSED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.CLOSED: frozenset(),
}

BID_TRANSITIONS: Mapping[BidStatus, FrozenSet[BidStatus]] = {
    BidStatus.PENDING: frozenset({BidStatus.ACCEPTED, BidStatus.REJECTED}),
    BidStatus.ACCEPTED: frozenset(),
    BidStatus.REJECTED: frozenset(),
}


def is_terminal_job_status(status: str) -> bool:
    return not JOB_TRANSITIONS[JobStatus(status)]


def validate_job_input(data: Mapping[str, Any]) -> Dict[str, str]:
    """
    Check a job posting form.

    `data` uses the form's field names: title, description, budget ({min, max}),
    categories, skillsRequired. Returns a map of field name to message; an
    empty map means the input is acceptable.
    """
    errors: Dict[str, str] = {}

    title = (data.get("title") or "").strip()
    if len(title) < MIN_TITLE_LENGTH:
        errors["title"] = f"Title must be at least {MIN_TITLE_LENGTH} characters"

    description = (data.get("description") or "").strip()
    if len(description) < MIN_DESCRIPTION_LENGTH:
        errors["description"] = f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters"

    budget = data.get("budget") or {}
    budget_min = budget.get("min")
    budget_max = budget.get("max")
    if budget_min is None:
        errors["budgetMin"] = "Minimum budget is required"
    elif not math.isfinite(budget_min):
        errors["budgetMin"] = "Minimum budget must be a finite number"
    elif budget_min < 0:
        errors["budgetMin"] = "Minimum budget cannot be negative"
    if budget_max is None:
        errors["budgetMax"] = "Maximum budget is required"
    elif not math.isfinite(budget_max):
        errors["budgetMax"] = "Maximum budget must be a finite number"
    elif "budgetMin" not in errors and budget_max <= budget_min:
        errors["budgetMax"] = "Maximum budget must be greater than minimum budget"

    if not [c for c in data.get("categories") or [] if c and c.strip()]:
        errors["categories"] = "Select at least one category"

    if not [s for s in data.get("skillsRequired") or [] if s and s.strip()]:
        errors["skillsRequired"] = "Add at least one required skill"

    return errors


def check_job_transition(current: str, requested: str) -> JobStatus:
    """Return the requested status if the edge is allowed, else raise InvalidTransitionError."""
    current_status = JobStatus(current)
    requested_status = JobStatus(requested)
    if requested_status not in JOB_TRANSITIONS[current_status]:
        raise InvalidTransitionError("job", current_status.value, requested_status.value)
    return requested_status


def check_bid_transition(current: str, requested: str) -> BidStatus:
    current_status = BidStatus(current)
    requested_status = BidStatus(requested)
    if requested_status not in BID_TRANSITIONS[current_status]:
        raise InvalidTransitionError("bid", current_status.value, requested_status.value)
    return requested_status


def ensure_open_for_bids(job_status: str) -> None:
    if JobStatus(job_status) != JobStatus.OPEN:
        raise InvalidStateError(
            "Job is not open for bids",
            details={"status": JobStatus(job_status).value},
        )


def check_bid_amount(amount: float, budget_min: float, budget_max: float) -> None:
    if not math.isfinite(amount):
        raise ValidationError({"amount": "Bid amount must be a finite number"})
    # Closed interval: both budget bounds are acceptable bids
    if amount < budget_min or amount > budget_max:
        raise OutOfRangeError(amount, budget_min, budget_max)
