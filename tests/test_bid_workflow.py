import pytest

from marketplace.models.bid import Bid
from marketplace.models.job import Job
from marketplace.models.notification import Notification
from tests.payloads import LANDING_PAGE_JOB


def _bid(client, job_id, user_headers, amount, **extra):
    return client.post(f"/api/jobs/{job_id}/bid", json={"amount": amount, **extra}, headers=user_headers)


def test_landing_page_scenario(client, open_job, employer, freelancer, auth_headers):
    """Post job, bid below budget, bid within budget, accept."""
    assert open_job["status"] == "open"
    job_id = open_job["id"]

    too_low = _bid(client, job_id, auth_headers(freelancer), 50)
    assert too_low.status_code == 400
    assert too_low.json()["errors"][0]["code"] == "OUT_OF_RANGE"

    placed = _bid(client, job_id, auth_headers(freelancer), 300, proposalText="I can ship this in a week.")
    assert placed.status_code == 201
    bid = placed.json()["bid"]
    assert bid["status"] == "pending"
    assert bid["proposalText"] == "I can ship this in a week."
    assert bid["freelancerId"] == freelancer.id

    accepted = client.put(f"/api/bids/accept/{bid['id']}", headers=auth_headers(employer))
    assert accepted.status_code == 200
    job = accepted.json()["job"]
    assert job["status"] == "in-progress"
    assert job["bidAccepted"] is True
    assert job["freelancerId"] == freelancer.id

    detail = client.get(f"/api/bids/bid/{bid['id']}", headers=auth_headers(freelancer))
    assert detail.json()["data"]["status"] == "accepted"

def test_bid_on_closed_job_fails(client, open_job, employer, freelancer, auth_headers):
    client.put(f"/api/jobs/{open_job['id']}", json={"status": "closed"}, headers=auth_headers(employer))

    response = _bid(client, open_job["id"], auth_headers(freelancer), 300)
    assert response.status_code == 409
    assert response.json()["errors"][0]["code"] == "INVALID_STATE"

def test_closed_job_checked_before_amount(client, open_job, employer, freelancer, auth_headers):
    client.put(f"/api/jobs/{open_job['id']}", json={"status": "closed"}, headers=auth_headers(employer))
    response = _bid(client, open_job["id"], auth_headers(freelancer), 5)
    assert response.json()["errors"][0]["code"] == "INVALID_STATE"

@pytest.mark.parametrize("amount", [100, 500])
def test_budget_bounds_are_inclusive(client, open_job, freelancer, auth_headers, amount):
    assert _bid(client, open_job["id"], auth_headers(freelancer), amount).status_code == 201

def test_bid_above_budget(client, open_job, freelancer, auth_headers):
    assert _bid(client, open_job["id"], auth_headers(freelancer), 501).status_code == 400

def test_bid_on_missing_job(client, freelancer, auth_headers):
    assert _bid(client, 9999, auth_headers(freelancer), 300).status_code == 404

def test_employer_cannot_bid(client, open_job, employer, auth_headers):
    assert _bid(client, open_job["id"], auth_headers(employer), 300).status_code == 403

def test_hybrid_cannot_bid_on_own_job(client, hybrid, auth_headers):
    job = client.post("/api/jobs/create", json=LANDING_PAGE_JOB, headers=auth_headers(hybrid)).json()
    assert _bid(client, job["id"], auth_headers(hybrid), 300).status_code == 403

def test_new_bid_notifies_employer(client, open_job, employer, freelancer, auth_headers, db_session):
    bid = _bid(client, open_job["id"], auth_headers(freelancer), 300).json()["bid"]
    notification = db_session.query(Notification).filter(
        Notification.user_id == employer.id,
        Notification.type == "bid",
    ).one()
    assert notification.related_id == bid["id"]
    assert notification.on_model == "Bid"

def test_accept_rejects_other_pending_bids(client, open_job, employer, freelancer, other_freelancer, hybrid, auth_headers, db_session):
    job_id = open_job["id"]
    winner = _bid(client, job_id, auth_headers(freelancer), 300).json()["bid"]
    loser_a = _bid(client, job_id, auth_headers(other_freelancer), 250).json()["bid"]
    loser_b = _bid(client, job_id, auth_headers(hybrid), 400).json()["bid"]

    response = client.put(f"/api/bids/accept/{winner['id']}", headers=auth_headers(employer))
    assert response.status_code == 200

    statuses = {b["id"]: b["status"] for b in client.get(f"/api/bids/{job_id}").json()}
    assert statuses == {winner["id"]: "accepted", loser_a["id"]: "rejected", loser_b["id"]: "rejected"}

    accepted = db_session.query(Bid).filter(Bid.job_id == job_id, Bid.status == "accepted").count()
    assert accepted == 1

    award = db_session.query(Notification).filter(
        Notification.user_id == freelancer.id, Notification.type == "job_award"
    ).one()
    assert award.related_id == job_id
    assert db_session.query(Notification).filter(
        Notification.user_id == other_freelancer.id, Notification.related_id == loser_a["id"]
    ).count() == 1

def test_second_acceptance_fails(client, open_job, employer, freelancer, other_freelancer, auth_headers):
    job_id = open_job["id"]
    first = _bid(client, job_id, auth_headers(freelancer), 300).json()["bid"]
    second = _bid(client, job_id, auth_headers(other_freelancer), 250).json()["bid"]

    assert client.put(f"/api/bids/accept/{first['id']}", headers=auth_headers(employer)).status_code == 200
    response = client.put(f"/api/bids/accept/{second['id']}", headers=auth_headers(employer))
    assert response.status_code == 409
    assert response.json()["errors"][0]["code"] == "INVALID_TRANSITION"

def test_accept_on_job_moved_on_without_bid(client, open_job, employer, freelancer, auth_headers, db_session):
    bid = _bid(client, open_job["id"], auth_headers(freelancer), 300).json()["bid"]
    client.put(f"/api/jobs/{open_job['id']}", json={"status": "in-progress"}, headers=auth_headers(employer))

    response = client.put(f"/api/bids/accept/{bid['id']}", headers=auth_headers(employer))
    assert response.status_code == 409
    assert response.json()["errors"][0]["code"] == "INVALID_STATE"
    assert db_session.get(Job, open_job["id"]).bid_accepted is False

def test_only_job_owner_decides(client, open_job, freelancer, hybrid, auth_headers):
    bid = _bid(client, open_job["id"], auth_headers(freelancer), 300).json()["bid"]
    assert client.put(f"/api/bids/accept/{bid['id']}", headers=auth_headers(hybrid)).status_code == 403
    assert client.put(f"/api/bids/accept/{bid['id']}", headers=auth_headers(freelancer)).status_code == 403

def test_reject_bid(client, open_job, employer, freelancer, auth_headers):
    bid = _bid(client, open_job["id"], auth_headers(freelancer), 300).json()["bid"]

    response = client.put(f"/api/bids/reject/{bid['id']}", headers=auth_headers(employer))
    assert response.status_code == 200
    assert response.json()["bid"]["status"] == "rejected"

    job = client.get(f"/api/jobs/{open_job['id']}").json()
    assert job["status"] == "open"
    assert job["bidAccepted"] is False

    # Rejection is terminal
    again = client.put(f"/api/bids/accept/{bid['id']}", headers=auth_headers(employer))
    assert again.status_code == 409

def test_set_bid_status_endpoint(client, open_job, employer, freelancer, auth_headers):
    bid = _bid(client, open_job["id"], auth_headers(freelancer), 300).json()["bid"]
    headers = auth_headers(employer)

    assert client.put(f"/api/bids/{bid['id']}/status", json={"status": "pending"}, headers=headers).status_code == 409

    response = client.put(f"/api/bids/{bid['id']}/status", json={"status": "accepted"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "accepted"

def test_bids_for_job_ordering(client, open_job, freelancer, other_freelancer, auth_headers):
    first = _bid(client, open_job["id"], auth_headers(freelancer), 200).json()["bid"]
    second = _bid(client, open_job["id"], auth_headers(other_freelancer), 300).json()["bid"]

    oldest_first = [b["id"] for b in client.get(f"/api/bids/{open_job['id']}").json()]
    newest_first = [b["id"] for b in client.get(f"/api/bids/{open_job['id']}?order=desc").json()]
    assert oldest_first == [first["id"], second["id"]]
    assert newest_first == [second["id"], first["id"]]

def test_bids_for_missing_job(client):
    assert client.get("/api/bids/9999").status_code == 404

def test_bids_by_user_and_recent(client, employer, freelancer, auth_headers):
    headers = auth_headers(employer)
    job_a = client.post("/api/jobs/create", json=LANDING_PAGE_JOB, headers=headers).json()
    job_b = client.post("/api/jobs/create", json={**LANDING_PAGE_JOB, "title": "Another landing page"}, headers=headers).json()
    bid_a = _bid(client, job_a["id"], auth_headers(freelancer), 150).json()["bid"]
    bid_b = _bid(client, job_b["id"], auth_headers(freelancer), 450).json()["bid"]

    page = client.get(f"/api/bids/user/{freelancer.id}", headers=headers).json()
    assert page["count"] == 2
    assert [b["id"] for b in page["data"]] == [bid_b["id"], bid_a["id"]]

    recent = client.get("/api/bids/recent/bid", headers=auth_headers(freelancer)).json()
    assert [b["id"] for b in recent["recentBids"]] == [bid_b["id"], bid_a["id"]]

    assert client.get("/api/bids/recent/bid", headers=headers).json() == {"recentBids": []}

def test_get_missing_bid(client, freelancer, auth_headers):
    assert client.get("/api/bids/bid/9999", headers=auth_headers(freelancer)).status_code == 404

def test_delete_bid(client, open_job, employer, freelancer, other_freelancer, auth_headers):
    bid = _bid(client, open_job["id"], auth_headers(freelancer), 300).json()["bid"]

    assert client.delete(f"/api/bids/{bid['id']}", headers=auth_headers(other_freelancer)).status_code == 403

    response = client.delete(f"/api/bids/{bid['id']}", headers=auth_headers(freelancer))
    assert response.status_code == 200
    assert client.get(f"/api/bids/bid/{bid['id']}", headers=auth_headers(freelancer)).status_code == 404

def test_decided_bid_cannot_be_withdrawn(client, open_job, employer, freelancer, auth_headers):
    bid = _bid(client, open_job["id"], auth_headers(freelancer), 300).json()["bid"]
    client.put(f"/api/bids/accept/{bid['id']}", headers=auth_headers(employer))

    response = client.delete(f"/api/bids/{bid['id']}", headers=auth_headers(freelancer))
    assert response.status_code == 409

@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_bid_amount_rejected(client, open_job, freelancer, auth_headers, db_session, literal):
    headers = {**auth_headers(freelancer), "Content-Type": "application/json"}
    response = client.post(f"/api/jobs/{open_job['id']}/bid", content=f'{{"amount": {literal}}}', headers=headers)
    assert response.status_code == 422
    assert response.json()["errors"][0]["field"] == "amount"
    assert db_session.query(Bid).count() == 0

def test_bid_details(client, open_job, employer, freelancer, auth_headers):
    bid = _bid(client, open_job["id"], auth_headers(freelancer), 300).json()["bid"]

    response = client.get(f"/api/bids/{bid['id']}/details", headers=auth_headers(employer))
    assert response.status_code == 200
    detail = response.json()["bid"]
    assert detail["id"] == bid["id"]
    assert detail["freelancer"] == {"id": freelancer.id, "name": "Alice", "username": "alice"}
    assert detail["job"] == {"id": open_job["id"], "title": LANDING_PAGE_JOB["title"]}

    assert client.get("/api/bids/9999/details", headers=auth_headers(employer)).status_code == 404
