from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from gym_access.api.deps import get_db, get_login_ip_limiter, get_login_throttle
from gym_access.main import app
from gym_access.models import (
    Admin,
    AssignmentStatus,
    AssignmentType,
    AuditLog,
    Membership,
    MembershipStatus,
    PlanMode,
    Trainer,
    TrainerAssignment,
)
from gym_access.services.auth import create_access_token, hash_password
from gym_access.services.plan_period import add_months
from gym_access.services.rate_limit import InMemoryCounterStore, LoginThrottle, RateLimiter
from gym_access.utils.time import ensure_utc


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    throttle = LoginThrottle(InMemoryCounterStore(), max_attempts=2, window_seconds=900)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_login_throttle] = lambda: throttle
    app.dependency_overrides[get_login_ip_limiter] = lambda: RateLimiter(100, 60)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin(db_session):
    admin = Admin(email="owner@gym.test", password_hash=hash_password("s3cret-pass"), full_name="Owner")
    db_session.add(admin)
    db_session.commit()
    return admin


@pytest.fixture
def trainer(db_session):
    trainer = Trainer(id="trainer-1", name="Sam", user_id="trainer-user")
    db_session.add(trainer)
    db_session.commit()
    return trainer


def auth_header(subject: str, role: str) -> dict:
    token, _ = create_access_token(subject, role)
    return {"Authorization": f"Bearer {token}"}


def member_headers(user_id: str = "user-1") -> dict:
    return auth_header(user_id, "member")


def add_membership(db, **fields) -> Membership:
    now = datetime.now(timezone.utc)
    values = {
        "user_id": "user-1",
        "plan_name": "Premium",
        "plan_mode": PlanMode.online,
        "duration_months": 3,
        "status": MembershipStatus.active,
        "membership_start": now - timedelta(days=10),
        "membership_end": now + timedelta(days=80),
    }
    values.update(fields)
    membership = Membership(**values)
    db.add(membership)
    db.commit()
    return membership


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_admin_login(client, admin, db_session):
    response = client.post("/admin/login", json={"email": "Owner@Gym.test", "password": "s3cret-pass"})

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"
    assert db_session.query(AuditLog).filter(AuditLog.action == "admin_login").count() == 1


def test_admin_login_is_throttled(client, admin):
    for _ in range(2):
        response = client.post("/admin/login", json={"email": "owner@gym.test", "password": "wrong"})
        assert response.status_code == 401

    response = client.post("/admin/login", json={"email": "owner@gym.test", "password": "s3cret-pass"})

    assert response.status_code == 429


def test_member_routes_require_member_token(client, admin, db_session):
    membership = add_membership(db_session)

    assert client.get(f"/memberships/{membership.id}/renewal-eligibility").status_code == 401
    response = client.get(
        f"/memberships/{membership.id}/renewal-eligibility", headers=auth_header(str(admin.id), "admin")
    )
    assert response.status_code == 403


def test_renewal_eligibility_for_grace_period_membership(client, db_session):
    now = datetime.now(timezone.utc)
    membership = add_membership(
        db_session,
        status=MembershipStatus.grace_period,
        membership_end=now - timedelta(days=2),
        grace_period_end=now + timedelta(days=13),
    )

    response = client.get(f"/memberships/{membership.id}/renewal-eligibility", headers=member_headers())

    assert response.status_code == 200
    body = response.json()
    assert body["membership_renewal"]["is_eligible"] is True
    assert body["membership_renewal"]["grace_period_days_remaining"] == 13
    assert body["trainer_renewal"]["is_eligible"] is False
    assert body["badge"] == "membership_renewal"
    assert body["plan_type"] == "online"
    assert body["can_purchase_new_plan"] is False
    assert body["can_submit_payment"] is False
    assert body["max_trainer_renewal_days"] == 0


def test_renewal_eligibility_reports_plan_options(client, db_session):
    active = add_membership(db_session)
    awaiting = add_membership(
        db_session,
        plan_name="Regular Monthly",
        plan_mode=PlanMode.in_gym,
        status=MembershipStatus.awaiting_payment,
        membership_start=None,
        membership_end=None,
    )

    active_body = client.get(f"/memberships/{active.id}/renewal-eligibility", headers=member_headers()).json()
    awaiting_body = client.get(f"/memberships/{awaiting.id}/renewal-eligibility", headers=member_headers()).json()

    assert active_body["plan_type"] == "online"
    assert active_body["can_purchase_new_plan"] is True
    assert active_body["can_submit_payment"] is False
    assert active_body["max_trainer_renewal_days"] == 80
    assert awaiting_body["plan_type"] == "in_gym"
    assert awaiting_body["can_submit_payment"] is True
    assert awaiting_body["max_trainer_renewal_days"] is None


def test_renewal_eligibility_hides_other_members(client, db_session):
    membership = add_membership(db_session, user_id="someone-else")

    response = client.get(f"/memberships/{membership.id}/renewal-eligibility", headers=member_headers())

    assert response.status_code == 404


def test_trainer_messaging_access(client, db_session, trainer):
    now = datetime.now(timezone.utc)
    add_membership(
        db_session,
        trainer_assigned=True,
        trainer_id=trainer.id,
        trainer_period_end=now + timedelta(days=5),
    )

    allowed = client.get(f"/messages/trainer/{trainer.id}/access", headers=member_headers())
    other = client.get("/messages/trainer/trainer-9/access", headers=member_headers())

    assert allowed.status_code == 200
    assert allowed.json()["can_message"] is True
    assert other.json()["can_message"] is False
    assert "do not have an assigned trainer" in other.json()["reason"]


def test_trainer_messaging_blocked_in_grace(client, db_session, trainer):
    now = datetime.now(timezone.utc)
    add_membership(
        db_session,
        trainer_assigned=True,
        trainer_id=trainer.id,
        trainer_period_end=now - timedelta(days=1),
        trainer_grace_period_end=now + timedelta(days=4),
    )

    response = client.get(f"/messages/trainer/{trainer.id}/access", headers=member_headers())

    body = response.json()
    assert body["can_message"] is False
    assert body["is_in_grace_period"] is True


def test_trainer_renewal_request_and_approval(client, db_session, admin, trainer):
    now = datetime.now(timezone.utc)
    membership = add_membership(
        db_session,
        trainer_assigned=True,
        trainer_id=trainer.id,
        trainer_period_end=now - timedelta(days=1),
    )

    response = client.post(
        f"/memberships/{membership.id}/renew-trainer", json={"duration_months": 1}, headers=member_headers()
    )
    assert response.status_code == 201
    assert response.json()["status"] == "pending"
    assert response.json()["assignment_type"] == "renewal"

    duplicate = client.post(
        f"/memberships/{membership.id}/renew-trainer", json={"duration_months": 1}, headers=member_headers()
    )
    assert duplicate.status_code == 409

    approved = client.post(
        f"/admin/memberships/{membership.id}/approve-trainer-renewal",
        headers=auth_header(str(admin.id), "admin"),
    )
    assert approved.status_code == 200
    assert approved.json()["status"] == "assigned"

    db_session.refresh(membership)
    assert membership.trainer_assigned is True
    assert ensure_utc(membership.trainer_period_end) > now


def test_trainer_renewal_rejected_while_trainer_active(client, db_session, trainer):
    now = datetime.now(timezone.utc)
    membership = add_membership(
        db_session,
        trainer_assigned=True,
        trainer_id=trainer.id,
        trainer_period_end=now + timedelta(days=3),
    )

    response = client.post(
        f"/memberships/{membership.id}/renew-trainer", json={"duration_months": 1}, headers=member_headers()
    )

    assert response.status_code == 400
    assert "still active" in response.json()["detail"]


def test_reject_trainer_renewal(client, db_session, admin, trainer):
    now = datetime.now(timezone.utc)
    membership = add_membership(db_session)
    db_session.add(
        TrainerAssignment(
            membership_id=membership.id,
            trainer_id=trainer.id,
            user_id=membership.user_id,
            assignment_type=AssignmentType.renewal,
            status=AssignmentStatus.pending,
            period_start=now,
            period_end=now + timedelta(days=30),
            requested_by_user=True,
        )
    )
    db_session.commit()

    response = client.post(
        f"/admin/memberships/{membership.id}/reject-trainer-renewal",
        headers=auth_header(str(admin.id), "admin"),
    )

    assert response.status_code == 200
    assert response.json()["status"] == "rejected"


def test_approve_pending_membership_assigns_requested_trainer(client, db_session, admin, trainer):
    membership = add_membership(
        db_session,
        plan_name="Elite",
        status=MembershipStatus.pending,
        membership_start=None,
        membership_end=None,
        requested_trainer_id=trainer.id,
    )

    response = client.post(
        f"/admin/memberships/{membership.id}/approve", headers=auth_header(str(admin.id), "admin")
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "active"
    assert body["trainer_assigned"] is True
    assert body["trainer_id"] == trainer.id
    assert body["trainer_access"] == "active"


def test_approve_grace_period_membership_reactivates_row(client, db_session, admin):
    now = datetime.now(timezone.utc)
    membership = add_membership(
        db_session,
        status=MembershipStatus.grace_period,
        membership_end=now - timedelta(days=2),
        grace_period_end=now + timedelta(days=13),
    )

    before = datetime.now(timezone.utc)
    response = client.post(
        f"/admin/memberships/{membership.id}/approve", headers=auth_header(str(admin.id), "admin")
    )
    after = datetime.now(timezone.utc)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "active"
    assert body["grace_period_end"] is None
    assert body["can_submit_payment"] is False
    db_session.refresh(membership)
    assert add_months(before, 3) <= ensure_utc(membership.membership_end) <= add_months(after, 3)
    assert db_session.query(AuditLog).filter(AuditLog.action == "membership_reactivated").count() == 1


def test_approve_requires_pending_status(client, db_session, admin):
    membership = add_membership(db_session, status=MembershipStatus.rejected)

    response = client.post(
        f"/admin/memberships/{membership.id}/approve", headers=auth_header(str(admin.id), "admin")
    )

    assert response.status_code == 400


def test_reject_pending_membership(client, db_session, admin):
    membership = add_membership(db_session, status=MembershipStatus.pending)

    response = client.post(
        f"/admin/memberships/{membership.id}/reject",
        json={"reason": "Screenshot unreadable"},
        headers=auth_header(str(admin.id), "admin"),
    )

    assert response.status_code == 200
    assert response.json()["status"] == "rejected"


def test_assign_trainer_to_premium_membership(client, db_session, admin, trainer):
    membership = add_membership(db_session, membership_start=datetime.now(timezone.utc) - timedelta(days=1))

    response = client.post(
        f"/admin/memberships/{membership.id}/assign-trainer",
        json={"trainer_id": trainer.id},
        headers=auth_header(str(admin.id), "admin"),
    )

    assert response.status_code == 200
    assert response.json()["assignment_type"] == "included"
    db_session.refresh(membership)
    assert membership.trainer_id == trainer.id


def test_assign_unknown_trainer(client, db_session, admin):
    membership = add_membership(db_session)

    response = client.post(
        f"/admin/memberships/{membership.id}/assign-trainer",
        json={"trainer_id": "missing"},
        headers=auth_header(str(admin.id), "admin"),
    )

    assert response.status_code == 404


def test_list_memberships_with_badges(client, db_session, admin):
    now = datetime.now(timezone.utc)
    add_membership(
        db_session,
        status=MembershipStatus.grace_period,
        membership_end=now - timedelta(days=1),
        grace_period_end=now + timedelta(days=14),
    )
    add_membership(db_session, user_id="user-2")

    response = client.get("/admin/memberships", headers=auth_header(str(admin.id), "admin"))
    filtered = client.get(
        "/admin/memberships", params={"status": "grace_period"}, headers=auth_header(str(admin.id), "admin")
    )
    invalid = client.get("/admin/memberships", params={"status": "bogus"}, headers=auth_header(str(admin.id), "admin"))

    assert response.status_code == 200
    assert len(response.json()) == 2
    assert [item["badge"] for item in filtered.json()] == ["membership_renewal"]
    assert invalid.status_code == 400


def test_check_expiries_endpoint(client, db_session, admin):
    add_membership(db_session, membership_end=datetime.now(timezone.utc) - timedelta(hours=1))

    response = client.post("/admin/check-expiries", headers=auth_header(str(admin.id), "admin"))

    assert response.status_code == 200
    assert response.json()["entered_grace_period"] == 1


def test_admin_routes_reject_member_tokens(client):
    response = client.post("/admin/check-expiries", headers=member_headers())

    assert response.status_code == 403
