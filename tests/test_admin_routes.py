from datetime import datetime, timedelta

from sqlalchemy import text

from placement_portal.db.postgres import get_db_session


def test_admin_routes_reject_students(client, student_headers):
    assert client.get("/api/admin/stats", headers=student_headers).status_code == 403
    assert client.get("/api/admin/applications", headers=student_headers).status_code == 403


def test_kyc_verdict(client, admin_headers, seed_profile, mongo):
    seed_profile("student-7", kyc_status="PENDING")

    response = client.put(
        "/api/admin/profiles/student-7/kyc",
        json={"status": "REJECTED", "remarks": "Marks card unreadable"},
        headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["kyc_status"] == "REJECTED"
    assert response.json()["kyc_remarks"] == "Marks card unreadable"

    event = mongo["audit_events"].find_one({"event": "kyc_status_changed"})
    assert event["user_id"] == "student-7"
    assert event["details"]["previous"] == "PENDING"


def test_cannot_verify_incomplete_profile(client, admin_headers, seed_profile):
    seed_profile("student-7", is_complete=False, kyc_status="INCOMPLETE")
    response = client.put("/api/admin/profiles/student-7/kyc", json={"status": "VERIFIED"}, headers=admin_headers)
    assert response.status_code == 400


def test_admin_cannot_set_pending(client, admin_headers, seed_profile):
    seed_profile("student-7")
    response = client.put("/api/admin/profiles/student-7/kyc", json={"status": "PENDING"}, headers=admin_headers)
    assert response.status_code == 400


def test_kyc_for_unknown_profile_is_404(client, admin_headers):
    response = client.put("/api/admin/profiles/ghost/kyc", json={"status": "VERIFIED"}, headers=admin_headers)
    assert response.status_code == 404


def test_rejected_student_resubmits_into_queue(client, student_headers, seed_profile):
    seed_profile("student-1", kyc_status="REJECTED")
    final_kyc = {
        "final_cgpa": 8.4,
        "active_backlogs": True,
        "backlog_subjects": [{"code": "18MAT41", "title": "Complex Analysis"}],
        "branch_mentor_name": "Dr. Kumar",
        "linkedin": "https://www.linkedin.com/in/asha",
        "resume": "https://files.example.com/asha-v2.pdf",
    }
    response = client.put("/api/profile/steps/7", json=final_kyc, headers=student_headers)
    assert response.status_code == 200
    profile = response.json()["profile"]
    assert profile["kyc_status"] == "PENDING"
    assert profile["sections"]["kyc_details"]["backlog_subjects"] == final_kyc["backlog_subjects"]


def test_record_placement_locks_tiers(client, admin_headers, student_headers, seed_profile, create_job):
    seed_profile(cgpa=9.0)
    response = client.post(
        "/api/admin/placements",
        json={"user_id": "student-1", "company_name": "Umbrella", "tier": "TIER_1", "package_lpa": 24.0},
        headers=admin_headers
    )
    assert response.status_code == 201
    assert response.json()["student_name"] == "ASHA RAO"

    job = create_job(tier="TIER_1")
    apply = client.post("/api/applications", json={"job_id": job["job_id"]}, headers=student_headers)
    assert apply.status_code == 400
    assert "already placed in Tier 1" in apply.json()["detail"]

    listed = client.get("/api/admin/placements", params={"user_id": "student-1"}, headers=admin_headers).json()
    assert [p["company_name"] for p in listed] == ["Umbrella"]


def test_placement_for_unknown_student_is_404(client, admin_headers):
    response = client.post(
        "/api/admin/placements",
        json={"user_id": "ghost", "company_name": "Umbrella", "tier": "TIER_2"},
        headers=admin_headers
    )
    assert response.status_code == 404


def test_admin_application_filters(client, admin_headers, student_headers, seed_profile, create_job):
    seed_profile(cgpa=9.0)
    first = create_job(title="Role A")
    second = create_job(title="Role B")
    for job in (first, second):
        client.post("/api/applications", json={"job_id": job["job_id"]}, headers=student_headers)

    body = client.get("/api/admin/applications", params={"job_id": first["job_id"]}, headers=admin_headers).json()
    assert body["pagination"]["total"] == 1
    assert body["applications"][0]["job_title"] == "Role A"

    body = client.get("/api/admin/applications", params={"status": "SHORTLISTED"}, headers=admin_headers).json()
    assert body["applications"] == []


def test_dashboard_stats(client, admin_headers, student_headers, seed_profile, seed_placement, create_job):
    seed_profile("student-1", kyc_status="VERIFIED", cgpa=9.0)
    seed_profile("student-2", kyc_status="PENDING", branch="ECE")
    seed_profile("student-3", kyc_status="VERIFIED", branch="ECE")
    seed_placement("student-3", tier="TIER_2")
    job = create_job()
    create_job(status="CLOSED")
    application_id = client.post(
        "/api/applications", json={"job_id": job["job_id"]}, headers=student_headers
    ).json()["application"]["application_id"]

    with get_db_session() as db:
        db.execute(
            text("INSERT INTO interview_schedules (application_id, user_id, scheduled_at) VALUES (:a, :u, :t)"),
            {"a": application_id, "u": "student-1", "t": datetime.utcnow() + timedelta(days=2)}
        )

    stats = client.get("/api/admin/stats", headers=admin_headers).json()
    assert stats["total_students"] == 3
    assert stats["verified_students"] == 2
    assert stats["pending_verifications"] == 1
    assert stats["active_jobs"] == 1
    assert stats["total_applications"] == 1
    assert stats["placed_students"] == 1
    assert stats["upcoming_interviews"] == 1
    assert stats["branch_wise_verified"] == {"CSE": 1, "ECE": 1}
    assert stats["tier_wise_placements"] == {"TIER_1": 0, "TIER_2": 1, "TIER_3": 0}

    interviews = client.get("/api/admin/interviews", headers=admin_headers).json()
    assert len(interviews) == 1
    assert interviews[0]["company_name"] == "Globex"


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["postgres"] == "connected"
