from placement_portal.core.auth import create_access_token
from placement_portal.schemas.schemas import UserRole


def test_students_cannot_post_jobs(client, student_headers):
    response = client.post("/api/jobs", json={"title": "SDE", "company_name": "Globex"}, headers=student_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Admin access required"


def test_role_claim_in_token_is_ignored(client):
    token = create_access_token({"sub": "student-9", "role": "ADMIN"})
    response = client.post(
        "/api/jobs", json={"title": "SDE", "company_name": "Globex"},
        headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 403


def test_create_job_with_branches(create_job):
    job = create_job(allowed_branches=["ISE", "CSE", "CSE"])
    assert job["allowed_branches"] == ["CSE", "ISE"]
    assert job["tier"] == "TIER_2"
    assert job["status"] == "ACTIVE"
    assert job["application_count"] == 0


def test_invalid_job_body_is_400(client, admin_headers):
    response = client.post("/api/jobs", json={"title": "SD", "company_name": "Globex"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert response.json()["detail"].startswith("title:")


def test_listing_attaches_eligibility(client, student_headers, seed_profile, create_job):
    seed_profile(cgpa=7.0)
    create_job(title="Backend Engineer")
    create_job(title="Support Engineer", min_cgpa=None, tier="TIER_3")

    body = client.get("/api/jobs", headers=student_headers).json()
    assert body["total"] == 2
    by_title = {job["title"]: job for job in body["jobs"]}
    assert by_title["Support Engineer"]["eligibility"] == {"eligible": True, "reason": None}
    backend = by_title["Backend Engineer"]["eligibility"]
    assert backend["eligible"] is False
    assert "Your CGPA: 7.00" in backend["reason"]


def test_students_only_see_active_visible_jobs(client, student_headers, admin_headers, create_job):
    create_job(title="Open Role")
    create_job(title="Draft Role", status="DRAFT")
    hidden = create_job(title="Hidden Role")
    client.put(f"/api/jobs/{hidden['job_id']}", json={"is_visible": False}, headers=admin_headers)

    titles = [job["title"] for job in client.get("/api/jobs", headers=student_headers).json()["jobs"]]
    assert titles == ["Open Role"]

    admin_titles = {job["title"] for job in client.get("/api/jobs", headers=admin_headers).json()["jobs"]}
    assert admin_titles == {"Open Role", "Draft Role", "Hidden Role"}


def test_search_and_pagination(client, student_headers, create_job):
    for i in range(3):
        create_job(title=f"Analyst {i}", company_name="Initech")
    create_job(title="Designer", company_name="Hooli")

    body = client.get("/api/jobs", params={"search": "initech", "page_size": 2}, headers=student_headers).json()
    assert body["total"] == 3
    assert len(body["jobs"]) == 2

    page_2 = client.get("/api/jobs", params={"search": "initech", "page_size": 2, "page": 2}, headers=student_headers).json()
    assert len(page_2["jobs"]) == 1


def test_job_detail(client, student_headers, seed_profile, create_job):
    seed_profile(cgpa=9.1)
    job = create_job()
    body = client.get(f"/api/jobs/{job['job_id']}", headers=student_headers).json()
    assert body["job"]["job_id"] == job["job_id"]
    assert body["has_applied"] is False
    assert body["profile_complete"] is True
    assert body["eligibility"]["eligible"] is True


def test_unknown_job_is_404(client, student_headers):
    response = client.get("/api/jobs/999", headers=student_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Job not found"


def test_update_job_replaces_branches(client, admin_headers, create_job):
    job = create_job()
    response = client.put(
        f"/api/jobs/{job['job_id']}",
        json={"allowed_branches": [], "min_cgpa": 6.0, "status": "CLOSED"},
        headers=admin_headers
    )
    assert response.status_code == 200
    body = response.json()
    assert body["allowed_branches"] == []
    assert body["min_cgpa"] == 6.0
    assert body["status"] == "CLOSED"


def test_update_unknown_job_is_404(client, admin_headers):
    response = client.put("/api/jobs/42", json={"title": "Renamed role"}, headers=admin_headers)
    assert response.status_code == 404


def test_concurrent_first_request_uses_provisioned_row(client, insert_first):
    fired = insert_first(
        "INSERT INTO users",
        "INSERT INTO users (user_id, email, role) VALUES ('newbie', 'newbie@gmail.com', 'ADMIN')"
    )
    token = create_access_token({"sub": "newbie", "email": "newbie@gmail.com"})
    headers = {"Authorization": f"Bearer {token}"}

    response = client.post("/api/jobs", json={"title": "SDE", "company_name": "Globex"}, headers=headers)

    assert fired
    assert response.status_code == 201, response.text


def test_roles_are_student_and_admin():
    assert {role.value for role in UserRole} == {"STUDENT", "ADMIN"}


def test_unknown_tier_filter_rejected(client, student_headers):
    response = client.get("/api/jobs", params={"tier": "TIER_9"}, headers=student_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
