import pytest

from portal.models import Role


@pytest.fixture
def hr(make_user):
    return make_user(Role.HR)


@pytest.fixture
def job(client, auth_headers, hr):
    resp = client.post("/api/recruitment/jobs", json={
        "title": "Loan Officer",
        "description": "Grow a microfinance collections portfolio",
        "branch": "Mombasa",
        "region": "Mombasa",
    }, headers=auth_headers(hr))
    assert resp.status_code == 201
    return resp.json()


def _applicant(job_id, **overrides):
    return {
        "job_id": job_id,
        "applicant_type": "EXTERNAL",
        "first_name": "Wanjiru",
        "last_name": "Kamau",
        "email": "wanjiru.kamau@gmail.com",
        "phone": "+254700000001",
        **overrides,
    }


def test_posting_jobs_requires_hiring_role(client, auth_headers, staff):
    payload = {"title": "Teller", "description": "Front desk cash handling"}

    assert client.post("/api/recruitment/jobs", json=payload).status_code == 401
    assert client.post("/api/recruitment/jobs", json=payload, headers=auth_headers(staff)).status_code == 403


def test_jobs_are_public(client, job):
    listed = client.get("/api/recruitment/jobs").json()
    assert [j["id"] for j in listed] == [job["id"]]

    assert client.get(f"/api/recruitment/jobs/{job['id']}").json()["title"] == "Loan Officer"
    assert client.get("/api/recruitment/jobs/999").status_code == 404


def test_apply_shortlists_strong_candidate(client, job):
    resp = client.post("/api/recruitment/applications/apply", json=_applicant(
        job["id"], resume_text="Five years in credit administration",
    ))

    assert resp.status_code == 201
    body = resp.json()
    assert body["score"] == 35
    assert body["decision"] == "SHORTLIST"
    assert body["application"]["status"] == "SHORTLISTED"
    assert body["application"]["reasons"] == body["reasons"]


def test_apply_review_stays_received(client, auth_headers, hr):
    job = client.post("/api/recruitment/jobs", json={
        "title": "Relationship Officer", "description": "Disburse group loans",
    }, headers=auth_headers(hr)).json()

    body = client.post("/api/recruitment/applications/apply", json=_applicant(job["id"])).json()

    assert body["decision"] == "REVIEW"
    assert body["application"]["status"] == "RECEIVED"


def test_apply_uses_job_rule_set(client, auth_headers, hr, job):
    assert client.get(f"/api/recruitment/jobs/{job['id']}/rules", headers=auth_headers(hr)).json() is None

    resp = client.put(f"/api/recruitment/jobs/{job['id']}/rules", json={
        "must_have": ["accounting"], "preferred": ["excel"],
        "shortlist_threshold": 25, "reject_threshold": 10,
    }, headers=auth_headers(hr))
    assert resp.status_code == 200

    body = client.post("/api/recruitment/applications/apply", json=_applicant(
        job["id"], resume_text="Credit and collections background",
    )).json()

    assert body["score"] == 0
    assert body["decision"] == "AUTO-REJECT"
    assert body["application"]["status"] == "REJECTED"

    body = client.post("/api/recruitment/applications/apply", json=_applicant(
        job["id"], email="otieno@gmail.com", resume_text="Accounting graduate, advanced Excel",
    )).json()

    assert body["score"] == 25
    assert body["application"]["status"] == "SHORTLISTED"


def test_rule_thresholds_must_be_ordered(client, auth_headers, hr, job):
    resp = client.put(f"/api/recruitment/jobs/{job['id']}/rules", json={
        "shortlist_threshold": 10, "reject_threshold": 20,
    }, headers=auth_headers(hr))

    assert resp.status_code == 422


def test_apply_validation(client, job):
    assert client.post(
        "/api/recruitment/applications/apply", json=_applicant(job["id"], email="not-an-email")
    ).status_code == 422
    assert client.post(
        "/api/recruitment/applications/apply", json=_applicant(job["id"], applicant_type="FRIEND")
    ).status_code == 422
    assert client.post("/api/recruitment/applications/apply", json=_applicant(999)).status_code == 404


def test_list_applications(client, auth_headers, hr, staff, job):
    client.post("/api/recruitment/applications/apply", json=_applicant(job["id"]))
    client.post("/api/recruitment/applications/apply", json=_applicant(
        job["id"], applicant_type="INTERNAL", email="staffer@gmail.com",
    ))

    assert client.get(f"/api/recruitment/applications/{job['id']}", headers=auth_headers(staff)).status_code == 403

    listed = client.get(f"/api/recruitment/applications/{job['id']}", headers=auth_headers(hr)).json()
    assert len(listed) == 2
    assert {a["applicant_type"] for a in listed} == {"INTERNAL", "EXTERNAL"}
