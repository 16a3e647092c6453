import json

from sqlalchemy import func, select

from intake.models import Candidate, CandidatePreferredLocation


def test_root_and_health(client):
    assert client.get("/").json()["ok"] is True
    assert client.get("/health").json()["status"] == "OK"
    status = client.get("/api/status").json()
    assert status["status"] == "OK"
    assert status["database"]["dialect"] == "sqlite"


def test_end_to_end_submission(client, database, upload_dir, payload, post_application):
    response = post_application(payload)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert isinstance(body["candidateId"], int)
    assert body["resumeUrl"].startswith("http://testserver/uploads/")
    assert body["resumeUrl"].endswith("my_resume.pdf")
    assert body["academicsUrl"] is None
    assert len(list(upload_dir.iterdir())) == 1

    with database.session() as db:
        cand = db.get(Candidate, body["candidateId"])
        assert float(cand.aggregate_marks) == 95.46
        locations = db.execute(
            select(func.count()).select_from(CandidatePreferredLocation)
            .where(CandidatePreferredLocation.candidate_id == body["candidateId"])
        ).scalar_one()
        assert locations == 2

    stored = client.get(body["resumeUrl"].replace("http://testserver", ""))
    assert stored.status_code == 200
    assert stored.content.startswith(b"%PDF")


def test_fetch_candidate_by_id(client, payload, post_application):
    payload["techSkills"] = ["Python", "Others"]
    payload["otherTechSkills"] = "Rust, Go"
    candidate_id = post_application(payload, academics=True).json()["candidateId"]

    response = client.get(f"/candidate/{candidate_id}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["candidate_id"] == candidate_id
    assert data["fullName"] == "Jane Doe"
    assert data["dob"] == "2001-04-12"
    assert data["gender"] == "female"
    assert data["marks"] == 95.46
    assert data["expectedCTC"] == 12.5
    assert data["techSkills"] == ["Python", "Rust", "Go"]
    assert data["otherTechSkills"] == "Rust, Go"
    assert data["preferredLocations"] == ["Pune", "Remote"]
    assert data["languages"] == ["English", "Marathi"]
    assert data["academics"].endswith("marksheet.pdf")
    assert "linkedin" not in data


def test_fetch_candidate_summary(client, payload, post_application):
    candidate_id = post_application(payload).json()["candidateId"]

    data = client.get(f"/api/candidates/{candidate_id}").json()

    assert data["id"] == candidate_id
    assert data["mobileNumber"] == "9876543210"
    assert data["skills"] == ["Java"]
    assert data["preferredLocations"] == ["Pune", "Remote"]


def test_unknown_and_invalid_candidate_ids(client):
    missing = client.get("/candidate/999")
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "not_found", "message": "Candidate not found"}

    invalid = client.get("/candidate/not-a-number")
    assert invalid.status_code == 400
    assert invalid.json()["message"] == "Invalid candidate ID"


def test_duplicate_email_is_a_conflict(client, database, upload_dir, payload, post_application):
    assert post_application(payload).status_code == 201
    payload["fullName"] = "Jane Again"

    response = post_application(payload)

    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "conflict"
    assert body["field"] == "email"
    assert "Email" in body["message"]
    with database.session() as db:
        assert db.execute(select(func.count()).select_from(Candidate)).scalar_one() == 1
    # the second resume was removed again
    assert len(list(upload_dir.iterdir())) == 1


def test_validation_failure_touches_nothing(client, database, upload_dir, payload, post_application):
    payload["marks"] = "101"

    response = post_application(payload)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "validation_error"
    assert body["message"] == "Aggregate Marks/CGPA exceeds maximum allowed value (100)"
    assert list(upload_dir.iterdir()) == []
    with database.session() as db:
        assert db.execute(select(func.count()).select_from(Candidate)).scalar_one() == 0


def test_malformed_requests(client, payload, post_application):
    missing_resume = post_application(payload, resume=False)
    assert missing_resume.status_code == 400
    assert missing_resume.json()["message"] == "Resume file is required."

    bad_json = client.post(
        "/upload",
        data={"data": "{not json"},
        files={"resume": ("cv.pdf", b"%PDF-1.4", "application/pdf")},
    )
    assert bad_json.status_code == 400
    assert bad_json.json()["message"] == "Invalid form data."

    not_pdf = client.post(
        "/upload",
        data={"data": json.dumps(payload)},
        files={"resume": ("cv.docx", b"PK\x03\x04", "application/msword")},
    )
    assert not_pdf.status_code == 400
    assert not_pdf.json()["message"] == "Only PDF files are allowed!"


def test_oversized_resume_is_rejected(client, upload_dir, payload):
    big = b"%PDF-1.4" + b"0" * (10 * 1024 * 1024)

    response = client.post(
        "/upload",
        data={"data": json.dumps(payload)},
        files={"resume": ("cv.pdf", big, "application/pdf")},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "File too large. Maximum size: 10MB"
    assert list(upload_dir.iterdir()) == []


def test_list_candidates_paginates_most_recent_first(client, payload, post_application):
    for i in range(15):
        payload["email"] = f"user{i}@x.com"
        payload["fullName"] = f"User {i}"
        assert post_application(payload).status_code == 201

    first = client.get("/api/candidates", params={"page": 1, "limit": 10}).json()
    assert len(first["data"]) == 10
    assert first["data"][0]["email"] == "user14@x.com"
    assert first["pagination"] == {"currentPage": 1, "totalPages": 2, "totalCandidates": 15, "limit": 10}

    second = client.get("/api/candidates", params={"page": 2, "limit": 10}).json()
    assert len(second["data"]) == 5
    assert second["data"][-1]["email"] == "user0@x.com"


def test_list_candidates_filters(client, payload, post_application):
    for name, email in (("Jane Doe", "jane@x.com"), ("John Roe", "john@y.com")):
        payload.update(fullName=name, email=email)
        post_application(payload)

    by_email = client.get("/api/candidates", params={"email": "Y.COM"}).json()
    assert [c["fullName"] for c in by_email["data"]] == ["John Roe"]

    by_name = client.get("/api/candidates", params={"fullName": "jane"}).json()
    assert [c["email"] for c in by_name["data"]] == ["jane@x.com"]
    assert by_name["pagination"]["totalCandidates"] == 1


def test_list_candidates_rejects_bad_pagination(client):
    for params in ({"page": 0}, {"limit": 0}, {"page": "abc"}):
        response = client.get("/api/candidates", params=params)
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid pagination parameters"


def test_file_checks_run_before_field_validation(client, upload_dir, payload):
    payload["marks"] = "101"

    response = client.post(
        "/upload",
        data={"data": json.dumps(payload)},
        files={"resume": ("cv.docx", b"PK\x03\x04", "application/msword")},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "malformed_request"
    assert response.json()["message"] == "Only PDF files are allowed!"
    assert list(upload_dir.iterdir()) == []


def test_list_filters_treat_wildcards_literally(client, payload, post_application):
    for name, email in (("Jane_Doe", "jane@x.com"), ("JaneXDoe", "janex@x.com"), ("Ann 100%", "ann@x.com")):
        payload.update(fullName=name, email=email)
        post_application(payload)

    underscore = client.get("/api/candidates", params={"fullName": "e_D"}).json()
    assert [c["fullName"] for c in underscore["data"]] == ["Jane_Doe"]

    percent = client.get("/api/candidates", params={"fullName": "%"}).json()
    assert [c["fullName"] for c in percent["data"]] == ["Ann 100%"]
