from schemas.user import Role

from conftest import DEFAULT_PASSWORD

PREFIX = "/api/v1"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_missing_token(client):
    response = client.get(f"{PREFIX}/auth/me")
    assert response.status_code == 401
    assert response.json() == {"detail": "Access token required"}


def test_invalid_token(client):
    response = client.get(f"{PREFIX}/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid or expired token"}


def test_register_login_me(client):
    payload = {
        "email": "Jane@School.edu",
        "password": "password1",
        "first_name": "Jane",
        "last_name": "Doe",
        "role": "TEACHER",
    }
    response = client.post(f"{PREFIX}/auth/register", json=payload)
    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "jane@school.edu"
    assert "password_hash" not in body["user"]

    duplicate = client.post(f"{PREFIX}/auth/register", json=payload)
    assert duplicate.status_code == 400
    assert duplicate.json() == {"detail": "User with this email already exists"}

    login = client.post(
        f"{PREFIX}/auth/login", json={"email": "jane@school.edu", "password": "password1"}
    )
    assert login.status_code == 200
    access = login.json()["tokens"]["access_token"]

    me = client.get(f"{PREFIX}/auth/me", headers={"Authorization": f"Bearer {access}"})
    assert me.status_code == 200
    assert me.json()["full_name"] == "Jane Doe"


def test_refresh_endpoint(client, student):
    login = client.post(
        f"{PREFIX}/auth/login", json={"email": student.email, "password": DEFAULT_PASSWORD}
    )
    tokens = login.json()["tokens"]

    refreshed = client.post(f"{PREFIX}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["access_token"]

    rejected = client.post(f"{PREFIX}/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert rejected.status_code == 401


def test_forgot_password_does_not_reveal_accounts(client, mailer, student):
    known = client.post(f"{PREFIX}/auth/forgot-password", json={"email": student.email})
    unknown = client.post(f"{PREFIX}/auth/forgot-password", json={"email": "ghost@school.edu"})
    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert len(mailer.sent) == 1


def test_role_gates(client, auth_header, student, teacher, admin):
    response = client.get(f"{PREFIX}/users", headers=auth_header(teacher))
    assert response.status_code == 403
    assert response.json() == {"detail": "Insufficient permissions"}

    payload = {"name": "Grade 9", "section": "A", "year": 2024, "class_teacher_id": teacher.user_id}
    assert client.post(f"{PREFIX}/classes", json=payload, headers=auth_header(student)).status_code == 403
    created = client.post(f"{PREFIX}/classes", json=payload, headers=auth_header(admin))
    assert created.status_code == 201

    class_id = created.json()["class_id"]
    deleted = client.delete(f"{PREFIX}/classes/{class_id}", headers=auth_header(teacher))
    assert deleted.status_code == 403


def test_pagination_envelope(client, auth_header, admin, make_user):
    for _ in range(3):
        make_user(Role.STUDENT)
    response = client.get(
        f"{PREFIX}/users",
        params={"role": "STUDENT", "limit": 2, "page": 2},
        headers=auth_header(admin),
    )
    assert response.status_code == 200
    body = response.json()
    assert len(body["items"]) == 1
    assert body["pagination"] == {
        "page": 2,
        "limit": 2,
        "total": 3,
        "pages": 2,
        "has_next": False,
        "has_prev": True,
    }


def test_business_errors_use_detail_shape(client, auth_header, teacher, school_class, make_user):
    parent = make_user(Role.PARENT)
    response = client.post(
        f"{PREFIX}/classes/{school_class.class_id}/students",
        json={"student_id": parent.user_id},
        headers=auth_header(teacher),
    )
    assert response.status_code == 400
    assert response.json() == {"detail": "User must have STUDENT role"}

    missing = client.get(f"{PREFIX}/classes/does-not-exist", headers=auth_header(teacher))
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Class not found"}


def test_grade_flow(client, auth_header, teacher, student, exam):
    response = client.post(
        f"{PREFIX}/grades",
        json={"exam_id": exam.exam_id, "student_id": student.user_id, "marks": 95},
        headers=auth_header(teacher),
    )
    assert response.status_code == 201
    assert response.json()["grade"] == "A+"
    assert response.json()["graded_by_id"] == teacher.user_id

    stats = client.get(f"{PREFIX}/exams/{exam.exam_id}/statistics", headers=auth_header(teacher))
    assert stats.status_code == 200
    assert stats.json()["grade_distribution"] == {"A+": 1}


def test_announcement_ownership_over_http(client, auth_header, teacher, make_user):
    created = client.post(
        f"{PREFIX}/announcements",
        json={"title": "Trip", "body": "Museum visit", "audience": "ALL", "status": "PUBLISHED"},
        headers=auth_header(teacher),
    )
    assert created.status_code == 201
    announcement_id = created.json()["announcement_id"]

    other = make_user(Role.TEACHER)
    response = client.patch(
        f"{PREFIX}/announcements/{announcement_id}",
        json={"title": "Changed"},
        headers=auth_header(other),
    )
    assert response.status_code == 403
    assert response.json() == {"detail": "You can only update your own announcements"}

    student = make_user(Role.STUDENT)
    feed = client.get(f"{PREFIX}/announcements/feed", headers=auth_header(student))
    assert [a["announcement_id"] for a in feed.json()] == [announcement_id]


def test_request_validation(client):
    response = client.post(
        f"{PREFIX}/auth/register",
        json={"email": "not-an-email", "password": "123", "first_name": "A", "last_name": "B", "role": "STUDENT"},
    )
    assert response.status_code == 422


def test_admin_registers_like_any_role(client):
    payload = {
        "email": "principal@school.edu",
        "password": "password1",
        "first_name": "Pat",
        "last_name": "Lee",
        "role": "ADMIN",
    }
    response = client.post(f"{PREFIX}/auth/register", json=payload)
    assert response.status_code == 201
    assert response.json()["user"]["role"] == "ADMIN"


def test_blank_names_are_rejected(client, auth_header, admin):
    payload = {
        "email": "blank@school.edu",
        "password": "password1",
        "first_name": "   ",
        "last_name": "Doe",
        "role": "STUDENT",
    }
    assert client.post(f"{PREFIX}/auth/register", json=payload).status_code == 422

    payload["first_name"] = "  Jane  "
    response = client.post(f"{PREFIX}/auth/register", json=payload)
    assert response.status_code == 201
    assert response.json()["user"]["first_name"] == "Jane"

    response = client.post(
        f"{PREFIX}/classes",
        json={"name": " ", "section": "A", "year": 2024, "class_teacher_id": admin.user_id},
        headers=auth_header(admin),
    )
    assert response.status_code == 422
