from datetime import datetime, timedelta

from app.models import Enrollment, Payment, User, Webinar
from tests.helpers import auth


def add_payment(db, user, course, status="completed", amount=None, created_at=None, n=1):
    payment = Payment(
        user_id=user.id,
        course_id=course.id,
        amount=amount if amount is not None else course.price,
        order_id=f"order_{user.id[:6]}_{n}",
        payment_id=f"pay_{user.id[:6]}_{n}" if status == "completed" else None,
        receipt=f"receipt_{n}",
        status=status,
        created_at=created_at or datetime.utcnow(),
    )
    db.add(payment)
    db.commit()
    return payment


def test_admin_routes_are_gated(client, student, instructor):
    assert client.get("/api/admin/users").status_code == 401
    assert client.get("/api/admin/users", headers=auth(student)).status_code == 403
    assert client.get("/api/admin/courses/stats", headers=auth(instructor)).status_code == 403


def test_user_paging_and_filters(client, admin, make_user):
    for _ in range(12):
        make_user("student")
    make_user("instructor", name="Findable Person")

    page = client.get("/api/admin/users", headers=auth(admin), params={"page": 2, "limit": 5}).json()
    assert page["total"] == 14
    assert page["totalPages"] == 3
    assert page["currentPage"] == 2
    assert len(page["users"]) == 5

    page = client.get("/api/admin/users", headers=auth(admin), params={"role": "instructor"}).json()
    assert [u["name"] for u in page["users"]] == ["Findable Person"]

    page = client.get("/api/admin/users", headers=auth(admin), params={"search": "findable"}).json()
    assert page["total"] == 1


def test_approve_instructor(client, admin, make_user):
    pending = make_user("instructor", approved=False, status="pending")

    res = client.patch(f"/api/admin/users/{pending.id}", headers=auth(admin), json={
        "approved": True, "status": "active",
    })
    assert res.status_code == 200
    assert res.json()["approved"] is True
    assert res.json()["status"] == "active"

    res = client.patch(f"/api/admin/users/{pending.id}", headers=auth(admin), json={"role": "superuser"})
    assert res.status_code == 400


def test_delete_user(client, db, admin, student, instructor, make_course):
    course = make_course(instructor)
    db.add(Enrollment(user_id=student.id, course_id=course.id, payment_status="free"))
    db.commit()

    res = client.delete(f"/api/admin/users/{instructor.id}", headers=auth(admin))
    assert res.status_code == 400

    res = client.delete(f"/api/admin/users/{student.id}", headers=auth(admin))
    assert res.status_code == 200
    assert db.query(User).filter(User.id == student.id).count() == 0
    assert db.query(Enrollment).count() == 0

    assert client.delete(f"/api/admin/users/{admin.id}", headers=auth(admin)).status_code == 400
    assert client.delete("/api/admin/users/" + "0" * 32, headers=auth(admin)).status_code == 404


def test_course_stats_and_revenue(client, db, admin, student, instructor, make_course):
    a = make_course(instructor, price=500, category="Trading")
    b = make_course(instructor, price=300, category="Investing", approved=False)
    add_payment(db, student, a, created_at=datetime(2026, 1, 15), n=1)
    add_payment(db, student, b, created_at=datetime(2026, 3, 2), n=2)
    add_payment(db, student, b, status="pending", n=3)

    stats = client.get("/api/admin/courses/stats", headers=auth(admin)).json()
    assert stats["totalCourses"] == 2
    assert stats["pendingApproval"] == 1
    assert stats["publishedCourses"] == 1
    assert stats["totalRevenue"] == 800
    assert {c["_id"]: c["count"] for c in stats["categoryStats"]} == {"Trading": 1, "Investing": 1}

    revenue = client.get("/api/admin/analytics/revenue", headers=auth(admin)).json()
    assert revenue == [
        {"_id": {"year": 2026, "month": 1}, "total": 500, "count": 1},
        {"_id": {"year": 2026, "month": 3}, "total": 300, "count": 1},
    ]

    revenue = client.get("/api/admin/analytics/revenue", headers=auth(admin), params={
        "startDate": "2026-02-01T00:00:00", "endDate": "2026-12-31T00:00:00",
    }).json()
    assert [r["_id"]["month"] for r in revenue] == [3]


def test_exports(client, admin, instructor, make_course):
    make_course(instructor, title="Exported")

    users = client.get("/api/admin/export/users", headers=auth(admin)).json()
    assert {u["Email"] for u in users} == {admin.email, instructor.email}

    courses = client.get("/api/admin/export/courses", headers=auth(admin)).json()
    assert courses[0]["Title"] == "Exported"
    assert courses[0]["Instructor"] == instructor.name


def test_admin_course_management(client, admin, instructor):
    res = client.post("/api/admin/courses", headers=auth(admin), json={
        "title": "Admin Course",
        "description": "A course created from the admin console.",
        "price": 0,
        "category": "General",
        "instructorId": instructor.id,
    })
    assert res.status_code == 201
    course = res.json()
    assert course["approved"] is True
    assert course["instructorId"] == instructor.id

    res = client.put(f"/api/admin/courses/{course['_id']}", headers=auth(admin), json={"approved": False})
    assert res.json()["approved"] is False

    assert client.delete(f"/api/admin/courses/{course['_id']}", headers=auth(admin)).status_code == 200
    assert client.put(f"/api/admin/courses/{course['_id']}", headers=auth(admin), json={}).status_code == 404


def test_admin_dashboard(client, db, admin, student, instructor, make_user, make_course):
    make_user("instructor", approved=False, status="pending")
    course = make_course(instructor, price=250, title="Dashboards 101")
    add_payment(db, student, course)

    stats = client.get("/api/dashboard/admin", headers=auth(admin)).json()
    assert stats["totalUsers"] == 4
    assert stats["totalInstructors"] == 2
    assert stats["totalCourses"] == 1
    assert stats["totalRevenue"] == 250
    assert len(stats["pendingApprovals"]) == 1
    assert stats["recentActivities"][0]["description"] == f"{student.name} enrolled in Dashboards 101"
    assert stats["detailedCourses"][0]["instructor"]["name"] == instructor.name

    assert client.get("/api/dashboard/admin", headers=auth(instructor)).status_code == 403


def test_instructor_dashboard(client, db, student, instructor, make_course):
    course = make_course(instructor, price=100, rating=4.0)
    db.add(Enrollment(user_id=student.id, course_id=course.id, payment_status="completed", progress=50))
    db.add(Webinar(
        title="Upcoming", description="An upcoming session for students.",
        start_time=datetime.utcnow() + timedelta(days=2), duration=60,
        link="https://meet.example.com/x", speaker_id=instructor.id,
    ))
    db.commit()
    add_payment(db, student, course)

    stats = client.get("/api/dashboard/instructor", headers=auth(instructor)).json()
    assert stats["courseStats"] == {
        "totalCourses": 1,
        "totalEnrollments": 1,
        "averageRating": 4.0,
        "totalRevenue": 100,
        "studentProgress": 50.0,
    }
    assert [w["title"] for w in stats["upcomingWebinars"]] == ["Upcoming"]

    assert client.get("/api/dashboard/instructor", headers=auth(student)).status_code == 403


def test_student_dashboard_and_pages(client, db, student, instructor, make_course):
    done = make_course(instructor, title="Done")
    ongoing = make_course(instructor, title="Ongoing")
    suggestion = make_course(instructor, title="Suggested")
    db.add(Enrollment(user_id=student.id, course_id=done.id, payment_status="free",
                      progress=100, certificate_issued=True))
    db.add(Enrollment(user_id=student.id, course_id=ongoing.id, payment_status="free", progress=30))
    db.add(Webinar(
        title="Joined", description="A webinar the student signed up for.",
        start_time=datetime.utcnow() + timedelta(days=1), duration=30,
        link="https://meet.example.com/y", speaker_name="Guest",
        attendees=[{"email": student.email, "paid": False}],
    ))
    db.commit()

    stats = client.get("/api/dashboard/student", headers=auth(student)).json()
    assert stats["totalCourses"] == 2
    assert stats["completedCourses"] == 1
    # two courses with 10 + 20 minutes of lessons each
    assert stats["learningHours"] == 1.0
    assert [w["title"] for w in stats["upcomingWebinars"]] == ["Joined"]

    courses = client.get("/api/student/courses", headers=auth(student)).json()
    assert {e["course"]["title"] for e in courses} == {"Done", "Ongoing"}

    certificates = client.get("/api/student/certificates", headers=auth(student)).json()
    assert [e["course"]["title"] for e in certificates] == ["Done"]

    recommendations = client.get("/api/student/recommendations", headers=auth(student)).json()
    assert [c["_id"] for c in recommendations] == [suggestion.id]

    assert client.get("/api/student/payments", headers=auth(student)).json() == []

    webinars = client.get("/api/student/webinars", headers=auth(student)).json()
    assert [w["title"] for w in webinars] == ["Joined"]
