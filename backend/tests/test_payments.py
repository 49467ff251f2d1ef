import pytest
from sqlalchemy.exc import IntegrityError

from app.models import Enrollment, Notification, Payment
from app.services.enrollment_service import EnrollmentService
from app.services.payment_gateway import GatewayError, RazorpayGateway
from tests.helpers import auth, sign


@pytest.fixture
def paid_course(instructor, make_course):
    return make_course(instructor, price=499, title="Futures Masterclass")


def create_order(client, user, course):
    res = client.post("/api/payments/create", headers=auth(user), json={"courseId": course.id})
    assert res.status_code == 200, res.text
    return res.json()


def verify(client, user, order_id, payment_id="pay_test0001", signature=None):
    return client.post("/api/payments/verify", headers=auth(user), json={
        "razorpay_order_id": order_id,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": signature if signature is not None else sign(order_id, payment_id),
    })


def test_create_order(client, db, student, paid_course, gateway):
    order = create_order(client, student, paid_course)

    assert order["orderId"] == gateway[0]["id"]
    assert order["amount"] == 49900
    assert order["currency"] == "INR"
    assert order["receipt"].startswith("receipt_")
    assert gateway[0]["notes"] == {"courseId": paid_course.id, "userId": student.id}

    payment = db.query(Payment).one()
    assert payment.status == "pending"
    assert payment.amount == 499
    assert payment.payment_id is None
    assert payment.order_id == order["orderId"]


def test_pending_order_is_reused(client, db, student, paid_course, gateway):
    first = create_order(client, student, paid_course)
    second = create_order(client, student, paid_course)

    assert first == second
    assert len(gateway) == 1
    assert db.query(Payment).count() == 1


def test_free_course_has_no_order(client, student, instructor, make_course, gateway):
    course = make_course(instructor, price=0)
    res = client.post("/api/payments/create", headers=auth(student), json={"courseId": course.id})
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid course price"
    assert gateway == []


def test_order_rejected_when_enrolled(client, db, student, paid_course, gateway):
    db.add(Enrollment(user_id=student.id, course_id=paid_course.id, payment_status="completed"))
    db.commit()

    res = client.post("/api/payments/create", headers=auth(student), json={"courseId": paid_course.id})
    assert res.status_code == 400
    assert res.json()["message"] == "Already enrolled in this course"


def test_order_for_missing_course(client, student, gateway):
    res = client.post("/api/payments/create", headers=auth(student), json={"courseId": "a" * 32})
    assert res.status_code == 404


def test_gateway_failure_writes_nothing(client, db, student, paid_course, monkeypatch):
    def boom(amount_paise, receipt, notes=None):
        raise GatewayError("upstream timeout")

    monkeypatch.setattr(RazorpayGateway, "create_order", staticmethod(boom))

    res = client.post("/api/payments/create", headers=auth(student), json={"courseId": paid_course.id})
    assert res.status_code == 500
    assert "upstream timeout" in res.json()["message"]
    assert db.query(Payment).count() == 0


def test_verify_unlocks_course(client, db, student, paid_course, gateway):
    order = create_order(client, student, paid_course)

    res = verify(client, student, order["orderId"])
    assert res.status_code == 200
    body = res.json()
    assert body["paymentStatus"] == "completed"
    assert body["paymentId"] == "pay_test0001"
    assert body["status"] == "active"

    db.expire_all()
    payment = db.query(Payment).one()
    assert payment.status == "completed"
    assert payment.payment_id == "pay_test0001"
    assert payment.completed_at is not None

    titles = sorted(n.title for n in db.query(Notification).all())
    assert titles == ["Course Enrollment Successful", "Payment Received"]

    detail = client.get(f"/api/courses/{paid_course.id}", headers=auth(student)).json()
    assert all(lesson["unlocked"] for lesson in detail["lessons"])


def test_verify_twice_is_idempotent(client, db, student, paid_course, gateway):
    order = create_order(client, student, paid_course)

    first = verify(client, student, order["orderId"])
    second = verify(client, student, order["orderId"])

    assert second.status_code == 200
    assert second.json()["_id"] == first.json()["_id"]
    assert db.query(Enrollment).count() == 1
    assert db.query(Payment).count() == 1
    assert db.query(Notification).count() == 2


def test_invalid_signature_changes_nothing(client, db, student, paid_course, gateway):
    order = create_order(client, student, paid_course)

    res = verify(client, student, order["orderId"], signature=sign(order["orderId"], "pay_test0001", "wrong"))
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid payment signature"

    db.expire_all()
    assert db.query(Payment).one().status == "pending"
    assert db.query(Enrollment).count() == 0
    assert db.query(Notification).count() == 0


def test_signature_bound_to_payment_id(client, db, student, paid_course, gateway):
    order = create_order(client, student, paid_course)

    res = verify(client, student, order["orderId"], payment_id="pay_other",
                 signature=sign(order["orderId"], "pay_test0001"))
    assert res.status_code == 400
    assert db.query(Enrollment).count() == 0


def test_non_ascii_signature_is_a_mismatch(client, db, student, paid_course, gateway):
    order = create_order(client, student, paid_course)

    res = verify(client, student, order["orderId"], signature="é" * 64)
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid payment signature"

    db.expire_all()
    assert db.query(Payment).one().status == "pending"
    assert db.query(Enrollment).count() == 0


def test_refunded_order_cannot_be_replayed(client, db, student, paid_course, gateway):
    order = create_order(client, student, paid_course)
    payment = db.query(Payment).one()
    payment.status = "refunded"
    db.commit()

    res = verify(client, student, order["orderId"])
    assert res.status_code == 400
    assert res.json()["message"] == "Payment has been refunded"
    assert db.query(Enrollment).count() == 0
    assert db.query(Notification).count() == 0


def test_conflicting_write_rolls_back(client, db, student, paid_course, gateway, monkeypatch):
    order = create_order(client, student, paid_course)

    def conflict(db, user_id, course, payment_id):
        raise IntegrityError("INSERT INTO enrollments", {}, Exception("UNIQUE constraint failed"))

    monkeypatch.setattr(EnrollmentService, "record_paid", staticmethod(conflict))

    res = verify(client, student, order["orderId"])
    assert res.status_code == 409
    assert res.json()["message"] == "Payment could not be reconciled"

    db.expire_all()
    payment = db.query(Payment).one()
    assert payment.status == "pending"
    assert payment.payment_id is None
    assert db.query(Enrollment).count() == 0
    assert db.query(Notification).count() == 0


def test_unknown_order(client, student, gateway):
    res = verify(client, student, "order_missing")
    assert res.status_code == 404
    assert res.json()["message"] == "Payment not found"


def test_cannot_verify_someone_elses_order(client, db, student, make_user, paid_course, gateway):
    order = create_order(client, student, paid_course)
    intruder = make_user("student")

    res = verify(client, intruder, order["orderId"])
    assert res.status_code == 404
    assert db.query(Enrollment).count() == 0


def test_verify_requires_all_fields(client, student):
    res = client.post("/api/payments/verify", headers=auth(student), json={"razorpay_order_id": "order_1"})
    assert res.status_code == 400
    fields = {e["field"] for e in res.json()["errors"]}
    assert fields == {"razorpay_payment_id", "razorpay_signature"}


def test_verify_upgrades_pending_enrollment(client, db, student, paid_course, gateway):
    order = create_order(client, student, paid_course)
    db.add(Enrollment(user_id=student.id, course_id=paid_course.id, payment_status="pending"))
    db.commit()

    res = verify(client, student, order["orderId"])
    assert res.status_code == 200
    assert res.json()["paymentStatus"] == "completed"
    assert db.query(Enrollment).count() == 1


def test_history_and_lookup(client, student, make_user, admin, paid_course, gateway):
    order = create_order(client, student, paid_course)

    history = client.get("/api/payments/history", headers=auth(student)).json()
    assert [p["orderId"] for p in history] == [order["orderId"]]
    assert history[0]["course"]["title"] == "Futures Masterclass"

    payment_id = history[0]["_id"]
    assert client.get(f"/api/payments/{payment_id}", headers=auth(student)).status_code == 200
    assert client.get(f"/api/payments/{payment_id}", headers=auth(admin)).status_code == 200
    assert client.get(f"/api/payments/{payment_id}", headers=auth(make_user("student"))).status_code == 404
