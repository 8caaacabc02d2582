"""
Staff tests.

Verifies:
- staff CRUD through the policy (salary in cents, attendance not writable)
- attendance: one entry per day, closed status set, check-in/out ordering
"""

from sweetshop.extensions import db
from sweetshop.models import AttendanceEntry


def _staff(client, headers, **overrides):
    body = {
        "name": "Lakshmi Devi",
        "position": "halwai",
        "contact": "9845012345",
        "salary_cents": 1800000,
    }
    body.update(overrides)
    return client.post("/api/staff/create", json=body, headers=headers)


def _attend(client, headers, staff_id, **body):
    return client.post(f"/api/staff/{staff_id}/attendance", json=body, headers=headers)


class TestStaffCrud:

    def test_create_and_list(self, client, auth_headers):
        resp = _staff(client, auth_headers)
        assert resp.status_code == 201
        member = resp.get_json()
        assert member["salary_cents"] == 1800000
        assert member["attendance"] == []

        _staff(client, auth_headers, name="Arjun", position="delivery")

        resp = client.get("/api/staff/list?position=halwai", headers=auth_headers)
        assert resp.status_code == 200
        assert [s["name"] for s in resp.get_json()["staff"]] == ["Lakshmi Devi"]

    def test_missing_salary_rejected(self, client, auth_headers):
        body = {"name": "Arjun", "position": "delivery", "contact": "9000000000"}
        resp = client.post("/api/staff/create", json=body, headers=auth_headers)
        assert resp.status_code == 400
        assert "salary_cents" in resp.get_json()["error"]

    def test_attendance_not_writable_through_update(self, client, auth_headers):
        member = _staff(client, auth_headers).get_json()
        resp = client.put(
            f"/api/staff/{member['id']}/update",
            json={"attendance": [{"date": "2026-10-01"}]},
            headers=auth_headers,
        )
        assert resp.status_code == 400

    def test_update_get_and_delete(self, client, auth_headers):
        member = _staff(client, auth_headers).get_json()

        resp = client.put(
            f"/api/staff/{member['id']}/update", json={"salary_cents": 2000000}, headers=auth_headers
        )
        assert resp.status_code == 200
        assert resp.get_json()["salary_cents"] == 2000000

        resp = client.get(f"/api/staff/{member['id']}/list", headers=auth_headers)
        assert resp.get_json()["salary_cents"] == 2000000

        assert client.delete(f"/api/staff/{member['id']}/delete", headers=auth_headers).status_code == 200
        assert client.get(f"/api/staff/{member['id']}/list", headers=auth_headers).status_code == 404


class TestAttendance:

    def test_record_present_day(self, client, auth_headers):
        member = _staff(client, auth_headers).get_json()

        resp = _attend(
            client, auth_headers, member["id"],
            date="2026-10-19",
            check_in_at="2026-10-19T03:30:00Z",
            check_out_at="2026-10-19T12:30:00Z",
        )
        assert resp.status_code == 201
        entry = resp.get_json()["attendance"][0]
        assert entry["date"] == "2026-10-19"
        assert entry["status"] == "present"
        assert entry["check_in_at"] == "2026-10-19T03:30:00Z"
        assert entry["check_out_at"] == "2026-10-19T12:30:00Z"

    def test_entries_ordered_by_date(self, client, auth_headers):
        member = _staff(client, auth_headers).get_json()
        _attend(client, auth_headers, member["id"], date="2026-10-18", status="late")
        resp = _attend(client, auth_headers, member["id"], date="2026-10-17", status="leave")

        entries = resp.get_json()["attendance"]
        assert [(e["date"], e["status"]) for e in entries] == [
            ("2026-10-17", "leave"),
            ("2026-10-18", "late"),
        ]

    def test_same_day_twice_rejected(self, client, auth_headers):
        member = _staff(client, auth_headers).get_json()
        assert _attend(client, auth_headers, member["id"], date="2026-10-19").status_code == 201

        resp = _attend(client, auth_headers, member["id"], date="2026-10-19", status="absent")
        assert resp.status_code == 400
        assert "already recorded" in resp.get_json()["error"]

    def test_unknown_status_rejected(self, client, auth_headers):
        member = _staff(client, auth_headers).get_json()
        resp = _attend(client, auth_headers, member["id"], date="2026-10-19", status="holiday")
        assert resp.status_code == 400

    def test_absent_day_has_no_times(self, client, auth_headers):
        member = _staff(client, auth_headers).get_json()
        resp = _attend(
            client, auth_headers, member["id"],
            date="2026-10-19", status="absent", check_in_at="2026-10-19T03:30:00Z",
        )
        assert resp.status_code == 400

    def test_check_out_before_check_in_rejected(self, client, auth_headers):
        member = _staff(client, auth_headers).get_json()
        resp = _attend(
            client, auth_headers, member["id"],
            date="2026-10-19",
            check_in_at="2026-10-19T12:30:00Z",
            check_out_at="2026-10-19T03:30:00Z",
        )
        assert resp.status_code == 400

    def test_date_required(self, client, auth_headers):
        member = _staff(client, auth_headers).get_json()
        assert _attend(client, auth_headers, member["id"], status="present").status_code == 400

    def test_unknown_staff(self, client, auth_headers):
        assert _attend(client, auth_headers, 987654, date="2026-10-19").status_code == 404

    def test_delete_removes_attendance(self, client, auth_headers):
        member = _staff(client, auth_headers).get_json()
        _attend(client, auth_headers, member["id"], date="2026-10-19")
        client.delete(f"/api/staff/{member['id']}/delete", headers=auth_headers)

        assert db.session.query(AttendanceEntry).count() == 0
