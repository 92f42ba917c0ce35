"""End-to-end tests through the HTTP API."""

from __future__ import annotations

from io import BytesIO

import pytest
from openpyxl import load_workbook

from conftest import CLASS_NAME, workbook_bytes

API = "/api/v1"
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def upload(client, content: bytes, filename: str = "results.xlsx", mode: str = "CURRENT"):
    return client.post(
        f"{API}/academic-results/upload",
        params={"mode": mode},
        files={"file": (filename, content, XLSX)},
    )


def create_student(client, name: str = "تلميذ تجريبي", grade: str = "1 متوسط 1") -> dict:
    response = client.post(f"{API}/students", json={"name": name, "grade": grade})
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def imported(client, sample_workbook):
    response = upload(client, sample_workbook)
    assert response.status_code == 200
    return response.json()


def student_id(client, name: str) -> int:
    items = client.get(f"{API}/students", params={"search": name}).json()["items"]
    return items[0]["id"]


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

class TestUpload:
    def test_success(self, imported):
        assert imported["class_name"] == CLASS_NAME
        assert (imported["total"], imported["created"], imported["updated"]) == (2, 2, 0)

    def test_rejects_extension(self, client, sample_workbook):
        response = upload(client, sample_workbook, filename="results.csv")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "UPLOAD_FAILED"

    def test_malformed_sheet(self, client):
        response = upload(client, workbook_bytes([["x"]] * 3))
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "MALFORMED_INPUT"

    def test_unknown_mode(self, client, sample_workbook):
        response = upload(client, sample_workbook, mode="NEXT")
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_results_list(self, client, imported):
        create_student(client, name="بدون نتائج")
        rows = client.get(f"{API}/academic-results").json()
        assert [r["name"] for r in rows] == ["بن علي محمد", "سعدي مريم"]
        maryam = rows[1]
        assert maryam["top_subject"]["subject"] == "اللغة العربية"
        assert maryam["previous_records"] == 0

    def test_grades(self, client, imported):
        create_student(client, grade="بلا نتائج")
        assert client.get(f"{API}/academic-results/grades").json() == [CLASS_NAME]


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

class TestAnalysis:
    def test_snapshot(self, client, imported):
        snapshot = client.get(f"{API}/analysis/snapshot").json()
        assert snapshot["total_students"] == 2
        assert snapshot["average_gpa"] == 13.5
        assert snapshot["subjects"][0]["subject"] == "الرياضيات"
        assert snapshot["subjects"][0]["average"] == 14.0

    def test_snapshot_empty_store(self, client):
        snapshot = client.get(f"{API}/analysis/snapshot").json()
        assert snapshot["total_students"] == 0
        assert snapshot["overall_pass_rate"] == 0

    def test_categories(self, client, imported):
        categories = client.get(f"{API}/analysis/categories").json()
        assert [s["name"] for s in categories["top_performers"]] == ["سعدي مريم"]
        assert categories["struggling"] == []

    def test_subject_detail(self, client, imported):
        detail = client.get(f"{API}/analysis/subjects/اللغة العربية").json()
        assert [s["name"] for s in detail["students"]] == ["سعدي مريم", "بن علي محمد"]
        assert [s["name"] for s in detail["failing"]] == ["بن علي محمد"]

    def test_weakest_subjects(self, client, imported):
        weak = client.get(f"{API}/analysis/weakest-subjects", params={"limit": 1}).json()
        assert [w["subject"] for w in weak] == ["اللغة العربية"]


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

class TestReports:
    def test_analysis_export(self, client, imported):
        response = client.get(f"{API}/reports/analysis/export")
        assert response.status_code == 200
        assert response.headers["content-type"] == XLSX
        assert "filename*=UTF-8''" in response.headers["content-disposition"]
        wb = load_workbook(BytesIO(response.content))
        assert len(wb.sheetnames) == 2

    def test_analysis_print(self, client, imported):
        response = client.get(f"{API}/reports/analysis/print")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "window.print()" in response.text

    def test_report_list(self, client, imported):
        report = client.get(f"{API}/reports/exited").json()
        assert [e["name"] for e in report["entries"]] == ["سعدي مريم"]

    def test_unknown_report_type(self, client):
        assert client.get(f"{API}/reports/unknown").status_code == 422

    def test_report_export(self, client, imported):
        response = client.get(f"{API}/reports/general/export")
        assert response.status_code == 200
        ws = load_workbook(BytesIO(response.content)).active
        assert ws.max_row == 4

    def test_transcript(self, client, imported):
        transcript = client.get(f"{API}/reports/transcript/{student_id(client, 'سعدي مريم')}").json()
        assert transcript["max_subject"]["subject"] == "اللغة العربية"
        assert transcript["date_of_birth"] == "2000-02-05"

    def test_transcript_print(self, client, imported):
        response = client.get(f"{API}/reports/transcript/{student_id(client, 'بن علي محمد')}/print")
        assert "بن علي محمد" in response.text

    def test_transcript_without_results(self, client):
        student = create_student(client)
        response = client.get(f"{API}/reports/transcript/{student['id']}")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_honor_board(self, client):
        student = create_student(client)
        url = f"{API}/students/{student['id']}/behavior-logs"
        client.post(url, json={
            "behavior_type": "POSITIVE", "points": 4, "description": "مبادرة",
            "logged_at": "2026-10-01T09:30:00",
        })
        client.post(url, json={
            "behavior_type": "POSITIVE", "points": 9, "description": "خارج الفترة",
            "logged_at": "2026-09-01T09:30:00",
        })
        board = client.get(
            f"{API}/reports/honor-board", params={"start": "2026-10-01", "end": "2026-10-31"},
        ).json()
        assert [(e["name"], e["period_points"]) for e in board] == [("تلميذ تجريبي", 4)]

    def test_honor_board_reads_utc_on_school_clock(self, client):
        student = create_student(client)
        log = client.post(f"{API}/students/{student['id']}/behavior-logs", json={
            "behavior_type": "POSITIVE", "points": 6, "description": "مساعدة",
            "logged_at": "2026-09-30T23:30:00Z",
        }).json()
        assert log["logged_at"].startswith("2026-10-01T00:30")
        board = client.get(
            f"{API}/reports/honor-board", params={"start": "2026-10-01", "end": "2026-10-01"},
        ).json()
        assert [e["period_points"] for e in board] == [6]

    def test_inverted_period(self, client):
        response = client.get(f"{API}/reports/honor", params={"start": "2026-10-31", "end": "2026-10-01"})
        assert response.status_code == 422
        assert response.json()["error"]["details"]["start"] == "2026-10-31"


# ---------------------------------------------------------------------------
# Students
# ---------------------------------------------------------------------------

class TestStudents:
    def test_crud(self, client):
        student = create_student(client)
        assert student["total_points"] == 0

        response = client.patch(f"{API}/students/{student['id']}", json={"gender": "أنثى"})
        assert response.json()["gender"] == "أنثى"

        assert client.delete(f"{API}/students/{student['id']}").status_code == 200
        response = client.get(f"{API}/students/{student['id']}")
        assert response.status_code == 404

    def test_create_validation(self, client):
        response = client.post(f"{API}/students", json={"name": "x", "grade": "1"})
        assert response.status_code == 422

    def test_list_search(self, client):
        create_student(client, name="أمين سالم")
        create_student(client, name="ياسين قادري")
        page = client.get(f"{API}/students", params={"search": "سالم"}).json()
        assert page["total"] == 1
        assert page["items"][0]["name"] == "أمين سالم"

    def test_insight(self, client, imported):
        insight = client.get(f"{API}/students/{student_id(client, 'سعدي مريم')}/insight").json()
        assert insight["tone"] == "gray"


class TestBehaviorLedger:
    def test_total_follows_logs(self, client):
        student = create_student(client)
        url = f"{API}/students/{student['id']}/behavior-logs"
        client.post(url, json={"behavior_type": "POSITIVE", "points": 3, "description": "مشاركة"})
        negative = client.post(url, json={
            "behavior_type": "NEGATIVE", "points": 5, "description": "شغب", "severity": "HIGH",
        }).json()
        assert negative["points"] == -5
        assert negative["balance_after"] == -2
        assert negative["severity"] == "HIGH"

        assert client.get(f"{API}/students/{student['id']}").json()["total_points"] == -2
        assert len(client.get(url).json()) == 2

    def test_positive_drops_severity(self, client):
        student = create_student(client)
        log = client.post(f"{API}/students/{student['id']}/behavior-logs", json={
            "behavior_type": "POSITIVE", "points": 2, "description": "تعاون", "severity": "LOW",
        }).json()
        assert log["severity"] is None

    def test_unknown_student(self, client):
        response = client.post(f"{API}/students/999/behavior-logs", json={
            "behavior_type": "POSITIVE", "points": 2, "description": "تعاون",
        })
        assert response.status_code == 404


class TestInterviews:
    def test_filters(self, client):
        first = create_student(client, name="أمين سالم")
        second = create_student(client, name="ياسين قادري")
        client.post(f"{API}/students/{first['id']}/interviews", json={
            "title": "قلق قبل الامتحان", "interview_date": "2026-10-01",
        })
        client.post(f"{API}/students/{second['id']}/interviews", json={
            "title": "متابعة النتائج", "interview_date": "2026-10-05",
            "interview_type": "PARENT", "parent_name": "قادري علي",
        })

        all_interviews = client.get(f"{API}/interviews").json()
        assert [i["student_name"] for i in all_interviews] == ["ياسين قادري", "أمين سالم"]
        assert all_interviews[0]["parent_name"] == "قادري علي"

        parents = client.get(f"{API}/interviews", params={"type": "PARENT"}).json()
        assert [i["title"] for i in parents] == ["متابعة النتائج"]

        searched = client.get(f"{API}/interviews", params={"search": "قلق"}).json()
        assert [i["student_name"] for i in searched] == ["أمين سالم"]

    def test_type_specific_fields_cleared(self, client):
        student = create_student(client)
        interview = client.post(f"{API}/students/{student['id']}/interviews", json={
            "title": "لقاء", "parent_name": "ولي", "admin_role": "مدير",
        }).json()
        assert interview["parent_name"] is None
        assert interview["admin_role"] is None


class TestAttendance:
    def test_summary(self, client):
        student = create_student(client)
        url = f"{API}/students/{student['id']}/attendance"
        client.post(url, json={"attendance_date": "2026-10-01", "status": "ABSENT"})
        client.post(url, json={"attendance_date": "2026-10-02", "status": "LATE"})
        # Same day again replaces the status
        client.post(url, json={"attendance_date": "2026-10-01", "status": "EXCUSED"})

        summary = client.get(f"{url}/summary").json()
        assert summary == {"total": 2, "present": 0, "absent": 0, "late": 1, "excused": 1}


class TestFollowUpTasks:
    def test_lifecycle(self, client):
        student = create_student(client)
        url = f"{API}/students/{student['id']}/tasks"
        later = client.post(url, json={"title": "استدعاء الولي", "deadline": "2026-10-20", "priority": "HIGH"}).json()
        sooner = client.post(url, json={"title": "متابعة الواجبات", "deadline": "2026-10-10"}).json()
        assert sooner["priority"] == "MEDIUM"
        assert sooner["is_completed"] is False
        assert sooner["student_name"] == "تلميذ تجريبي"

        assert [t["id"] for t in client.get(url).json()] == [sooner["id"], later["id"]]

        toggled = client.patch(f"{API}/tasks/{sooner['id']}/toggle").json()
        assert toggled["is_completed"] is True
        # Completed tasks sink below open ones whatever their deadline
        assert [t["id"] for t in client.get(url).json()] == [later["id"], sooner["id"]]
        pending = client.get(f"{API}/tasks", params={"pending_only": True}).json()
        assert [t["id"] for t in pending] == [later["id"]]

        assert client.patch(f"{API}/tasks/{sooner['id']}/toggle").json()["is_completed"] is False

        assert client.delete(f"{API}/tasks/{later['id']}").status_code == 200
        assert [t["id"] for t in client.get(f"{API}/tasks").json()] == [sooner["id"]]

    def test_dashboard_list_spans_students(self, client):
        first = create_student(client, name="أمين سالم")
        second = create_student(client, name="ياسين قادري")
        client.post(f"{API}/students/{first['id']}/tasks", json={"title": "أ", "deadline": "2026-11-01"})
        client.post(f"{API}/students/{second['id']}/tasks", json={"title": "ب", "deadline": "2026-10-01"})
        tasks = client.get(f"{API}/tasks").json()
        assert [t["student_name"] for t in tasks] == ["ياسين قادري", "أمين سالم"]

    def test_title_required(self, client):
        student = create_student(client)
        response = client.post(f"{API}/students/{student['id']}/tasks", json={"title": ""})
        assert response.status_code == 422

    def test_unknown_task(self, client):
        assert client.patch(f"{API}/tasks/999/toggle").status_code == 404
        assert client.delete(f"{API}/tasks/999").status_code == 404

    def test_removed_with_student(self, client):
        student = create_student(client)
        client.post(f"{API}/students/{student['id']}/tasks", json={"title": "متابعة"})
        client.delete(f"{API}/students/{student['id']}")
        assert client.get(f"{API}/tasks").json() == []


class TestScaleResults:
    def test_catalog(self, client):
        scales = client.get(f"{API}/scales").json()
        assert len(scales) == 5
        anxiety = client.get(f"{API}/scales/anxiety").json()
        assert anxiety["max_score"] == 15
        assert len(anxiety["questions"]) == 5
        assert client.get(f"{API}/scales/unknown").status_code == 404

    def test_preview_does_not_save(self, client):
        answers = {str(i): 2 for i in range(1, 6)}
        score = client.post(f"{API}/scales/anxiety/score", json={"answers": answers}).json()
        assert score["score"] == 10
        assert score["interpretation"]["level"] == "قلق مرتفع"

    def test_save_and_list(self, client):
        student = create_student(client)
        url = f"{API}/students/{student['id']}/scale-results"
        answers = {str(i): 1 for i in range(1, 6)}
        saved = client.post(url, json={
            "scale_id": "anxiety", "answers": answers, "assessed_on": "2026-10-01",
        }).json()
        assert (saved["score"], saved["max_score"]) == (5, 15)
        assert saved["level"] == "قلق متوسط"
        assert saved["scale_title"] == "مقياس القلق المدرسي"
        assert saved["answers"]["1"] == 1

        client.post(url, json={
            "scale_id": "anxiety", "answers": {str(i): 0 for i in range(1, 6)}, "assessed_on": "2026-10-08",
        })
        assert [r["level"] for r in client.get(url).json()] == ["قلق طبيعي", "قلق متوسط"]

    def test_incomplete_answers_rejected(self, client):
        student = create_student(client)
        url = f"{API}/students/{student['id']}/scale-results"
        response = client.post(url, json={"scale_id": "adhd_short", "answers": {"1": 3}})
        assert response.status_code == 422
        assert response.json()["error"]["details"]["unanswered"] == [2, 3, 4, 5, 6, 7, 8]
        assert client.get(url).json() == []

    def test_unknown_student(self, client):
        response = client.post(f"{API}/students/999/scale-results", json={"scale_id": "anxiety", "answers": {}})
        assert response.status_code == 404
