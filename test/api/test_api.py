# =====================================================
# test/api/test_api.py
# =====================================================
"""
Test degli endpoint HTTP: validazione input, mapping errori,
associazioni bulk e viste dashboard.
"""

import uuid
from datetime import date

import pytest

MONTHLY = {
    "recurrence_type": "CALENDAR_MONTHLY",
    "day_of_month": 31,
    "tolerance_value": 1,
    "tolerance_unit": "WEEKS",
}

# =====================================================
# HEALTH
# =====================================================

class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_status_reports_features(self, client):
        response = client.get("/api/v1/status")
        assert response.status_code == 200
        assert "recurrence-engine" in response.json()["features"]

# =====================================================
# POLICY VALIDATION
# =====================================================

class TestPolicyValidation:

    @pytest.mark.parametrize("policy", [
        {"recurrence_type": "CALENDAR_WEEKLY", "days_of_week": []},
        {"recurrence_type": "CALENDAR_MONTHLY"},
        {"recurrence_type": "CALENDAR_YEARLY", "month_of_year": 2},
        {"recurrence_type": "CALENDAR_YEARLY", "month_of_year": 4, "day_of_year": 31},
        {"recurrence_type": "FIXED_INTERVAL", "frequency_unit": "MONTHS"},
        {"recurrence_type": "FIXED_INTERVAL", "frequency_value": 0, "frequency_unit": "MONTHS"},
        {"recurrence_type": "CALENDAR_DAILY", "tolerance_value": -1},
        {"recurrence_type": "EVERY_FULL_MOON"},
    ])
    def test_incomplete_policies_rejected(self, client, policy):
        response = client.post("/api/v1/calendars", json={"name": "Invalid", **policy})
        assert response.status_code == 422

    def test_february_29_accepted(self, client):
        response = client.post("/api/v1/calendars", json={
            "name": "Leap day",
            "recurrence_type": "CALENDAR_YEARLY",
            "month_of_year": 2,
            "day_of_year": 29,
        })
        assert response.status_code == 201
        assert response.json()["tolerance_value"] == 0
        assert response.json()["tolerance_unit"] == "DAYS"

# =====================================================
# CALENDARS
# =====================================================

class TestCalendarRoutes:

    def test_create_with_instruments_and_list(self, client, instruments):
        # Act
        response = client.post("/api/v1/calendars", json={
            "name": "End of month",
            **MONTHLY,
            "instrument_ids": [str(instruments["A"].id), str(instruments["B"].id)],
        })

        # Assert
        assert response.status_code == 201
        body = response.json()
        assert body["instrument_count"] == 2
        assert body["tolerance_label"] == "1 week"

        listing = client.get("/api/v1/calendars", params={"active": True}).json()
        assert listing["count"] == 1
        assert listing["items"][0]["instrument_count"] == 2

    def test_update_reconciles_members(self, client, instruments):
        a, b, d = (str(instruments[k].id) for k in ("A", "B", "D"))
        created = client.post("/api/v1/calendars", json={"name": "Members", **MONTHLY, "instrument_ids": [a, b]}).json()

        response = client.put(f"/api/v1/calendars/{created['id']}", json={"instrument_ids": [b, d]})

        assert response.status_code == 200
        body = response.json()
        assert body["detached"] == [a]
        assert body["attached"] == [d]
        assert body["kept"] == [b]

        detail = client.get(f"/api/v1/calendars/{created['id']}").json()
        assert sorted(i["serial_number"] for i in detail["instruments"]) == ["SN-B", "SN-D"]

    def test_toggle_and_delete(self, client, instruments):
        created = client.post("/api/v1/calendars", json={
            "name": "Temp", **MONTHLY, "instrument_ids": [str(instruments["C"].id)]
        }).json()

        toggled = client.patch(f"/api/v1/calendars/{created['id']}/active", json={"active": False})
        assert toggled.json()["active"] is False

        deleted = client.delete(f"/api/v1/calendars/{created['id']}")
        assert deleted.status_code == 200
        assert deleted.json()["detached_count"] == 1
        assert client.get(f"/api/v1/calendars/{created['id']}").status_code == 404

    @pytest.mark.parametrize("field", ["name", "active"])
    def test_explicit_null_rejected(self, client, field):
        created = client.post("/api/v1/calendars", json={"name": "Not null", **MONTHLY}).json()

        response = client.put(f"/api/v1/calendars/{created['id']}", json={field: None})

        assert response.status_code == 422
        assert client.get(f"/api/v1/calendars/{created['id']}").json()["name"] == "Not null"

    def test_unknown_instrument_is_404(self, client):
        response = client.post("/api/v1/calendars", json={
            "name": "Ghost", **MONTHLY, "instrument_ids": [str(uuid.uuid4())]
        })
        assert response.status_code == 404
        assert response.json()["error"] == "EntityNotFoundError"

# =====================================================
# METHODS
# =====================================================

class TestMethodRoutes:

    @pytest.fixture
    def method(self, client):
        response = client.post("/api/v1/methods", json={
            "name": "Thermometer check",
            "instrument_type": "thermometer",
            "estimated_duration": 30,
            "recurrence_type": "FIXED_INTERVAL",
            "frequency_value": 6,
            "frequency_unit": "MONTHS",
            "tolerance_value": 15,
        })
        assert response.status_code == 201
        return response.json()

    def test_method_labels(self, method):
        assert method["frequency_label"] == "6 months"
        assert method["calendar_count"] == 0

    def test_apply_and_remove(self, client, method, instruments):
        ids = [str(instruments["A"].id), str(instruments["B"].id)]

        applied = client.post(f"/api/v1/methods/{method['id']}/apply", json={"instrument_ids": ids})
        assert applied.status_code == 200
        assert applied.json()["affected_count"] == 2
        assert applied.json()["calendar"]["name"] == "Thermometer check - automatic calendar"

        usage = client.get(f"/api/v1/methods/{method['id']}/instruments").json()
        assert len(usage) == 2

        removed = client.post(f"/api/v1/methods/{method['id']}/remove", json={"instrument_ids": ids[:1]})
        assert removed.json()["affected_count"] == 1

    def test_apply_requires_instruments(self, client, method):
        response = client.post(f"/api/v1/methods/{method['id']}/apply", json={"instrument_ids": []})
        assert response.status_code == 422

    def test_delete_refused_while_in_use(self, client, method, instruments):
        client.post(f"/api/v1/methods/{method['id']}/apply", json={"instrument_ids": [str(instruments["A"].id)]})

        response = client.delete(f"/api/v1/methods/{method['id']}")

        assert response.status_code == 400
        assert "calendar" in response.json()["detail"]

    def test_null_name_rejected(self, client, method):
        response = client.put(f"/api/v1/methods/{method['id']}", json={"name": None})
        assert response.status_code == 422

    def test_list_by_type(self, client, method):
        assert len(client.get("/api/v1/methods", params={"instrument_type": "thermometer"}).json()) == 1
        assert client.get("/api/v1/methods", params={"instrument_type": "caliper"}).json() == []

# =====================================================
# INTERVENTIONS + DASHBOARD
# =====================================================

class TestInterventionAndDashboard:

    def test_completion_updates_schedule_and_dashboard(self, client, instruments):
        instrument_id = str(instruments["A"].id)
        client.post("/api/v1/calendars", json={
            "name": "Six months",
            "recurrence_type": "FIXED_INTERVAL",
            "frequency_value": 6,
            "frequency_unit": "MONTHS",
            "tolerance_value": 15,
            "instrument_ids": [instrument_id],
        })

        # Act
        response = client.post("/api/v1/interventions", json={
            "instrument_id": instrument_id,
            "intervention_type": "CALIBRATION",
            "completed_date": "2024-01-01",
            "certificate_number": "CERT-001",
        })

        # Assert
        assert response.status_code == 201
        assert response.json()["next_calibration_date"] == "2024-07-01"

        stats = client.get("/api/v1/dashboard/tolerance-stats", params={"now": "2024-07-10"}).json()
        assert stats["counts"]["OVERDUE_TOLERATED"] == 1
        assert stats["counts"]["NOT_SET"] == 3

        timeline = client.get("/api/v1/dashboard/timeline", params={"start": "2024-06-25", "days": 10}).json()
        assert list(timeline["days"]) == ["2024-07-01"]

        planning = client.get("/api/v1/dashboard/planning", params={"now": "2024-07-20", "overdue": True}).json()
        assert planning["count"] == 1
        assert planning["items"][0]["status"] == "OVERDUE_CRITICAL"

    def test_explicit_next_date_must_follow_completion(self, client, instruments):
        response = client.post("/api/v1/interventions", json={
            "instrument_id": str(instruments["A"].id),
            "intervention_type": "CALIBRATION",
            "completed_date": "2024-01-01",
            "next_calibration_date": "2023-12-31",
        })
        assert response.status_code == 422

    def test_complete_planned(self, client, instruments):
        planned = client.post("/api/v1/interventions/planned", json={
            "instrument_id": str(instruments["B"].id),
            "intervention_type": "VERIFICATION",
            "scheduled_date": str(date(2024, 2, 1)),
        }).json()
        assert planned["status"] == "PLANNED"

        completed = client.post(f"/api/v1/interventions/{planned['id']}/complete", json={
            "completed_date": "2024-02-02",
            "conformity_result": "CONFORMING",
        })

        assert completed.status_code == 200
        assert completed.json()["next_calibration_date"] == "2025-02-02"

    def test_history(self, client, instruments):
        instrument_id = str(instruments["C"].id)
        client.post("/api/v1/interventions", json={
            "instrument_id": instrument_id,
            "intervention_type": "CALIBRATION",
            "completed_date": "2024-01-01",
        })

        response = client.get("/api/v1/interventions", params={"instrument_id": instrument_id})

        assert response.status_code == 200
        assert [i["completed_date"] for i in response.json()] == ["2024-01-01"]

    def test_nested_status_uses_reference_date(self, client, instruments):
        # Arrange: scadenza 2024-07-01, tolleranza fino al 2024-07-16
        instrument_id = str(instruments["A"].id)
        calendar = client.post("/api/v1/calendars", json={
            "name": "Six months",
            "recurrence_type": "FIXED_INTERVAL",
            "frequency_value": 6,
            "frequency_unit": "MONTHS",
            "tolerance_value": 15,
            "instrument_ids": [instrument_id],
        }).json()
        client.post("/api/v1/interventions", json={
            "instrument_id": instrument_id,
            "intervention_type": "CALIBRATION",
            "completed_date": "2024-01-01",
        })

        # Act
        stats = client.get("/api/v1/dashboard/tolerance-stats", params={"now": "2024-07-10"}).json()
        detail = client.get(f"/api/v1/calendars/{calendar['id']}", params={"now": "2024-07-10"}).json()
        planning = client.get("/api/v1/dashboard/planning", params={"now": "2024-07-10"}).json()

        # Assert: bucket e strumento annidato concordano
        tolerated = stats["details"]["OVERDUE_TOLERATED"][0]
        assert tolerated["calibration_status"] == "OVERDUE_TOLERATED"
        assert tolerated["days_until_due"] == -9
        assert detail["instruments"][0]["calibration_status"] == "OVERDUE_TOLERATED"
        item = next(i for i in planning["items"] if i["instrument"]["id"] == instrument_id)
        assert item["status"] == item["instrument"]["calibration_status"] == "OVERDUE_TOLERATED"
        print("✅ Nested instrument status computed at the request date")
