"""
Tests for the Emergency SOS HTTP surface.
"""

import asyncio
from unittest.mock import Mock

from fastapi.testclient import TestClient

from api.deps import get_emergency_service
from main import app
from schemas.emergency import EmergencySettings


URL = "/api/emergency/sos"


def post(client, action, data=None, user_id="u1"):
    return client.post(URL, json={"userId": user_id, "action": action, "data": data or {}})


def put(client, action, data=None, user_id="u1"):
    return client.put(URL, json={"userId": user_id, "action": action, "data": data or {}})


def add_family(client):
    mother = post(client, "add-contact", {"name": "Mother", "phone": "090-1111-2222", "relationship": "mother", "isPrimary": True})
    brother = post(client, "add-contact", {"name": "Brother", "phone": "090-3333-4444", "relationship": "brother"})
    return mother.json()["contact"], brother.json()["contact"]


class TestEmergencyReads:

    def test_default_settings(self, client):
        resp = client.get(URL, params={"userId": "u1", "action": "settings"})

        assert resp.status_code == 200
        settings = resp.json()["settings"]
        assert settings["isEnabled"] is True
        assert settings["triggerMethod"] == "button"
        assert settings["contacts"] == []
        assert settings["autoActions"]["callEnabled"] is True
        assert settings["quietHours"] == {"enabled": False, "startTime": "22:00", "endTime": "07:00"}

    def test_untouched_user(self, client):
        history = client.get(URL, params={"userId": "u1", "action": "history"})
        active = client.get(URL, params={"userId": "u1", "action": "active"})
        status = client.get(URL, params={"userId": "u1", "action": "status"})

        assert history.json() == {"history": []}
        assert active.json() == {"active": None}
        assert status.json() == {"status": {"isEnabled": True, "hasActiveEmergency": False, "lastTriggered": None}}

    def test_missing_user_id(self, client):
        resp = client.get(URL, params={"action": "settings"})

        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "User ID is required"}

    def test_unknown_action(self, client):
        resp = client.get(URL, params={"userId": "u1", "action": "explode"})

        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid action"


class TestEmergencyWrites:

    def test_trigger_scenario(self, client):
        post(client, "update-settings", {"autoActions": {
            "callEnabled": True,
            "messageEnabled": True,
            "locationSharingEnabled": True,
            "customMessage": "help",
        }})
        add_family(client)

        resp = post(client, "trigger", {"triggerMethod": "button", "location": {"lat": 35.0, "lng": 139.0}})

        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Emergency SOS activated successfully"
        assert body["emergency"]["status"] == "active"
        assert body["emergency"]["userId"] == "u1"
        assert body["emergency"]["location"] == {"latitude": 35.0, "longitude": 139.0}
        call, sms, share = body["actions"]
        assert call["type"] == "call" and call["target"] == "090-1111-2222"
        assert sms["type"] == "sms"
        assert sms["target"] == ["090-1111-2222", "090-3333-4444"]
        assert sms["message"] == "help"
        assert share["type"] == "location_share"
        assert [c["name"] for c in share["target"]] == ["Mother", "Brother"]
        assert share["location"] == {"latitude": 35.0, "longitude": 139.0}
        assert all(a["status"] == "pending" for a in body["actions"])

    def test_scenario_settings_applied_in_one_update(self, client):
        resp = post(client, "update-settings", {
            "isEnabled": True,
            "contacts": [
                {"name": "Mother", "phone": "090-1111-2222", "isPrimary": True},
                {"name": "Brother", "phone": "090-3333-4444"},
            ],
            "autoActions": {
                "callEnabled": True,
                "messageEnabled": True,
                "locationSharingEnabled": True,
                "customMessage": "help",
            },
        })

        assert resp.status_code == 200
        contacts = resp.json()["settings"]["contacts"]
        assert all(c["id"] and c["createdAt"] for c in contacts)
        assert contacts[0]["id"] != contacts[1]["id"]

        resp = post(client, "trigger", {"location": {"lat": 35.0, "lng": 139.0}})

        assert resp.status_code == 200
        call, sms, share = resp.json()["actions"]
        assert call["target"] == "090-1111-2222"
        assert sms["target"] == ["090-1111-2222", "090-3333-4444"]
        assert sms["message"] == "help"
        assert [c["name"] for c in share["target"]] == ["Mother", "Brother"]

    def test_trigger_without_contacts(self, client):
        resp = post(client, "trigger")

        actions = resp.json()["actions"]
        assert [a["type"] for a in actions] == ["call", "sms"]
        assert actions[0]["target"] is None
        assert actions[1]["target"] == []
        assert resp.json()["emergency"]["triggerMethod"] == "manual"

    def test_trigger_while_disabled(self, client):
        post(client, "update-settings", {"isEnabled": False})

        resp = post(client, "trigger")

        assert resp.status_code == 400
        assert resp.json()["error"] == "Emergency SOS is disabled"
        status = client.get(URL, params={"userId": "u1", "action": "status"}).json()["status"]
        assert status["hasActiveEmergency"] is False

    def test_double_trigger_conflicts(self, client):
        post(client, "trigger")

        resp = post(client, "trigger")

        assert resp.status_code == 409

    def test_trigger_with_bad_location(self, client):
        resp = post(client, "trigger", {"location": {"lat": "north"}})

        assert resp.status_code == 400

    def test_user_id_in_query_for_post(self, client):
        resp = client.post(URL, params={"userId": "u9"}, json={"action": "trigger", "data": {}})

        assert resp.status_code == 200
        assert resp.json()["emergency"]["userId"] == "u9"

    def test_missing_user_id_on_post(self, client):
        resp = client.post(URL, json={"action": "trigger", "data": {}})

        assert resp.status_code == 400

    def test_malformed_json(self, client):
        resp = client.post(URL, content="{not json", headers={"Content-Type": "application/json"})

        assert resp.status_code == 400

    def test_unknown_post_action(self, client):
        assert post(client, "delete-everything").status_code == 400

    def test_update_settings(self, client):
        resp = post(client, "update-settings", {"triggerMethod": "voice", "quietHours": {"enabled": True, "startTime": "21:30", "endTime": "06:00"}})

        assert resp.status_code == 200
        settings = resp.json()["settings"]
        assert settings["triggerMethod"] == "voice"
        assert settings["quietHours"]["startTime"] == "21:30"
        assert settings["isEnabled"] is True

    def test_add_contact(self, client):
        resp = post(client, "add-contact", {"name": "Mother", "phone": "090-1111-2222", "relationship": "mother", "isPrimary": True})

        assert resp.status_code == 201
        contact = resp.json()["contact"]
        assert contact["id"]
        assert contact["createdAt"]
        assert contact["isPrimary"] is True

    def test_add_contact_missing_fields(self, client):
        assert post(client, "add-contact", {"name": "Mother"}).status_code == 400

    def test_update_contact(self, client):
        mother, _ = add_family(client)

        resp = put(client, "update-contact", {"id": mother["id"], "phone": "090-0000-1111"})

        assert resp.status_code == 200
        assert resp.json()["contact"]["phone"] == "090-0000-1111"
        assert resp.json()["contact"]["id"] == mother["id"]

    def test_update_unknown_contact_leaves_list_alone(self, client):
        add_family(client)
        before = client.get(URL, params={"userId": "u1", "action": "settings"}).json()["settings"]["contacts"]

        resp = put(client, "update-contact", {"id": "missing", "name": "Stranger"})

        assert resp.status_code == 404
        assert resp.json()["error"] == "Contact not found"
        after = client.get(URL, params={"userId": "u1", "action": "settings"}).json()["settings"]["contacts"]
        assert after == before

    def test_update_contact_requires_id(self, client):
        assert put(client, "update-contact", {"name": "Nobody"}).status_code == 400

    def test_resolve_without_active(self, client):
        resp = put(client, "resolve-emergency", {"resolution": "ok"})

        assert resp.status_code == 404
        assert resp.json()["error"] == "No active emergency found"

    def test_trigger_then_resolve(self, client):
        emergency = post(client, "trigger").json()["emergency"]

        resp = put(client, "resolve-emergency", {"resolution": "Family arrived"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Emergency resolved"
        assert body["emergency"]["id"] == emergency["id"]
        assert body["emergency"]["status"] == "resolved"
        assert body["emergency"]["resolution"] == "Family arrived"
        assert body["emergency"]["resolvedAt"] is not None

        history = client.get(URL, params={"userId": "u1", "action": "history"}).json()["history"]
        assert len(history) == 1
        assert history[0]["resolvedAt"] is not None
        status = client.get(URL, params={"userId": "u1", "action": "status"}).json()["status"]
        assert status["hasActiveEmergency"] is False
        assert status["lastTriggered"] == emergency["timestamp"]

    def test_unknown_put_action(self, client):
        assert put(client, "teleport").status_code == 400


class TestProtocol:

    def test_unsupported_method(self, client):
        resp = client.delete(URL, params={"userId": "u1"})

        assert resp.status_code == 405
        assert resp.json()["success"] is False

    def test_plain_options(self, client):
        resp = client.options(URL)

        assert resp.status_code == 200
        assert resp.content == b""

    def test_cors_preflight(self, client):
        resp = client.options(URL, headers={
            "Origin": "https://example.org",
            "Access-Control-Request-Method": "POST",
        })

        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"
        assert resp.content == b""

    def test_cors_preflight_with_authorization_header(self, client):
        resp = client.options(URL, headers={
            "Origin": "https://example.org",
            "Access-Control-Request-Method": "PUT",
            "Access-Control-Request-Headers": "authorization, content-type",
        })

        assert resp.status_code == 200
        assert resp.content == b""
        assert "authorization" in resp.headers["access-control-allow-headers"].lower()
        assert "PUT" in resp.headers["access-control-allow-methods"]

    def test_cors_on_simple_request(self, client):
        resp = client.get(URL, params={"userId": "u1", "action": "status"}, headers={"Origin": "https://example.org"})

        assert resp.headers["access-control-allow-origin"] == "*"

    def test_internal_error_is_generic(self):
        broken = Mock()
        broken.get_settings.side_effect = RuntimeError("store exploded at 10.0.0.5")
        app.dependency_overrides[get_emergency_service] = lambda: broken
        try:
            with TestClient(app, raise_server_exceptions=False) as client:
                resp = client.get(URL, params={"userId": "u1", "action": "settings"})
        finally:
            app.dependency_overrides.clear()

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": "Internal server error"}

    def test_service_runs_outside_the_event_loop(self):
        seen = []

        def get_settings(user_id):
            try:
                asyncio.get_running_loop()
                seen.append("event loop")
            except RuntimeError:
                seen.append("worker thread")
            return EmergencySettings()

        service = Mock()
        service.get_settings.side_effect = get_settings
        app.dependency_overrides[get_emergency_service] = lambda: service
        try:
            with TestClient(app) as client:
                resp = client.get(URL, params={"userId": "u1", "action": "settings"})
        finally:
            app.dependency_overrides.clear()

        assert resp.status_code == 200
        assert seen == ["worker thread"]

    def test_health(self, client):
        resp = client.get("/health")

        assert resp.status_code == 200
        assert resp.json()["success"] is True
