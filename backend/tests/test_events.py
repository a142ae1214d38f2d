"""Tests for the Event lifecycle endpoints."""
from tests.conftest import (
    create_published_event,
    create_test_category,
    create_test_event,
    create_test_user,
    event_payload,
    future,
    publish,
)


class TestEventCreate:
    """Initiator creates events."""

    def test_create_event_defaults(self, client):
        user = create_test_user(client)
        category = create_test_category(client)
        data = create_test_event(client, user["id"], category["id"])
        assert data["state"] == "PENDING"
        assert data["paid"] is False
        assert data["participant_limit"] == 0
        assert data["request_moderation"] is True
        assert data["published_on"] is None
        assert data["confirmed_requests"] == 0
        assert data["views"] == 0
        assert data["initiator"]["id"] == user["id"]
        assert data["category"]["id"] == category["id"]
        assert data["location"] == {"lat": 55.75, "lon": 37.62}

    def test_create_event_explicit_options(self, client):
        user = create_test_user(client)
        category = create_test_category(client)
        data = create_test_event(
            client, user["id"], category["id"],
            paid=True, participant_limit=5, request_moderation=False,
        )
        assert data["paid"] is True
        assert data["participant_limit"] == 5
        assert data["request_moderation"] is False

    def test_create_event_too_soon(self, client):
        user = create_test_user(client)
        category = create_test_category(client)
        resp = client.post(
            f"/users/{user['id']}/events/",
            json=event_payload(category["id"], event_date=future(1)),
        )
        assert resp.status_code == 400
        assert resp.json()["status"] == "BAD_REQUEST"

    def test_create_event_unknown_category(self, client):
        user = create_test_user(client)
        resp = client.post(f"/users/{user['id']}/events/", json=event_payload("missing-category"))
        assert resp.status_code == 404

    def test_create_event_unknown_user(self, client):
        category = create_test_category(client)
        resp = client.post("/users/missing-user/events/", json=event_payload(category["id"]))
        assert resp.status_code == 404

    def test_create_event_short_annotation(self, client):
        user = create_test_user(client)
        category = create_test_category(client)
        resp = client.post(
            f"/users/{user['id']}/events/",
            json=event_payload(category["id"], annotation="too short"),
        )
        assert resp.status_code == 422

    def test_create_event_negative_limit(self, client):
        user = create_test_user(client)
        category = create_test_category(client)
        resp = client.post(
            f"/users/{user['id']}/events/",
            json=event_payload(category["id"], participant_limit=-1),
        )
        assert resp.status_code == 422


class TestOwnerUpdate:
    """Initiator edits and review actions."""

    def _setup(self, client):
        user = create_test_user(client)
        category = create_test_category(client)
        event = create_test_event(client, user["id"], category["id"])
        return user, category, event

    def test_cancel_review_then_send_to_review(self, client):
        user, _, event = self._setup(client)
        url = f"/users/{user['id']}/events/{event['id']}"

        resp = client.patch(url, json={"state_action": "CANCEL_REVIEW"})
        assert resp.status_code == 200
        assert resp.json()["state"] == "CANCELED"

        resp = client.patch(url, json={"state_action": "SEND_TO_REVIEW"})
        assert resp.status_code == 200
        assert resp.json()["state"] == "PENDING"

    def test_send_to_review_while_pending_is_noop(self, client):
        user, _, event = self._setup(client)
        resp = client.patch(
            f"/users/{user['id']}/events/{event['id']}",
            json={"state_action": "SEND_TO_REVIEW"},
        )
        assert resp.status_code == 200
        assert resp.json()["state"] == "PENDING"

    def test_partial_update_keeps_other_fields(self, client):
        user, _, event = self._setup(client)
        resp = client.patch(
            f"/users/{user['id']}/events/{event['id']}",
            json={"title": "Blues Night", "participant_limit": 3},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["title"] == "Blues Night"
        assert data["participant_limit"] == 3
        assert data["annotation"] == event["annotation"]
        assert data["description"] == event["description"]
        assert data["location"] == event["location"]

    def test_update_category_and_location(self, client):
        user, _, event = self._setup(client)
        other = create_test_category(client, name="Lectures")
        resp = client.patch(
            f"/users/{user['id']}/events/{event['id']}",
            json={"category": other["id"], "location": {"lat": 10.0, "lon": 20.0}},
        )
        assert resp.status_code == 200
        assert resp.json()["category"]["id"] == other["id"]
        assert resp.json()["location"] == {"lat": 10.0, "lon": 20.0}

    def test_published_event_is_immutable(self, client):
        user, _, event = self._setup(client)
        publish(client, event["id"])
        resp = client.patch(
            f"/users/{user['id']}/events/{event['id']}",
            json={"title": "Changed title"},
        )
        assert resp.status_code == 409
        detail = client.get(f"/users/{user['id']}/events/{event['id']}").json()
        assert detail["title"] == event["title"]

    def test_admin_action_token_on_owner_path(self, client):
        user, _, event = self._setup(client)
        resp = client.patch(
            f"/users/{user['id']}/events/{event['id']}",
            json={"state_action": "PUBLISH_EVENT"},
        )
        assert resp.status_code == 409

    def test_owner_date_too_soon(self, client):
        user, _, event = self._setup(client)
        resp = client.patch(
            f"/users/{user['id']}/events/{event['id']}",
            json={"event_date": future(1.5)},
        )
        assert resp.status_code == 400

    def test_non_owner_gets_not_found(self, client):
        _, _, event = self._setup(client)
        stranger = create_test_user(client, name="Stranger")
        resp = client.patch(
            f"/users/{stranger['id']}/events/{event['id']}",
            json={"title": "Hijacked title"},
        )
        assert resp.status_code == 404
        resp = client.get(f"/users/{stranger['id']}/events/{event['id']}")
        assert resp.status_code == 404

    def test_list_own_events(self, client):
        user = create_test_user(client)
        category = create_test_category(client)
        near = create_test_event(client, user["id"], category["id"], event_date=future(24))
        far = create_test_event(client, user["id"], category["id"], event_date=future(72))
        resp = client.get(f"/users/{user['id']}/events/")
        assert resp.status_code == 200
        assert [e["id"] for e in resp.json()] == [far["id"], near["id"]]

        resp = client.get(f"/users/{user['id']}/events/", params={"from": 1, "size": 1})
        assert [e["id"] for e in resp.json()] == [near["id"]]


class TestAdminUpdate:
    """Administrator moderation."""

    def test_publish_sets_published_on(self, client):
        user = create_test_user(client)
        category = create_test_category(client)
        event = create_test_event(client, user["id"], category["id"])
        data = publish(client, event["id"])
        assert data["state"] == "PUBLISHED"
        assert data["published_on"] is not None

    def test_publish_twice_conflict(self, client):
        _, event = create_published_event(client)
        resp = client.patch(f"/admin/events/{event['id']}", json={"state_action": "PUBLISH_EVENT"})
        assert resp.status_code == 409

    def test_publish_canceled_conflict(self, client):
        user = create_test_user(client)
        category = create_test_category(client)
        event = create_test_event(client, user["id"], category["id"])
        client.patch(f"/users/{user['id']}/events/{event['id']}", json={"state_action": "CANCEL_REVIEW"})
        resp = client.patch(f"/admin/events/{event['id']}", json={"state_action": "PUBLISH_EVENT"})
        assert resp.status_code == 409

    def test_reject_pending(self, client):
        user = create_test_user(client)
        category = create_test_category(client)
        event = create_test_event(client, user["id"], category["id"])
        resp = client.patch(f"/admin/events/{event['id']}", json={"state_action": "REJECT_EVENT"})
        assert resp.status_code == 200
        assert resp.json()["state"] == "CANCELED"

    def test_reject_published_conflict(self, client):
        _, event = create_published_event(client)
        resp = client.patch(f"/admin/events/{event['id']}", json={"state_action": "REJECT_EVENT"})
        assert resp.status_code == 409

    def test_admin_may_edit_published_event(self, client):
        _, event = create_published_event(client)
        resp = client.patch(f"/admin/events/{event['id']}", json={"title": "Edited by admin"})
        assert resp.status_code == 200
        assert resp.json()["title"] == "Edited by admin"
        assert resp.json()["state"] == "PUBLISHED"

    def test_admin_lead_time_is_one_hour(self, client):
        user = create_test_user(client)
        category = create_test_category(client)
        event = create_test_event(client, user["id"], category["id"])

        resp = client.patch(f"/admin/events/{event['id']}", json={"event_date": future(1.5)})
        assert resp.status_code == 200

        resp = client.patch(f"/admin/events/{event['id']}", json={"event_date": future(0.5)})
        assert resp.status_code == 400

    def test_unknown_action_conflict(self, client):
        user = create_test_user(client)
        category = create_test_category(client)
        event = create_test_event(client, user["id"], category["id"])
        resp = client.patch(f"/admin/events/{event['id']}", json={"state_action": "CANCEL_REVIEW"})
        assert resp.status_code == 409

    def test_missing_event(self, client):
        resp = client.patch("/admin/events/missing-event", json={"title": "Nothing here"})
        assert resp.status_code == 404
