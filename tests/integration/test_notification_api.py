import pytest

from modules.notifications.models import NotificationType
from modules.notifications.services import default_notification_service

pytestmark = pytest.mark.integration


@pytest.fixture()
def notes(shopper):
    service = default_notification_service()
    return [
        service.notify(shopper.user_id, NotificationType.ORDER, f"T{i}", "Message")
        for i in range(3)
    ]


class TestNotificationApi:
    def test_list_own_notifications(self, client_for, shopper, other_shopper, notes):
        assert len(client_for(shopper).get("/api/v1/notifications/").data["data"]) == 3
        assert client_for(other_shopper).get("/api/v1/notifications/").data["data"] == []

    def test_unread_count_and_mark_read(self, client_for, shopper, notes):
        client = client_for(shopper)
        response = client.post(f"/api/v1/notifications/{notes[0].id}/read/")
        assert response.status_code == 200
        assert response.data["data"]["is_read"] is True

        count = client.get("/api/v1/notifications/unread-count/").data["data"]["count"]
        assert count == 2
        unread = client.get("/api/v1/notifications/?unread=true").data["data"]
        assert len(unread) == 2

    def test_read_all(self, client_for, shopper, notes):
        client = client_for(shopper)
        response = client.post("/api/v1/notifications/read-all/")
        assert response.status_code == 200
        assert client.get("/api/v1/notifications/unread-count/").data["data"]["count"] == 0

    def test_reading_someone_elses_returns_404(self, client_for, other_shopper, notes):
        response = client_for(other_shopper).post(
            f"/api/v1/notifications/{notes[0].id}/read/"
        )
        assert response.status_code == 404
