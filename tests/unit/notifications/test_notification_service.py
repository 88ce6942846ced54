import pytest

from modules.notifications.exceptions import NotificationNotFound
from modules.notifications.models import NotificationType
from modules.notifications.services import LIST_LIMIT, default_notification_service

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return default_notification_service()


def _notify(service, recipient="shopper-1", title="Info"):
    return service.notify(recipient, NotificationType.SYSTEM, title, "Message")


class TestNotificationService:
    def test_list_newest_first(self, service):
        _notify(service, title="old")
        _notify(service, title="new")
        assert [n.title for n in service.list("shopper-1")] == ["new", "old"]

    def test_list_capped(self, service):
        for i in range(LIST_LIMIT + 5):
            _notify(service, title=f"n{i}")
        assert len(service.list("shopper-1", limit=500)) == LIST_LIMIT

    def test_unread_filter_and_count(self, service):
        first = _notify(service)
        _notify(service)
        service.mark_read(str(first.id), "shopper-1")
        assert service.count_unread("shopper-1") == 1
        assert len(service.list("shopper-1", unread_only=True)) == 1

    def test_mark_read_is_idempotent(self, service):
        note = _notify(service)
        once = service.mark_read(str(note.id), "shopper-1")
        twice = service.mark_read(str(note.id), "shopper-1")
        assert once.is_read and twice.is_read
        assert twice.read_at == once.read_at

    def test_cannot_read_someone_elses(self, service):
        note = _notify(service, recipient="shopper-2")
        with pytest.raises(NotificationNotFound):
            service.mark_read(str(note.id), "shopper-1")

    def test_mark_all_read(self, service):
        _notify(service)
        _notify(service)
        _notify(service, recipient="shopper-2")
        assert service.mark_all_read("shopper-1") == 2
        assert service.count_unread("shopper-1") == 0
        assert service.count_unread("shopper-2") == 1
