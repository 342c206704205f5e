from unittest.mock import MagicMock, patch

import pytest
from firebase_admin import messaging

from newsdesk.exceptions import NotificationError
from newsdesk.models import Device
from newsdesk.news.services.notifier import MULTICAST_BATCH_SIZE, PushNotifier, build_notifier


def send_result(success, exception=None):
    return MagicMock(success=success, exception=exception)


@pytest.fixture
def push_settings(test_settings):
    test_settings.push_enabled = True
    return test_settings


@pytest.fixture
def notifier(push_settings):
    return PushNotifier(push_settings, app=MagicMock(name="firebase-app"))


@pytest.fixture
def devices(test_db):
    test_db.add_all([
        Device(token="token-all", categories=[], language=None),
        Device(token="token-india", categories=["India"], language="en"),
        Device(token="token-sports", categories=["Sports"], language="en"),
        Device(token="token-hindi", categories=["India"], language="hi"),
    ])
    test_db.commit()


class TestPushNotifier:
    def test_sends_to_subscribed_devices(self, notifier, test_db, devices, make_article):
        article = make_article("Earthquake shakes Delhi", summary="Tremors felt across NCR")
        response = MagicMock(success_count=2, responses=[send_result(True), send_result(True)])

        with patch("newsdesk.news.services.notifier.messaging.send_each_for_multicast", return_value=response) as send:
            delivered = notifier.notify_breaking(test_db, article)

        assert delivered == 2
        message = send.call_args[0][0]
        assert sorted(message.tokens) == ["token-all", "token-india"]
        assert message.notification.title == "Breaking: Earthquake shakes Delhi"
        assert message.notification.body == "Tremors felt across NCR"
        assert message.data == {"article_id": str(article.id), "category": "India", "url": article.url}

    def test_removes_stale_tokens(self, notifier, test_db, devices, make_article):
        article = make_article("Flood alert for Assam")
        response = MagicMock(success_count=1, responses=[
            send_result(True),
            send_result(False, messaging.UnregisteredError("Requested entity was not found")),
        ])

        with patch("newsdesk.news.services.notifier.messaging.send_each_for_multicast", return_value=response) as send:
            delivered = notifier.notify_breaking(test_db, article)

        stale_token = send.call_args[0][0].tokens[1]
        assert delivered == 1
        assert test_db.query(Device).filter(Device.token == stale_token).count() == 0
        assert test_db.query(Device).count() == 3

    def test_transport_failure_raises_notification_error(self, notifier, test_db, devices, make_article):
        article = make_article("Flood alert for Assam")

        with patch(
            "newsdesk.news.services.notifier.messaging.send_each_for_multicast",
            side_effect=RuntimeError("connection reset"),
        ):
            with pytest.raises(NotificationError):
                notifier.notify_breaking(test_db, article)

    def test_no_subscribers_sends_nothing(self, notifier, test_db, make_article):
        article = make_article("Flood alert for Assam")

        with patch("newsdesk.news.services.notifier.messaging.send_each_for_multicast") as send:
            assert notifier.notify_breaking(test_db, article) == 0

        send.assert_not_called()

    def test_disabled_without_firebase_credentials(self, push_settings, test_db, devices, make_article):
        notifier = PushNotifier(push_settings)
        article = make_article("Flood alert for Assam")

        with patch("newsdesk.news.services.notifier.initialize_firebase", return_value=None), \
                patch("newsdesk.news.services.notifier.messaging.send_each_for_multicast") as send:
            assert notifier.enabled is False
            assert notifier.notify_breaking(test_db, article) is None

        send.assert_not_called()

    def test_firebase_init_is_attempted_once(self, push_settings, test_db, make_article):
        notifier = PushNotifier(push_settings)
        article = make_article("Flood alert for Assam")

        with patch("newsdesk.news.services.notifier.initialize_firebase", return_value=None) as init:
            for _ in range(3):
                assert notifier.notify_breaking(test_db, article) is None

        init.assert_called_once_with(push_settings)

    def test_sends_in_batches_of_500(self, notifier, test_db, make_article):
        test_db.add_all([Device(token=f"token-{n:04d}", categories=[]) for n in range(501)])
        test_db.commit()
        article = make_article("Flood alert for Assam")

        def deliver_all(message, app=None):
            return MagicMock(
                success_count=len(message.tokens),
                responses=[send_result(True) for _ in message.tokens],
            )

        with patch(
            "newsdesk.news.services.notifier.messaging.send_each_for_multicast",
            side_effect=deliver_all,
        ) as send:
            delivered = notifier.notify_breaking(test_db, article)

        assert delivered == 501
        assert [len(call.args[0].tokens) for call in send.call_args_list] == [MULTICAST_BATCH_SIZE, 1]


def test_build_notifier_respects_push_flag(test_settings):
    assert build_notifier(test_settings) is None
    test_settings.push_enabled = True
    assert isinstance(build_notifier(test_settings), PushNotifier)
