"""
Tests for the client-side medicine reminder watcher.
"""

import threading
from datetime import datetime

import httpx
import pytest

from healthtrack.notifications import NotificationPermission
from healthtrack.reminder_client import (
    PERMISSION_PROMPT, MedicineReminderWatcher, MedicinesApi, ReminderSession, main, settings,
)
from healthtrack.schemas import MedicineResponse


def medicine(id=1, name="Aspirin", time="08:00", is_active=True, **fields) -> MedicineResponse:
    return MedicineResponse(id=id, user_id=1, name=name, time=time, is_active=is_active, **fields)


class FakeApi:
    def __init__(self, medicines=None):
        self.medicines = list(medicines or [])
        self.error = None
        self.calls = 0
        self.closed = False

    def list_medicines(self):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.medicines)

    def close(self):
        self.closed = True


class FakeNotifier:
    def __init__(self, permission=NotificationPermission.GRANTED, grant=NotificationPermission.GRANTED):
        self._permission = permission
        self._grant = grant
        self.shown = []
        self.requests = 0
        self.error = None

    def permission(self):
        return self._permission

    def request_permission(self):
        self.requests += 1
        self._permission = self._grant
        return self._permission

    def show(self, title, body, **options):
        if self.error:
            raise self.error
        self.shown.append((title, body, options))


class FakeMessenger:
    def __init__(self):
        self.messages = []

    def show(self, content, actions=None):
        self.messages.append((content, actions))


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def make_watcher(notifier, messenger):
    def _make(*medicines, **options):
        api = FakeApi(medicines)
        watcher = MedicineReminderWatcher(api, notifier, messenger, **options)
        watcher.refresh_medicines()
        return watcher

    return _make


def test_alert_fires_once_within_the_same_minute(make_watcher, notifier, messenger):
    watcher = make_watcher(medicine(name="Aspirin", time="08:00", dosage="75mg"))

    assert watcher.check_reminders(datetime(2026, 10, 19, 8, 0, 3)) == 1
    assert watcher.check_reminders(datetime(2026, 10, 19, 8, 0, 7)) == 0

    assert len(notifier.shown) == 1
    title, body, options = notifier.shown[0]
    assert "Aspirin" in body
    assert "75mg" in body
    assert options["tag"] == "med-reminder-1"
    assert len(messenger.messages) == 1
    assert "Aspirin" in messenger.messages[0][0]


def test_repeated_checks_in_one_minute_deliver_one_alert(make_watcher, notifier):
    watcher = make_watcher(medicine())

    fired = sum(watcher.check_reminders(datetime(2026, 10, 19, 8, 0, second)) for second in range(0, 60, 5))

    assert fired == 1
    assert len(notifier.shown) == 1


def test_alert_fires_again_on_the_next_day(make_watcher):
    watcher = make_watcher(medicine())

    assert watcher.check_reminders(datetime(2026, 10, 19, 8, 0)) == 1
    assert watcher.check_reminders(datetime(2026, 10, 20, 8, 0)) == 1


def test_no_alert_outside_the_configured_minute(make_watcher, notifier):
    watcher = make_watcher(medicine(time="08:00"))

    assert watcher.check_reminders(datetime(2026, 10, 19, 7, 59, 50)) == 0
    assert watcher.check_reminders(datetime(2026, 10, 19, 8, 1)) == 0
    assert notifier.shown == []


def test_untimed_and_inactive_medicines_never_alert(make_watcher, messenger):
    watcher = make_watcher(
        medicine(id=1, time=None),
        medicine(id=2, time="", name="Blank"),
        medicine(id=3, time="08:00", is_active=False),
    )

    assert watcher.check_reminders(datetime(2026, 10, 19, 8, 0)) == 0
    assert messenger.messages == []


def test_stored_time_is_zero_padded_before_comparison(make_watcher):
    watcher = make_watcher(medicine(time="8:05"))

    assert watcher.check_reminders(datetime(2026, 10, 19, 8, 5)) == 1


def test_invalid_stored_time_is_skipped(make_watcher):
    watcher = make_watcher(medicine(id=1, time="soon"), medicine(id=2, time="08:00"))

    assert watcher.check_reminders(datetime(2026, 10, 19, 8, 0)) == 1


def test_refresh_mid_minute_does_not_realert(make_watcher):
    watcher = make_watcher(medicine(id=7, name="Aspirin"))
    assert watcher.check_reminders(datetime(2026, 10, 19, 8, 0, 1)) == 1

    watcher.api.medicines = [medicine(id=7, name="Aspirin", dosage="100mg"), medicine(id=8, time="09:00")]
    watcher.refresh_medicines()

    assert watcher.check_reminders(datetime(2026, 10, 19, 8, 0, 40)) == 0


def test_denied_permission_falls_back_to_in_app_message(messenger):
    notifier = FakeNotifier(permission=NotificationPermission.DENIED)
    watcher = MedicineReminderWatcher(FakeApi([medicine()]), notifier, messenger)
    watcher.refresh_medicines()

    assert watcher.check_reminders(datetime(2026, 10, 19, 8, 0)) == 1
    assert notifier.shown == []
    assert len(messenger.messages) == 1


def test_notification_error_is_contained(make_watcher, notifier, messenger):
    notifier.error = RuntimeError("notification service crashed")
    watcher = make_watcher(medicine())

    assert watcher.check_reminders(datetime(2026, 10, 19, 8, 0)) == 1
    assert len(messenger.messages) == 1


def test_failed_poll_keeps_cached_medicines(make_watcher):
    watcher = make_watcher(medicine())
    watcher.api.error = httpx.ConnectError("connection refused")

    watcher.refresh_medicines()

    assert [m.name for m in watcher.medicines] == ["Aspirin"]
    assert watcher.check_reminders(datetime(2026, 10, 19, 8, 0)) == 1


def test_check_interval_over_a_minute_is_rejected():
    with pytest.raises(ValueError):
        MedicineReminderWatcher(FakeApi(), check_seconds=61)


def test_start_prompts_for_permission_without_requesting(messenger):
    notifier = FakeNotifier(permission=NotificationPermission.DEFAULT)
    watcher = MedicineReminderWatcher(FakeApi([medicine()]), notifier, messenger)

    watcher.start()
    try:
        assert watcher.running
        assert notifier.requests == 0
        content, actions = messenger.messages[0]
        assert content == PERMISSION_PROMPT
        assert set(actions) == {"Enable", "Later"}

        actions["Enable"]()

        assert notifier.requests == 1
        assert messenger.messages[-1][0] == "Awesome! You will be notified."
    finally:
        watcher.stop()
    assert not watcher.running


def test_blocked_permission_request_is_reported(messenger):
    notifier = FakeNotifier(permission=NotificationPermission.DEFAULT, grant=NotificationPermission.DENIED)
    watcher = MedicineReminderWatcher(FakeApi(), notifier, messenger)

    assert watcher.enable_notifications() == NotificationPermission.DENIED
    assert messenger.messages[-1][0] == "Notifications blocked."


def test_start_with_granted_permission_skips_prompt(notifier, messenger):
    watcher = MedicineReminderWatcher(FakeApi(), notifier, messenger)

    watcher.start()
    watcher.stop()

    assert messenger.messages == []
    assert watcher.api.calls == 1


def test_watcher_can_be_restarted_after_stop(notifier, messenger):
    watcher = MedicineReminderWatcher(FakeApi([medicine()]), notifier, messenger)

    watcher.start()
    watcher.stop()
    watcher.start()
    try:
        assert watcher.running
        assert watcher._scheduler.running
        assert len(watcher._scheduler.get_jobs()) == 2
    finally:
        watcher.stop()
    assert not watcher.running


def test_session_runs_watcher_only_while_token_is_set(notifier, messenger):
    apis = []

    def api_factory(token):
        apis.append(FakeApi([medicine()]))
        return apis[-1]

    session = ReminderSession(notifier, messenger, api_factory=api_factory)

    session.set_token("token-a")
    first = session.watcher
    assert first.running

    session.set_token("token-b")
    assert not first.running
    assert apis[0].closed
    assert session.watcher.running

    session.logout()
    assert session.watcher is None
    assert apis[1].closed


def test_main_watches_until_stopped(monkeypatch, notifier, messenger):
    monkeypatch.setattr(settings, "API_TOKEN", "token-a")
    tokens = []

    def api_factory(token):
        tokens.append(token)
        return FakeApi([medicine()])

    session = ReminderSession(notifier, messenger, api_factory=api_factory)
    stop = threading.Event()
    stop.set()

    main(session=session, stop_event=stop)

    assert tokens == ["token-a"]
    assert session.watcher is None


def test_main_requires_a_token(monkeypatch):
    monkeypatch.setattr(settings, "API_TOKEN", None)

    with pytest.raises(SystemExit):
        main(session=ReminderSession(api_factory=lambda token: FakeApi()))


def test_medicines_api_sends_bearer_token_and_parses_list():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer secret-token"
        assert request.url.path == "/api/medicines/"
        assert request.url.params["active_only"] == "true"
        return httpx.Response(200, json=[
            {"id": 3, "user_id": 1, "name": "Aspirin", "time": "08:00", "is_active": True},
        ])

    api = MedicinesApi("secret-token", base_url="http://testserver/api", transport=httpx.MockTransport(handler))

    medicines = api.list_medicines()
    api.close()

    assert [(m.id, m.name, m.time) for m in medicines] == [(3, "Aspirin", "08:00")]


def test_medicines_api_raises_on_server_error():
    api = MedicinesApi(
        "secret-token",
        base_url="http://testserver/api",
        transport=httpx.MockTransport(lambda request: httpx.Response(500)),
    )

    with pytest.raises(httpx.HTTPStatusError):
        api.list_medicines()
