# tests/test_dispatcher.py
import asyncio
from types import SimpleNamespace

import pytest
from tenacity import wait_none
from twilio.base.exceptions import TwilioRestException

from brokerdesk.errors import DispatchError, VoiceMessageNotFoundError
from brokerdesk.messaging import (
    DispatchJob,
    DispatchQueue,
    DownloadedMedia,
    ResponseDispatcher,
    WhatsAppSender,
)
from brokerdesk.messaging.dispatcher import FALLBACK_RESPONSE
from tests.fakes import FakeSender, FakeVoiceMessageRepository


def _answered_row(**overrides):
    row = {
        "id": "vm-1",
        "from_number": "whatsapp:+2348000000001",
        "to_number": "whatsapp:+2348000000002",
        "transcription_status": "completed",
        "response_text": "🏠 Great news! I found 1 apartment in Lagos for rent:",
        "response_audio_path": "audio_responses/vm-1/1.mp3",
    }
    row.update(overrides)
    return row


def test_send_response_replies_from_agent_number():
    repo = FakeVoiceMessageRepository({"vm-1": _answered_row()})
    sender = FakeSender()

    sid = asyncio.run(ResponseDispatcher(repository=repo, sender=sender).send_response("vm-1"))

    assert sid.startswith("SM")
    assert sender.sent == [
        {
            "from": "whatsapp:+2348000000002",
            "to": "whatsapp:+2348000000001",
            "body": "🏠 Great news! I found 1 apartment in Lagos for rent:",
        }
    ]
    assert repo.rows["vm-1"]["response_sent"] is True


def test_send_response_uses_fallback_text():
    repo = FakeVoiceMessageRepository({"vm-1": _answered_row(response_text=None)})
    sender = FakeSender()

    asyncio.run(ResponseDispatcher(repository=repo, sender=sender).send_response("vm-1"))

    assert sender.sent[0]["body"] == FALLBACK_RESPONSE


def test_send_response_defaults_sender_number():
    repo = FakeVoiceMessageRepository({"vm-1": _answered_row(to_number=None)})
    sender = FakeSender()

    asyncio.run(ResponseDispatcher(repository=repo, sender=sender).send_response("vm-1"))

    assert sender.sent[0]["from"] == "whatsapp:+10000000000"


def test_send_response_unknown_message():
    dispatcher = ResponseDispatcher(repository=FakeVoiceMessageRepository(), sender=FakeSender())

    with pytest.raises(VoiceMessageNotFoundError):
        asyncio.run(dispatcher.send_response("missing"))


def test_queue_records_success_and_failure():
    repo = FakeVoiceMessageRepository(
        {"vm-1": _answered_row(), "vm-2": _answered_row(id="vm-2")}
    )
    ok = DispatchQueue(ResponseDispatcher(repository=repo, sender=FakeSender()))
    broken = DispatchQueue(
        ResponseDispatcher(
            repository=repo,
            sender=FakeSender(error=DispatchError("Twilio error: invalid number", status=400)),
        )
    )

    async def run():
        ok.submit(DispatchJob(voice_message_id="vm-1"))
        broken.submit(DispatchJob(voice_message_id="vm-2"))
        return await ok.drain(), await broken.drain()

    ok_results, broken_results = asyncio.run(run())

    assert ok_results[0].success is True
    assert ok.results["vm-1"].message_sid
    assert ok.failed() == []

    assert broken_results[0].success is False
    assert broken.failed()[0].error == "Twilio error: invalid number"
    assert "response_sent" not in repo.rows["vm-2"]
    assert broken.pending == 0


def test_drain_returns_sends_finished_before_it():
    repo = FakeVoiceMessageRepository({"vm-1": _answered_row()})
    queue = DispatchQueue(ResponseDispatcher(repository=repo, sender=FakeSender()))

    async def run():
        task = queue.submit(DispatchJob(voice_message_id="vm-1"))
        await task
        assert queue.pending == 0
        return await queue.drain()

    results = asyncio.run(run())

    assert [r.voice_message_id for r in results] == ["vm-1"]
    assert results[0].success is True


def test_results_keep_only_most_recent():
    rows = {f"vm-{i}": _answered_row(id=f"vm-{i}") for i in range(5)}
    queue = DispatchQueue(
        ResponseDispatcher(repository=FakeVoiceMessageRepository(rows), sender=FakeSender()),
        max_results=3,
    )

    async def run():
        for i in range(5):
            await queue.submit(DispatchJob(voice_message_id=f"vm-{i}"))
        return await queue.drain()

    results = asyncio.run(run())

    assert list(queue.results) == ["vm-2", "vm-3", "vm-4"]
    assert len(results) == 3


def test_drain_without_jobs():
    queue = DispatchQueue(ResponseDispatcher(repository=FakeVoiceMessageRepository(), sender=FakeSender()))

    assert asyncio.run(queue.drain()) == []


class _FlakyMessages:
    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0

    def create(self, from_, to, body):
        self.calls += 1
        if self.calls <= self.failures:
            raise TwilioRestException(503, "https://api.twilio.com", msg="Service unavailable")
        return SimpleNamespace(sid="SM123")


def test_sender_retries_transient_errors():
    messages = _FlakyMessages(failures=2)
    sender = WhatsAppSender(client=SimpleNamespace(messages=messages), max_attempts=3, wait=wait_none())

    sid = asyncio.run(sender.send_text("whatsapp:+1", "whatsapp:+2", "hello"))

    assert sid == "SM123"
    assert messages.calls == 3


def test_sender_gives_up_after_max_attempts():
    messages = _FlakyMessages(failures=5)
    sender = WhatsAppSender(client=SimpleNamespace(messages=messages), max_attempts=2, wait=wait_none())

    with pytest.raises(DispatchError, match="Service unavailable"):
        asyncio.run(sender.send_text("whatsapp:+1", "whatsapp:+2", "hello"))

    assert messages.calls == 2


@pytest.mark.parametrize(
    "content_type,filename",
    [
        ("audio/ogg", "audio.ogg"),
        ("audio/ogg; codecs=opus", "audio.ogg"),
        ("audio/mpeg", "audio.mpeg"),
    ],
)
def test_downloaded_media_filename(content_type, filename):
    assert DownloadedMedia(content=b"x", content_type=content_type).filename == filename
