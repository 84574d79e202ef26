# tests/test_speech_providers.py
import asyncio
from types import SimpleNamespace

import pytest

from brokerdesk.speech import (
    GroqSpeechProvider,
    OpenAISpeechProvider,
    get_speech_provider,
)


def test_openai_provider_requires_api_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "")

    with pytest.raises(ValueError):
        get_speech_provider("openai")


def test_groq_provider_requires_api_key(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "")

    with pytest.raises(ValueError):
        get_speech_provider("groq")


def test_unknown_provider():
    with pytest.raises(ValueError, match="no soportado"):
        get_speech_provider("azure")


def test_factory_reads_provider_from_settings(monkeypatch):
    monkeypatch.setenv("SPEECH_PROVIDER", "groq")
    monkeypatch.setenv("GROQ_API_KEY", "gsk-test")

    assert isinstance(get_speech_provider(), GroqSpeechProvider)


def test_openai_transcribe_sends_named_file():
    calls = []

    async def create(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(text="  3 bedroom flat in Lekki \n")

    provider = OpenAISpeechProvider(api_key="sk-test")
    provider.client = SimpleNamespace(
        audio=SimpleNamespace(transcriptions=SimpleNamespace(create=create))
    )

    text = asyncio.run(provider.transcribe(b"OggS", "audio.ogg", "audio/ogg"))

    assert text == "3 bedroom flat in Lekki"
    assert calls[0]["model"] == "whisper-1"
    assert calls[0]["file"] == ("audio.ogg", b"OggS", "audio/ogg")


def test_openai_synthesize_returns_mp3():
    async def create(**kwargs):
        assert kwargs["voice"] == "alloy"
        assert kwargs["response_format"] == "mp3"
        return SimpleNamespace(content=b"ID3")

    provider = OpenAISpeechProvider(api_key="sk-test")
    provider.client = SimpleNamespace(
        audio=SimpleNamespace(speech=SimpleNamespace(create=create))
    )

    audio = asyncio.run(provider.synthesize("hello"))

    assert audio.content == b"ID3"
    assert audio.content_type == "audio/mpeg"
    assert audio.extension == "mp3"
    assert audio.provider == "openai"
