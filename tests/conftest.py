# tests/conftest.py
import pytest

from brokerdesk.config import get_settings


@pytest.fixture(autouse=True)
def _settings_env(monkeypatch):
    """Settings mínimos sin depender de un .env real."""
    monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "test-anon-key")
    monkeypatch.setenv("TWILIO_WHATSAPP_NUMBER", "whatsapp:+10000000000")
    monkeypatch.setenv("CURRENCY_SYMBOL", "₦")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
