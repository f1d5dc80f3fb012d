import pytest

from zapdesk.core.settings import settings

settings.debug = True
settings.log_level = "TRACE"
settings.lnurl_timeout = 2.0
settings.lnurl_cache_ttl = 300
settings.default_lightning_address = "fallback@example.org"
settings.zendesk_subdomain = "support.example.com"
settings.zendesk_email = None
settings.zendesk_api_token = None


@pytest.fixture
def zendesk_credentials(monkeypatch):
    monkeypatch.setattr(settings, "zendesk_email", "admin@example.com")
    monkeypatch.setattr(settings, "zendesk_api_token", "TEST_TOKEN")
