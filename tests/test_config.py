"""tests/test_config.py – Settings.from_env."""
from decimal import Decimal

from foodpos.config import Settings


def test_defaults(monkeypatch):
    for name in ("DATABASE_URL", "TAX_RATE", "TRUST_CLIENT_TOTALS", "ALLOW_TRANSACTION_DELETE", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)
    s = Settings.from_env()
    assert s.database_url == "sqlite:///./foodpos.db"
    assert s.tax_rate == Decimal("0")
    assert s.trust_client_totals is True
    assert s.allow_transaction_delete is False
    assert s.cors_origins == ["*"]


def test_overrides(monkeypatch):
    monkeypatch.setenv("TAX_RATE", "0.11")
    monkeypatch.setenv("TRUST_CLIENT_TOTALS", "false")
    monkeypatch.setenv("ALLOW_TRANSACTION_DELETE", "yes")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = Settings.from_env()
    assert s.tax_rate == Decimal("0.11")
    assert s.trust_client_totals is False
    assert s.allow_transaction_delete is True
    assert s.cors_origins == ["http://a.test", "http://b.test"]
    assert s.log_level == "DEBUG"
