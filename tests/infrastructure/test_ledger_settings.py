"""Tests for infrastructure settings."""

from unittest.mock import MagicMock

import pytest

from fundledger.infrastructure import settings as settings_module
from fundledger.infrastructure.settings import LedgerSettings

_ENV_VARS = (
    "LEDGER_NAMESPACE",
    "LEDGER_YTD_FUND",
    "LEDGER_IRA_PATTERN",
    "LEDGER_SWEEP_BUDGET_SECONDS",
)


@pytest.fixture
def fake_logger(monkeypatch) -> MagicMock:
    logger = MagicMock()
    monkeypatch.setattr(settings_module.dotenv, "load_dotenv", lambda: None)
    monkeypatch.setattr(settings_module, "get_app_logger", lambda: logger)
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return logger


def test_from_env_defaults(fake_logger) -> None:
    """Missing variables should fall back to the defaults."""
    settings = LedgerSettings.from_env()

    assert settings == LedgerSettings(
        namespace="users",
        ytd_fund="AGQ",
        ira_pattern="IRA",
        sweep_budget_seconds=300.0,
    )
    fake_logger.warning.assert_not_called()


def test_from_env_reads_values(monkeypatch, fake_logger) -> None:
    """Configured variables should be used as-is."""
    monkeypatch.setenv("LEDGER_NAMESPACE", " clients ")
    monkeypatch.setenv("LEDGER_YTD_FUND", "BND")
    monkeypatch.setenv("LEDGER_IRA_PATTERN", r"(?i)ira")
    monkeypatch.setenv("LEDGER_SWEEP_BUDGET_SECONDS", "12.5")

    settings = LedgerSettings.from_env()

    assert settings.namespace == "clients"
    assert settings.ytd_fund == "BND"
    assert settings.ira_pattern == r"(?i)ira"
    assert settings.sweep_budget_seconds == 12.5


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("LEDGER_IRA_PATTERN", "("),
        ("LEDGER_SWEEP_BUDGET_SECONDS", "soon"),
        ("LEDGER_SWEEP_BUDGET_SECONDS", "-1"),
    ],
)
def test_from_env_invalid_values_fall_back(
    monkeypatch,
    fake_logger,
    name,
    value,
) -> None:
    """Invalid values should log a warning and use the default."""
    monkeypatch.setenv(name, value)

    settings = LedgerSettings.from_env()

    assert settings.ira_pattern == "IRA"
    assert settings.sweep_budget_seconds == 300.0
    fake_logger.warning.assert_called_once()
