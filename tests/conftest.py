"""
Pytest configuration and shared fixtures.
"""

import os
import sys
import pytest
from unittest.mock import AsyncMock, MagicMock

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


# ============================================================================
# Environment Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def mock_env(monkeypatch, tmp_path):
    """Set up test environment variables."""
    monkeypatch.setenv("REPO_URL", "https://github.com/example/site.git")
    monkeypatch.setenv("LIVE_BRANCH", "main")
    monkeypatch.setenv("BETA_BRANCH", "staging")
    monkeypatch.setenv("LIVE_BASE_URL", "https://example.com/")
    monkeypatch.setenv("BETA_BASE_URL", "https://beta.example.com/")
    monkeypatch.setenv("GITHUB_SEC_TOKEN", "test_secret")
    monkeypatch.setenv("CHECKOUT_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("LIVE_OUT", str(tmp_path / "live"))
    monkeypatch.setenv("BETA_OUT", str(tmp_path / "beta"))
    for name in ("MAIL_SMTP_SERVER", "MAIL_RECIPIENTS", "MAIL_PUSH_SUCCESS", "MAIL_CRON_SUCCESS",
                 "LIVE_BUILD_CRON", "BETA_BUILD_CRON", "BIND_ADDRESS"):
        monkeypatch.delenv(name, raising=False)


# ============================================================================
# Model Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Settings built from the test environment."""
    from sitebuild.core.config import Settings
    return Settings()


@pytest.fixture
def live_target(settings):
    return settings.live_target


@pytest.fixture
def beta_target(settings):
    return settings.beta_target


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def mock_checkout():
    """GitCheckout double that always succeeds."""
    checkout = MagicMock()
    checkout.ensure_branch = AsyncMock(return_value="")
    return checkout


@pytest.fixture
def mock_generator():
    """HugoGenerator double that always succeeds."""
    generator = MagicMock()
    generator.generate = AsyncMock(return_value="Total in 42 ms\n")
    return generator


@pytest.fixture
def mock_notifier():
    """MailNotifier double with mail enabled."""
    notifier = MagicMock()
    notifier.enabled = True
    notifier.notify = AsyncMock()
    return notifier


@pytest.fixture
def gate():
    from sitebuild.state.gate import BuildGate
    return BuildGate()


@pytest.fixture
def builder(gate, mock_checkout, mock_generator, mock_notifier):
    """SiteBuilder wired to test doubles."""
    from sitebuild.services.builder import SiteBuilder
    return SiteBuilder(gate, mock_checkout, mock_generator, mock_notifier)
