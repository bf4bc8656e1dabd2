"""
Application configuration using pydantic-settings.
All environment variables are validated and typed.
"""

import os

from pydantic_settings import BaseSettings
from pydantic import field_validator, model_validator

from sitebuild.core.logging import get_logger
from sitebuild.models.target import BranchTarget, DispatchMode

logger = get_logger(__name__)

_TRUE_VALUES = {"1", "t", "true", "y", "yes", "on"}
_FALSE_VALUES = {"0", "f", "false", "n", "no", "off"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Source repository
    repo_url: str
    live_branch: str
    beta_branch: str

    # Public base URLs passed to hugo
    live_base_url: str = ""
    beta_base_url: str = ""

    # Webhook secret shared with GitHub
    github_sec_token: str | None = None

    # HTTP listener ("host:port", empty host binds all interfaces)
    bind_address: str = ":8080"

    # Cron expressions, empty disables the schedule
    live_build_cron: str = ""
    beta_build_cron: str = ""

    # Whether a webhook build blocks the HTTP response
    live_webhook_dispatch: DispatchMode = DispatchMode.SYNC
    beta_webhook_dispatch: DispatchMode = DispatchMode.ASYNC

    # Filesystem layout
    checkout_dir: str = "/data"
    live_out: str = "/live"
    beta_out: str = "/beta"

    # External tools
    git_path: str = "git"
    hugo_path: str = "hugo"
    git_timeout: float | None = 300.0
    hugo_timeout: float | None = 600.0

    # Mail relay
    mail_smtp_server: str | None = None
    mail_smtp_port: int = 587
    mail_smtp_username: str | None = None
    mail_smtp_password: str | None = None
    mail_sender: str | None = None
    mail_recipients: str | None = None
    mail_push_success: bool = False
    mail_cron_success: bool = False
    mail_timeout: float = 30.0

    log_level: str = "INFO"

    @property
    def mail_recipient_list(self) -> list[str]:
        """Parse comma-separated recipients."""
        if not self.mail_recipients:
            return []
        return [r.strip() for r in self.mail_recipients.split(",") if r.strip()]

    @property
    def mail_configured(self) -> bool:
        """Mail is sent only with a relay and at least one recipient."""
        return bool(self.mail_smtp_server) and bool(self.mail_recipient_list)

    @property
    def listen_host(self) -> str:
        host = self.bind_address.rpartition(":")[0]
        return host or "0.0.0.0"

    @property
    def listen_port(self) -> int:
        return int(self.bind_address.rpartition(":")[2])

    @property
    def live_target(self) -> BranchTarget:
        return BranchTarget(
            name="live",
            branch=self.live_branch,
            output_dir=self.live_out,
            base_url=self.live_base_url,
            include_drafts=False,
            webhook_dispatch=self.live_webhook_dispatch,
            schedule=self.live_build_cron,
        )

    @property
    def beta_target(self) -> BranchTarget:
        return BranchTarget(
            name="beta",
            branch=self.beta_branch,
            output_dir=self.beta_out,
            base_url=self.beta_base_url,
            include_drafts=True,
            webhook_dispatch=self.beta_webhook_dispatch,
            schedule=self.beta_build_cron,
        )

    @property
    def targets(self) -> tuple[BranchTarget, BranchTarget]:
        """Get the live and beta branch targets."""
        return self.live_target, self.beta_target

    @field_validator("mail_push_success", "mail_cron_success", mode="before")
    @classmethod
    def _parse_flag(cls, value: object) -> bool:
        if isinstance(value, bool):
            return value
        if value is None:
            return False
        cleaned = str(value).strip().lower()
        if cleaned in _TRUE_VALUES:
            return True
        if cleaned and cleaned not in _FALSE_VALUES:
            logger.warning(f"Invalid boolean value {value!r}, treating as false.")
        return False

    @field_validator("live_build_cron", "beta_build_cron", "live_base_url", "beta_base_url", mode="before")
    @classmethod
    def _strip(cls, value: str | None) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("git_timeout", "hugo_timeout", mode="after")
    @classmethod
    def _zero_means_unbounded(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            return None
        return value

    @field_validator("bind_address")
    @classmethod
    def _check_bind_address(cls, value: str) -> str:
        cleaned = value.strip()
        _, sep, port = cleaned.rpartition(":")
        if not sep or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(f"bind address must look like 'host:port', got {value!r}")
        return cleaned

    @model_validator(mode="after")
    def _check_branches(self):
        """A pushed branch must map to at most one target."""
        if self.live_branch == self.beta_branch:
            raise ValueError("LIVE_BRANCH and BETA_BRANCH must differ")
        return self

    model_config = {
        "env_file": os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), ".env"),
        "env_file_encoding": "utf-8",
        "env_ignore_empty": True,
        "extra": "ignore",
    }
