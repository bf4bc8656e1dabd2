"""
Serialized build pipeline: gate, checkout, generate, notify.
"""

from sitebuild.core.config import Settings
from sitebuild.core.exceptions import BuildInProgressError, CheckoutError, GenerateError
from sitebuild.core.logging import get_logger
from sitebuild.models.build import BuildOutcome, BuildTranscript, TriggerSource
from sitebuild.models.target import BranchTarget
from sitebuild.services.git import GitCheckout
from sitebuild.services.hugo import HugoGenerator
from sitebuild.services.mailer import MailNotifier
from sitebuild.state.gate import BuildGate

logger = get_logger(__name__)


class SiteBuilder:
    """Runs one build at a time, whatever triggered it."""

    def __init__(
        self,
        gate: BuildGate,
        checkout: GitCheckout,
        generator: HugoGenerator,
        notifier: MailNotifier,
    ):
        self._gate = gate
        self._checkout = checkout
        self._generator = generator
        self._notifier = notifier

    @classmethod
    def from_settings(cls, settings: Settings, gate: BuildGate | None = None) -> "SiteBuilder":
        return cls(
            gate=gate or BuildGate(),
            checkout=GitCheckout(
                settings.repo_url,
                settings.checkout_dir,
                git_path=settings.git_path,
                timeout=settings.git_timeout,
            ),
            generator=HugoGenerator(settings.hugo_path, settings.checkout_dir, timeout=settings.hugo_timeout),
            notifier=MailNotifier.from_settings(settings),
        )

    @property
    def gate(self) -> BuildGate:
        return self._gate

    async def attempt_build(self, source: TriggerSource, target: BranchTarget) -> BuildOutcome:
        """
        Build ``target`` unless another build is running.

        A rejected attempt only logs a warning. Otherwise the gate is released
        on every exit path and the outcome is handed to the notifier.
        """
        transcript = BuildTranscript(enabled=self._notifier.enabled)
        succeeded = False
        try:
            with self._gate.claim(target.branch):
                try:
                    succeeded = await self._run(transcript, source, target)
                except Exception as e:  # noqa: BLE001
                    logger.exception(f"Unexpected error building {target.branch}")
                    transcript.write(f"unexpected error: {e}")
        except BuildInProgressError:
            logger.warning(
                f"Already a build running ({self._gate.current_branch}), "
                f"aborting {target.name} build of {target.branch} ({source.value})"
            )
            return BuildOutcome.SKIPPED

        await self._notifier.notify(transcript, source, succeeded)
        return BuildOutcome.SUCCEEDED if succeeded else BuildOutcome.FAILED

    async def _run(self, transcript: BuildTranscript, source: TriggerSource, target: BranchTarget) -> bool:
        transcript.write(f"building {target.branch}...")

        try:
            await self._checkout.ensure_branch(target.branch)
        except CheckoutError as e:
            transcript.write(f"error during checkout: {e}")
            return False
        logger.info(f"Checkout of {target.branch} OK")

        try:
            output = await self._generator.generate(target.output_dir, target.base_url, target.include_drafts)
        except GenerateError as e:
            transcript.write(f"error during build: {e}")
            return False
        transcript.write(output.rstrip())

        transcript.write(f"build of {target.branch} finished ({source.value})")
        return True
