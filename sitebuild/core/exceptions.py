"""
Custom application exceptions.
"""


class SiteBuildError(Exception):
    """Base exception for site builder errors."""
    pass


class SignatureInvalidError(SiteBuildError):
    """Webhook signature is missing or does not match."""
    pass


class BuildInProgressError(SiteBuildError):
    """Another build holds the build gate."""
    pass


class CommandTimeoutError(SiteBuildError):
    """External command did not finish in time."""
    pass


class InvalidCronExpressionError(SiteBuildError):
    """Schedule expression could not be parsed."""
    pass


class MailDeliveryError(SiteBuildError):
    """Notification mail could not be delivered."""
    pass


class BuildStageError(SiteBuildError):
    """A build pipeline stage failed. Carries the captured tool output."""

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.output = output

    def __str__(self) -> str:
        if self.output:
            return f"{self.output.rstrip()}\n{self.message}"
        return self.message


class CheckoutError(BuildStageError):
    """Working copy could not be brought to the requested branch."""
    pass


class RepositoryStateError(CheckoutError):
    """Working copy is dirty or corrupt and needs an operator."""
    pass


class VcsOperationError(CheckoutError):
    """A clone, checkout or pull failed."""
    pass


class GenerateError(BuildStageError):
    """Site generator exited with an error."""
    pass
