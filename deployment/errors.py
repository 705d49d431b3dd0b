"""
Errors raised while deploying and bootstrapping the escrow contracts.

None of these are recovered locally: every submission is a real side effect
on a shared ledger, so a failed step aborts the run and the operator decides
what to do after inspecting what actually landed on chain.
"""

from typing import Any, Optional


class DeploymentError(Exception):
    """Base class for every error raised by a deployment or bootstrap run."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.step: Optional[int] = None
        self.name: Optional[str] = None
        self.completed: Any = None

    def at(self, step: int, name: str, completed: Any) -> "DeploymentError":
        """Attach the failing step and the results completed before it."""
        self.step = step
        self.name = name
        self.completed = completed
        return self

    def __str__(self):
        if self.step is None:
            return self.message
        return f"step {self.step} ({self.name}): {self.message}"


class IdentityUnavailable(DeploymentError):
    pass


class LedgerUnavailable(DeploymentError):
    pass


class ConfigError(DeploymentError):
    pass


class PlanError(DeploymentError):
    pass


class ArtifactNotFound(DeploymentError):
    pass


class InvalidReference(DeploymentError):
    def __init__(self, reference: str, message: Optional[str] = None):
        super().__init__(message or f"reference to unresolved name '{reference}'")
        self.reference = reference


class SubmissionRejected(DeploymentError):
    """The ledger refused the transaction before it was mined."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class CreationFailed(DeploymentError):
    def __init__(self, reason: str):
        super().__init__(f"creation failed: {reason}")
        self.reason = reason


class CallFailed(DeploymentError):
    def __init__(self, reason: str):
        super().__init__(f"call failed: {reason}")
        self.reason = reason


class UnexpectedReceiptShape(DeploymentError):
    """The transaction succeeded but did not emit the expected event."""

    def __init__(self, expected: Optional[str], found):
        found = list(found)
        wanted = expected or "any decoded event"
        super().__init__(f"expected {wanted} in receipt, found {found or 'no events'}")
        self.expected = expected
        self.found = found


class ConfirmationTimeout(DeploymentError):
    def __init__(self, blocks_waited: int, tx_hash: Optional[str] = None):
        super().__init__(f"no confirmation after {blocks_waited} blocks (tx {tx_hash})")
        self.blocks_waited = blocks_waited
        self.tx_hash = tx_hash
