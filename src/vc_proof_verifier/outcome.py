"""
Verification outcome model.

Every verification attempt ends in exactly one of three states:
success, rejected (an expected negative result with a reason) or
fatal (the verification process itself could not complete).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OutcomeStatus(Enum):
    """Terminal state of a verification attempt."""

    SUCCESS = "success"
    REJECTED = "rejected"
    FATAL = "fatal"


class FailedCheck(Enum):
    """The pipeline stage that produced a negative outcome."""

    PROOF_SELECTION = "proof-selection"
    METHOD_RESOLUTION = "method-resolution"
    KEY_DECODING = "key-decoding"
    CONTROLLER_MATCH = "controller-match"
    SIGNATURE = "signature"


class ProofCheckError(Exception):
    """Raised by a pipeline stage when the credential fails its check."""

    check: FailedCheck = FailedCheck.PROOF_SELECTION

    def __init__(self, message: str, check: FailedCheck | None = None) -> None:
        super().__init__(message)
        if check is not None:
            self.check = check


@dataclass(frozen=True)
class VerificationOutcome:
    """Result of verifying a credential's embedded proof."""

    status: OutcomeStatus
    reason: str | None = None
    check: FailedCheck | None = None
    verification_method: str | None = None
    controller: str | None = None

    @classmethod
    def success(
        cls,
        verification_method: str | None = None,
        controller: str | None = None,
    ) -> VerificationOutcome:
        return cls(
            status=OutcomeStatus.SUCCESS,
            verification_method=verification_method,
            controller=controller,
        )

    @classmethod
    def rejected(
        cls,
        check: FailedCheck,
        reason: str,
        verification_method: str | None = None,
        controller: str | None = None,
    ) -> VerificationOutcome:
        return cls(
            status=OutcomeStatus.REJECTED,
            reason=reason,
            check=check,
            verification_method=verification_method,
            controller=controller,
        )

    @classmethod
    def fatal(
        cls,
        check: FailedCheck,
        reason: str,
        verification_method: str | None = None,
        controller: str | None = None,
    ) -> VerificationOutcome:
        return cls(
            status=OutcomeStatus.FATAL,
            reason=reason,
            check=check,
            verification_method=verification_method,
            controller=controller,
        )

    @property
    def is_success(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def is_rejected(self) -> bool:
        return self.status == OutcomeStatus.REJECTED

    @property
    def is_fatal(self) -> bool:
        return self.status == OutcomeStatus.FATAL

    def to_dict(self) -> dict[str, str | None]:
        """Serialize for JSON output."""
        return {
            "status": self.status.value,
            "reason": self.reason,
            "check": self.check.value if self.check else None,
            "verification_method": self.verification_method,
            "controller": self.controller,
        }
