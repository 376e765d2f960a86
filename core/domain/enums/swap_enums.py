from __future__ import annotations

from enum import StrEnum


class SwapStage(StrEnum):
    """
    Lifecycle of a single swap execution.

    pending -> approving -> approved -> quoting -> submitting -> confirmed,
    or failed from any stage.
    """

    PENDING = "pending"
    APPROVING = "approving"
    APPROVED = "approved"
    QUOTING = "quoting"
    SUBMITTING = "submitting"
    CONFIRMED = "confirmed"
    FAILED = "failed"
