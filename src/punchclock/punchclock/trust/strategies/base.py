from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..model import TrustEvidence, TrustResult


class TrustStrategy(ABC):
    """Strategy Pattern: one source of evidence that may establish trust."""

    @abstractmethod
    def assess(self, evidence: TrustEvidence) -> Optional[TrustResult]:
        """Return a Trusted result, or None to defer to the next strategy."""

        raise NotImplementedError
