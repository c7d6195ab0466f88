"""Request result models"""

from rebound.domain.models.attempt_result import AttemptResult
from rebound.domain.models.outcome import Outcome

__all__ = ["AttemptResult", "Outcome"]
