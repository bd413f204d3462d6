# naturalization/__init__.py

from .eligibility import EvaluationResult, evaluate
from .models import Profile, Trip

__all__ = ["EvaluationResult", "Profile", "Trip", "evaluate"]
