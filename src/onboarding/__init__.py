"""
ServiceFlow Creator Onboarding.

Six-step linear wizard a creator completes before reaching their dashboard:

1. Profile - bio, location, languages (autosaved)
2. Specialization - categories with skill levels
3. Portfolio - 6-10 images or videos
4. Pricing - service packages
5. Availability - weekly hours
6. Banking - payout details

Progress is persisted after every advance so the wizard resumes where the
creator left off.
"""

from .state import CreatorProfile, OnboardingSequencer, OnboardingStep, TransitionError
from .store import PersistenceError

__all__ = [
    "CreatorProfile",
    "OnboardingSequencer",
    "OnboardingStep",
    "PersistenceError",
    "TransitionError",
]
