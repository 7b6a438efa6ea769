"""
Onboarding State Management.

Drives the creator wizard through its six fixed steps. The step pointer on
creator_profiles records the furthest step reached; the sequencer tracks the
step currently in view on top of it.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Protocol


class OnboardingStep(IntEnum):
    """Wizard steps, in order."""
    PROFILE = 1
    SPECIALIZATION = 2
    PORTFOLIO = 3
    PRICING = 4
    AVAILABILITY = 5
    BANKING = 6


FIRST_STEP = OnboardingStep.PROFILE
LAST_STEP = OnboardingStep.BANKING

STEP_DETAILS: dict[OnboardingStep, dict[str, str]] = {
    OnboardingStep.PROFILE: {"title": "Profile", "description": "Complete your profile"},
    OnboardingStep.SPECIALIZATION: {"title": "Specialization", "description": "Select your skills"},
    OnboardingStep.PORTFOLIO: {"title": "Portfolio", "description": "Showcase your work"},
    OnboardingStep.PRICING: {"title": "Pricing", "description": "Set your rates"},
    OnboardingStep.AVAILABILITY: {"title": "Availability", "description": "Set your schedule"},
    OnboardingStep.BANKING: {"title": "Banking", "description": "Payment details"},
}


class TransitionError(Exception):
    """Raised when a wizard transition is not allowed from the current state."""


@dataclass
class CreatorProfile:
    """
    One row of creator_profiles.

    Exactly one per user identity. Step data rows reference `id`,
    never `user_id`.
    """
    id: str
    user_id: str
    onboarding_step: int = 1
    onboarding_completed: bool = False
    bio: str | None = None
    state: str | None = None
    city: str | None = None
    location: str | None = None
    languages: list[str] = field(default_factory=list)
    profile_picture_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "CreatorProfile":
        """Build from a PostgREST row, ignoring columns we don't model."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            onboarding_step=row.get("onboarding_step") or 1,
            onboarding_completed=bool(row.get("onboarding_completed")),
            bio=row.get("bio"),
            state=row.get("state"),
            city=row.get("city"),
            location=row.get("location"),
            languages=list(row.get("languages") or []),
            profile_picture_url=row.get("profile_picture_url"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "onboarding_step": self.onboarding_step,
            "onboarding_completed": self.onboarding_completed,
            "bio": self.bio,
            "state": self.state,
            "city": self.city,
            "location": self.location,
            "languages": self.languages,
            "profile_picture_url": self.profile_picture_url,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @property
    def resume_step(self) -> OnboardingStep:
        """Step to show when the wizard is opened."""
        return OnboardingStep(min(max(FIRST_STEP, self.onboarding_step), LAST_STEP))


class ProgressStore(Protocol):
    """Persistence the sequencer needs. Both calls raise on failure."""

    async def save_step(self, profile_id: str, step: int) -> None:
        ...

    async def mark_completed(self, profile_id: str) -> None:
        ...


class OnboardingSequencer:
    """
    Linear wizard over one creator profile.

    advance() persists before moving the view, so a failed write leaves the
    sequencer where it was. retreat() only moves the view. complete() is the
    only way out of the last step.
    """

    def __init__(
        self,
        profile: CreatorProfile,
        store: ProgressStore,
        current_step: int | None = None,
    ):
        self.profile = profile
        self.store = store

        if current_step is None:
            self.current_step = profile.resume_step
            return

        try:
            step = OnboardingStep(current_step)
        except ValueError:
            raise TransitionError(f"Unknown step: {current_step}")
        if step > profile.resume_step:
            raise TransitionError(
                f"Step {step.value} has not been reached yet (furthest is {profile.resume_step.value})"
            )
        self.current_step = step

    @property
    def completed(self) -> bool:
        return self.profile.onboarding_completed

    @property
    def furthest_step(self) -> OnboardingStep:
        return self.profile.resume_step

    def _ensure_active(self) -> None:
        if self.completed:
            raise TransitionError("Onboarding is already completed")

    async def advance(self) -> OnboardingStep:
        """Move to the next step, recording it as reached."""
        self._ensure_active()
        if self.current_step >= LAST_STEP:
            raise TransitionError("Already on the last step; complete onboarding instead")

        next_step = OnboardingStep(self.current_step + 1)
        # Pointer never moves backwards
        if next_step > self.profile.onboarding_step:
            await self.store.save_step(self.profile.id, int(next_step))
            self.profile.onboarding_step = int(next_step)

        self.current_step = next_step
        return next_step

    def retreat(self) -> OnboardingStep:
        """Move the view back one step. Saved progress is untouched."""
        self._ensure_active()
        if self.current_step <= FIRST_STEP:
            raise TransitionError("Already on the first step")

        self.current_step = OnboardingStep(self.current_step - 1)
        return self.current_step

    async def complete(self) -> bool:
        """
        Finish onboarding from the last step.

        Returns True when this call completed it, False if it was
        already complete (nothing is written then).
        """
        if self.completed:
            return False
        if self.current_step != LAST_STEP:
            raise TransitionError(f"Onboarding can only be completed from step {LAST_STEP.value}")

        await self.store.mark_completed(self.profile.id)
        self.profile.onboarding_completed = True
        self.profile.onboarding_step = int(LAST_STEP)
        return True

    def snapshot(self) -> dict[str, Any]:
        """Serializable view of the wizard for the frontend."""
        steps = []
        for step in OnboardingStep:
            if self.completed or step < self.current_step:
                status = "completed"
            elif step == self.current_step:
                status = "active"
            else:
                status = "upcoming"
            steps.append({"id": step.value, **STEP_DETAILS[step], "status": status})

        return {
            "profile_id": self.profile.id,
            "current_step": self.current_step.value,
            "furthest_step": self.furthest_step.value,
            "completed": self.completed,
            "can_retreat": not self.completed and self.current_step > FIRST_STEP,
            "can_advance": not self.completed and self.current_step < LAST_STEP,
            "can_complete": not self.completed and self.current_step == LAST_STEP,
            "steps": steps,
        }
