"""
Onboarding wizard.

A linear five-step flow (personal info, class selection, workout schedule,
username, commit) that accumulates an OnboardingRecord in memory. Steps only
move forward when their own fields validate; going back never clears data.
Only the commit step talks to the server, with exactly one submission.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from fitsync.domains.errors import FitSyncError, ValidationError, describe_error
from fitsync.domains.models import DAYS_PER_WEEK, CharacterClass, OnboardingRecord
from fitsync.infrastructure.api import endpoints
from fitsync.infrastructure.api.client import ApiClient
from fitsync.services.session import SessionGate
from fitsync.utils.logger import get_logger

logger = get_logger("fitsync.onboarding")

SUBMIT_FALLBACK = "Something went wrong. Please try again."


class OnboardingStep(Enum):
    PERSONAL_INFO = "personal_info"
    CLASS_SELECTION = "class_selection"
    WORKOUT_SCHEDULE = "workout_schedule"
    USERNAME = "username"
    COMMIT = "commit"


STEP_ORDER: tuple[OnboardingStep, ...] = tuple(OnboardingStep)


class OnboardingWizard:
    """
    Args:
        client: API client used for the class list and the final submission.
        session: Session whose onboarding flag is set after a successful commit.
        default_class_id: Class used when the user never picks one. None means
            a class must be chosen explicitly.
    """

    def __init__(
        self,
        client: ApiClient,
        session: SessionGate,
        default_class_id: int | None = None,
    ) -> None:
        self._client = client
        self._session = session
        self._default_class_id = default_class_id
        self.record = OnboardingRecord()
        self.step = OnboardingStep.PERSONAL_INFO
        self.error: str | None = None
        self.submitting = False
        self.finished = False
        self.classes: list[CharacterClass] = []

    # --- field updates ---

    def set_names(self, first_name: str, last_name: str) -> None:
        self.record.first_name = first_name
        self.record.last_name = last_name

    def set_class(self, class_id: int) -> None:
        self.record.class_id = class_id

    def set_schedule(self, schedule: Sequence[bool]) -> None:
        if len(schedule) != DAYS_PER_WEEK:
            raise ValueError(f"workout schedule needs {DAYS_PER_WEEK} days, got {len(schedule)}")
        self.record.workout_schedule = [bool(d) for d in schedule]

    def toggle_day(self, index: int) -> None:
        """Flip one day (Sunday=0 .. Saturday=6)."""
        if not 0 <= index < DAYS_PER_WEEK:
            raise IndexError(f"day index out of range: {index}")
        self.record.workout_schedule[index] = not self.record.workout_schedule[index]

    def set_username(self, username: str) -> None:
        self.record.username = username

    # --- validation ---

    def validate(self, step: OnboardingStep | None = None) -> None:
        """Raise ValidationError if `step` (default: current) is missing input."""
        step = step or self.step
        r = self.record
        if step is OnboardingStep.PERSONAL_INFO:
            if not r.first_name.strip() or not r.last_name.strip():
                raise ValidationError(step.value, "Please fill in both fields")
        elif step is OnboardingStep.CLASS_SELECTION:
            if r.class_id is None and self._default_class_id is None:
                raise ValidationError(step.value, "Please select a class")
        elif step is OnboardingStep.WORKOUT_SCHEDULE:
            if len(r.workout_schedule) != DAYS_PER_WEEK:
                raise ValidationError(step.value, "Please choose your workout days")
        elif step is OnboardingStep.USERNAME:
            if not r.username.strip():
                raise ValidationError(step.value, "Please enter a username")

    def _validate_all(self) -> None:
        for step in STEP_ORDER[:-1]:
            try:
                self.validate(step)
            except ValidationError as e:
                raise ValidationError(
                    e.step,
                    "Missing onboarding information. Please go back and complete all steps.",
                ) from e

    # --- navigation ---

    def advance(self) -> OnboardingStep:
        """
        Move to the next step if the current one validates.

        Raises:
            ValidationError: The current step is incomplete; the step is unchanged.
        """
        if self.step is OnboardingStep.COMMIT:
            return self.step
        try:
            self.validate()
        except ValidationError as e:
            self.error = str(e)
            raise
        self.error = None
        self.step = STEP_ORDER[STEP_ORDER.index(self.step) + 1]
        return self.step

    def back(self) -> OnboardingStep:
        """Return to the previous step. Entered data is kept."""
        idx = STEP_ORDER.index(self.step)
        if idx > 0:
            self.step = STEP_ORDER[idx - 1]
        self.error = None
        return self.step

    def abandon(self) -> None:
        """Discard everything entered and start over."""
        self.record = OnboardingRecord()
        self.step = OnboardingStep.PERSONAL_INFO
        self.error = None
        self.finished = False

    # --- remote ---

    async def load_classes(self) -> list[CharacterClass]:
        """Fetch the selectable character classes. Errors propagate."""
        raw = await endpoints.fetch_classes(self._client)
        self.classes = [CharacterClass.from_dict(d) for d in raw]
        return self.classes

    async def commit(self) -> None:
        """
        Submit the full record once.

        On success the record is cleared, the session is marked onboarded and
        `finished` is set. On failure the record is kept for a retry, `error`
        holds the message to display and the exception is re-raised.
        """
        if self.step is not OnboardingStep.COMMIT:
            raise ValidationError(self.step.value, "Finish the remaining steps before submitting")
        if self.submitting:
            raise ValidationError(self.step.value, "Submission already in progress")
        try:
            self._validate_all()
        except ValidationError as e:
            self.error = str(e)
            raise

        if self.record.class_id is None:
            self.record.class_id = self._default_class_id
        payload = self.record.to_payload()

        self.error = None
        self.submitting = True
        try:
            await endpoints.submit_onboarding(self._client, payload)
        except Exception as e:
            if not isinstance(e, FitSyncError):
                logger.exception("Onboarding submission failed unexpectedly")
            else:
                logger.warning("Onboarding submission failed: %s", e)
            self.error = describe_error(e, SUBMIT_FALLBACK)
            raise
        finally:
            self.submitting = False

        logger.info("Onboarding submitted for username %s", payload["username"])
        await self._session.complete_onboarding()
        self.record = OnboardingRecord()
        self.finished = True
