"""Story Wizard - idea to outline to storyboard to narrated video."""

from .errors import InvalidTransitionError, OperationInProgressError, WizardError
from .machine import REGENERATE_QUOTA_WARNING, StoryWizard, WizardContext

__all__ = [
    "WizardError",
    "InvalidTransitionError",
    "OperationInProgressError",
    "WizardContext",
    "StoryWizard",
    "REGENERATE_QUOTA_WARNING",
]
