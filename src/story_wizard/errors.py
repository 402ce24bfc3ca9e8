"""Errors raised by the story wizard."""


class WizardError(Exception):
    """Base class for wizard errors."""

    pass


class InvalidTransitionError(WizardError):
    """An operation's guard does not hold in the current wizard state."""

    pass


class OperationInProgressError(WizardError):
    """The same operation is already outstanding."""

    def __init__(self, operation: str):
        super().__init__(f"{operation} is already in progress")
        self.operation = operation
