from __future__ import annotations

"""Error taxonomy shared by the session engine, loaders and stores."""


class QuizError(Exception):
    """Base class for all quiz engine errors."""


class LoadError(QuizError):
    """Question resolution failed or produced no usable questions."""


class ProviderError(LoadError):
    """A generative question provider failed; the loader falls back to static content."""


class StoreError(QuizError):
    """History append or read failed. Never fatal to a session."""


class InvalidTransition(QuizError):
    """An operation was invoked in a state that does not permit it."""

    def __init__(self, operation: str, state: str) -> None:
        super().__init__(f"cannot {operation} while {state}")
        self.operation = operation
        self.state = state


class InvalidAnswerIndex(QuizError):
    """Selected option index is outside the current question's options."""

    def __init__(self, index: int, option_count: int) -> None:
        super().__init__(f"answer index {index} out of range for {option_count} options")
        self.index = index
        self.option_count = option_count
