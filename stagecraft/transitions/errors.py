"""
errors.py
---------
Exception hierarchy for misuse of the transition engine.

Timing anomalies (a missing transition-end signal) and direction flips are
not errors and never surface here.
"""


class TransitionError(RuntimeError):
    """Base class for all transition engine errors."""

    def __init__(self, message: str, node_id: str = None):
        super().__init__(message)
        self.message = message
        self.node_id = node_id

    def __str__(self) -> str:
        if self.node_id:
            return f"[{self.node_id}] {self.message}"
        return self.message


class ScopeNotFoundError(TransitionError):
    """A node referenced a scope that does not exist (or no longer exists)."""


class MissingShowError(TransitionError):
    """A scope root was registered without a show value."""


class RegistrationError(TransitionError):
    """A node was registered twice or into its own subtree."""


class TransitionConfigError(TransitionError, ValueError):
    """Unknown option keys, ill-typed values or unparsable durations."""


class TransitionHookError(TransitionError):
    """A user lifecycle hook raised. The original error is chained."""

    def __init__(self, hook_name: str, node_id: str, original: BaseException):
        super().__init__(f"{hook_name} hook raised {type(original).__name__}: {original}", node_id)
        self.hook_name = hook_name
        self.original = original
