"""
Custom exception types for the navcore profiling/GVF/follower pipeline.
Keep this focused and non-redundant; prefer built-ins where appropriate.
"""


class NavCoreError(RuntimeError):
    """Base class for navcore failures."""

    prefix = "NavCore Error"

    def __init__(self, message: str):
        self.original_message = message
        super().__init__(f"{self.prefix}: {message}")

    def __str__(self):
        return f"{self.prefix}: {self.original_message}"


class ProfileGenerationError(NavCoreError):
    """Motion profile generation failure."""

    prefix = "Profile Generation Error"


class UnsatisfiableConstraintError(ProfileGenerationError):
    """A velocity/acceleration constraint cannot be satisfied before solving begins.

    This is a configuration error; retrying with the same inputs fails the same way.
    """

    prefix = "Unsatisfiable Constraint"

    def __init__(self, message: str, displacement: float | None = None):
        self.displacement = displacement
        super().__init__(message)


class FollowerStateError(NavCoreError):
    """Follower used outside its follow session (e.g. update before follow_path)."""

    prefix = "Follower State Error"
