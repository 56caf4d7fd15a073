"""Grid-pipeline exceptions and warnings for telesto."""

from telesto.exceptions import TelestoError


class GridError(TelestoError):
    """Base exception for grid operations."""

    pass


class InsufficientInputError(GridError):
    """Not enough horizon data to generate a grid."""

    pass


class IncompatibleGridsError(GridError):
    """Grids were handed to a merge without passing the compatibility check."""

    def __init__(self, message: str, reasons: list[str] | None = None):
        super().__init__(message)
        self.reasons = reasons or []

    def __str__(self) -> str:
        msg = self.args[0]
        if self.reasons:
            reason_list = "\n  - ".join(self.reasons)
            msg += f"\n  - {reason_list}"
        return msg


class GenerationCancelledError(GridError):
    """Grid generation was cancelled through its cancellation token."""

    pass


class GridBuildError(GridError):
    """Unexpected failure while assembling a grid."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def __str__(self) -> str:
        msg = self.args[0]
        if self.details:
            msg += f"\nDetails: {self.details}"
        return msg


class EmptyInterpolationSetWarning(UserWarning):
    """Interpolation over zero points; the result is the 0.0 sentinel."""

    pass
