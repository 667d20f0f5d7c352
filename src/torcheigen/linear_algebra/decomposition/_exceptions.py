"""Exception classes for matrix decompositions."""


class DecompositionError(Exception):
    """Base exception for decomposition errors."""

    pass


class ConvergenceError(DecompositionError):
    """Raised when QL/QR iteration exceeds ``maxiter`` on one eigenvalue."""

    pass
