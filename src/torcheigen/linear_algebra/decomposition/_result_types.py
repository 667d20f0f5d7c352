from typing import NamedTuple

from torch import Tensor


class EigenvalueDecompositionResult(NamedTuple):
    """Result of real eigenvalue decomposition A V = V D.

    D is block diagonal: real eigenvalues in 1x1 blocks and each complex
    conjugate pair a +/- ib in a 2x2 block [a, b; -b, a]. V is real.

    For symmetric input V is orthogonal and the eigenvalues are ascending.
    For general input conjugate pairs are adjacent, the member with the
    positive imaginary part first.
    """

    D: Tensor  # (..., n, n) - Block diagonal eigenvalue matrix
    V: Tensor  # (..., n, n) - Real eigenvector matrix
    eigenvalues_real: Tensor  # (..., n)
    eigenvalues_imag: Tensor  # (..., n)
    symmetric: Tensor  # (...) - bool, which pipeline was used
    info: Tensor  # (...) - int, 0 indicates success, 1 exceeded maxiter


class SchurDecompositionResult(NamedTuple):
    """Result of real Schur decomposition A = QTQ^T."""

    T: Tensor
    Q: Tensor
    eigenvalues: Tensor
    info: Tensor


class HessenbergResult(NamedTuple):
    """Result of Hessenberg decomposition A = QHQ^T.

    H is upper Hessenberg (zeros below the first subdiagonal) and Q is
    orthogonal.
    """

    H: Tensor
    Q: Tensor
    info: Tensor
