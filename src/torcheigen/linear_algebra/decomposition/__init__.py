"""Real matrix decompositions on PyTorch tensors.

This module computes eigenvalue decompositions of real square matrices in
real arithmetic, together with the Hessenberg and real Schur forms the
general algorithm passes through. All functions accept batches of shape
(..., n, n); results are not differentiable.

Classes
-------
EigenvalueDecomposition
    Eigenvalues and eigenvectors of a single real square matrix, computed
    at construction: A V = V D with V real and D block diagonal.

Functions
---------
eigenvalue_decomposition
    Batched eigenvalue decomposition A V = V D. Symmetric matrices get an
    orthogonal V and ascending eigenvalues; general matrices keep complex
    conjugate pairs as 2x2 blocks [a, b; -b, a] of D.

hessenberg
    Computes the Hessenberg decomposition A = QHQ^T where Q is orthogonal
    and H is upper Hessenberg (zeros below the first subdiagonal).

schur_decomposition
    Computes the real Schur decomposition A = QTQ^T where Q is orthogonal
    and T is quasi-upper-triangular.

is_symmetric
    Exact symmetry test used to choose between the two eigenvalue
    algorithms.

Result Types
------------
EigenvalueDecompositionResult
    Named tuple with D, V, eigenvalues_real, eigenvalues_imag, symmetric,
    info.

SchurDecompositionResult
    Named tuple with T, Q, eigenvalues, info.

HessenbergResult
    Named tuple with H, Q, info.

Exceptions
----------
DecompositionError
    Base class of the runtime errors of this module.

ConvergenceError
    QL/QR iteration exceeded ``maxiter``.
"""

from torcheigen.linear_algebra.decomposition._eigenvalue_decomposition import (
    EigenvalueDecomposition,
    eigenvalue_decomposition,
)
from torcheigen.linear_algebra.decomposition._exceptions import (
    ConvergenceError,
    DecompositionError,
)
from torcheigen.linear_algebra.decomposition._hessenberg import (
    hessenberg,
)
from torcheigen.linear_algebra.decomposition._result_types import (
    EigenvalueDecompositionResult,
    HessenbergResult,
    SchurDecompositionResult,
)
from torcheigen.linear_algebra.decomposition._schur_decomposition import (
    schur_decomposition,
)
from torcheigen.linear_algebra.decomposition._symmetry import (
    is_symmetric,
)

__all__ = [
    "ConvergenceError",
    "DecompositionError",
    "EigenvalueDecomposition",
    "EigenvalueDecompositionResult",
    "HessenbergResult",
    "SchurDecompositionResult",
    "eigenvalue_decomposition",
    "hessenberg",
    "is_symmetric",
    "schur_decomposition",
]
