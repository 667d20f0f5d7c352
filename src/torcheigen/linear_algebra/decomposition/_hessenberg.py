"""Hessenberg decomposition."""

import math

import torch
from torch import Tensor

from torcheigen.linear_algebra.decomposition._result_types import (
    HessenbergResult,
)
from torcheigen.linear_algebra.decomposition._validation import (
    as_real_square,
    flatten_batch,
    to_matrix,
)


def householder_hessenberg(H: list[list[float]]) -> list[list[float]]:
    """Reduce ``H`` to upper Hessenberg form in place (orthes and ortran).

    Derived from the Algol procedures orthes and ortran by Martin and
    Wilkinson (Handbook for Automatic Computation, Vol. II, Linear Algebra)
    and the corresponding EISPACK subroutines.

    Returns the orthogonal matrix ``V`` with ``A = V H V^T``. On exit the
    entries of ``H`` below the first subdiagonal are not zero: they hold the
    Householder vectors, which the reduction reads back when accumulating
    ``V`` and which the Schur iteration clears as it goes.
    """
    n = len(H)
    low = 0
    high = n - 1
    ort = [0.0] * n

    for m in range(low + 1, high):
        # Scale column
        scale = 0.0
        for i in range(m, high + 1):
            scale += abs(H[i][m - 1])

        if scale != 0.0:
            # Compute Householder transformation
            h = 0.0
            for i in range(high, m - 1, -1):
                ort[i] = H[i][m - 1] / scale
                h += ort[i] * ort[i]
            g = math.sqrt(h)
            if ort[m] > 0:
                g = -g
            h = h - ort[m] * g
            ort[m] = ort[m] - g

            # Apply Householder similarity transformation
            # H = (I - u u^T / h) H (I - u u^T / h)
            for j in range(m, n):
                f = 0.0
                for i in range(high, m - 1, -1):
                    f += ort[i] * H[i][j]
                f = f / h
                for i in range(m, high + 1):
                    H[i][j] -= f * ort[i]

            for i in range(high + 1):
                f = 0.0
                for j in range(high, m - 1, -1):
                    f += ort[j] * H[i][j]
                f = f / h
                for j in range(m, high + 1):
                    H[i][j] -= f * ort[j]

            ort[m] = scale * ort[m]
            H[m][m - 1] = scale * g

    # Accumulate transformations (ortran)
    V = [[0.0] * n for _ in range(n)]
    for i in range(n):
        V[i][i] = 1.0

    for m in range(high - 1, low, -1):
        if H[m][m - 1] != 0.0:
            for i in range(m + 1, high + 1):
                ort[i] = H[i][m - 1]
            for j in range(m, high + 1):
                g = 0.0
                for i in range(m, high + 1):
                    g += ort[i] * V[i][j]
                # Double division avoids possible underflow
                g = (g / ort[m]) / H[m][m - 1]
                for i in range(m, high + 1):
                    V[i][j] += g * ort[i]

    return V


def hessenberg(a: Tensor) -> HessenbergResult:
    r"""
    Hessenberg decomposition.

    Computes the Hessenberg decomposition :math:`A = QHQ^T` where :math:`H` is
    upper Hessenberg (has zeros below the first subdiagonal) and :math:`Q` is
    orthogonal.

    The upper Hessenberg form is the first stage of the general eigenvalue
    algorithm used by :func:`eigenvalue_decomposition`: it preserves
    eigenvalues while making each QR iteration cost :math:`O(n^2)`.

    Parameters
    ----------
    a : Tensor
        Input matrix of shape (..., n, n). Must be real. Integer and
        half-precision inputs are computed in ``float64``.

    Returns
    -------
    HessenbergResult
        A named tuple containing:

        - **H** (*Tensor*) - Upper Hessenberg matrix of shape (..., n, n).
          Has exact zeros below the first subdiagonal.
        - **Q** (*Tensor*) - Orthogonal transformation matrix of shape
          (..., n, n). Satisfies :math:`Q Q^T = Q^T Q = I`.
        - **info** (*Tensor*) - Integer tensor of shape (...). A value of 0
          indicates successful computation.

    Raises
    ------
    ValueError
        If input is not at least 2D, not square, complex, or not finite.

    Notes
    -----
    The decomposition is computed using :math:`n-2` Householder reflections.
    Each column below the subdiagonal is scaled by its 1-norm before the
    reflection is formed, to avoid under/overflow. The reflections are then
    accumulated into :math:`Q` in reverse order.

    The decomposition satisfies:

    .. math::

        A = Q H Q^T

    Examples
    --------
    >>> import torch
    >>> from torcheigen.linear_algebra.decomposition import hessenberg
    >>> a = torch.tensor([[1., 2., 3.], [4., 5., 6.], [7., 8., 9.]],
    ...                  dtype=torch.float64)
    >>> result = hessenberg(a)
    >>> torch.allclose(result.Q @ result.H @ result.Q.mT, a)
    True
    """
    a = as_real_square(a)

    # Flatten batch dimensions for processing
    a_flat, batch_shape = flatten_batch(a)
    batch_size, n = a_flat.shape[0], a.shape[-1]

    H = torch.empty(batch_size, n, n, dtype=a.dtype)
    Q = torch.empty(batch_size, n, n, dtype=a.dtype)

    for i in range(batch_size):
        H_i = a_flat[i].tolist()
        Q_i = householder_hessenberg(H_i)

        # Drop the Householder vectors stored below the subdiagonal
        H[i] = torch.triu(to_matrix(H_i, n, a.dtype), -1)
        Q[i] = to_matrix(Q_i, n, a.dtype)

    H = H.reshape(*batch_shape, n, n).to(a.device)
    Q = Q.reshape(*batch_shape, n, n).to(a.device)
    info = torch.zeros(batch_shape, dtype=torch.int32, device=a.device)

    return HessenbergResult(H=H, Q=Q, info=info)
