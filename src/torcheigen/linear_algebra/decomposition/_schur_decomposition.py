"""Real Schur decomposition."""

import math
import warnings

import torch
from torch import Tensor

from torcheigen.linear_algebra.decomposition._exceptions import (
    ConvergenceError,
)
from torcheigen.linear_algebra.decomposition._hessenberg import (
    householder_hessenberg,
)
from torcheigen.linear_algebra.decomposition._result_types import (
    SchurDecompositionResult,
)
from torcheigen.linear_algebra.decomposition._validation import (
    as_real_square,
    check_maxiter,
    flatten_batch,
    machine_epsilon,
    to_matrix,
)


def hessenberg_norm(H: list[list[float]]) -> float:
    """Sum of absolute values over the Hessenberg part of ``H``."""
    n = len(H)
    norm = 0.0
    for i in range(n):
        for j in range(max(i - 1, 0), n):
            norm += abs(H[i][j])
    return norm


def francis_qr(
    H: list[list[float]],
    V: list[list[float]],
    d: list[float],
    e: list[float],
    eps: float,
    maxiter: int | None = None,
) -> float:
    """Reduce upper Hessenberg ``H`` to real Schur form (hqr2, first phase).

    Shifted double-step QR iteration derived from the Algol procedure hqr2 by
    Martin and Wilkinson and the corresponding EISPACK subroutine. Works in
    place: on exit ``H`` is quasi-upper-triangular in its Hessenberg part,
    ``V`` has been multiplied by the accumulated orthogonal transformations,
    and ``d``/``e`` hold the real/imaginary parts of the eigenvalues with
    conjugate pairs adjacent, positive imaginary part first.

    Returns the norm of the Hessenberg matrix on entry; it scales the
    regularizing denominators of :func:`real_schur_eigenvectors`.

    Raises
    ------
    ConvergenceError
        If ``maxiter`` is given and more than ``maxiter`` QR steps are spent
        on a single deflation window.
    """
    nn = len(H)
    n = nn - 1
    low = 0
    high = nn - 1
    exshift = 0.0
    p = q = r = s = z = 0.0

    # Store roots isolated by balancing
    for i in range(nn):
        if i < low or i > high:
            d[i] = H[i][i]
            e[i] = 0.0

    norm = hessenberg_norm(H)

    # A zero Hessenberg matrix is already in Schur form
    if norm == 0.0:
        for i in range(nn):
            d[i] = H[i][i]
            e[i] = 0.0
        return norm

    # Outer loop over eigenvalue index
    iteration = 0
    while n >= low:
        # Look for single small subdiagonal element
        l = n  # noqa: E741
        while l > low:
            s = abs(H[l - 1][l - 1]) + abs(H[l][l])
            if s == 0.0:
                s = norm
            if abs(H[l][l - 1]) < eps * s:
                break
            l -= 1

        if l == n:
            # One root found
            H[n][n] = H[n][n] + exshift
            d[n] = H[n][n]
            e[n] = 0.0
            n -= 1
            iteration = 0

        elif l == n - 1:
            # Two roots found
            w = H[n][n - 1] * H[n - 1][n]
            p = (H[n - 1][n - 1] - H[n][n]) / 2.0
            q = p * p + w
            z = math.sqrt(abs(q))
            H[n][n] += exshift
            H[n - 1][n - 1] += exshift
            x = H[n][n]

            if q >= 0:
                # Real pair
                if p >= 0:
                    z = p + z
                else:
                    z = p - z
                d[n - 1] = x + z
                d[n] = d[n - 1]
                if z != 0.0:
                    d[n] = x - w / z
                e[n - 1] = 0.0
                e[n] = 0.0
                x = H[n][n - 1]
                s = abs(x) + abs(z)
                p = x / s
                q = z / s
                r = math.sqrt(p * p + q * q)
                p /= r
                q /= r

                # Row modification
                for j in range(n - 1, nn):
                    z = H[n - 1][j]
                    H[n - 1][j] = q * z + p * H[n][j]
                    H[n][j] *= q
                    H[n][j] -= p * z

                # Column modification
                for i in range(n + 1):
                    z = H[i][n - 1]
                    H[i][n - 1] = q * z + p * H[i][n]
                    H[i][n] *= q
                    H[i][n] -= p * z

                # Accumulate transformations
                for i in range(low, high + 1):
                    z = V[i][n - 1]
                    V[i][n - 1] = q * z + p * V[i][n]
                    V[i][n] *= q
                    V[i][n] -= p * z

            else:
                # Complex pair
                d[n - 1] = x + p
                d[n] = x + p
                e[n - 1] = z
                e[n] = -z

            n = n - 2
            iteration = 0

        else:
            # No convergence yet; form shift
            x = H[n][n]
            y = 0.0
            w = 0.0
            if l < n:
                y = H[n - 1][n - 1]
                w = H[n][n - 1] * H[n - 1][n]

            # Wilkinson's original ad hoc shift
            if iteration == 10:
                exshift += x
                for i in range(low, n + 1):
                    H[i][i] -= x
                s = abs(H[n][n - 1]) + abs(H[n - 1][n - 2])
                x = y = 0.75 * s
                w = -0.4375 * s * s

            # MATLAB's ad hoc shift
            if iteration == 30:
                s = (y - x) / 2.0
                s *= s
                s += w
                if s > 0:
                    s = math.sqrt(s)
                    if y < x:
                        s = -s
                    s = x - w / ((y - x) / 2.0 + s)
                    for i in range(low, n + 1):
                        H[i][i] -= s
                    exshift += s
                    x = y = w = 0.964

            iteration += 1
            if maxiter is not None and iteration > maxiter:
                raise ConvergenceError(
                    f"QR iteration did not converge for eigenvalue {n} "
                    f"within maxiter={maxiter} iterations"
                )

            # Look for two consecutive small subdiagonal elements
            m = n - 2
            while m >= l:
                z = H[m][m]
                r = x - z
                s = y - z
                p = (r * s - w) / H[m + 1][m] + H[m][m + 1]
                q = H[m + 1][m + 1] - z - r - s
                r = H[m + 2][m + 1]
                s = abs(p) + abs(q) + abs(r)
                p /= s
                q /= s
                r /= s
                if m == l:
                    break
                u = abs(H[m][m - 1]) * (abs(q) + abs(r))
                v = abs(p) * (
                    abs(H[m - 1][m - 1]) + abs(z) + abs(H[m + 1][m + 1])
                )
                if u < eps * v:
                    break
                m -= 1

            for i in range(m + 2, n + 1):
                H[i][i - 2] = 0.0
                if i > m + 2:
                    H[i][i - 3] = 0.0

            # Double QR step involving rows l:n and columns m:n
            for k in range(m, n):
                notlast = k != n - 1
                if k != m:
                    p = H[k][k - 1]
                    q = H[k + 1][k - 1]
                    r = H[k + 2][k - 1] if notlast else 0.0
                    x = abs(p) + abs(q) + abs(r)
                    if x == 0.0:
                        # Nothing to chase at this k; the sweep goes on
                        continue
                    p /= x
                    q /= x
                    r /= x
                # At k == m, p, q, r are the normalized shift vector from
                # the search above and the reflection is always formed
                s = math.sqrt(p * p + q * q + r * r)
                if p < 0:
                    s = -s
                if s != 0:
                    if k != m:
                        H[k][k - 1] = -s * x
                    elif l != m:
                        H[k][k - 1] = -H[k][k - 1]
                    p += s
                    x = p / s
                    y = q / s
                    z = r / s
                    q /= p
                    r /= p

                    # Row modification
                    for j in range(k, nn):
                        p = H[k][j] + q * H[k + 1][j]
                        if notlast:
                            p += r * H[k + 2][j]
                            H[k + 2][j] -= p * z
                        H[k][j] -= p * x
                        H[k + 1][j] -= p * y

                    # Column modification
                    for i in range(min(n, k + 3) + 1):
                        p = x * H[i][k] + y * H[i][k + 1]
                        if notlast:
                            p += z * H[i][k + 2]
                            H[i][k + 2] -= p * r
                        H[i][k] -= p
                        H[i][k + 1] -= p * q

                    # Accumulate transformations
                    for i in range(low, high + 1):
                        p = x * V[i][k] + y * V[i][k + 1]
                        if notlast:
                            p += z * V[i][k + 2]
                            V[i][k + 2] -= p * r
                        V[i][k] -= p
                        V[i][k + 1] -= p * q

    return norm


def quasi_triangular(
    H: list[list[float]], e: list[float], dtype: torch.dtype
) -> Tensor:
    """Extract the real Schur form from the working matrix of francis_qr.

    Entries below the first subdiagonal are zeroed, and so are subdiagonal
    entries outside the 2x2 blocks of complex conjugate pairs (deflated
    entries and rotated real pairs).
    """
    n = len(H)
    T = torch.triu(to_matrix(H, n, dtype), -1)
    for i in range(n - 1):
        if not e[i] > 0:
            T[i + 1, i] = 0.0
    return T


def schur_decomposition(
    a: Tensor,
    *,
    maxiter: int | None = None,
) -> SchurDecompositionResult:
    r"""
    Real Schur decomposition.

    Computes the real Schur decomposition :math:`A = QTQ^T` where :math:`Q` is
    orthogonal and :math:`T` is quasi-upper-triangular: upper triangular
    except for 2x2 diagonal blocks, one per complex conjugate eigenvalue
    pair.

    Parameters
    ----------
    a : Tensor
        Input matrix of shape (..., n, n). Must be real.
    maxiter : int, optional
        Maximum number of QR steps spent on a single eigenvalue. Default
        ``None`` iterates until convergence.

    Returns
    -------
    SchurDecompositionResult
        T : Tensor of shape (..., n, n), real Schur form
        Q : Tensor of shape (..., n, n), orthogonal matrix
        eigenvalues : Tensor of shape (..., n), eigenvalues (complex), in the
            order of the diagonal blocks of T, conjugate pairs with the
            positive imaginary part first
        info : Tensor of shape (...), int, 0 indicates success, 1 that
            ``maxiter`` was exceeded (T, Q and eigenvalues are NaN)

    Raises
    ------
    ValueError
        If input is not at least 2D, not square, complex, or not finite, or
        if ``maxiter`` is not a positive int.

    Warns
    -----
    RuntimeWarning
        If some matrices of the batch did not converge within ``maxiter``.

    Notes
    -----
    The matrix is first reduced to Hessenberg form (see :func:`hessenberg`)
    and then iterated with Francis double-shift QR steps. Stagnating
    iterations receive exceptional shifts after 10 and 30 steps.

    Examples
    --------
    >>> import torch
    >>> from torcheigen.linear_algebra.decomposition import schur_decomposition
    >>> a = torch.tensor([[0., -1.], [1., 0.]], dtype=torch.float64)
    >>> result = schur_decomposition(a)
    >>> result.eigenvalues
    tensor([0.+1.j, 0.-1.j], dtype=torch.complex128)
    """
    a = as_real_square(a)
    check_maxiter(maxiter)

    eps = machine_epsilon(a.dtype)
    complex_dtype = (
        torch.complex128 if a.dtype == torch.float64 else torch.complex64
    )

    a_flat, batch_shape = flatten_batch(a)
    batch_size, n = a_flat.shape[0], a.shape[-1]

    T = torch.empty(batch_size, n, n, dtype=a.dtype)
    Q = torch.empty(batch_size, n, n, dtype=a.dtype)
    eigenvalues = torch.empty(batch_size, n, dtype=complex_dtype)
    info = torch.zeros(batch_size, dtype=torch.int32)

    for i in range(batch_size):
        H_i = a_flat[i].tolist()
        d_i = [0.0] * n
        e_i = [0.0] * n
        try:
            Q_i = householder_hessenberg(H_i)
            francis_qr(H_i, Q_i, d_i, e_i, eps, maxiter)
        except ConvergenceError:
            T[i] = float("nan")
            Q[i] = float("nan")
            eigenvalues[i] = complex(float("nan"), float("nan"))
            info[i] = 1
            continue

        T[i] = quasi_triangular(H_i, e_i, a.dtype)
        Q[i] = to_matrix(Q_i, n, a.dtype)
        eigenvalues[i] = torch.complex(
            torch.tensor(d_i, dtype=a.dtype), torch.tensor(e_i, dtype=a.dtype)
        )

    failed = int(info.sum())
    if failed:
        warnings.warn(
            f"schur_decomposition: {failed} of {batch_size} matrices did not "
            f"converge within maxiter={maxiter}",
            RuntimeWarning,
            stacklevel=2,
        )

    return SchurDecompositionResult(
        T=T.reshape(*batch_shape, n, n).to(a.device),
        Q=Q.reshape(*batch_shape, n, n).to(a.device),
        eigenvalues=eigenvalues.reshape(*batch_shape, n).to(a.device),
        info=info.reshape(batch_shape).to(a.device),
    )
