"""Symmetric eigenproblem: Householder tridiagonalization and implicit QL.

Both routines are derived from the Algol procedures tred2 and tql2 by
Bowdler, Martin, Reinsch and Wilkinson (Handbook for Automatic Computation,
Vol. II, Linear Algebra) and the corresponding EISPACK subroutines, by way of
JAMA. They work in place on row-major nested lists of Python floats; the
order of every arithmetic operation follows the reference procedures.
"""

import math
import sys

from torcheigen.linear_algebra.decomposition._exceptions import (
    ConvergenceError,
)


def scaled_hypot(x: float, y: float) -> float:
    """Return sqrt(x**2 + y**2) without overflow.

    The larger magnitude is factored out, and returned unchanged when the
    smaller one is below its epsilon fraction.
    """
    x = abs(x)
    y = abs(y)
    if math.isinf(x) or math.isinf(y):
        return math.inf
    if y > x:
        x, y = y, x
    if x * sys.float_info.epsilon >= y:
        return x
    rat = y / x
    return x * math.sqrt(1.0 + rat * rat)


def householder_tridiagonalize(
    V: list[list[float]], d: list[float], e: list[float]
) -> None:
    """Reduce the symmetric matrix held in ``V`` to tridiagonal form (tred2).

    On entry ``V`` holds the matrix. On exit ``V`` holds the accumulated
    orthogonal transformation, ``d`` the diagonal and ``e[1:]`` the
    subdiagonal of the tridiagonal matrix, with ``e[0] = 0``.
    """
    n = len(V)

    for j in range(n):
        d[j] = V[n - 1][j]

    for i in range(n - 1, 0, -1):
        # Scale to avoid under/overflow
        scale = 0.0
        h = 0.0
        for k in range(i):
            scale = scale + abs(d[k])

        if scale == 0.0:
            e[i] = d[i - 1]
            for j in range(i):
                d[j] = V[i - 1][j]
                V[i][j] = 0.0
                V[j][i] = 0.0
        else:
            # Generate Householder vector
            for k in range(i):
                d[k] /= scale
                h += d[k] * d[k]
            f = d[i - 1]
            g = math.sqrt(h)
            if f > 0:
                g = -g
            e[i] = scale * g
            h -= f * g
            d[i - 1] = f - g
            for j in range(i):
                e[j] = 0.0

            # Apply similarity transformation to remaining columns
            for j in range(i):
                f = d[j]
                V[j][i] = f
                g = e[j] + V[j][j] * f
                for k in range(j + 1, i):
                    g += V[k][j] * d[k]
                    e[k] += V[k][j] * f
                e[j] = g
            f = 0.0
            for j in range(i):
                e[j] /= h
                f += e[j] * d[j]
            hh = f / (h + h)
            for j in range(i):
                e[j] -= hh * d[j]
            for j in range(i):
                f = d[j]
                g = e[j]
                for k in range(j, i):
                    V[k][j] -= f * e[k] + g * d[k]
                d[j] = V[i - 1][j]
                V[i][j] = 0.0
        d[i] = h

    # Accumulate transformations
    for i in range(n - 1):
        V[n - 1][i] = V[i][i]
        V[i][i] = 1.0
        h = d[i + 1]
        if h != 0.0:
            for k in range(i + 1):
                d[k] = V[k][i + 1] / h
            for j in range(i + 1):
                g = 0.0
                for k in range(i + 1):
                    g += V[k][i + 1] * V[k][j]
                for k in range(i + 1):
                    V[k][j] -= g * d[k]
        for k in range(i + 1):
            V[k][i + 1] = 0.0

    for j in range(n):
        d[j] = V[n - 1][j]
        V[n - 1][j] = 0.0
    V[n - 1][n - 1] = 1.0
    e[0] = 0.0


def tridiagonal_ql(
    V: list[list[float]],
    d: list[float],
    e: list[float],
    eps: float,
    maxiter: int | None = None,
) -> None:
    """Diagonalize a symmetric tridiagonal matrix by implicit QL (tql2).

    Takes the output of :func:`householder_tridiagonalize`. On exit ``d``
    holds the eigenvalues in ascending order, ``e`` is zero and the columns
    of ``V`` are the corresponding orthonormal eigenvectors.

    Raises
    ------
    ConvergenceError
        If ``maxiter`` is given and more than ``maxiter`` QL steps are spent
        isolating a single eigenvalue.
    """
    n = len(d)

    for i in range(1, n):
        e[i - 1] = e[i]
    e[n - 1] = 0.0

    f = 0.0
    tst1 = 0.0
    for l in range(n):  # noqa: E741
        # Find small subdiagonal element
        tst1 = max(tst1, abs(d[l]) + abs(e[l]))
        m = l
        while m < n:
            if abs(e[m]) <= eps * tst1:
                break
            m += 1

        # If m == l, d[l] is an eigenvalue, otherwise iterate
        if m > l:
            iteration = 0
            while True:
                iteration += 1
                if maxiter is not None and iteration > maxiter:
                    raise ConvergenceError(
                        f"tridiagonal QL did not converge for eigenvalue {l} "
                        f"within maxiter={maxiter} iterations"
                    )

                # Compute implicit shift
                g = d[l]
                p = (d[l + 1] - g) / (2.0 * e[l])
                r = scaled_hypot(p, 1.0)
                if p < 0:
                    r = -r
                d[l] = e[l] / (p + r)
                d[l + 1] = e[l] * (p + r)
                dl1 = d[l + 1]
                h = g - d[l]
                for i in range(l + 2, n):
                    d[i] -= h
                f += h

                # Implicit QL transformation
                p = d[m]
                c = 1.0
                c2 = c
                c3 = c
                el1 = e[l + 1]
                s = 0.0
                s2 = 0.0
                for i in range(m - 1, l - 1, -1):
                    c3 = c2
                    c2 = c
                    s2 = s
                    g = c * e[i]
                    h = c * p
                    r = scaled_hypot(p, e[i])
                    e[i + 1] = s * r
                    s = e[i] / r
                    c = p / r
                    p = c * d[i] - s * g
                    d[i + 1] = h + s * (c * g + s * d[i])

                    # Accumulate transformation
                    for k in range(n):
                        h = V[k][i + 1]
                        V[k][i + 1] = s * V[k][i] + c * h
                        V[k][i] = c * V[k][i] - s * h

                p = -s * s2 * c3 * el1 * e[l] / dl1
                e[l] = s * p
                d[l] = c * p

                if abs(e[l]) <= eps * tst1:
                    break

        d[l] += f
        e[l] = 0.0

    # Sort eigenvalues and corresponding vectors
    for i in range(n - 1):
        k = i
        p = d[i]
        for j in range(i + 1, n):
            if d[j] < p:
                k = j
                p = d[j]
        if k != i:
            d[k] = d[i]
            d[i] = p
            for j in range(n):
                V[j][i], V[j][k] = V[j][k], V[j][i]
