"""Eigenvectors of a real Schur form by backsubstitution (hqr2, second phase).

Derived from the Algol procedure hqr2 by Martin and Wilkinson (Handbook for
Automatic Computation, Vol. II, Linear Algebra) and the corresponding
EISPACK subroutine. Complex 2x2 solves use Python's built-in complex
division.
"""


def real_schur_eigenvectors(
    H: list[list[float]],
    V: list[list[float]],
    d: list[float],
    e: list[float],
    eps: float,
    norm: float,
) -> None:
    """Overwrite ``V`` with the eigenvectors of the original matrix.

    ``H``, ``V``, ``d`` and ``e`` are the working state left by
    :func:`francis_qr`, and ``norm`` its return value. Eigenvectors of the
    quasi-triangular ``H`` are solved into the upper triangle of ``H``, one
    column per real eigenvalue and a column pair ``(re, im)`` per complex
    conjugate pair, then multiplied back through ``V``.

    If ``norm`` is zero every eigenvalue is zero and ``V`` is left as is.
    """
    nn = len(H)
    low = 0
    high = nn - 1
    p = q = r = s = t = w = x = y = z = 0.0

    if norm == 0.0:
        return

    # Backsubstitute to find vectors of upper triangular form
    for n in range(nn - 1, -1, -1):
        p = d[n]
        q = e[n]

        if q == 0:
            # Real vector
            l = n  # noqa: E741
            H[n][n] = 1.0
            for i in range(n - 1, -1, -1):
                w = H[i][i] - p
                r = 0.0
                for j in range(l, n + 1):
                    r = r + H[i][j] * H[j][n]
                if e[i] < 0.0:
                    z = w
                    s = r
                else:
                    l = i  # noqa: E741
                    if e[i] == 0.0:
                        if w != 0.0:
                            H[i][n] = -r / w
                        else:
                            H[i][n] = -r / (eps * norm)
                    else:
                        # Solve real equations
                        x = H[i][i + 1]
                        y = H[i + 1][i]
                        q = (d[i] - p) * (d[i] - p) + e[i] * e[i]
                        t = (x * s - z * r) / q
                        H[i][n] = t
                        if abs(x) > abs(z):
                            H[i + 1][n] = (-r - w * t) / x
                        else:
                            H[i + 1][n] = (-s - y * t) / z

                    # Overflow control
                    t = abs(H[i][n])
                    if (eps * t) * t > 1:
                        for j in range(i, n + 1):
                            H[j][n] /= t

        elif q < 0:
            # Complex vector, solved at the second member of the pair
            l = n - 1  # noqa: E741

            # Last vector component imaginary so matrix is triangular
            if abs(H[n][n - 1]) > abs(H[n - 1][n]):
                H[n - 1][n - 1] = q / H[n][n - 1]
                H[n - 1][n] = -(H[n][n] - p) / H[n][n - 1]
            else:
                c = complex(0.0, -H[n - 1][n]) / complex(
                    H[n - 1][n - 1] - p, q
                )
                H[n - 1][n - 1] = c.real
                H[n - 1][n] = c.imag
            H[n][n - 1] = 0.0
            H[n][n] = 1.0

            for i in range(n - 2, -1, -1):
                ra = 0.0
                sa = 0.0
                for j in range(l, n + 1):
                    ra += H[i][j] * H[j][n - 1]
                    sa += H[i][j] * H[j][n]
                w = H[i][i] - p

                if e[i] < 0.0:
                    z = w
                    r = ra
                    s = sa
                else:
                    l = i  # noqa: E741
                    if e[i] == 0:
                        c = complex(-ra, -sa) / complex(w, q)
                        H[i][n - 1] = c.real
                        H[i][n] = c.imag
                    else:
                        # Solve complex equations
                        x = H[i][i + 1]
                        y = H[i + 1][i]
                        vr = (d[i] - p) * (d[i] - p) + e[i] * e[i] - q * q
                        vi = (d[i] - p) * 2.0 * q
                        if vr == 0.0 and vi == 0.0:
                            vr = (
                                eps
                                * norm
                                * (abs(w) + abs(q) + abs(x) + abs(y) + abs(z))
                            )
                        c = complex(
                            x * r - z * ra + q * sa, x * s - z * sa - q * ra
                        ) / complex(vr, vi)
                        H[i][n - 1] = c.real
                        H[i][n] = c.imag
                        if abs(x) > (abs(z) + abs(q)):
                            H[i + 1][n - 1] = (
                                -ra - w * H[i][n - 1] + q * H[i][n]
                            ) / x
                            H[i + 1][n] = (
                                -sa - w * H[i][n] - q * H[i][n - 1]
                            ) / x
                        else:
                            c = complex(
                                -r - y * H[i][n - 1], -s - y * H[i][n]
                            ) / complex(z, q)
                            H[i + 1][n - 1] = c.real
                            H[i + 1][n] = c.imag

                    # Overflow control
                    t = max(abs(H[i][n - 1]), abs(H[i][n]))
                    if (eps * t) * t > 1:
                        for j in range(i, n + 1):
                            H[j][n - 1] /= t
                            H[j][n] /= t

    # Vectors of isolated roots
    for i in range(nn):
        if i < low or i > high:
            for j in range(i, nn):
                V[i][j] = H[i][j]

    # Back transformation to get eigenvectors of original matrix
    for j in range(nn - 1, low - 1, -1):
        for i in range(low, high + 1):
            z = 0.0
            for k in range(low, min(j, high) + 1):
                z += V[i][k] * H[k][j]
            V[i][j] = z
