"""Eigenvalue decomposition of a real square matrix."""

import warnings

import torch
from torch import Tensor

from torcheigen.linear_algebra.decomposition._exceptions import (
    ConvergenceError,
)
from torcheigen.linear_algebra.decomposition._hessenberg import (
    householder_hessenberg,
)
from torcheigen.linear_algebra.decomposition._real_schur_eigenvectors import (
    real_schur_eigenvectors,
)
from torcheigen.linear_algebra.decomposition._result_types import (
    EigenvalueDecompositionResult,
)
from torcheigen.linear_algebra.decomposition._schur_decomposition import (
    francis_qr,
)
from torcheigen.linear_algebra.decomposition._symmetric import (
    householder_tridiagonalize,
    tridiagonal_ql,
)
from torcheigen.linear_algebra.decomposition._symmetry import (
    is_symmetric,
    symmetrize,
)
from torcheigen.linear_algebra.decomposition._validation import (
    as_real_square,
    check_maxiter,
    flatten_batch,
    machine_epsilon,
    to_matrix,
)


def _check_uplo(uplo: str) -> None:
    if uplo not in ("L", "U"):
        raise ValueError(f"uplo must be 'L' or 'U', got {uplo!r}")


def _symmetric_eigen(
    a: Tensor, eps: float, maxiter: int | None
) -> tuple[list[float], list[float], list[list[float]]]:
    n = a.shape[-1]
    V = a.tolist()
    d = [0.0] * n
    e = [0.0] * n

    # Tridiagonalize, then diagonalize
    householder_tridiagonalize(V, d, e)
    tridiagonal_ql(V, d, e, eps, maxiter)

    return d, e, V


def _general_eigen(
    a: Tensor, eps: float, maxiter: int | None
) -> tuple[list[float], list[float], list[list[float]]]:
    n = a.shape[-1]
    H = a.tolist()
    d = [0.0] * n
    e = [0.0] * n

    # Reduce to Hessenberg form, iterate to real Schur form, backsubstitute
    V = householder_hessenberg(H)
    norm = francis_qr(H, V, d, e, eps, maxiter)
    real_schur_eigenvectors(H, V, d, e, eps, norm)

    return d, e, V


def _eigen(
    a: Tensor, symmetric: bool, eps: float, maxiter: int | None
) -> tuple[list[float], list[float], list[list[float]]]:
    """Run the pipeline selected by ``symmetric`` on a single matrix."""
    n = a.shape[-1]
    if n == 0:
        return [], [], []
    if symmetric:
        return _symmetric_eigen(a, eps, maxiter)
    return _general_eigen(a, eps, maxiter)


def block_diagonal(real: Tensor, imag: Tensor) -> Tensor:
    """Assemble the block diagonal eigenvalue matrix D from its eigenvalues.

    ``D[i, i] = real[i]``; ``D[i, i + 1] = imag[i]`` where ``imag[i] > 0`` and
    ``D[i, i - 1] = imag[i]`` where ``imag[i] < 0``. Each conjugate pair
    a +/- ib becomes the block [a, b; -b, a]. Works on batches.
    """
    D = torch.diag_embed(real)
    n = real.shape[-1]
    if n > 1:
        upper = torch.where(imag[..., :-1] > 0, imag[..., :-1], 0.0)
        lower = torch.where(imag[..., 1:] < 0, imag[..., 1:], 0.0)
        D = D + torch.diag_embed(upper, offset=1)
        D = D + torch.diag_embed(lower, offset=-1)
    return D


class EigenvalueDecomposition:
    r"""
    Eigenvalues and eigenvectors of a real square matrix.

    The decomposition is computed once, in the constructor, from a snapshot
    of ``a``; the object is immutable afterwards and its accessors return
    copies.

    If :math:`A` is symmetric, then :math:`A = V D V^T` where :math:`D` is
    diagonal, :math:`V` is orthogonal and the eigenvalues are in ascending
    order.

    If :math:`A` is not symmetric, then :math:`D` is block diagonal with the
    real eigenvalues in 1x1 blocks and every complex eigenvalue pair
    :math:`a \pm ib` in a 2x2 block :math:`[a, b; -b, a]`. This keeps
    :math:`V` real, and :math:`AV = VD` holds in both cases. :math:`V` may be
    badly conditioned or even singular, so :math:`A = VDV^{-1}` depends on
    the condition number of :math:`V`.

    Parameters
    ----------
    a : Tensor
        Input matrix of shape (n, n). Must be real. The recurrences run in
        double precision; deflation uses the epsilon of the input dtype
        (``float32`` or ``float64``, other real dtypes are promoted to
        ``float64``) and results are returned in that dtype.
    symmetric : bool, optional
        ``None`` (default) tests ``a`` for exact symmetry and picks the
        pipeline accordingly. ``True`` declares ``a`` symmetric without
        testing: only the triangle selected by ``uplo`` is read. ``False``
        forces the general pipeline, which is useful for matrices that are
        symmetric up to rounding noise.
    uplo : str
        ``'L'`` (default) or ``'U'``: the triangle read when
        ``symmetric=True``.
    maxiter : int, optional
        Maximum number of QL/QR steps spent on a single eigenvalue. Default
        ``None`` iterates until convergence.

    Raises
    ------
    ValueError
        If ``a`` is not 2D, not square, complex or not finite, or if
        ``uplo`` or ``maxiter`` are invalid.
    ConvergenceError
        If ``maxiter`` is given and exceeded.

    Examples
    --------
    >>> import torch
    >>> from torcheigen.linear_algebra.decomposition import (
    ...     EigenvalueDecomposition,
    ... )
    >>> a = torch.tensor([[4., 1., 1.], [1., 2., 3.], [1., 3., 6.]],
    ...                  dtype=torch.float64)
    >>> eig = EigenvalueDecomposition(a)
    >>> eig.is_symmetric
    True
    >>> V, D = eig.eigenvectors, eig.block_diagonal_eigenvalues()
    >>> torch.allclose(a @ V, V @ D)
    True

    A rotation has the complex pair :math:`\pm i`:

    >>> eig = EigenvalueDecomposition(torch.tensor([[0., -1.], [1., 0.]]))
    >>> eig.imag_eigenvalues
    tensor([ 1., -1.])
    >>> eig.block_diagonal_eigenvalues()
    tensor([[ 0.,  1.],
            [-1.,  0.]])
    """

    def __init__(
        self,
        a: Tensor,
        *,
        symmetric: bool | None = None,
        uplo: str = "L",
        maxiter: int | None = None,
    ):
        a = as_real_square(a)
        if a.dim() != 2:
            raise ValueError(
                f"a must be 2D, got shape {a.shape}; "
                "use eigenvalue_decomposition for batches"
            )
        _check_uplo(uplo)
        check_maxiter(maxiter)

        if symmetric is None:
            symmetric = is_symmetric(a)
        elif symmetric:
            a = symmetrize(a, uplo)

        n = a.shape[-1]
        d, e, V = _eigen(a, symmetric, machine_epsilon(a.dtype), maxiter)

        self._n = n
        self._symmetric = bool(symmetric)
        self._d = torch.tensor(d, dtype=a.dtype).to(a.device)
        self._e = torch.tensor(e, dtype=a.dtype).to(a.device)
        self._V = to_matrix(V, n, a.dtype).to(a.device)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(n={self._n}, "
            f"symmetric={self._symmetric}, dtype={self._d.dtype})"
        )

    @property
    def n(self) -> int:
        """Row and column dimension."""
        return self._n

    @property
    def dtype(self) -> torch.dtype:
        return self._d.dtype

    @property
    def is_symmetric(self) -> bool:
        """Whether the symmetric pipeline was used."""
        return self._symmetric

    @property
    def eigenvectors(self) -> Tensor:
        """Eigenvector matrix V of shape (n, n), one eigenvector per column.

        Orthogonal for symmetric input. For a conjugate pair at columns
        ``i, i + 1`` the complex eigenvectors are
        ``V[:, i] +/- 1j * V[:, i + 1]``.
        """
        return self._V.clone()

    @property
    def real_eigenvalues(self) -> Tensor:
        """Real parts of the eigenvalues, shape (n,).

        Ascending for symmetric input. Otherwise unordered, except that
        complex conjugate pairs are adjacent.
        """
        return self._d.clone()

    @property
    def imag_eigenvalues(self) -> Tensor:
        """Imaginary parts of the eigenvalues, shape (n,).

        Zero for symmetric input. Otherwise conjugate pairs are adjacent,
        the member with the positive imaginary part first.
        """
        return self._e.clone()

    @property
    def eigenvalues(self) -> Tensor:
        """Eigenvalues as a complex tensor of shape (n,)."""
        return torch.complex(self._d, self._e)

    def block_diagonal_eigenvalues(self) -> Tensor:
        """Block diagonal eigenvalue matrix D of shape (n, n), with AV = VD."""
        return block_diagonal(self._d, self._e)


def eigenvalue_decomposition(
    a: Tensor,
    *,
    symmetric: bool | None = None,
    uplo: str = "L",
    maxiter: int | None = None,
) -> EigenvalueDecompositionResult:
    r"""
    Real eigenvalue decomposition.

    Computes :math:`AV = VD` for a real square matrix, or a batch of them,
    keeping both factors real. For symmetric matrices :math:`V` is orthogonal
    and :math:`D` diagonal with ascending eigenvalues. For general matrices
    :math:`D` is block diagonal: real eigenvalues in 1x1 blocks and each
    complex conjugate pair :math:`a \pm ib` in a 2x2 block
    :math:`[a, b; -b, a]`.

    Parameters
    ----------
    a : Tensor
        Input matrix of shape (..., n, n). Must be real.
    symmetric : bool, optional
        ``None`` (default) tests each matrix for exact symmetry. ``True``
        reads only the ``uplo`` triangle of every matrix. ``False`` forces
        the general algorithm.
    uplo : str
        ``'L'`` (default) or ``'U'``; used when ``symmetric=True``.
    maxiter : int, optional
        Maximum number of QL/QR steps spent on a single eigenvalue. Default
        ``None`` iterates until convergence.

    Returns
    -------
    EigenvalueDecompositionResult
        A named tuple containing:

        - **D** (*Tensor*) - Block diagonal eigenvalue matrix (..., n, n).
        - **V** (*Tensor*) - Real eigenvector matrix (..., n, n).
        - **eigenvalues_real** (*Tensor*) - Real parts (..., n).
        - **eigenvalues_imag** (*Tensor*) - Imaginary parts (..., n).
        - **symmetric** (*Tensor*) - Boolean (...), which algorithm ran.
        - **info** (*Tensor*) - Integer (...). 0 indicates success, 1 that
          ``maxiter`` was exceeded; the outputs of that matrix are NaN.

    Raises
    ------
    ValueError
        If input is not at least 2D, not square, complex or not finite, or
        if ``uplo`` or ``maxiter`` are invalid.

    Warns
    -----
    RuntimeWarning
        If some matrices of the batch did not converge within ``maxiter``.

    Notes
    -----
    Symmetric matrices are reduced to tridiagonal form by Householder
    reflections and diagonalized by implicit QL iteration (EISPACK tred2 and
    tql2). General matrices are reduced to Hessenberg form, iterated to real
    Schur form by Francis double-shift QR steps and their eigenvectors
    recovered by backsubstitution (EISPACK orthes and hqr2).

    The results are not differentiable.

    Examples
    --------
    >>> import torch
    >>> from torcheigen.linear_algebra.decomposition import (
    ...     eigenvalue_decomposition,
    ... )
    >>> a = torch.randn(3, 4, 4, dtype=torch.float64)
    >>> result = eigenvalue_decomposition(a)
    >>> torch.allclose(a @ result.V, result.V @ result.D)
    True
    """
    a = as_real_square(a)
    _check_uplo(uplo)
    check_maxiter(maxiter)

    if symmetric:
        a = symmetrize(a, uplo)

    eps = machine_epsilon(a.dtype)

    a_flat, batch_shape = flatten_batch(a)
    batch_size, n = a_flat.shape[0], a.shape[-1]

    V = torch.empty(batch_size, n, n, dtype=a.dtype)
    real = torch.empty(batch_size, n, dtype=a.dtype)
    imag = torch.empty(batch_size, n, dtype=a.dtype)
    symmetric_flags = torch.zeros(batch_size, dtype=torch.bool)
    info = torch.zeros(batch_size, dtype=torch.int32)

    for i in range(batch_size):
        a_i = a_flat[i]
        symmetric_i = is_symmetric(a_i) if symmetric is None else symmetric
        symmetric_flags[i] = bool(symmetric_i)
        try:
            d_i, e_i, V_i = _eigen(a_i, symmetric_i, eps, maxiter)
        except ConvergenceError:
            V[i] = float("nan")
            real[i] = float("nan")
            imag[i] = float("nan")
            info[i] = 1
            continue

        V[i] = to_matrix(V_i, n, a.dtype)
        real[i] = torch.tensor(d_i, dtype=a.dtype)
        imag[i] = torch.tensor(e_i, dtype=a.dtype)

    failed = int(info.sum())
    if failed:
        warnings.warn(
            f"eigenvalue_decomposition: {failed} of {batch_size} matrices "
            f"did not converge within maxiter={maxiter}",
            RuntimeWarning,
            stacklevel=2,
        )

    D = block_diagonal(real, imag)

    return EigenvalueDecompositionResult(
        D=D.reshape(*batch_shape, n, n).to(a.device),
        V=V.reshape(*batch_shape, n, n).to(a.device),
        eigenvalues_real=real.reshape(*batch_shape, n).to(a.device),
        eigenvalues_imag=imag.reshape(*batch_shape, n).to(a.device),
        symmetric=symmetric_flags.reshape(batch_shape).to(a.device),
        info=info.reshape(batch_shape).to(a.device),
    )
