"""Symmetry classification."""

import torch
from torch import Tensor


def is_symmetric(a: Tensor) -> bool:
    r"""
    Test whether a matrix is exactly symmetric.

    Returns ``True`` iff :math:`A_{ij} = A_{ji}` for all :math:`i, j`. The
    comparison is exact, without tolerance: a matrix that differs from its
    transpose in the last bit is not symmetric. For a batch of shape
    (..., n, n) the result is ``True`` only if every matrix is symmetric.

    Parameters
    ----------
    a : Tensor
        Input matrix of shape (..., n, n).

    Returns
    -------
    bool

    Raises
    ------
    ValueError
        If input is not at least 2D or not square.

    Examples
    --------
    >>> import torch
    >>> from torcheigen.linear_algebra.decomposition import is_symmetric
    >>> is_symmetric(torch.tensor([[1., 2.], [2., 3.]]))
    True
    >>> is_symmetric(torch.tensor([[1., 2.], [2.5, 3.]]))
    False
    """
    if a.dim() < 2:
        raise ValueError(f"a must be at least 2D, got {a.dim()}D")
    if a.shape[-2] != a.shape[-1]:
        raise ValueError(f"a must be square, got shape {a.shape}")

    return torch.equal(a, a.mT)


def symmetrize(a: Tensor, uplo: str) -> Tensor:
    """Mirror one triangle of ``a`` onto the other.

    ``uplo="L"`` keeps the lower triangle (and diagonal), ``"U"`` the upper.
    This is how a matrix known to be symmetric is read: only the referenced
    triangle is trusted.
    """
    if uplo == "L":
        return torch.tril(a) + torch.tril(a, -1).mT
    return torch.triu(a) + torch.triu(a, 1).mT
