"""Argument checking and working precision for the decompositions."""

import math

import torch
from torch import Tensor


def working_dtype(dtype: torch.dtype) -> torch.dtype:
    """Return the real floating-point dtype the algorithms run in.

    ``float32`` and ``float64`` are kept; every other real dtype (integers,
    bool, half precision) is promoted to ``float64``.
    """
    if dtype in (torch.float32, torch.float64):
        return dtype
    return torch.float64


def machine_epsilon(dtype: torch.dtype) -> float:
    """Machine epsilon of the working dtype, as used in deflation tests."""
    return torch.finfo(working_dtype(dtype)).eps


def as_real_square(a: Tensor) -> Tensor:
    """Validate a (batch of) real square matrices and return a detached copy.

    Parameters
    ----------
    a : Tensor
        Input of shape (..., n, n).

    Returns
    -------
    Tensor
        Detached tensor in the working dtype.

    Raises
    ------
    ValueError
        If ``a`` is not at least 2D, not square, complex, or contains
        NaN or Inf.
    """
    if a.dim() < 2:
        raise ValueError(f"a must be at least 2D, got {a.dim()}D")
    if a.shape[-2] != a.shape[-1]:
        raise ValueError(f"a must be square, got shape {a.shape}")
    if a.is_complex():
        raise ValueError(
            f"complex input is not supported, got dtype {a.dtype}"
        )

    # Results are discontinuous in the entries (eigenvalue ordering,
    # conjugate pairing), so no gradients are tracked
    a = a.detach().to(working_dtype(a.dtype))

    if not torch.isfinite(a).all():
        raise ValueError("a must not contain NaN or Inf")

    return a


def flatten_batch(a: Tensor) -> tuple[Tensor, torch.Size]:
    """Reshape (..., n, n) to (batch, n, n), returning the batch shape."""
    batch_shape = a.shape[:-2]
    n = a.shape[-1]
    return a.reshape(math.prod(batch_shape), n, n), batch_shape


def to_matrix(rows: list[list[float]], n: int, dtype: torch.dtype) -> Tensor:
    return torch.tensor(rows, dtype=dtype).reshape(n, n)


def check_maxiter(maxiter: int | None) -> None:
    if maxiter is None:
        return
    if isinstance(maxiter, bool) or not isinstance(maxiter, int):
        raise ValueError(
            "maxiter must be a positive int or None, "
            f"got {type(maxiter).__name__}"
        )
    if maxiter < 1:
        raise ValueError(
            f"maxiter must be a positive int or None, got {maxiter}"
        )
