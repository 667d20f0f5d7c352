"""Dense linear algebra on PyTorch tensors.

Submodules
----------
decomposition
    Matrix decompositions (eigenvalue problems, Hessenberg and Schur forms).
"""

from torcheigen.linear_algebra import decomposition

__all__ = ["decomposition"]
