"""Tests for Hessenberg decomposition."""

import pytest
import scipy.linalg
import torch

from torcheigen.linear_algebra.decomposition import (
    HessenbergResult,
    hessenberg,
)
from torcheigen.linear_algebra.decomposition._hessenberg import (
    householder_hessenberg,
)


def sort_complex(t):
    return t[torch.argsort(t.real)]


class TestHessenberg:
    """Tests for Hessenberg decomposition."""

    def test_basic(self):
        """Test shapes and info of a basic Hessenberg decomposition."""
        a = torch.tensor(
            [
                [1.0, 2.0, 3.0],
                [4.0, 5.0, 6.0],
                [7.0, 8.0, 9.0],
            ],
            dtype=torch.float64,
        )

        result = hessenberg(a)

        assert isinstance(result, HessenbergResult)
        assert result.H.shape == (3, 3)
        assert result.Q.shape == (3, 3)
        assert result.info.shape == ()
        assert result.info.item() == 0

    def test_reconstruction(self):
        """Test that A = Q @ H @ Q.mT holds."""
        torch.manual_seed(42)
        n = 5
        a = torch.randn(n, n, dtype=torch.float64)

        result = hessenberg(a)

        reconstructed = result.Q @ result.H @ result.Q.mT
        torch.testing.assert_close(reconstructed, a, rtol=1e-10, atol=1e-10)

    def test_hessenberg_form(self):
        """Test that H has exact zeros below the first subdiagonal."""
        torch.manual_seed(123)
        n = 6
        a = torch.randn(n, n, dtype=torch.float64)

        result = hessenberg(a)

        for i in range(2, n):
            for j in range(i - 1):
                assert result.H[i, j].item() == 0.0, (
                    f"H[{i}, {j}] = {result.H[i, j].item()} should be zero"
                )

    def test_orthogonal(self):
        """Test that Q is orthogonal: Q @ Q.mT = I."""
        torch.manual_seed(456)
        n = 4
        a = torch.randn(n, n, dtype=torch.float64)

        result = hessenberg(a)

        identity = torch.eye(n, dtype=torch.float64)
        torch.testing.assert_close(
            result.Q @ result.Q.mT, identity, rtol=1e-10, atol=1e-10
        )
        torch.testing.assert_close(
            result.Q.mT @ result.Q, identity, rtol=1e-10, atol=1e-10
        )

    def test_scipy_comparison(self):
        """Compare with scipy.linalg.hessenberg."""
        torch.manual_seed(789)
        n = 5
        a = torch.randn(n, n, dtype=torch.float64)

        result = hessenberg(a)

        H_scipy, _ = scipy.linalg.hessenberg(a.numpy(), calc_q=True)

        # Hessenberg forms are unique up to the signs of the columns of Q,
        # so the subdiagonals agree in magnitude
        torch.testing.assert_close(
            torch.diagonal(result.H, -1).abs(),
            torch.from_numpy(H_scipy).diagonal(-1).abs(),
            rtol=1e-10,
            atol=1e-10,
        )

        eig_H = torch.linalg.eigvals(result.H)
        eig_scipy = torch.linalg.eigvals(torch.from_numpy(H_scipy))
        torch.testing.assert_close(
            sort_complex(eig_H),
            sort_complex(eig_scipy),
            rtol=1e-10,
            atol=1e-10,
        )

    def test_batched(self):
        """Test batched Hessenberg decomposition."""
        torch.manual_seed(101)
        batch_size = 3
        n = 4

        a = torch.randn(batch_size, n, n, dtype=torch.float64)

        result = hessenberg(a)

        assert result.H.shape == (batch_size, n, n)
        assert result.Q.shape == (batch_size, n, n)
        assert result.info.shape == (batch_size,)

        for i in range(batch_size):
            reconstructed = result.Q[i] @ result.H[i] @ result.Q[i].mT
            torch.testing.assert_close(
                reconstructed, a[i], rtol=1e-10, atol=1e-10
            )

            for row in range(2, n):
                for col in range(row - 1):
                    assert result.H[i, row, col].item() == 0.0

            identity = torch.eye(n, dtype=torch.float64)
            torch.testing.assert_close(
                result.Q[i] @ result.Q[i].mT, identity, rtol=1e-10, atol=1e-10
            )

    def test_batched_multi_dim(self):
        """Test with multiple batch dimensions."""
        torch.manual_seed(202)
        n = 3

        a = torch.randn(2, 3, n, n, dtype=torch.float64)

        result = hessenberg(a)

        assert result.H.shape == (2, 3, n, n)
        assert result.Q.shape == (2, 3, n, n)
        assert result.info.shape == (2, 3)

        reconstructed = result.Q[1, 2] @ result.H[1, 2] @ result.Q[1, 2].mT
        torch.testing.assert_close(
            reconstructed, a[1, 2], rtol=1e-10, atol=1e-10
        )

    def test_already_hessenberg(self):
        """Test with an already upper Hessenberg matrix."""
        a = torch.tensor(
            [
                [1.0, 2.0, 3.0, 4.0],
                [5.0, 6.0, 7.0, 8.0],
                [0.0, 9.0, 10.0, 11.0],
                [0.0, 0.0, 12.0, 13.0],
            ],
            dtype=torch.float64,
        )

        result = hessenberg(a)

        reconstructed = result.Q @ result.H @ result.Q.mT
        torch.testing.assert_close(reconstructed, a, rtol=1e-10, atol=1e-10)

    def test_upper_triangular(self):
        """Test that a triangular matrix is left unchanged."""
        a = torch.tensor(
            [
                [1.0, 2.0, 3.0],
                [0.0, 4.0, 5.0],
                [0.0, 0.0, 6.0],
            ],
            dtype=torch.float64,
        )

        result = hessenberg(a)

        # Zero columns need no reflection
        torch.testing.assert_close(result.H, a)
        torch.testing.assert_close(
            result.Q, torch.eye(3, dtype=torch.float64)
        )

    def test_2x2_matrix(self):
        """Test with 2x2 matrix (trivial case, already Hessenberg)."""
        a = torch.tensor(
            [
                [1.0, 2.0],
                [3.0, 4.0],
            ],
            dtype=torch.float64,
        )

        result = hessenberg(a)

        torch.testing.assert_close(result.H, a)
        torch.testing.assert_close(
            result.Q, torch.eye(2, dtype=torch.float64)
        )

    def test_1x1_matrix(self):
        """Test with 1x1 matrix (trivial case)."""
        a = torch.tensor([[5.0]], dtype=torch.float64)

        result = hessenberg(a)

        assert result.H.shape == (1, 1)
        assert result.Q.shape == (1, 1)
        torch.testing.assert_close(result.H, a, rtol=1e-10, atol=1e-10)

    def test_empty_matrix(self):
        """Test with 0x0 matrix."""
        a = torch.zeros(0, 0, dtype=torch.float64)

        result = hessenberg(a)

        assert result.H.shape == (0, 0)
        assert result.Q.shape == (0, 0)

    def test_float32(self):
        """Test with float32 dtype."""
        torch.manual_seed(505)
        n = 4
        a = torch.randn(n, n, dtype=torch.float32)

        result = hessenberg(a)

        assert result.H.dtype == torch.float32
        assert result.Q.dtype == torch.float32

        # Lower tolerance for float32
        reconstructed = result.Q @ result.H @ result.Q.mT
        torch.testing.assert_close(reconstructed, a, rtol=1e-4, atol=1e-4)

    def test_eigenvalue_preservation(self):
        """Test that eigenvalues of H match eigenvalues of A."""
        torch.manual_seed(606)
        n = 5
        a = torch.randn(n, n, dtype=torch.float64)

        result = hessenberg(a)

        torch.testing.assert_close(
            sort_complex(torch.linalg.eigvals(a)),
            sort_complex(torch.linalg.eigvals(result.H)),
            rtol=1e-10,
            atol=1e-10,
        )

    def test_householder_vectors_kept_below_subdiagonal(self):
        """Test the in-place reduction leaves its reflectors below H."""
        H = [
            [1.0, 2.0, 3.0, 4.0],
            [2.0, 1.0, 5.0, 6.0],
            [3.0, 5.0, 1.0, 7.0],
            [4.0, 6.0, 7.0, 1.0],
        ]

        V = householder_hessenberg(H)

        assert len(V) == 4
        assert any(H[i][j] != 0.0 for i in range(2, 4) for j in range(i - 1))

    def test_invalid_1d_input(self):
        """Test error on 1D input."""
        a = torch.tensor([1.0, 2.0, 3.0])
        with pytest.raises(ValueError, match=r"^a must be at least 2D"):
            hessenberg(a)

    def test_invalid_non_square(self):
        """Test error on non-square input."""
        a = torch.randn(3, 4, dtype=torch.float64)
        with pytest.raises(ValueError, match=r"^a must be square"):
            hessenberg(a)

    def test_invalid_complex(self):
        """Test error on complex input."""
        a = torch.randn(3, 3, dtype=torch.complex128)
        with pytest.raises(ValueError, match="complex input is not supported"):
            hessenberg(a)
