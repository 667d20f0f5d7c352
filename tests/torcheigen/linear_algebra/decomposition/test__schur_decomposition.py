"""Tests for real Schur decomposition."""

import pytest
import scipy.linalg
import torch

from torcheigen.linear_algebra.decomposition import (
    SchurDecompositionResult,
    schur_decomposition,
)


def _assert_quasi_triangular(T, eigenvalues):
    """Only the subdiagonal entries of complex pair blocks are nonzero."""
    n = T.shape[-1]
    assert bool((torch.tril(T, -2) == 0).all())
    for i in range(n - 1):
        if T[i + 1, i] != 0:
            assert eigenvalues[i].imag > 0
            assert eigenvalues[i + 1].imag < 0
            if i + 2 < n:
                assert T[i + 2, i + 1] == 0


def _assert_same_spectrum(ours, reference, tol):
    distance = (ours[:, None] - reference[None, :]).abs()
    assert distance.min(dim=1).values.max().item() < tol
    assert distance.min(dim=0).values.max().item() < tol


class TestSchurDecomposition:
    """Tests for real Schur decomposition."""

    def test_basic_real_schur(self):
        """Test that a triangular matrix is its own Schur form."""
        a = torch.tensor(
            [
                [1.0, 2.0, 3.0],
                [0.0, 4.0, 5.0],
                [0.0, 0.0, 6.0],
            ],
            dtype=torch.float64,
        )

        result = schur_decomposition(a)

        assert isinstance(result, SchurDecompositionResult)
        assert result.T.shape == (3, 3)
        assert result.Q.shape == (3, 3)
        assert result.eigenvalues.shape == (3,)
        assert result.info.item() == 0

        torch.testing.assert_close(result.T, a)
        torch.testing.assert_close(
            result.Q, torch.eye(3, dtype=torch.float64)
        )
        torch.testing.assert_close(
            result.eigenvalues,
            torch.tensor([1.0, 4.0, 6.0], dtype=torch.complex128),
        )

    def test_rotation(self):
        """Test a plane rotation: a single 2x2 block with eigenvalues +/- i."""
        a = torch.tensor(
            [
                [0.0, -1.0],
                [1.0, 0.0],
            ],
            dtype=torch.float64,
        )

        result = schur_decomposition(a)

        torch.testing.assert_close(
            result.eigenvalues,
            torch.tensor([1j, -1j], dtype=torch.complex128),
        )
        reconstructed = result.Q @ result.T @ result.Q.mT
        torch.testing.assert_close(reconstructed, a, rtol=1e-10, atol=1e-10)
        assert result.T[1, 0] != 0

    def test_reconstruction(self):
        """Test that A = Q @ T @ Q.mT holds with Q orthogonal."""
        torch.manual_seed(42)
        n = 6
        a = torch.randn(n, n, dtype=torch.float64)

        result = schur_decomposition(a)

        reconstructed = result.Q @ result.T @ result.Q.mT
        torch.testing.assert_close(reconstructed, a, rtol=1e-10, atol=1e-10)

        identity = torch.eye(n, dtype=torch.float64)
        torch.testing.assert_close(
            result.Q.mT @ result.Q, identity, rtol=1e-10, atol=1e-10
        )

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_quasi_triangular(self, seed):
        """Test the block structure of T and its agreement with eigenvalues."""
        torch.manual_seed(seed)
        n = 7
        a = torch.randn(n, n, dtype=torch.float64)

        result = schur_decomposition(a)
        T, eigenvalues = result.T, result.eigenvalues

        _assert_quasi_triangular(T, eigenvalues)

        i = 0
        while i < n:
            if eigenvalues[i].imag != 0:
                block = torch.linalg.eigvals(T[i : i + 2, i : i + 2])
                _assert_same_spectrum(block, eigenvalues[i : i + 2], 1e-10)
                i += 2
            else:
                torch.testing.assert_close(
                    T[i, i], eigenvalues[i].real, rtol=1e-10, atol=1e-10
                )
                i += 1

    def test_scipy_comparison(self):
        """Compare eigenvalues with scipy.linalg.schur."""
        torch.manual_seed(42)
        n = 5
        a = torch.randn(n, n, dtype=torch.float64)

        result = schur_decomposition(a)

        T_scipy, _ = scipy.linalg.schur(a.numpy(), output="real")
        reference = torch.from_numpy(scipy.linalg.eigvals(T_scipy))
        _assert_same_spectrum(result.eigenvalues, reference, 1e-10)

    def test_batched(self):
        """Test batched Schur decomposition."""
        torch.manual_seed(123)
        batch_size = 2
        n = 3

        a = torch.randn(batch_size, n, n, dtype=torch.float64)

        result = schur_decomposition(a)

        assert result.T.shape == (batch_size, n, n)
        assert result.Q.shape == (batch_size, n, n)
        assert result.eigenvalues.shape == (batch_size, n)
        assert result.info.shape == (batch_size,)

        for i in range(batch_size):
            reconstructed = result.Q[i] @ result.T[i] @ result.Q[i].mT
            torch.testing.assert_close(
                reconstructed, a[i], rtol=1e-10, atol=1e-10
            )

    def test_batched_multi_dim(self):
        """Test with multiple batch dimensions."""
        torch.manual_seed(124)
        a = torch.randn(2, 2, 4, 4, dtype=torch.float64)

        result = schur_decomposition(a)

        assert result.T.shape == (2, 2, 4, 4)
        assert result.eigenvalues.shape == (2, 2, 4)
        assert result.info.shape == (2, 2)

    def test_zero_matrix(self):
        """Test that the zero matrix is already in Schur form."""
        a = torch.zeros(3, 3, dtype=torch.float64)

        result = schur_decomposition(a)

        assert bool((result.T == 0).all())
        torch.testing.assert_close(
            result.Q, torch.eye(3, dtype=torch.float64)
        )
        assert bool((result.eigenvalues == 0).all())

    def test_float32(self):
        """Test with float32 dtype."""
        torch.manual_seed(505)
        a = torch.randn(4, 4, dtype=torch.float32)

        result = schur_decomposition(a)

        assert result.T.dtype == torch.float32
        assert result.Q.dtype == torch.float32
        assert result.eigenvalues.dtype == torch.complex64

        reconstructed = result.Q @ result.T @ result.Q.mT
        torch.testing.assert_close(reconstructed, a, rtol=1e-4, atol=1e-4)

    def test_maxiter_reports_info(self):
        """Test that exceeding maxiter sets info, NaN outputs and warns."""
        torch.manual_seed(606)
        a = torch.stack(
            [
                torch.randn(6, 6, dtype=torch.float64),
                torch.triu(torch.randn(6, 6, dtype=torch.float64)),
            ]
        )

        with pytest.warns(RuntimeWarning, match="did not converge"):
            result = schur_decomposition(a, maxiter=1)

        # Triangular matrices deflate without iterating
        assert result.info.tolist() == [1, 0]
        assert bool(result.T[0].isnan().all())
        assert bool(result.Q[0].isnan().all())
        assert bool(result.eigenvalues[0].real.isnan().all())
        torch.testing.assert_close(result.T[1], a[1])

    def test_invalid_maxiter(self):
        """Test error on invalid maxiter."""
        a = torch.randn(3, 3)
        with pytest.raises(ValueError, match="maxiter must be a positive int"):
            schur_decomposition(a, maxiter=0)

    def test_invalid_input_1d(self):
        """Test error on 1D input."""
        a = torch.tensor([1.0, 2.0, 3.0])
        with pytest.raises(ValueError, match=r"^a must be at least 2D"):
            schur_decomposition(a)

    def test_invalid_input_non_square(self):
        """Test error on non-square input."""
        a = torch.randn(3, 4)
        with pytest.raises(ValueError, match=r"^a must be square"):
            schur_decomposition(a)

    def test_invalid_input_complex(self):
        """Test error on complex input."""
        a = torch.randn(3, 3, dtype=torch.complex128)
        with pytest.raises(ValueError, match="complex input is not supported"):
            schur_decomposition(a)
