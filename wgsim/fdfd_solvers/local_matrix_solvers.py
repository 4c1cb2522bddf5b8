""" Defines solvers for the FDFD matrix equations that run locally. """
import abc
import logging
import time

import numpy as np
import scipy.sparse
import scipy.sparse.linalg

from wgsim.fdfd_tools import error

logger = logging.getLogger(__name__)


class LocalMatrixSolver:
    """Base class for all CPU solvers that rely on generic matrix solves."""

    @abc.abstractmethod
    def solve_matrix_equation(self, A: scipy.sparse.csr_matrix, b: np.ndarray):
        """Solve matrix equation Ax = b.

        Args:
            A: The matrix A.
            b: The vector b.

        Returns:
            x satisfying Ax = b.
        """
        raise NotImplementedError('solve_matrix_equation not implemented')

    def solve(self, A: scipy.sparse.spmatrix, b: np.ndarray) -> np.ndarray:
        """Solves Ax = b and checks that the solution is usable.

        Raises:
            ShapeMismatch: If `A` is not square or does not match `b`.
            SingularMatrix: If the solve fails or gives non-finite values.
        """
        if A.shape[0] != A.shape[1] or A.shape[0] != b.size:
            raise error.ShapeMismatch(
                'Cannot solve system with matrix {} and right-hand side {}'.
                format(A.shape, b.shape))

        logger.debug('Solving system of size {} with {} non-zeros'.format(
            A.shape[0], A.nnz))
        start = time.time()
        x = self.solve_matrix_equation(
            A.astype(np.complex128).tocsc(), b.astype(np.complex128))
        logger.debug('Solve took {:.3f} s'.format(time.time() - start))

        if not np.all(np.isfinite(x)):
            raise error.SingularMatrix(
                'Solution of system of size {} is not finite'.format(
                    A.shape[0]))
        return x


class DirectSolver(LocalMatrixSolver):
    """ Use a direct sparse LU factorization.

    The wave operators are indefinite and not diagonally dominant, so
    iterative solvers are not guaranteed to converge.
    """

    def solve_matrix_equation(self, A, b):
        try:
            lu = scipy.sparse.linalg.splu(A)
        except RuntimeError as exc:
            raise error.SingularMatrix(
                'Factorization of system of size {} failed: {}'.format(
                    A.shape[0], exc)) from exc
        return lu.solve(b)
