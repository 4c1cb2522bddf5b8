from wgsim.fdfd_solvers.local_matrix_solvers import DirectSolver
