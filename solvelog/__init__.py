"""SolveLog: solver error log import and convergence analytics."""
