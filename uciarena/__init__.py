"""UCI chess engine tooling: processes, options, compliance checks, pairings and adjudication."""

__version__ = "0.1.0"