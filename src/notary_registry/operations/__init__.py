"""
Operations package - error mapping shared by the CLI commands.
"""
from .mappers import exit_code_for, run_and_exit

__all__ = ["exit_code_for", "run_and_exit"]
