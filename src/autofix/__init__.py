"""AutoFix - self-healing command runner.

Runs a shell command and, when it fails, classifies the error, resolves a
remediation, gates it behind safety policy and confirmation, applies it and
retries the original command.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
