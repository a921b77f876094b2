"""
RegenPW - Error Types

Every failure raised by the package derives from RegenPWError:
- InvalidInput: keywords, length, salt or iteration count are unusable
- InvalidConfiguration: options or configuration values are malformed
- CompatibilityFailure: the frozen test vectors no longer reproduce
"""

from typing import List, Optional


class RegenPWError(Exception):
    """Base class for all RegenPW errors."""


class InvalidInput(RegenPWError, ValueError):
    """Raised when derivation input has no usable content."""


class InvalidConfiguration(RegenPWError, ValueError):
    """Raised when character options or configuration values are malformed."""


class CompatibilityFailure(RegenPWError):
    """
    Raised by the compatibility harness after a full run, when at least one
    vector diverged from its pinned output.

    Never raised while deriving a password.
    """

    def __init__(self, algorithm_version: str, failures: Optional[List] = None):
        self.algorithm_version = algorithm_version
        self.failures = list(failures or [])
        lines = [f"{len(self.failures)} test vector(s) failed for algorithm {algorithm_version}"]
        for failure in self.failures:
            detail = failure.error or "; ".join(failure.differences)
            lines.append(f"  vector {failure.vector_index}: {detail}")
        super().__init__("\n".join(lines))
