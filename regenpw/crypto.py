"""
RegenPW - Digest Deriver

Turns a set of keywords (plus optional master salt) into a fixed-length
hex digest. The digest is the only source of entropy for the password
mapper, so this module must be bit-for-bit stable across platforms.

Derivation:
    1. Keywords -> trim, lowercase, strip diacritics -> join with "|"
    2. current = joined input
    3. For i in 0..iterations-1:
           message = [salt |] iter-<i> | joined | current
           current = hex(SHA-512(message as UTF-8))
    4. Digest = current (128 lowercase hex chars)

Why chain?
    - Each round consumes the previous round's output, so brute-force cost
      grows linearly with the iteration count
    - The iter-<i> marker makes every round's message distinct, so the
      chain cannot fall into a short cycle
"""

import collections.abc
import logging
import time
import unicodedata
from dataclasses import dataclass
from typing import Iterable, List, Optional

from cryptography.hazmat.primitives import hashes

from .config import DEFAULT_CONFIG, GeneratorConfig
from .errors import InvalidConfiguration, InvalidInput

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

KEYWORD_DELIMITER = "|"
MIN_COMBINED_LENGTH = 3     # characters, after normalization and joining
FIRST_ROUND_DELAY = 0.001   # seconds of timing noise after round 0

# Only one primitive is supported; the name is kept in config for versioning
HASH_ALGORITHMS = {
    "SHA-512": hashes.SHA512,
}


@dataclass(frozen=True)
class HashResult:
    hash: str
    iterations: int
    timestamp: int          # Unix milliseconds when derivation finished


# =============================================================================
# Normalization
# =============================================================================

def normalize_keyword(keyword: str) -> str:
    """
    Normalize one keyword: trim, lowercase, strip diacritics.

    "  Café " -> "cafe"
    """
    text = keyword.strip().lower()
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(c for c in decomposed if unicodedata.category(c) != "Mn")


def normalize_keywords(keywords: Iterable[str]) -> List[str]:
    """Drop non-string and blank keywords, normalize the rest (order kept)."""
    return [
        normalize_keyword(k) for k in keywords
        if isinstance(k, str) and k.strip()
    ]


def join_keywords(keywords: Iterable[str]) -> str:
    """
    Normalize and join keywords into the derivation input.

    Raises:
        InvalidInput: nothing usable remains, or the joined input is shorter
            than MIN_COMBINED_LENGTH
    """
    if isinstance(keywords, str):
        raise InvalidInput("Keywords must be a sequence of strings, not a single string")
    if not isinstance(keywords, collections.abc.Iterable):
        raise InvalidInput("Keywords must be a sequence of strings")

    normalized = normalize_keywords(keywords)
    if not normalized:
        raise InvalidInput("At least one non-empty keyword is required")

    joined = KEYWORD_DELIMITER.join(normalized)
    if len(joined) < MIN_COMBINED_LENGTH:
        raise InvalidInput(
            f"Combined keyword input must be at least {MIN_COMBINED_LENGTH} characters"
        )
    return joined


# =============================================================================
# Derivation
# =============================================================================

class DigestDeriver:
    """
    Iterated, salted SHA-512 over normalized keywords.

    Usage:
        deriver = DigestDeriver()
        result = deriver.derive(["github.com", "alice"])
        result.hash   # 128 hex chars
    """

    def __init__(self, config: GeneratorConfig = DEFAULT_CONFIG):
        self.config = config
        try:
            self._algorithm = HASH_ALGORITHMS[config.security.hash_algorithm]
        except KeyError:
            raise InvalidConfiguration(
                f"Unsupported hash algorithm: {config.security.hash_algorithm}"
            )

    def _hash_hex(self, message: str) -> str:
        h = hashes.Hash(self._algorithm())
        h.update(message.encode("utf-8"))
        return h.finalize().hex()

    def derive(
        self,
        keywords: Iterable[str],
        master_salt: Optional[str] = None,
        iterations: Optional[int] = None,
    ) -> HashResult:
        """
        Derive the digest for a keyword set.

        Args:
            keywords: Caller keywords (order matters)
            master_salt: Optional salt; None falls back to the configured
                master salt, empty string means no salt
            iterations: Round count; None uses the configured default

        Returns:
            HashResult with the hex digest

        Raises:
            InvalidInput: unusable keywords or iterations < 1
        """
        if iterations is None:
            iterations = self.config.security.hash_iterations
        if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 1:
            raise InvalidInput("Iterations must be a positive integer")

        if master_salt is None:
            master_salt = self.config.security.master_salt

        joined = join_keywords(keywords)
        current = joined

        logger.debug("Deriving digest: %d iterations, salted=%s", iterations, bool(master_salt))

        for i in range(iterations):
            parts = [master_salt] if master_salt else []
            parts.extend([f"iter-{i}", joined, current])
            current = self._hash_hex(KEYWORD_DELIMITER.join(parts))

            if i == 0:
                time.sleep(FIRST_ROUND_DELAY)

        return HashResult(
            hash=current,
            iterations=iterations,
            timestamp=int(time.time() * 1000),
        )


def derive_digest(
    keywords: Iterable[str],
    master_salt: Optional[str] = None,
    iterations: Optional[int] = None,
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> str:
    """Convenience wrapper: derive and return only the hex digest."""
    return DigestDeriver(config).derive(keywords, master_salt, iterations).hash


def validate_hash_options(keywords, master_salt=None, iterations=None) -> bool:
    """
    Structural check of derivation options without raising.

    Only shapes are checked (list of keywords, positive iteration count,
    salt is str or None); keyword content is checked by derive().
    """
    if not isinstance(keywords, (list, tuple)) or len(keywords) == 0:
        return False
    if iterations is not None and (
        isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 1
    ):
        return False
    if master_salt is not None and not isinstance(master_salt, str):
        return False
    return True
