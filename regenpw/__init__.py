"""
RegenPW - Deterministic Password Regeneration

Don't store passwords: regenerate them from memorable context. The same
keywords (and optional master salt) always give the same password, on
any platform, for a given algorithm version.

Key Features:
- Iterated, chained SHA-512 over normalized keywords
- Balanced character-class distribution with a per-character repetition cap
- Deterministic shuffle driven by the digest itself
- Frozen test vectors to prove the algorithm has not drifted

Components:
- config.py: Immutable configuration and algorithm version
- crypto.py: Digest Deriver (keywords -> hex digest)
- mapper.py: Password Mapper (digest -> password + metrics)
- generator.py: Validation + derivation + mapping in one call
- compat.py: Compatibility harness over pinned test vectors
- analyzer.py: Strength analysis for arbitrary passwords

Usage:
    import regenpw
    regenpw.generate_password(["github.com", "alice"])           # str
    regenpw.PasswordGenerator().generate(["github.com"], 20)     # full result
    regenpw.compat.quick_compatibility_check()                   # True
"""

from typing import Dict, Optional, Sequence

from . import compat
from .analyzer import analyze_password, calculate_character_distribution, count_character_types
from .compat import (
    ALGORITHM_TEST_VECTORS,
    get_algorithm_version,
    quick_compatibility_check,
    validate_algorithm_compatibility,
    validate_full_algorithm,
)
from .config import (
    ALGORITHM_VERSION,
    DEFAULT_CONFIG,
    CharacterSets,
    DistributionConfig,
    GeneratorConfig,
    PasswordOptions,
    SecurityConfig,
    merge_config,
)
from .crypto import DigestDeriver, derive_digest, normalize_keyword
from .errors import CompatibilityFailure, InvalidConfiguration, InvalidInput, RegenPWError
from .generator import GenerationResult, OptionsLike, PasswordGenerator, coerce_options
from .mapper import PasswordMapper

__version__ = "1.0.2"
__author__ = "RegenPW Team"


def generate_password(
    keywords: Sequence[str],
    length: Optional[int] = None,
    options: OptionsLike = None,
    master_salt: Optional[str] = None,
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> str:
    """Generate and return only the password string."""
    return PasswordGenerator(config).generate(keywords, length, options, master_salt).password


def generate_hash(
    keywords: Sequence[str],
    master_salt: Optional[str] = None,
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> str:
    """Derive the hex digest for a keyword set."""
    return derive_digest(keywords, master_salt, config=config)


def hash_to_password(
    digest: str,
    length: Optional[int] = None,
    options: OptionsLike = None,
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> str:
    """Map an existing digest to a password (no input validation)."""
    if length is None:
        length = config.security.default_password_length
    password_options = coerce_options(options, config.options)
    return PasswordMapper(config).map(digest, length, password_options).password


def normalize_input(text: str) -> str:
    """Normalize one keyword the same way derivation does."""
    return normalize_keyword(text)


def analyze_character_distribution(password: str) -> Dict[str, float]:
    """Percentage of each character class in `password`."""
    return calculate_character_distribution(count_character_types(password))


__all__ = [
    "ALGORITHM_TEST_VECTORS",
    "ALGORITHM_VERSION",
    "CharacterSets",
    "CompatibilityFailure",
    "DEFAULT_CONFIG",
    "DigestDeriver",
    "DistributionConfig",
    "GenerationResult",
    "GeneratorConfig",
    "InvalidConfiguration",
    "InvalidInput",
    "PasswordGenerator",
    "PasswordMapper",
    "PasswordOptions",
    "RegenPWError",
    "SecurityConfig",
    "analyze_character_distribution",
    "analyze_password",
    "compat",
    "generate_hash",
    "generate_password",
    "get_algorithm_version",
    "hash_to_password",
    "merge_config",
    "normalize_input",
    "quick_compatibility_check",
    "validate_algorithm_compatibility",
    "validate_full_algorithm",
]
