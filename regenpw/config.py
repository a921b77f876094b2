"""
RegenPW - Configuration

All tunables live here as immutable values. Nothing in the package reads
mutable global state: DigestDeriver, PasswordMapper and PasswordGenerator
each take a GeneratorConfig, so a test configuration and an operator
override can be used side by side in one process.

Changing any value that feeds derivation (pools, thresholds, weights,
iteration count) changes every generated password. Bump ALGORITHM_VERSION
and the pinned test vectors together.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Dict, Optional, Tuple

from .errors import InvalidConfiguration


# =============================================================================
# Character Classes
# =============================================================================

# Iteration order matters: placement, fill weights and remainder assignment
# all walk the classes in this order.
CLASS_NAMES: Tuple[str, ...] = ("uppercase", "lowercase", "numbers", "symbols")

UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
NUMBERS = "0123456789"
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"


@dataclass(frozen=True)
class CharacterSets:
    """The four character pools, one per class."""
    uppercase: str = UPPERCASE
    lowercase: str = LOWERCASE
    numbers: str = NUMBERS
    symbols: str = SYMBOLS

    def pool(self, class_name: str) -> str:
        return getattr(self, class_name)


@dataclass(frozen=True)
class PasswordOptions:
    """Which character classes a password may draw from."""
    include_uppercase: bool = True
    include_lowercase: bool = True
    include_numbers: bool = True
    include_symbols: bool = True

    def enabled(self, class_name: str) -> bool:
        return getattr(self, f"include_{class_name}")

    def active_classes(self) -> Tuple[str, ...]:
        return tuple(name for name in CLASS_NAMES if self.enabled(name))

    def as_dict(self) -> Dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# =============================================================================
# Distribution Profiles
# =============================================================================

@dataclass(frozen=True)
class ClassWeights:
    """Share of the password assigned to each class (sums to 1.0)."""
    uppercase: float
    lowercase: float
    numbers: float
    symbols: float


@dataclass(frozen=True)
class DistributionConfig:
    """
    Length-dependent target distribution, used only when all four classes
    are active. Below medium_threshold the length is split equally.
    """
    long_threshold: int = 64
    long_weights: ClassWeights = ClassWeights(0.20, 0.35, 0.20, 0.25)
    medium_threshold: int = 32
    medium_weights: ClassWeights = ClassWeights(0.25, 0.35, 0.20, 0.20)

    def weights_for(self, length: int) -> Optional[ClassWeights]:
        """Return the weight profile for a length, or None for an equal split."""
        if length >= self.long_threshold:
            return self.long_weights
        if length >= self.medium_threshold:
            return self.medium_weights
        return None


# =============================================================================
# Security Settings
# =============================================================================

@dataclass(frozen=True)
class SecurityConfig:
    min_password_length: int = 8
    max_password_length: int = 128
    default_password_length: int = 16
    hash_algorithm: str = "SHA-512"
    hash_iterations: int = 1000
    master_salt: Optional[str] = None


@dataclass(frozen=True)
class GeneratorConfig:
    """Everything one derivation needs, bundled into a single value."""
    security: SecurityConfig = field(default_factory=SecurityConfig)
    options: PasswordOptions = field(default_factory=PasswordOptions)
    character_sets: CharacterSets = field(default_factory=CharacterSets)
    distribution: DistributionConfig = field(default_factory=DistributionConfig)


DEFAULT_CONFIG = GeneratorConfig()


# =============================================================================
# Algorithm Version Lock
# =============================================================================

@dataclass(frozen=True)
class AlgorithmVersion:
    version: str
    hash_algorithm: str
    encoding: str
    number_precision: str
    shuffle_algorithm: str


ALGORITHM_VERSION = AlgorithmVersion(
    version="1.0.2",
    hash_algorithm="SHA-512",
    encoding="UTF-8",
    number_precision="IEEE-754",
    shuffle_algorithm="Fisher-Yates",
)


# =============================================================================
# Overrides
# =============================================================================

def _override(base, overrides: Optional[dict], section: str):
    if not overrides:
        return base
    known = {f.name for f in fields(base)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise InvalidConfiguration(f"Unknown {section} setting(s): {', '.join(unknown)}")
    return replace(base, **overrides)


def merge_config(
    security: Optional[dict] = None,
    options: Optional[dict] = None,
    character_sets: Optional[dict] = None,
    distribution: Optional[dict] = None,
    base: GeneratorConfig = DEFAULT_CONFIG,
) -> GeneratorConfig:
    """
    Build a new configuration from partial overrides.

    Each argument is a dict of field names for the matching section, e.g.
    merge_config(security={"hash_iterations": 5000}). Sections not given
    keep the values from `base`.

    Raises:
        InvalidConfiguration: unknown field names or empty character pools
    """
    if distribution:
        distribution = dict(distribution)
        for key in ("long_weights", "medium_weights"):
            if isinstance(distribution.get(key), dict):
                distribution[key] = ClassWeights(**distribution[key])

    merged = GeneratorConfig(
        security=_override(base.security, security, "security"),
        options=_override(base.options, options, "options"),
        character_sets=_override(base.character_sets, character_sets, "character set"),
        distribution=_override(base.distribution, distribution, "distribution"),
    )

    for name in CLASS_NAMES:
        if not merged.character_sets.pool(name):
            raise InvalidConfiguration(f"Character pool '{name}' cannot be empty")

    return merged
