"""
RegenPW - Password Generator

Ties the pieces together for one call:
    validate input -> derive digest -> map to password -> attach metadata

The digest never leaves this function; only the password and its
metadata are returned.
"""

import logging
import time
from dataclasses import dataclass, fields, replace
from typing import Dict, Optional, Sequence, Tuple, Union

from .config import DEFAULT_CONFIG, GeneratorConfig, PasswordOptions
from .crypto import DigestDeriver
from .errors import InvalidConfiguration, RegenPWError
from .mapper import CharacterDiversity, PasswordMapper
from .validation import validate_all_inputs

logger = logging.getLogger(__name__)

OptionsLike = Union[PasswordOptions, Dict[str, bool], None]


@dataclass(frozen=True)
class GenerationMetadata:
    hash_iterations: int
    generation_time_ms: int
    character_distribution: Dict[str, int]
    character_diversity: CharacterDiversity


@dataclass(frozen=True)
class GenerationResult:
    password: str
    length: int
    options: PasswordOptions
    metadata: GenerationMetadata


def coerce_options(options: OptionsLike, defaults: PasswordOptions) -> PasswordOptions:
    """
    Accept a PasswordOptions, a partial dict of flags, or None.

    Dict values are merged over `defaults`:
        {"include_symbols": False} -> defaults with symbols disabled
    """
    if options is None:
        return defaults
    if isinstance(options, PasswordOptions):
        return options
    if isinstance(options, dict):
        known = {f.name for f in fields(PasswordOptions)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise InvalidConfiguration(f"Unknown password option(s): {', '.join(unknown)}")
        return replace(defaults, **options)
    raise InvalidConfiguration("Password options must be a PasswordOptions or dict")


class PasswordGenerator:
    """
    Deterministic password generation from keywords.

    Usage:
        generator = PasswordGenerator()
        result = generator.generate(["github.com", "alice@example.com"], length=20)
        result.password
        result.metadata.character_diversity.diversity_ratio
    """

    def __init__(self, config: GeneratorConfig = DEFAULT_CONFIG):
        self.config = config
        self.deriver = DigestDeriver(config)
        self.mapper = PasswordMapper(config)

    def generate(
        self,
        keywords: Sequence[str],
        length: Optional[int] = None,
        options: OptionsLike = None,
        master_salt: Optional[str] = None,
        iterations: Optional[int] = None,
    ) -> GenerationResult:
        """
        Generate the password for a keyword set.

        Args:
            keywords: Memorable context (site, username, ...)
            length: Password length; None uses the configured default
            options: Character classes to use (PasswordOptions or partial dict)
            master_salt: Optional second factor mixed into every round
            iterations: Hash rounds; None uses the configured default

        Raises:
            InvalidInput: keywords, length or salt rejected
            InvalidConfiguration: options rejected
        """
        start = time.monotonic()
        security = self.config.security

        if length is None:
            length = security.default_password_length
        password_options = coerce_options(options, self.config.options)

        validate_all_inputs(keywords, length, password_options, master_salt, security)

        hash_result = self.deriver.derive(keywords, master_salt, iterations)
        mapped = self.mapper.map(hash_result.hash, length, password_options)

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug("Generated password: length=%d, %d ms", length, elapsed_ms)

        return GenerationResult(
            password=mapped.password,
            length=len(mapped.password),
            options=password_options,
            metadata=GenerationMetadata(
                hash_iterations=hash_result.iterations,
                generation_time_ms=elapsed_ms,
                character_distribution=mapped.character_distribution,
                character_diversity=mapped.character_diversity,
            ),
        )

    def validate_options(
        self,
        keywords: Sequence[str],
        length: Optional[int] = None,
        options: OptionsLike = None,
        master_salt: Optional[str] = None,
    ) -> Tuple[bool, Optional[str]]:
        """Non-raising variant of input validation: (is_valid, error_message)."""
        if length is None:
            length = self.config.security.default_password_length
        try:
            password_options = coerce_options(options, self.config.options)
            validate_all_inputs(keywords, length, password_options, master_salt, self.config.security)
        except RegenPWError as e:
            return False, str(e)
        return True, None
