"""
RegenPW - Compatibility Harness

Re-runs the deriver and mapper against frozen test vectors. A vector pins
its input (keywords, length, options, salt) to the exact digest prefix,
password and diversity numbers that algorithm version 1.0.2 produces.

If any vector drifts, the algorithm has changed and every password users
regenerate would change with it. Run this in CI and at startup:

    from regenpw import compat
    compat.quick_compatibility_check()      # first vector only -> bool
    compat.validate_algorithm_compatibility()   # every vector, full report
    compat.assert_compatible()              # raises CompatibilityFailure
"""

import logging
import platform
import time
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Tuple

from .config import ALGORITHM_VERSION, DEFAULT_CONFIG, GeneratorConfig
from .crypto import DigestDeriver
from .errors import CompatibilityFailure
from .generator import PasswordGenerator

logger = logging.getLogger(__name__)

HASH_PREFIX_LENGTH = 16
DIVERSITY_RATIO_TOLERANCE = 0.001

ALGORITHM_FEATURES = (
    "SHA-512 Hash Generation",
    "Character Diversity Optimization",
    "Repetition Control",
    "Balanced Distribution",
    "Cross-Platform Validation",
)


# =============================================================================
# Test Vectors
# =============================================================================

@dataclass(frozen=True)
class TestVector:
    keywords: Tuple[str, ...]
    length: int
    expected_password: str
    expected_hash_prefix: str
    expected_unique_characters: int
    expected_max_repetitions: int
    expected_diversity_ratio: float
    options: Optional[Dict[str, bool]] = None
    master_salt: Optional[str] = None
    timestamp: int = 1704067200000      # 2024-01-01, when the vector was pinned

    # Not a pytest test class
    __test__ = False


ALGORITHM_TEST_VECTORS: Tuple[TestVector, ...] = (
    TestVector(
        keywords=("test",),
        length=16,
        expected_password="Bu9]T_0Yi&p09.Hg",
        expected_hash_prefix="465e349bf20ac009",
        expected_unique_characters=14,
        expected_max_repetitions=2,
        expected_diversity_ratio=0.875,
    ),
    TestVector(
        keywords=("github.com", "user@email.com"),
        length=16,
        expected_password="Vk!]XmK0G25<m3$p",
        expected_hash_prefix="0e593aaaaaac049e",
        expected_unique_characters=15,
        expected_max_repetitions=2,
        expected_diversity_ratio=0.938,
    ),
    TestVector(
        keywords=("diversity-test",),
        length=32,
        expected_password="$Ueqo0MyJyMz6DyjMJd6;Gw62h]<9*h%",
        expected_hash_prefix="461f4d98bee7922b",
        expected_unique_characters=24,
        expected_max_repetitions=3,
        expected_diversity_ratio=0.750,
    ),
)


# =============================================================================
# Reports
# =============================================================================

@dataclass
class VectorResult:
    vector_index: int
    vector: TestVector
    expected: str
    actual: str
    passed: bool
    differences: List[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class CompatibilityReport:
    is_compatible: bool
    algorithm_version: str
    tested_vectors: int
    passed_vectors: int
    failed_vectors: List[VectorResult]
    results: List[VectorResult]      # every vector, in order
    environment: Dict[str, object]


@dataclass
class AlgorithmReport:
    is_fully_compatible: bool
    algorithm_version: str
    timestamp: int
    hash_generation: CompatibilityReport
    password_generation: CompatibilityReport

    @property
    def failures(self) -> List[VectorResult]:
        return self.hash_generation.failed_vectors + self.password_generation.failed_vectors


def _environment() -> Dict[str, object]:
    return {
        "python_version": platform.python_version(),
        "implementation": platform.python_implementation(),
        "platform": platform.platform(),
        "timestamp": int(time.time() * 1000),
    }


def _report(results: List[VectorResult], vectors) -> CompatibilityReport:
    failed = [r for r in results if not r.passed]
    for r in failed:
        logger.warning(
            "Test vector %d failed: %s", r.vector_index, r.error or "; ".join(r.differences)
        )
    return CompatibilityReport(
        is_compatible=not failed,
        algorithm_version=ALGORITHM_VERSION.version,
        tested_vectors=len(vectors),
        passed_vectors=len(results) - len(failed),
        failed_vectors=failed,
        results=list(results),
        environment=_environment(),
    )


# =============================================================================
# Checks
# =============================================================================

def _check_hash(index: int, vector: TestVector, deriver: DigestDeriver, iterations: int) -> VectorResult:
    expected = vector.expected_hash_prefix
    try:
        digest = deriver.derive(vector.keywords, vector.master_salt, iterations).hash
    except Exception as e:
        return VectorResult(index, vector, expected, "", False, error=str(e))

    actual = digest[:HASH_PREFIX_LENGTH]
    differences = []
    if actual != expected:
        differences.append(f'hash prefix: expected "{expected}", got "{actual}"')
    return VectorResult(index, vector, expected, actual, not differences, differences)


def _check_password(index: int, vector: TestVector, generator: PasswordGenerator) -> VectorResult:
    expected = vector.expected_password
    try:
        result = generator.generate(
            list(vector.keywords),
            length=vector.length,
            options=vector.options,
            master_salt=vector.master_salt,
        )
    except Exception as e:
        return VectorResult(index, vector, expected, "", False, error=str(e))

    differences = []
    if result.password != expected:
        differences.append(f'password: expected "{expected}", got "{result.password}"')

    diversity = result.metadata.character_diversity
    if diversity.total_unique_characters != vector.expected_unique_characters:
        differences.append(
            f"total_unique_characters: expected {vector.expected_unique_characters}, "
            f"got {diversity.total_unique_characters}"
        )
    if diversity.max_repetitions != vector.expected_max_repetitions:
        differences.append(
            f"max_repetitions: expected {vector.expected_max_repetitions}, "
            f"got {diversity.max_repetitions}"
        )
    if abs(diversity.diversity_ratio - vector.expected_diversity_ratio) > DIVERSITY_RATIO_TOLERANCE:
        differences.append(
            f"diversity_ratio: expected {vector.expected_diversity_ratio}, "
            f"got {diversity.diversity_ratio}"
        )

    return VectorResult(index, vector, expected, result.password, not differences, differences)


def validate_hash_compatibility(
    config: GeneratorConfig = DEFAULT_CONFIG,
    vectors=ALGORITHM_TEST_VECTORS,
) -> CompatibilityReport:
    """Check every vector's digest prefix."""
    deriver = DigestDeriver(config)
    iterations = config.security.hash_iterations
    results = [_check_hash(i, v, deriver, iterations) for i, v in enumerate(vectors)]
    return _report(results, vectors)


def validate_password_compatibility(
    config: GeneratorConfig = DEFAULT_CONFIG,
    vectors=ALGORITHM_TEST_VECTORS,
) -> CompatibilityReport:
    """Check every vector's password and diversity metrics."""
    generator = PasswordGenerator(config)
    results = [_check_password(i, v, generator) for i, v in enumerate(vectors)]
    return _report(results, vectors)


def validate_algorithm_compatibility(
    config: GeneratorConfig = DEFAULT_CONFIG,
    vectors=ALGORITHM_TEST_VECTORS,
) -> AlgorithmReport:
    """Full check: every vector through both the deriver and the mapper."""
    hash_report = validate_hash_compatibility(config, vectors)
    password_report = validate_password_compatibility(config, vectors)
    return AlgorithmReport(
        is_fully_compatible=hash_report.is_compatible and password_report.is_compatible,
        algorithm_version=ALGORITHM_VERSION.version,
        timestamp=int(time.time() * 1000),
        hash_generation=hash_report,
        password_generation=password_report,
    )


def assert_compatible(config: GeneratorConfig = DEFAULT_CONFIG, vectors=ALGORITHM_TEST_VECTORS) -> AlgorithmReport:
    """
    Run the full check and raise if anything drifted.

    Raises:
        CompatibilityFailure: with every failing vector attached
    """
    report = validate_algorithm_compatibility(config, vectors)
    if not report.is_fully_compatible:
        raise CompatibilityFailure(report.algorithm_version, report.failures)
    return report


def quick_hash_check(config: GeneratorConfig = DEFAULT_CONFIG) -> bool:
    vector = ALGORITHM_TEST_VECTORS[0]
    deriver = DigestDeriver(config)
    return _check_hash(0, vector, deriver, config.security.hash_iterations).passed


def quick_password_check(config: GeneratorConfig = DEFAULT_CONFIG) -> bool:
    vector = ALGORITHM_TEST_VECTORS[0]
    result = _check_password(0, vector, PasswordGenerator(config))
    return result.actual == vector.expected_password


def quick_compatibility_check(config: GeneratorConfig = DEFAULT_CONFIG) -> bool:
    """Fast startup check: first vector only, digest prefix and password."""
    return quick_hash_check(config) and quick_password_check(config)


def validate_full_algorithm(config: GeneratorConfig = DEFAULT_CONFIG) -> Dict[str, object]:
    """Quick hash and password checks reported separately."""
    hash_ok = quick_hash_check(config)
    password_ok = quick_password_check(config)
    return {
        "is_fully_compatible": hash_ok and password_ok,
        "hash_compatibility": hash_ok,
        "password_compatibility": password_ok,
        "algorithm_version": ALGORITHM_VERSION.version,
        "timestamp": int(time.time() * 1000),
    }


def get_algorithm_version() -> Dict[str, object]:
    """Algorithm version lock plus the static feature list."""
    info = asdict(ALGORITHM_VERSION)
    info["timestamp"] = int(time.time() * 1000)
    info["features"] = list(ALGORITHM_FEATURES)
    return info
