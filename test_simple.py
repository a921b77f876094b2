"""
RegenPW - Self-Tests

Run with: python test_simple.py   (or: pytest)

Covers the derivation pipeline end to end:
- Digest derivation is deterministic and salt-sensitive
- Keyword normalization (case, whitespace, diacritics)
- The hash stream's cursor/seed behavior
- Distribution and repetition math
- Mapper properties: length, class coverage, repetition bound, diversity
- Input validation rejects what the core should never see
"""

import string

from regenpw import crypto, mapper
from regenpw.config import DEFAULT_CONFIG, PasswordOptions, merge_config
from regenpw.errors import InvalidConfiguration, InvalidInput
from regenpw.generator import PasswordGenerator

FAST = 10   # iterations for tests that don't check pinned vectors


def test_derivation():
    """Test digest derivation from keywords."""
    print("Testing Digest Derivation...")

    d1 = crypto.derive_digest(["test"])
    d2 = crypto.derive_digest(["test"])

    assert d1 == d2, "Derivation should be deterministic"
    assert len(d1) == 128, "SHA-512 digest should be 128 hex chars"
    assert all(c in "0123456789abcdef" for c in d1), "Digest should be lowercase hex"
    print("  [OK] Derivation is deterministic")

    result = crypto.DigestDeriver().derive(["test"])
    assert result.iterations == 1000, "Default iteration count should be 1000"
    assert result.hash == d1
    print("  [OK] Default iterations applied")

    assert crypto.derive_digest(["test"], iterations=FAST) != d1, "Iteration count should change digest"
    assert crypto.derive_digest(["a", "bc"], iterations=FAST) != crypto.derive_digest(["ab", "c"], iterations=FAST)
    assert crypto.derive_digest(["one", "two"], iterations=FAST) != crypto.derive_digest(["two", "one"], iterations=FAST)
    print("  [OK] Keyword split and order matter")


def test_salt_sensitivity():
    """Test master salt handling."""
    print("Testing Salt Sensitivity...")

    unsalted = crypto.derive_digest(["github.com"], iterations=FAST)
    salt_a = crypto.derive_digest(["github.com"], "pepper", iterations=FAST)
    salt_b = crypto.derive_digest(["github.com"], "paprika", iterations=FAST)

    assert unsalted != salt_a, "Salt should change digest"
    assert salt_a != salt_b, "Different salts should give different digests"
    assert crypto.derive_digest(["github.com"], "", iterations=FAST) == unsalted, "Empty salt means no salt"
    print("  [OK] Salt changes digest")

    salted_config = merge_config(security={"master_salt": "pepper"})
    configured = crypto.derive_digest(["github.com"], iterations=FAST, config=salted_config)
    assert configured == salt_a, "Configured master salt should apply when none is passed"
    print("  [OK] Configured master salt applies")


def test_normalization():
    """Test keyword normalization."""
    print("Testing Normalization...")

    assert crypto.normalize_keyword("  Café ") == "cafe"
    assert crypto.normalize_keyword("ÅNGSTRÖM") == "angstrom"
    assert crypto.normalize_keywords(["  A ", "", "   ", "b"]) == ["a", "b"]

    base = crypto.derive_digest(["cafe"], iterations=FAST)
    assert crypto.derive_digest([" CAFÉ "], iterations=FAST) == base
    assert crypto.derive_digest(["cafe", "   "], iterations=FAST) == base, "Blank keywords are dropped"
    print("  [OK] Case, whitespace and diacritics are normalized")


def test_invalid_input():
    """Test that unusable keyword material is rejected."""
    print("Testing Invalid Input...")

    for keywords in ([], ["ab"], ["   ", ""], ["  a "], None, 42):
        try:
            crypto.derive_digest(keywords, iterations=FAST)
            assert False, f"Should reject {keywords!r}"
        except InvalidInput:
            pass
    print("  [OK] Empty, too-short and non-sequence keywords rejected")

    # "a|b" is three characters once joined
    assert len(crypto.derive_digest(["a", "b"], iterations=FAST)) == 128

    for iterations in (0, -1, True):
        try:
            crypto.derive_digest(["test"], iterations=iterations)
            assert False, "Should reject bad iteration count"
        except InvalidInput:
            pass
    print("  [OK] Bad iteration counts rejected")

    assert crypto.validate_hash_options(["test"])
    assert not crypto.validate_hash_options([])
    assert not crypto.validate_hash_options(["test"], iterations=0)
    assert not crypto.validate_hash_options(["test"], master_salt=42)
    print("  [OK] Structural option check works")


def test_hash_stream():
    """Test the deterministic draw primitive."""
    print("Testing Hash Stream...")

    stream = mapper.HashStream("000fff123")
    assert stream.next() == 1, "Zero draw should clamp to 1"
    assert stream.next() == 0xfff
    # offset 6, seed 1 -> digits at 7, 8, 0 (wraps)
    assert stream.next(1) == 0x230
    assert stream.offset == 0, "Offset wraps modulo digest length"
    print("  [OK] Draws read three digits and clamp zero")

    plain = mapper.HashStream("0123456789abcdef")
    seeded = mapper.HashStream("0123456789abcdef")
    plain.next()
    seeded.next(500)
    assert plain.offset == seeded.offset == 3, "Seed must not change cursor advance"
    print("  [OK] Seed biases the window only")

    try:
        mapper.HashStream("")
        assert False, "Empty digest should be rejected"
    except InvalidInput:
        print("  [OK] Empty digest rejected")


def test_distribution_math():
    """Test target distribution and repetition budget."""
    print("Testing Distribution Math...")

    all_classes = ("uppercase", "lowercase", "numbers", "symbols")
    assert mapper.target_distribution(all_classes, 16) == {
        "uppercase": 4, "lowercase": 4, "numbers": 4, "symbols": 4}
    assert mapper.target_distribution(all_classes, 17) == {
        "uppercase": 5, "lowercase": 4, "numbers": 4, "symbols": 4}
    assert mapper.target_distribution(all_classes, 32) == {
        "uppercase": 8, "lowercase": 12, "numbers": 6, "symbols": 6}
    assert mapper.target_distribution(all_classes, 64) == {
        "uppercase": 12, "lowercase": 24, "numbers": 12, "symbols": 16}
    assert mapper.target_distribution(("lowercase", "numbers"), 9) == {
        "uppercase": 0, "lowercase": 5, "numbers": 4, "symbols": 0}
    for length in range(8, 129):
        assert sum(mapper.target_distribution(all_classes, length).values()) == length
    print("  [OK] Target distribution sums to length")

    # ties go to the first class in order
    assert mapper.target_distribution(("uppercase", "lowercase", "numbers"), 16) == {
        "uppercase": 6, "lowercase": 5, "numbers": 5, "symbols": 0}
    assert mapper.target_distribution((), 16) == mapper.target_distribution(all_classes, 16)
    assert mapper.target_distribution([], 33) == mapper.target_distribution(all_classes, 33)
    print("  [OK] Remainder tie-break and empty class list")

    expected = {8: 2, 12: 2, 16: 2, 17: 2, 24: 3, 32: 4, 33: 3, 64: 6, 128: 12}
    for length, budget in expected.items():
        assert mapper.max_repetitions(length) == budget, f"Budget for {length}"
    print("  [OK] Repetition budget matches length bands")


def test_diversity_metrics():
    """Test diversity metric rounding."""
    print("Testing Diversity Metrics...")

    d = mapper.character_diversity("aabc")
    assert d.total_unique_characters == 3
    assert d.max_repetitions == 2
    assert d.average_repetitions == 1.33
    assert d.diversity_ratio == 0.75

    d = mapper.character_diversity("abcdefghijklmnoa")
    assert d.diversity_ratio == 0.938, "Ratio rounds half up"

    assert mapper.character_distribution("aB3!") == {
        "uppercase": 1, "lowercase": 1, "numbers": 1, "symbols": 1}
    print("  [OK] Metrics computed and rounded")


def test_mapper_properties():
    """Test length fidelity, coverage, repetition bound and diversity floor."""
    print("Testing Mapper Properties...")

    digest = crypto.derive_digest(["property", "check"], iterations=FAST)
    m = mapper.PasswordMapper()

    for length in (8, 9, 16, 24, 31, 32, 48, 63, 64, 96, 128):
        result = m.map(digest, length)
        assert len(result.password) == length, f"Length {length}"
        assert result == m.map(digest, length), "Mapping should be deterministic"

        counts = result.character_distribution
        assert all(counts[name] > 0 for name in counts), f"All classes present at {length}"
        assert counts == result.target_distribution, "Default pools land exactly on target"

        diversity = result.character_diversity
        assert diversity.max_repetitions <= mapper.max_repetitions(length) + 1, f"Repetition at {length}"
        assert diversity.diversity_ratio >= 0.4, f"Diversity at {length}"
    print("  [OK] Length, coverage, repetition and diversity hold")

    no_symbols = PasswordOptions(include_symbols=False)
    result = m.map(digest, 16, no_symbols)
    assert not any(c in string.punctuation for c in result.password)
    assert result.character_distribution == {
        "uppercase": 6, "lowercase": 5, "numbers": 5, "symbols": 0}
    print("  [OK] Disabled class excluded, remainder to first largest class")

    nothing = PasswordOptions(False, False, False, False)
    assert m.map(digest, 16, nothing).password == m.map(digest, 16).password, \
        "All-disabled should fall back to all classes"
    print("  [OK] All-disabled falls back to all classes")

    try:
        m.map(digest, 0)
        assert False, "Zero length should be rejected"
    except InvalidInput:
        print("  [OK] Non-positive length rejected")


def test_saturated_selection():
    """Test selection once every candidate is at the repetition budget."""
    print("Testing Saturated Selection...")

    stream = mapper.HashStream("0123456789abcdef" * 8)
    assert mapper.select_character("ab", {"a": 2, "b": 3}, 2, stream, 0) == "a"
    # both saturated and tied: window at 1000 % 128 = 104 reads "89a" -> 2202 % 2 = 0
    stream = mapper.HashStream("0123456789abcdef" * 8)
    assert mapper.select_character("ab", {"a": 2, "b": 2}, 2, stream, 0) == "a"
    assert stream.offset == 3
    print("  [OK] Least-used character chosen past the budget")

    # ten digits, budget 12: 120 picks saturate the pool, 8 more overflow by one
    digest = crypto.derive_digest(["saturate", "digits"], iterations=FAST)
    numbers_only = PasswordOptions(False, False, True, False)
    result = mapper.PasswordMapper().map(digest, 128, numbers_only)
    budget = mapper.max_repetitions(128)
    assert budget == 12
    assert set(result.password) <= set(string.digits)
    assert result.character_diversity.total_unique_characters == 10
    assert result.character_diversity.max_repetitions == budget + 1
    counts = sorted(result.password.count(d) for d in string.digits)
    assert counts == [12, 12] + [13] * 8
    print("  [OK] Overflow spread across least-used characters")


def test_fill_pass():
    """Test the weighted fill of positions left empty by placement."""
    print("Testing Fill Pass...")

    all_classes = ("uppercase", "lowercase", "numbers", "symbols")
    assert mapper.fill_weights(all_classes, 32) == [1, 1, 2, 3]
    assert mapper.fill_weights(all_classes, 31) == [1, 1, 1, 1]
    assert mapper.fill_weights(("lowercase", "symbols"), 64) == [1, 3]
    print("  [OK] Symbols weigh 3 and numbers 2 from length 32")

    picks = [mapper.pick_weighted_class(all_classes, [1, 1, 2, 3], r) for r in range(7)]
    assert picks == ["uppercase", "uppercase", "lowercase", "numbers", "numbers",
                     "symbols", "symbols"]
    picks = [mapper.pick_weighted_class(all_classes, [1, 1, 1, 1], r) for r in range(4)]
    assert picks == ["uppercase", "uppercase", "lowercase", "numbers"]
    print("  [OK] Subtract-and-stop picks the class at or below zero")

    digest = "0123456789abcdef" * 8
    m = mapper.PasswordMapper()

    def fill():
        password = [None] * 4 + ["x"] * 28
        usage = {"x": 28}
        m._fill(password, list(all_classes), set(range(4, 32)), mapper.HashStream(digest), usage, 4)
        return password, usage

    password, usage = fill()
    # class draws 0x012, 0xabc, 0x456, 0xef0 -> 4, 4, 4, 2 (mod 7)
    # character draws 0x345, 0x123, 0xf01, 0xdef -> '7', '1', '1', 'f'
    assert password[:4] == ["7", "1", "1", "f"]
    assert password[4:] == ["x"] * 28, "Placed positions are kept"
    assert usage == {"x": 28, "7": 1, "1": 2, "f": 1}
    assert fill() == (password, usage), "Fill should be deterministic"
    print("  [OK] Empty positions filled deterministically")


def test_custom_pools():
    """Test operator-provided character pools."""
    print("Testing Custom Pools...")

    config = merge_config(character_sets={"symbols": "!@#"})
    digest = crypto.derive_digest(["custom"], iterations=FAST)
    password = mapper.map_to_password(digest, 16, config=config)

    symbols = [c for c in password if not c.isalnum()]
    assert symbols and set(symbols) <= set("!@#"), "Only configured symbols used"
    assert password != mapper.map_to_password(digest, 16), "Pools feed the mapping"
    print("  [OK] Custom pools honored")

    try:
        merge_config(character_sets={"numbers": ""})
        assert False, "Empty pool should be rejected"
    except InvalidConfiguration:
        pass
    try:
        merge_config(security={"iterations": 5})
        assert False, "Unknown setting should be rejected"
    except InvalidConfiguration:
        print("  [OK] Bad configuration rejected")

    assert DEFAULT_CONFIG.character_sets.symbols == "!@#$%^&*()_+-=[]{}|;:,.<>?", "Defaults untouched"


def test_generator():
    """Test the full generator, including upstream validation."""
    print("Testing Password Generator...")

    generator = PasswordGenerator(merge_config(security={"hash_iterations": FAST}))

    r1 = generator.generate(["example.com", "alice"])
    r2 = generator.generate(["example.com", "alice"])
    assert r1.password == r2.password, "Generation should be deterministic"
    assert r1.length == 16, "Default length should be 16"
    assert r1.metadata.hash_iterations == FAST
    assert r1.metadata.character_diversity == r2.metadata.character_diversity
    print(f"  Generated: {r1.password}")

    assert generator.generate(["example.com", "bob"]).password != r1.password
    assert generator.generate(["example.com", "alice"], master_salt="pepper").password != r1.password
    assert len(generator.generate(["example.com"], length=32).password) == 32
    print("  [OK] Different inputs give different passwords")

    letters_only = generator.generate(["example.com"], options={"include_numbers": False, "include_symbols": False})
    assert letters_only.password.isalpha()
    assert letters_only.options == PasswordOptions(include_numbers=False, include_symbols=False)
    print("  [OK] Partial option dicts merge over defaults")

    bad_inputs = [
        dict(keywords=["example.com"], length=7),
        dict(keywords=["example.com"], length=200),
        dict(keywords=["example.com"], length=16.0),
        dict(keywords=[]),
        dict(keywords=["example.com", "   "]),
        dict(keywords="example.com"),
        dict(keywords=["example.com"], master_salt=""),
    ]
    for kwargs in bad_inputs:
        try:
            generator.generate(**kwargs)
            assert False, f"Should reject {kwargs}"
        except InvalidInput:
            pass
    print("  [OK] Out-of-range length, blank keywords and empty salt rejected")

    for options in ({"include_emoji": True}, PasswordOptions(False, False, False, False), "all"):
        try:
            generator.generate(["example.com"], options=options)
            assert False, f"Should reject options {options!r}"
        except InvalidConfiguration:
            pass
    print("  [OK] Malformed options rejected")

    ok, error = generator.validate_options(["example.com"], length=7)
    assert not ok and "at least 8" in error
    assert generator.validate_options(["example.com"]) == (True, None)
    print("  [OK] Non-raising validation works")


def run_all_tests():
    """Run all tests."""
    print("=" * 70)
    print("RegenPW - Test Suite")
    print("=" * 70)
    print()

    tests = [
        test_derivation,
        test_salt_sensitivity,
        test_normalization,
        test_invalid_input,
        test_hash_stream,
        test_distribution_math,
        test_diversity_metrics,
        test_mapper_properties,
        test_saturated_selection,
        test_fill_pass,
        test_custom_pools,
        test_generator,
    ]

    failed = []

    for test in tests:
        try:
            test()
            print()
        except Exception as e:
            print(f"  [FAIL] TEST FAILED: {e}")
            failed.append((test.__name__, e))
            print()

    print("=" * 70)
    if not failed:
        print("[OK] ALL TESTS PASSED!")
    else:
        print(f"[FAIL] {len(failed)} TESTS FAILED:")
        for name, error in failed:
            print(f"  - {name}: {error}")
    print("=" * 70)

    return len(failed) == 0


if __name__ == "__main__":
    import sys
    success = run_all_tests()
    sys.exit(0 if success else 1)
