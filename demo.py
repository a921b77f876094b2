"""
RegenPW - Guided Journey (single run, no user input)

Run: python demo.py

Walks through the derivation pipeline step by step and explains what
happens under the hood:
 - Keyword normalization
 - Iterated, chained SHA-512 digest
 - Digest -> password mapping (distribution, repetition budget, shuffle)
 - Master salt as a second factor
 - Character class options and custom pools
 - Rejected input
 - Compatibility harness over pinned vectors
 - Strength analysis of the result
"""

import logging
from textwrap import indent

from regenpw import analyzer, compat, crypto, mapper
from regenpw.config import merge_config
from regenpw.errors import InvalidInput
from regenpw.generator import PasswordGenerator


LINE = "=" * 70


def step(title: str, code_path: str):
    print(f"\n{LINE}\n{title}  (code: {code_path})\n{LINE}")


def explain(title: str, body: str):
    print(f"\n[Behind the scenes] {title}")
    print(indent(body.strip(), "  "))


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    keywords = ["GitHub.com", "  Alice@Example.com "]
    generator = PasswordGenerator()

    # 1) Normalization
    step("Normalize keywords", "regenpw/crypto.py:normalize_keyword")
    for k in keywords + ["Café"]:
        print(f"  {k!r:28} -> {crypto.normalize_keyword(k)!r}")
    explain(
        "Why normalize",
        "Trimming, lowercasing and stripping diacritics means 'GitHub.com' and 'github.com ' "
        "regenerate the same password. Keywords are joined with '|'.",
    )

    # 2) Digest
    step("Derive digest", "regenpw/crypto.py:DigestDeriver.derive")
    result = crypto.DigestDeriver().derive(keywords)
    print(f"  Digest ({result.iterations} rounds): {result.hash[:32]}...")
    explain(
        "Chained SHA-512",
        "Each round hashes [salt |] iter-<i> | input | previous digest, so the cost of guessing "
        "grows with the round count and no two rounds hash the same message.",
    )

    # 3) Mapping
    step("Map digest to password", "regenpw/mapper.py:PasswordMapper.map")
    mapped = mapper.PasswordMapper().map(result.hash, 20)
    print(f"  Password:            {mapped.password}")
    print(f"  Target distribution: {mapped.target_distribution}")
    print(f"  Actual distribution: {mapped.character_distribution}")
    print(f"  Diversity:           {mapped.character_diversity.as_dict()}")
    print(f"  Repetition budget:   {mapper.max_repetitions(20)}")
    explain(
        "Deterministic draws",
        "HashStream reads three hex digits per draw from the digest. Class slots are placed at "
        "hash-chosen free positions, characters are picked under the repetition budget, then a Fisher-Yates "
        "shuffle removes placement bias.",
    )

    # 4) Master salt
    step("Master salt", "regenpw/generator.py:PasswordGenerator.generate")
    plain = generator.generate(keywords, 20).password
    salted = generator.generate(keywords, 20, master_salt="my-second-factor").password
    print(f"  Without salt: {plain}")
    print(f"  With salt:    {salted}")

    # 5) Options and pools
    step("Character options", "regenpw/config.py:merge_config")
    print(f"  Letters only:  {generator.generate(keywords, 16, {'include_numbers': False, 'include_symbols': False}).password}")
    restricted = PasswordGenerator(merge_config(character_sets={"symbols": "!@#$%"}))
    print(f"  Safe symbols:  {restricted.generate(keywords, 16).password}")

    # 6) Rejected input
    step("Rejected input", "regenpw/validation.py:validate_all_inputs")
    for bad in ([], ["ab"]):
        try:
            generator.generate(bad)
        except InvalidInput as e:
            print(f"  {bad!r}: {e}")
    try:
        generator.generate(keywords, 7)
    except InvalidInput as e:
        print(f"  length=7: {e}")

    # 7) Compatibility
    step("Compatibility harness", "regenpw/compat.py:validate_algorithm_compatibility")
    report = compat.validate_algorithm_compatibility()
    print(f"  Algorithm {report.algorithm_version}: "
          f"{'compatible' if report.is_fully_compatible else 'DRIFTED'}")
    print(f"  Hash vectors:     {report.hash_generation.passed_vectors}/{report.hash_generation.tested_vectors}")
    print(f"  Password vectors: {report.password_generation.passed_vectors}/{report.password_generation.tested_vectors}")
    explain(
        "Why vectors",
        "Users never store their passwords, so any change to the algorithm silently changes every "
        "password. Pinned vectors make such a change fail loudly in CI.",
    )

    # 8) Analysis
    step("Strength analysis", "regenpw/analyzer.py:analyze_password")
    analysis = analyzer.analyze_password(plain)
    print(f"  Score: {analysis.strength_score} ({analysis.strength_level}), entropy {analysis.entropy} bits/char")
    for s in analysis.suggestions:
        print(f"  - {s}")


if __name__ == "__main__":
    main()
