"""
Tests for SecureGenerator and CharsetSpec.

Tests cover:
- Class coverage for every requested class
- Default charset when no class is requested
- Similar-character exclusion and its policies
- Length defaults and clamping
- Bounded retries and unsatisfiable requests
- Randomness failures
"""
import string
from concurrent.futures import ThreadPoolExecutor

import pytest

from credential_vault.vault import generator as generator_module
from credential_vault.vault.generator import (
    CharsetSpec,
    SecureGenerator,
    UPPERCASE,
    LOWERCASE,
    DIGITS,
    SYMBOLS,
    SIMILAR_CHARS,
    PRESERVE_REQUIRED,
)
from credential_vault.vault.exceptions import (
    RandomnessUnavailable,
    UnsatisfiableCharsetSpec,
)


@pytest.fixture
def full_spec():
    return CharsetSpec(
        length=20, upper=True, lower=True, numbers=True, symbols=True,
    )


class TestCharsetSpec:

    @pytest.mark.parametrize("requested,expected", [
        (0, 12),
        (-5, 12),
        (1, 1),
        (64, 64),
        (128, 128),
        (500, 128),
    ])
    def test_resolved_length(self, requested, expected):
        assert CharsetSpec(length=requested).resolved_length() == expected

    def test_default_classes(self):
        spec = CharsetSpec()
        assert spec.required_classes() == ()
        assert spec.enabled_classes() == ("upper", "lower", "numbers")

    def test_requested_classes(self):
        spec = CharsetSpec(symbols=True, lower=True)
        assert spec.required_classes() == ("lower", "symbols")
        assert spec.enabled_classes() == ("lower", "symbols")


class TestClassCoverage:

    def test_all_classes_present(self, generator, full_spec):
        for _ in range(300):
            password = generator.generate(full_spec)
            assert len(password) == 20
            assert any(c in UPPERCASE for c in password)
            assert any(c in LOWERCASE for c in password)
            assert any(c in DIGITS for c in password)
            assert any(c in SYMBOLS for c in password)

    def test_single_class(self, generator):
        for _ in range(50):
            password = generator.generate(CharsetSpec(length=16, numbers=True))
            assert set(password) <= set(DIGITS)

    def test_minimum_length_for_classes(self):
        generator = SecureGenerator(max_attempts=2000)
        spec = CharsetSpec(length=4, upper=True, lower=True, numbers=True, symbols=True)
        for _ in range(5):
            password = generator.generate(spec)
            assert len(password) == 4
            assert len({
                name for name, chars in (
                    ("u", UPPERCASE), ("l", LOWERCASE), ("d", DIGITS), ("s", SYMBOLS),
                ) for c in password if c in chars
            }) == 4

    def test_every_character_reachable(self, generator):
        seen = set()
        for _ in range(60):
            seen.update(generator.generate(CharsetSpec(length=128, upper=True)))
        assert seen == set(UPPERCASE)

    def test_keyword_options(self, generator):
        password = generator.generate(length=30, lower=True)
        assert len(password) == 30
        assert set(password) <= set(string.ascii_lowercase)


class TestDefaults:

    def test_no_class_uses_alphanumerics(self, generator):
        allowed = set(UPPERCASE + LOWERCASE + DIGITS)
        for _ in range(100):
            password = generator.generate(CharsetSpec(length=32))
            assert set(password) <= allowed

    def test_no_class_length_one(self, generator):
        assert len(generator.generate(CharsetSpec(length=1))) == 1

    def test_default_length(self, generator):
        assert len(generator.generate(CharsetSpec())) == 12

    def test_clamped_length(self, generator):
        assert len(generator.generate(CharsetSpec(length=500))) == 128

    def test_custom_default_length(self):
        assert len(SecureGenerator(default_length=20).generate()) == 20


class TestExcludeSimilar:

    def test_no_similar_characters(self, generator, full_spec):
        spec = full_spec.model_copy(update={"exclude_similar": True, "length": 64})
        for _ in range(200):
            password = generator.generate(spec)
            assert not set(password) & set(SIMILAR_CHARS)

    def test_default_classes_exclusion(self, generator):
        for _ in range(100):
            password = generator.generate(CharsetSpec(length=40, exclude_similar=True))
            assert not set(password) & set(SIMILAR_CHARS)

    def test_strict_policy_class_vanishes(self):
        generator = SecureGenerator(similar_chars=SIMILAR_CHARS + DIGITS)
        spec = CharsetSpec(length=12, upper=True, numbers=True, exclude_similar=True)
        with pytest.raises(UnsatisfiableCharsetSpec) as excinfo:
            generator.generate(spec)
        assert "numbers" in str(excinfo.value)

    def test_preserve_required_policy(self):
        generator = SecureGenerator(
            similar_chars=SIMILAR_CHARS + DIGITS,
            exclusion_policy=PRESERVE_REQUIRED,
        )
        spec = CharsetSpec(length=12, upper=True, numbers=True, exclude_similar=True)
        for _ in range(50):
            password = generator.generate(spec)
            assert any(c in DIGITS for c in password)
            assert not set(password) & set("LO")

    def test_build_charset(self, generator):
        pools = generator.build_charset(CharsetSpec(numbers=True, exclude_similar=True))
        assert pools == {"numbers": "23456789"}


class TestTermination:

    def test_retry_ceiling(self, monkeypatch):
        generator = SecureGenerator(max_attempts=7)
        calls = []

        def never_valid(charset, length):
            calls.append(length)
            return "a" * length

        monkeypatch.setattr(generator, "_draw", never_valid)
        with pytest.raises(UnsatisfiableCharsetSpec):
            generator.generate(CharsetSpec(length=10, upper=True, lower=True))
        assert len(calls) == 7

    def test_retries_until_valid(self, monkeypatch):
        generator = SecureGenerator()
        draws = iter(["aaaa", "bbbb", "aB3c"])
        monkeypatch.setattr(generator, "_draw", lambda charset, length: next(draws))
        spec = CharsetSpec(length=4, upper=True, lower=True, numbers=True)
        assert generator.generate(spec) == "aB3c"

    def test_too_short_for_classes(self, generator):
        spec = CharsetSpec(length=3, upper=True, lower=True, numbers=True, symbols=True)
        with pytest.raises(UnsatisfiableCharsetSpec):
            generator.generate(spec)

    def test_unsatisfiable_is_value_error(self):
        assert issubclass(UnsatisfiableCharsetSpec, ValueError)

    def test_invalid_settings(self):
        with pytest.raises(ValueError):
            SecureGenerator(max_attempts=0)
        with pytest.raises(ValueError):
            SecureGenerator(exclusion_policy="lenient")


class TestRandomness:

    def test_randbelow_failure(self, generator, monkeypatch):
        def broken(n):
            raise OSError("no entropy")
        monkeypatch.setattr(generator_module.secrets, "randbelow", broken)
        with pytest.raises(RandomnessUnavailable):
            generator.generate(CharsetSpec(length=8))


class TestConcurrency:

    def test_shared_instance_across_threads(self, generator, full_spec):
        with ThreadPoolExecutor(max_workers=8) as pool:
            passwords = list(pool.map(lambda _: generator.generate(full_spec), range(100)))
        assert all(len(p) == 20 for p in passwords)
        assert len(set(passwords)) == 100
