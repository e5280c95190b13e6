"""Tests for submission identity generation."""
from concurrent.futures import ThreadPoolExecutor

import pytest

from anonsurvey.shared.models import is_valid_identity
from anonsurvey.services.submission_service.identity import (
    ENTROPY_BYTES,
    IdentityGenerationError,
    IdentityGenerator,
)


@pytest.fixture
def generator():
    return IdentityGenerator()


class TestIdentityShape:
    def test_identity_is_32_lowercase_hex(self, generator):
        identity = generator.generate()

        assert len(identity) == 32
        assert is_valid_identity(identity)

    def test_at_least_128_bits(self):
        assert ENTROPY_BYTES * 8 >= 128

    def test_identities_differ(self, generator):
        assert generator.generate() != generator.generate()


class TestUniqueness:
    def test_concurrent_generation_unique(self, generator):
        samples = 100_000

        def batch(_):
            return [generator.generate() for _ in range(1_000)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            identities = [i for chunk in pool.map(batch, range(samples // 1_000)) for i in chunk]

        assert len(identities) == samples
        assert len(set(identities)) == samples


class TestEntropyFailure:
    def test_os_error_is_fatal(self):
        def broken(_n):
            raise OSError("no entropy")

        with pytest.raises(IdentityGenerationError) as exc_info:
            IdentityGenerator(token_source=broken).generate()

        assert isinstance(exc_info.value.__cause__, OSError)

    def test_not_implemented_is_fatal(self):
        def missing(_n):
            raise NotImplementedError

        with pytest.raises(IdentityGenerationError):
            IdentityGenerator(token_source=missing).generate()

    def test_malformed_token_is_fatal(self):
        with pytest.raises(IdentityGenerationError):
            IdentityGenerator(token_source=lambda n: "short").generate()

    def test_token_source_asked_for_16_bytes(self):
        requested = []

        def recording(n):
            requested.append(n)
            return "f" * (2 * n)

        IdentityGenerator(token_source=recording).generate()
        assert requested == [16]
