"""Tests for the Prometheus metrics registry."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from steem_auth import metrics
from steem_auth.ecc import Signature
from steem_auth.rpc import sign, validate
from steem_auth.types import SignatureExpiredError

T = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _count(outcome: str) -> float:
    return metrics.rpc_validations.labels(result=outcome)._value.get()


class TestSigningMetrics:
    """Tests for signing counters."""

    def test_signature_counter(self, alice_key) -> None:
        """Each signature increments the counter."""
        initial = metrics.signatures_created._value.get()
        Signature.sign_buffer(b"count me", alice_key)
        assert metrics.signatures_created._value.get() == initial + 1.0

    def test_signed_requests_counter(self, alice_key) -> None:
        """Signing a request counts once, whatever the number of keys."""
        initial = metrics.rpc_requests_signed._value.get()
        sign({"method": "m", "params": []}, "alice", [alice_key, alice_key])
        assert metrics.rpc_requests_signed._value.get() == initial + 1.0


class TestValidationMetrics:
    """Tests for validation outcome counters."""

    @pytest.mark.anyio
    async def test_accepted(self, alice_key) -> None:
        """Accepted requests count under "accepted"."""
        request = sign({"method": "m", "params": []}, "alice", [alice_key], timestamp=T)
        initial = _count("accepted")
        await validate(request, lambda m, s, a: True, now=T)
        assert _count("accepted") == initial + 1.0

    @pytest.mark.anyio
    async def test_rejected_by_error_type(self, alice_key) -> None:
        """Rejections count under the exception name."""
        request = sign({"method": "m", "params": []}, "alice", [alice_key], timestamp=T)
        initial = _count("SignatureExpiredError")
        with pytest.raises(SignatureExpiredError):
            await validate(request, lambda m, s, a: True, now=T.replace(year=2027))
        assert _count("SignatureExpiredError") == initial + 1.0


class TestPrometheusOutput:
    """Tests for Prometheus text format output."""

    def test_output_contains_metric_names(self) -> None:
        """Output is text format and names every metric."""
        output = metrics.generate_metrics()
        assert isinstance(output, bytes)
        text = output.decode()
        assert "steem_auth_signatures_created_total" in text
        assert "steem_auth_rpc_validation_seconds" in text
