"""
Metric registry using prometheus_client.

Counts signatures produced and the outcome of every signed-request validation,
so a server embedding `steem_auth.rpc.validate` can export them next to its own.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Dedicated registry; servers may merge it into their own exposition.
REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Signing
# -----------------------------------------------------------------------------

signatures_created = Counter(
    "steem_auth_signatures_created_total",
    "Canonical signatures produced",
    registry=REGISTRY,
)

signing_attempts = Histogram(
    "steem_auth_signing_attempts",
    "Nonces tried before a canonical signature was found",
    buckets=(1, 2, 3, 5, 10, 25),
    registry=REGISTRY,
)

rpc_requests_signed = Counter(
    "steem_auth_rpc_requests_signed_total",
    "JSON-RPC requests signed",
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------

rpc_validations = Counter(
    "steem_auth_rpc_validations_total",
    "Signed JSON-RPC requests validated, by outcome",
    labelnames=["result"],
    registry=REGISTRY,
)

rpc_validation_time = Histogram(
    "steem_auth_rpc_validation_seconds",
    "Signed request validation duration, verifier included",
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1.0),
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output as bytes.
    """
    return generate_latest(REGISTRY)
