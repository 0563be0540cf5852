"""
Payment gateway package for Tamboon.

Re-exports the gateway protocol and the concrete implementations so callers
can import from `tamboon.gateway` directly.
"""

from tamboon.gateway.abstract import PaymentGateway
from tamboon.gateway.omise import OmiseGateway
from tamboon.gateway.simulated import SimulatedGateway, luhn_valid, random_latency

__all__ = [
    "PaymentGateway",
    "OmiseGateway",
    "SimulatedGateway",
    "luhn_valid",
    "random_latency",
]
