"""
PI-SPI Participant Simulator

Conformance simulator for the participant account API: balance lookup,
intra-bank transfers, aliases and webhook subscriptions behind mocked
OAuth2 and mTLS checks. All state lives in memory.
"""

__version__ = "1.0.0"
