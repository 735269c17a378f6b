"""Enforcer database layer: key state persistence for DNSSEC key material."""

__version__ = "0.1.0"
