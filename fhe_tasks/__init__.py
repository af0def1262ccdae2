"""Operator tasks for confidential (FHE) contracts on an fhevm network."""

__version__ = "0.1.0"
