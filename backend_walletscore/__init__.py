"""
Backend WalletScore — wallet statistics and reputation scoring.

Turns raw on-chain account data, transactions and token holdings into a
canonical statistics record and a reproducible, quantized score. Chain
clients, price transport, signing and persistence live outside this package
and are reached through small capability interfaces.
"""

__version__ = "0.1.0"
