"""
Backend WalletDNA — portfolio analytics and similarity engine.

Turns a wallet's holdings and transaction history into a behavioral profile:
risk score, personality, insights, similar wallets and peer comparison.
Pure in-memory engines; data fetching and persistence belong to the caller.
"""

__version__ = "0.1.0"
