"""
pulse2tx — correlate Solana account transactions with heart rate.

Fetches transaction signatures for an account page by page from a Solana
JSON-RPC endpoint and attaches the average heart rate recorded around each
transaction's block time. Modular layout: ledger client, biometric resolver,
correlation pipeline, and the session state it owns.
"""

__version__ = "0.1.0"
