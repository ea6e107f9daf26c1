"""
Core — shared error taxonomy used by the ledger client, biometric resolver
and correlation pipeline.
"""
