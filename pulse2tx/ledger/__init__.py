"""
Solana ledger access.

Fetches transaction signature pages for an account over JSON-RPC and
normalizes them into SignatureInfo items for the correlation pipeline.
"""

from pulse2tx.ledger.client import (
    LedgerSignatureClient,
    build_signatures_request,
    parse_signatures_response,
)
from pulse2tx.ledger.models import RpcErrorInfo, SignatureInfo

__all__ = [
    "LedgerSignatureClient",
    "RpcErrorInfo",
    "SignatureInfo",
    "build_signatures_request",
    "parse_signatures_response",
]
