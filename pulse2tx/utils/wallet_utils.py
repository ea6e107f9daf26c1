"""Account address validation for the CLI entry point."""

from solders.pubkey import Pubkey


def normalize_wallet(w: str) -> str:
    """
    Return the canonical base58 form of a Solana account address.

    Raises:
        ValueError: w is not a 32-byte base58 public key.
    """
    try:
        return str(Pubkey.from_string(w.strip()))
    except Exception as e:
        raise ValueError(f"not a valid Solana address: {w!r}") from e


def is_valid_wallet(w: str) -> bool:
    try:
        normalize_wallet(w)
    except ValueError:
        return False
    return True
