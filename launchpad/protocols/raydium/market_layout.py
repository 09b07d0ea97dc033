"""
OpenBook market account decoding

Only the fields pool creation needs are decoded. MARKET_STATE_LAYOUT_V3:
- blob(5): "serum" padding
- u64: account_flags (offset 5)
- publicKey(32): own_address (offset 13)
- u64: vault_signer_nonce (offset 45)
- publicKey(32): base_mint (offset 53)
- publicKey(32): quote_mint (offset 85)
- ...
"""

import struct
from dataclasses import dataclass

from solders.pubkey import Pubkey

from ...errors import ValidationError

ACCOUNT_FLAGS_OFFSET = 5
OWN_ADDRESS_OFFSET = 13
VAULT_SIGNER_NONCE_OFFSET = 45
BASE_MINT_OFFSET = 53
QUOTE_MINT_OFFSET = 85
MIN_MARKET_SIZE = QUOTE_MINT_OFFSET + 32


@dataclass(frozen=True)
class MarketState:
    """Decoded market header"""
    own_address: str
    base_mint: str
    quote_mint: str
    account_flags: int
    vault_signer_nonce: int


def _pubkey_at(data: bytes, offset: int) -> str:
    return str(Pubkey.from_bytes(data[offset:offset + 32]))


def decode_market(data: bytes) -> MarketState:
    """
    Decode market account data

    Raises:
        ValidationError: data too short to be a market account
    """
    if len(data) < MIN_MARKET_SIZE:
        raise ValidationError.invalid(
            "marketId", f"account data is {len(data)} bytes, not an OpenBook market"
        )

    account_flags = struct.unpack_from("<Q", data, ACCOUNT_FLAGS_OFFSET)[0]
    vault_signer_nonce = struct.unpack_from("<Q", data, VAULT_SIGNER_NONCE_OFFSET)[0]

    return MarketState(
        own_address=_pubkey_at(data, OWN_ADDRESS_OFFSET),
        base_mint=_pubkey_at(data, BASE_MINT_OFFSET),
        quote_mint=_pubkey_at(data, QUOTE_MINT_OFFSET),
        account_flags=account_flags,
        vault_signer_nonce=vault_signer_nonce,
    )
