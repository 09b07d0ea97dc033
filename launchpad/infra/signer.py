"""
Transaction signing and key storage

Provides:
- LocalSigner: signs SDK-built transactions with the operator keypair,
  keeping signatures the SDK service already added (new mint/market keys)
- load_or_create_keypair: operator wallet file handling
- WalletVault: per-user custodial keypair files
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import List, Optional, Tuple

from solders.keypair import Keypair
from solders.message import MessageV0
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from ..errors import SignerError, ConfigurationError, ValidationError

logger = logging.getLogger(__name__)


class LocalSigner:
    """
    Local signer using a Solana keypair

    Usage:
        signer = LocalSigner.from_file("wallet.json")
        signed_tx, sig = signer.sign_transaction(tx_bytes)
    """

    def __init__(self, keypair: Keypair):
        self._keypair = keypair

    @property
    def keypair(self) -> Keypair:
        return self._keypair

    @property
    def pubkey(self) -> str:
        """Public key as base58 string"""
        return str(self._keypair.pubkey())

    def sign(self, message: bytes) -> bytes:
        """Sign message bytes"""
        return bytes(self._keypair.sign_message(message))

    def sign_transaction(self, tx_bytes: bytes) -> Tuple[bytes, str]:
        """
        Add the operator signature to a (possibly partially signed) transaction

        Args:
            tx_bytes: Serialized legacy or v0 transaction

        Returns:
            (signed_tx_bytes, signature_base58)

        Raises:
            SignerError: Operator is not a required signer, or another
                required signature is still missing
        """
        try:
            tx = VersionedTransaction.from_bytes(tx_bytes)
        except ValueError as e:
            raise SignerError.failed(f"Cannot parse transaction: {e}")

        message = tx.message

        # v0 messages are signed with their 0x80 version prefix
        message_bytes = bytes(message)
        if isinstance(message, MessageV0):
            message_bytes = bytes([0x80]) + message_bytes

        num_required = message.header.num_required_signatures
        account_keys = list(message.account_keys)
        our_pubkey = self._keypair.pubkey()

        signer_index = None
        for i in range(min(num_required, len(account_keys))):
            if account_keys[i] == our_pubkey:
                signer_index = i
                break

        if signer_index is None:
            raise SignerError.failed(
                f"Wallet {our_pubkey} is not in the required signers list. "
                f"Expected signers: {[str(k) for k in account_keys[:num_required]]}"
            )

        null_sig = Signature.default()
        signatures: List[Signature] = list(tx.signatures)[:num_required]
        signatures += [null_sig] * (num_required - len(signatures))

        signature = self._keypair.sign_message(message_bytes)
        signatures[signer_index] = signature

        missing = [str(account_keys[i]) for i, sig in enumerate(signatures) if sig == null_sig]
        if missing:
            raise SignerError.failed(f"Missing signatures for required signers: {', '.join(missing)}")

        signed_tx = VersionedTransaction.populate(message, signatures)
        return bytes(signed_tx), str(signature)

    @classmethod
    def from_bytes(cls, secret_key: bytes) -> "LocalSigner":
        """Create signer from secret key bytes (64 bytes)"""
        return cls(Keypair.from_bytes(secret_key))

    @classmethod
    def from_file(cls, path: str) -> "LocalSigner":
        """Create signer from a Solana CLI keypair file (JSON byte array)"""
        return cls(read_keypair_file(path))


def read_keypair_file(path: str) -> Keypair:
    """
    Load keypair from file

    Supports:
    - JSON array format (Solana CLI): [1,2,3,...]
    - Raw bytes file (64 bytes)
    """
    with open(path, "rb") as f:
        content = f.read()

    try:
        data = json.loads(content.decode("utf-8"))
        if isinstance(data, list):
            return Keypair.from_bytes(bytes(data))
    except (json.JSONDecodeError, UnicodeDecodeError):
        pass
    except ValueError as e:
        raise ConfigurationError.invalid("keypair_file", f"Invalid secret key in {path}: {e}")

    if len(content) == 64:
        return Keypair.from_bytes(content)

    raise ConfigurationError.invalid("keypair_file", f"Cannot parse keypair file: {path}")


def write_keypair_file(path: str, keypair: Keypair):
    """Save keypair as a JSON byte array readable by the Solana CLI"""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(str(target), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        json.dump(list(bytes(keypair)), f)


def load_or_create_keypair(path: str, auto_create: bool = True) -> Keypair:
    """
    Load the operator keypair, generating and saving one when missing

    Raises:
        SignerError: File missing and auto_create disabled
    """
    if path and os.path.isfile(path):
        return read_keypair_file(path)

    if not path or not auto_create:
        raise SignerError.not_configured()

    keypair = Keypair()
    write_keypair_file(path, keypair)
    logger.warning(f"No wallet found at {path}; generated new wallet {keypair.pubkey()}")
    return keypair


def create_signer(
    keypair: Optional[Keypair] = None,
    keypair_path: Optional[str] = None,
    auto_create: bool = True,
) -> LocalSigner:
    """
    Create signer

    Priority:
    1. keypair: Use provided keypair
    2. keypair_path: Load (or create) keypair file
    """
    if keypair is not None:
        return LocalSigner(keypair)
    if keypair_path:
        return LocalSigner(load_or_create_keypair(keypair_path, auto_create=auto_create))
    raise SignerError.not_configured()


_USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class WalletVault:
    """
    Per-user custodial wallets, one keypair file per user id

    Usage:
        vault = WalletVault("data/wallets")
        keypair, is_new = vault.create("12345")
        same = vault.get("12345")
    """

    def __init__(self, directory: str):
        self._directory = Path(directory)

    def _path_for(self, user_id: str) -> Path:
        user_id = str(user_id).strip()
        if not _USER_ID_PATTERN.match(user_id):
            raise ValidationError.invalid("userId", "must be 1-64 letters, digits, '-' or '_'")
        return self._directory / f"{user_id}.json"

    def get(self, user_id: str) -> Optional[Keypair]:
        """Existing keypair for user, or None"""
        path = self._path_for(user_id)
        if not path.is_file():
            return None
        return read_keypair_file(str(path))

    def create(self, user_id: str) -> Tuple[Keypair, bool]:
        """Return (keypair, is_new); an existing wallet is never replaced"""
        existing = self.get(user_id)
        if existing is not None:
            return existing, False
        keypair = Keypair()
        write_keypair_file(str(self._path_for(user_id)), keypair)
        logger.info(f"Created custodial wallet {keypair.pubkey()} for user {user_id}")
        return keypair, True
