"""
Transaction sender

Signs SDK-built transactions with the operator signer, sends them and
waits for confirmation.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from .rpc import RpcClient
from .signer import LocalSigner
from ..types import TxResult
from ..errors import TransactionError, RpcError
from ..config import config as global_config

logger = logging.getLogger(__name__)


@dataclass
class TxSenderConfig:
    """
    Transaction sender runtime configuration

    Unset values are pulled from the global config (launchpad.config.TxConfig).
    """
    skip_preflight: bool = None
    preflight_commitment: str = None
    max_retries: int = None
    confirmation_timeout: float = None
    retry_delay: float = None

    def __post_init__(self):
        if self.skip_preflight is None:
            self.skip_preflight = global_config.tx.skip_preflight
        if self.preflight_commitment is None:
            self.preflight_commitment = global_config.tx.preflight_commitment
        if self.max_retries is None:
            self.max_retries = global_config.tx.max_retries
        if self.confirmation_timeout is None:
            self.confirmation_timeout = global_config.tx.confirmation_timeout
        if self.retry_delay is None:
            self.retry_delay = global_config.tx.retry_delay


class TxSender:
    """
    Sign, send and confirm

    Usage:
        sender = TxSender(rpc, signer)
        signatures = sender.execute(build_result.transactions)
    """

    def __init__(
        self,
        rpc: RpcClient,
        signer: LocalSigner,
        config: Optional[TxSenderConfig] = None,
    ):
        self._rpc = rpc
        self._signer = signer
        self._config = config or TxSenderConfig()

    @property
    def pubkey(self) -> str:
        return self._signer.pubkey

    def send(self, signed_tx: bytes) -> TxResult:
        """
        Send signed transaction and wait for confirmation

        Raises:
            TransactionError: send failed after retries
        """
        for attempt in range(self._config.max_retries):
            try:
                signature = self._rpc.send_transaction(
                    signed_tx,
                    skip_preflight=self._config.skip_preflight,
                    preflight_commitment=self._config.preflight_commitment,
                )
            except RpcError as e:
                if e.recoverable and attempt < self._config.max_retries - 1:
                    logger.warning(f"Send failed (attempt {attempt + 1}), retrying: {e}")
                    time.sleep(self._config.retry_delay)
                    continue
                raise TransactionError.send_failed(e.message)

            logger.info(f"Transaction sent: {signature}")

            confirmed = self._rpc.confirm_transaction(
                signature,
                timeout_seconds=self._config.confirmation_timeout,
            )
            if confirmed is True:
                return TxResult.success(signature)
            if confirmed is False:
                return TxResult.failed(
                    "Transaction failed on-chain (check explorer for details)",
                    signature=signature,
                )
            return TxResult.timeout(signature)

        raise TransactionError.send_failed("No send attempts made (max_retries=0)")

    def execute(self, transactions: List[bytes]) -> List[str]:
        """
        Sign and send transactions sequentially

        Each transaction must confirm before the next is sent, since later
        ones depend on accounts created by earlier ones.

        Returns:
            Confirmed signatures in order

        Raises:
            TransactionError: a transaction failed or was not confirmed
        """
        signatures: List[str] = []
        for index, unsigned in enumerate(transactions):
            signed, _ = self._signer.sign_transaction(unsigned)
            result = self.send(signed)
            if not result.is_success:
                logger.error(
                    f"Transaction {index + 1}/{len(transactions)} not confirmed: {result.error}"
                )
                raise TransactionError.confirmation_failed(result.signature, result.error)
            signatures.append(result.signature)
        return signatures
