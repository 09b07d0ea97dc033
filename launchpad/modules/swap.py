"""
Swap Module

Single-pool swaps on Raydium AMM v4.
"""

import logging
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..client import LaunchpadClient

from ..types import SwapResult, TokenLeg
from ..types.common import Number, to_amount
from ..protocols.raydium.math import compute_amount_in, compute_amount_out
from ..infra import CorrelationContext
from ..errors import ValidationError, PoolUnavailable

logger = logging.getLogger(__name__)

FIXED_SIDES = ("in", "out")


class SwapModule:
    """
    Swap operations module

    fixed_side "in": amount is what goes in; the output is bounded below.
    fixed_side "out": amount is what comes out; the input is bounded above.

    Usage:
        client = LaunchpadClient.from_config()

        result = client.swap.swap(pool_id, input_mint=SOL.mint, amount=0.1)
        print(result.output_token.amount)
    """

    def __init__(self, client: "LaunchpadClient"):
        self._client = client

    @property
    def owner(self) -> str:
        return self._client.pubkey

    def swap(
        self,
        pool_id: str,
        input_mint: str,
        amount: Number,
        fixed_side: str = "in",
        slippage_pct: Optional[Number] = None,
    ) -> SwapResult:
        """
        Swap input_mint for the other side of the pool

        Args:
            pool_id: AMM v4 pool
            input_mint: Mint being sold; must be one of the pool mints
            amount: Input amount (fixed in) or desired output amount (fixed out), UI units
            fixed_side: "in" or "out"
            slippage_pct: Tolerance in percent

        Raises:
            PoolUnavailable: Placeholder or unknown pool, or input_mint not in pool
        """
        if fixed_side not in FIXED_SIDES:
            raise ValidationError.invalid("fixedSide", "must be 'in' or 'out'")
        if not input_mint:
            raise ValidationError.missing("inputMint")
        amount = to_amount(amount, "amount")
        if amount <= 0:
            raise ValidationError.invalid("amount", "must be positive")
        slippage = to_amount(
            slippage_pct if slippage_pct is not None else self._client.launch_config.default_slippage_pct,
            "slippage",
        )

        with CorrelationContext("swap") as cid:
            snapshot = self._client.pool.require_live(pool_id)

            if input_mint == snapshot.mint_a.mint:
                token_in, token_out = snapshot.mint_a, snapshot.mint_b
                reserve_in, reserve_out = snapshot.base_reserve, snapshot.quote_reserve
            elif input_mint == snapshot.mint_b.mint:
                token_in, token_out = snapshot.mint_b, snapshot.mint_a
                reserve_in, reserve_out = snapshot.quote_reserve, snapshot.base_reserve
            else:
                raise PoolUnavailable.mint_mismatch(pool_id, input_mint)

            logger.info(f"[{cid}] Swap {amount} {token_in} -> {token_out} on {pool_id} (fixed {fixed_side})")

            if fixed_side == "in":
                amount_in = token_in.raw_amount(amount)
                amount_out, min_out = compute_amount_out(amount_in, reserve_in, reserve_out, slippage)
                sdk_in, sdk_out = amount_in, min_out
                input_leg = TokenLeg(token_in, amount)
                output_leg = TokenLeg(
                    token_out,
                    token_out.ui_amount(amount_out),
                    min_amount=token_out.ui_amount(min_out),
                )
            else:
                amount_out = token_out.raw_amount(amount)
                amount_in, max_in = compute_amount_in(amount_out, reserve_in, reserve_out, slippage)
                sdk_in, sdk_out = max_in, amount_out
                input_leg = TokenLeg(
                    token_in,
                    token_in.ui_amount(amount_in),
                    max_amount=token_in.ui_amount(max_in),
                )
                output_leg = TokenLeg(token_out, amount)

            built = self._client.sdk.build_swap(
                owner=self.owner,
                pool_id=pool_id,
                input_mint=token_in.mint,
                amount_in=sdk_in,
                amount_out=sdk_out,
                fixed_side=fixed_side,
            )
            signatures = self._client.tx_sender.execute(built.transactions)

            return SwapResult(
                tx_id=signatures[-1] if signatures else "",
                pool_id=pool_id,
                input_token=input_leg,
                output_token=output_leg,
            )
