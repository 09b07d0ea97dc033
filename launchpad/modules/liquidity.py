"""
Liquidity Module

Add and remove liquidity on Raydium AMM v4 pools.
"""

import logging
from decimal import Decimal
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..client import LaunchpadClient

from ..types import LiquidityResult, TokenLeg
from ..types.common import Number, to_amount
from ..protocols.raydium.math import compute_pair_amount, compute_withdraw_amounts
from ..infra import CorrelationContext
from ..errors import PoolUnavailable, ValidationError

logger = logging.getLogger(__name__)

FIXED_SIDES = ("a", "b")


class LiquidityModule:
    """
    Liquidity operations module

    Usage:
        client = LaunchpadClient.from_config()

        # Deposit 1 unit of token A plus the matching amount of token B
        result = client.liquidity.add(pool_id, 1, fixed_side="a", slippage_pct=1)

        # Withdraw 0.5 LP
        result = client.liquidity.remove(pool_id, 0.5, slippage_pct=1)
    """

    def __init__(self, client: "LaunchpadClient"):
        self._client = client

    @property
    def owner(self) -> str:
        return self._client.pubkey

    def _slippage(self, slippage_pct: Optional[Number]) -> Decimal:
        if slippage_pct is None:
            return to_amount(self._client.launch_config.default_slippage_pct, "slippage")
        return to_amount(slippage_pct, "slippage")

    def add(
        self,
        pool_id: str,
        amount: Number,
        fixed_side: str = "a",
        slippage_pct: Optional[Number] = None,
    ) -> LiquidityResult:
        """
        Add liquidity

        Args:
            pool_id: AMM v4 pool
            amount: Amount of the fixed side in UI units
            fixed_side: "a" (base) or "b" (quote)
            slippage_pct: Tolerance on the paired amount, in percent

        Returns:
            LiquidityResult; the paired leg carries the maximum deposit
        """
        if fixed_side not in FIXED_SIDES:
            raise ValidationError.invalid("fixedSide", "must be 'a' or 'b'")
        amount = to_amount(amount, "amount")
        if amount <= 0:
            raise ValidationError.invalid("amount", "must be positive")
        slippage = self._slippage(slippage_pct)

        with CorrelationContext("liquidity") as cid:
            snapshot = self._client.pool.require_live(pool_id)
            logger.info(f"[{cid}] Adding liquidity to {pool_id} (fixed side {fixed_side})")

            if fixed_side == "a":
                fixed, other = snapshot.mint_a, snapshot.mint_b
                reserve_fixed, reserve_other = snapshot.base_reserve, snapshot.quote_reserve
            else:
                fixed, other = snapshot.mint_b, snapshot.mint_a
                reserve_fixed, reserve_other = snapshot.quote_reserve, snapshot.base_reserve

            fixed_raw = fixed.raw_amount(amount)
            pair = compute_pair_amount(fixed_raw, reserve_fixed, reserve_other, slippage)

            if fixed_side == "a":
                amount_a, amount_b = fixed_raw, pair.max_another_amount
            else:
                amount_a, amount_b = pair.max_another_amount, fixed_raw

            built = self._client.sdk.build_add_liquidity(
                owner=self.owner,
                pool_id=pool_id,
                amount_a=amount_a,
                amount_b=amount_b,
                other_amount_min=pair.min_another_amount,
                fixed_side=fixed_side,
            )
            signatures = self._client.tx_sender.execute(built.transactions)

            fixed_leg = TokenLeg(fixed, amount)
            other_leg = TokenLeg(
                other,
                other.ui_amount(pair.max_another_amount),
                min_amount=other.ui_amount(pair.min_another_amount),
            )
            leg_a, leg_b = (fixed_leg, other_leg) if fixed_side == "a" else (other_leg, fixed_leg)

            return LiquidityResult(
                tx_id=signatures[-1] if signatures else "",
                pool_id=pool_id,
                token_a=leg_a,
                token_b=leg_b,
            )

    def remove(
        self,
        pool_id: str,
        lp_amount: Number,
        slippage_pct: Optional[Number] = None,
    ) -> LiquidityResult:
        """
        Remove liquidity

        Expected withdrawal per side is lp_amount times reserve over LP
        supply; the minimum accepted is that amount less slippage, floored
        to base units.

        Args:
            pool_id: AMM v4 pool
            lp_amount: LP tokens to burn, in UI units
            slippage_pct: Tolerance in percent
        """
        lp_amount = to_amount(lp_amount, "lpAmount")
        if lp_amount <= 0:
            raise ValidationError.invalid("lpAmount", "must be positive")
        slippage = self._slippage(slippage_pct)

        with CorrelationContext("liquidity") as cid:
            snapshot = self._client.pool.require_live(pool_id)
            logger.info(f"[{cid}] Removing {lp_amount} LP from {pool_id}")

            lp_raw = snapshot.lp_token.raw_amount(lp_amount)
            if lp_raw <= 0:
                raise ValidationError.invalid("lpAmount", "below the LP token's smallest unit")
            lp_ui = snapshot.lp_token.ui_amount(lp_raw)

            lp_supply = snapshot.lp_amount
            if lp_supply <= 0:
                raise PoolUnavailable.no_lp_supply(pool_id)
            amounts = compute_withdraw_amounts(
                lp_ui,
                snapshot.amount_a / lp_supply,
                snapshot.amount_b / lp_supply,
                snapshot.mint_a.decimals,
                snapshot.mint_b.decimals,
                slippage,
            )

            built = self._client.sdk.build_remove_liquidity(
                owner=self.owner,
                pool_id=pool_id,
                lp_amount=lp_raw,
                base_amount_min=amounts.base_min,
                quote_amount_min=amounts.quote_min,
            )
            signatures = self._client.tx_sender.execute(built.transactions)

            return LiquidityResult(
                tx_id=signatures[-1] if signatures else "",
                pool_id=pool_id,
                token_a=TokenLeg(
                    snapshot.mint_a,
                    snapshot.mint_a.ui_amount(amounts.base_expected),
                    min_amount=snapshot.mint_a.ui_amount(amounts.base_min),
                ),
                token_b=TokenLeg(
                    snapshot.mint_b,
                    snapshot.mint_b.ui_amount(amounts.quote_expected),
                    min_amount=snapshot.mint_b.ui_amount(amounts.quote_min),
                ),
                lp_amount=lp_ui,
            )
