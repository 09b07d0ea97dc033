"""
Pool type definitions

PoolRecord is the registry row (real or placeholder) and the shape served
over HTTP. PoolSnapshot is live pool state resolved from the hosted API or
rebuilt from chain by the SDK service.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from .common import (
    NATIVE_MINT,
    SOL,
    UNKNOWN_NAME,
    UNKNOWN_SYMBOL,
    Number,
    Token,
    TokenInfo,
    json_number,
    to_decimal,
    to_ui_amount,
)

PLACEHOLDER_PREFIX = "placeholder-"
PENDING_MARKET = "pending"

# Raydium AMM v4 trade fee (25 bps)
DEFAULT_FEE_RATE = Decimal("0.0025")

_RECORD_KEYS = frozenset({
    "poolId", "txId", "marketId",
    "baseMint", "baseName", "baseSymbol", "baseDecimals", "baseAmount",
    "quoteMint", "quoteName", "quoteSymbol", "quoteDecimals", "quoteAmount",
    "lpMint", "createdAt", "owner", "initialPrice", "isPlaceholder",
})


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def compute_initial_price(base_amount: Decimal, quote_amount: Decimal) -> Decimal:
    """quote per base; 0 when there is no base liquidity"""
    if base_amount == 0:
        return Decimal(0)
    return quote_amount / base_amount


@dataclass
class PoolRecord:
    """
    Liquidity pool row kept in the local registry

    initial_price is always derived from the amounts and cannot be set
    independently.
    """
    pool_id: str
    base_mint: str
    quote_mint: str = NATIVE_MINT
    market_id: str = PENDING_MARKET
    tx_id: str = ""
    base_name: str = UNKNOWN_NAME
    base_symbol: str = UNKNOWN_SYMBOL
    base_decimals: int = 0
    base_amount: Decimal = Decimal(0)
    quote_name: str = UNKNOWN_NAME
    quote_symbol: str = UNKNOWN_SYMBOL
    quote_decimals: int = 0
    quote_amount: Decimal = Decimal(0)
    lp_mint: str = ""
    owner: str = ""
    created_at: str = field(default_factory=utc_now_iso)
    is_placeholder: bool = False
    # Unrecognised keys from stored rows, written back unchanged
    extra: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)
    initial_price: Decimal = field(init=False, default=Decimal(0))

    def __post_init__(self):
        self.base_amount = to_decimal(self.base_amount)
        self.quote_amount = to_decimal(self.quote_amount)
        self.initial_price = compute_initial_price(self.base_amount, self.quote_amount)

    def __repr__(self) -> str:
        kind = "placeholder" if self.is_placeholder else "pool"
        return f"PoolRecord({kind}, {self.base_symbol}/{self.quote_symbol}, {self.pool_id[:20]})"

    @property
    def base_token(self) -> Token:
        return Token(self.base_mint, self.base_symbol, self.base_decimals, self.base_name)

    def is_placeholder_for(self, base_mint: str) -> bool:
        """Placeholder rows are recognised by flag or by the synthetic id prefix"""
        if self.base_mint != base_mint:
            return False
        return self.is_placeholder or self.pool_id.startswith(PLACEHOLDER_PREFIX)

    def references_mint(self, mint: str) -> bool:
        return self.base_mint == mint or self.quote_mint == mint

    def with_amounts(self, base_amount: Number, quote_amount: Number) -> "PoolRecord":
        """Copy with new amounts; price is recomputed"""
        return replace(self, base_amount=to_decimal(base_amount), quote_amount=to_decimal(quote_amount))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary (camelCase keys)"""
        data = dict(self.extra)
        data.update({
            "poolId": self.pool_id,
            "txId": self.tx_id,
            "marketId": self.market_id,
            "baseMint": self.base_mint,
            "baseName": self.base_name,
            "baseSymbol": self.base_symbol,
            "baseDecimals": self.base_decimals,
            "baseAmount": json_number(self.base_amount),
            "quoteMint": self.quote_mint,
            "quoteName": self.quote_name,
            "quoteSymbol": self.quote_symbol,
            "quoteDecimals": self.quote_decimals,
            "quoteAmount": json_number(self.quote_amount),
            "lpMint": self.lp_mint,
            "createdAt": self.created_at,
            "owner": self.owner,
            "initialPrice": json_number(self.initial_price),
            "isPlaceholder": self.is_placeholder,
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoolRecord":
        """
        Parse a stored row

        Raises:
            KeyError: poolId or baseMint missing
            ValueError: numeric fields not parseable
        """
        pool_id = data["poolId"]
        return cls(
            pool_id=pool_id,
            tx_id=data.get("txId") or "",
            market_id=data.get("marketId") or PENDING_MARKET,
            base_mint=data["baseMint"],
            base_name=data.get("baseName") or UNKNOWN_NAME,
            base_symbol=data.get("baseSymbol") or UNKNOWN_SYMBOL,
            base_decimals=int(data.get("baseDecimals") or 0),
            base_amount=to_decimal(data.get("baseAmount") or 0),
            quote_mint=data.get("quoteMint") or NATIVE_MINT,
            quote_name=data.get("quoteName") or UNKNOWN_NAME,
            quote_symbol=data.get("quoteSymbol") or UNKNOWN_SYMBOL,
            quote_decimals=int(data.get("quoteDecimals") or 0),
            quote_amount=to_decimal(data.get("quoteAmount") or 0),
            lp_mint=data.get("lpMint") or "",
            owner=data.get("owner") or "",
            created_at=data.get("createdAt") or utc_now_iso(),
            is_placeholder=bool(data.get("isPlaceholder", str(pool_id).startswith(PLACEHOLDER_PREFIX))),
            extra={k: v for k, v in data.items() if k not in _RECORD_KEYS},
        )

    @classmethod
    def placeholder(cls, token: TokenInfo, owner: str, created_at: Optional[str] = None) -> "PoolRecord":
        """Synthetic record for a token without an on-chain pool, quoted in SOL"""
        return cls(
            pool_id=f"{PLACEHOLDER_PREFIX}{token.mint}",
            tx_id="",
            market_id=PENDING_MARKET,
            base_mint=token.mint,
            base_name=token.name or UNKNOWN_NAME,
            base_symbol=token.symbol or UNKNOWN_SYMBOL,
            base_decimals=token.decimals,
            base_amount=Decimal(0),
            quote_mint=SOL.mint,
            quote_name=SOL.name,
            quote_symbol=SOL.symbol,
            quote_decimals=SOL.decimals,
            quote_amount=Decimal(0),
            lp_mint="",
            owner=owner,
            created_at=created_at or utc_now_iso(),
            is_placeholder=True,
        )


@dataclass
class PoolSnapshot:
    """
    Live AMM pool state

    Attributes:
        pool_id: Pool (AMM) account address
        program_id: Owning AMM program
        mint_a: Base token
        mint_b: Quote token
        amount_a: Base reserve in UI units
        amount_b: Quote reserve in UI units
        lp_mint: LP token mint
        lp_decimals: LP token decimals
        lp_amount: LP supply in UI units
        market_id: OpenBook market backing the pool
        base_reserve: Base reserve in base units
        quote_reserve: Quote reserve in base units
        fee_rate: Trade fee as a fraction
        source: "api" or "rpc"
    """
    pool_id: str
    program_id: str
    mint_a: Token
    mint_b: Token
    amount_a: Decimal
    amount_b: Decimal
    lp_mint: str = ""
    lp_decimals: int = 0
    lp_amount: Decimal = Decimal(0)
    market_id: str = ""
    base_reserve: Optional[int] = None
    quote_reserve: Optional[int] = None
    fee_rate: Decimal = DEFAULT_FEE_RATE
    source: str = "api"
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        if self.base_reserve is None:
            self.base_reserve = self.mint_a.raw_amount(self.amount_a)
        if self.quote_reserve is None:
            self.quote_reserve = self.mint_b.raw_amount(self.amount_b)

    @property
    def lp_token(self) -> Token:
        return Token(mint=self.lp_mint, symbol="LP", decimals=self.lp_decimals, name="LP")

    def token_for(self, mint: str) -> Optional[Token]:
        if self.mint_a.mint == mint:
            return self.mint_a
        if self.mint_b.mint == mint:
            return self.mint_b
        return None

    def to_record(self, stored: Optional[PoolRecord] = None) -> PoolRecord:
        """
        Present live state as a PoolRecord

        Ownership and creation details only exist locally, so they are taken
        from the stored row when there is one.
        """
        return PoolRecord(
            pool_id=self.pool_id,
            tx_id=stored.tx_id if stored else "",
            market_id=self.market_id or (stored.market_id if stored else PENDING_MARKET),
            base_mint=self.mint_a.mint,
            base_name=self.mint_a.name,
            base_symbol=self.mint_a.symbol,
            base_decimals=self.mint_a.decimals,
            base_amount=self.amount_a,
            quote_mint=self.mint_b.mint,
            quote_name=self.mint_b.name,
            quote_symbol=self.mint_b.symbol,
            quote_decimals=self.mint_b.decimals,
            quote_amount=self.amount_b,
            lp_mint=self.lp_mint,
            owner=stored.owner if stored else "",
            created_at=stored.created_at if stored else "",
            is_placeholder=False,
        )

    @classmethod
    def from_api(cls, item: Dict[str, Any], source: str = "api") -> "PoolSnapshot":
        """Parse a hosted-API v3 pool item"""
        lp = item.get("lpMint") or {}
        fee = item.get("feeRate")
        return cls(
            pool_id=item["id"],
            program_id=item.get("programId", ""),
            mint_a=Token.from_api(item.get("mintA")),
            mint_b=Token.from_api(item.get("mintB")),
            amount_a=to_decimal(item.get("mintAmountA") or 0),
            amount_b=to_decimal(item.get("mintAmountB") or 0),
            lp_mint=lp.get("address", ""),
            lp_decimals=int(lp.get("decimals") or 0),
            lp_amount=to_decimal(item.get("lpAmount") or 0),
            market_id=item.get("marketId") or "",
            fee_rate=to_decimal(fee) if fee is not None else DEFAULT_FEE_RATE,
            source=source,
            raw=item,
        )

    @classmethod
    def from_rpc(cls, data: Dict[str, Any]) -> "PoolSnapshot":
        """
        Parse the SDK service's on-chain reconstruction

        Expected shape: {"poolInfo": <api v3 item>, "poolRpcData": {"baseReserve", "quoteReserve", "status"}}
        """
        info = data.get("poolInfo") or {}
        rpc_data = data.get("poolRpcData") or {}
        snapshot = cls.from_api(info, source="rpc")
        if rpc_data.get("baseReserve") is not None:
            snapshot.base_reserve = int(rpc_data["baseReserve"])
            snapshot.amount_a = to_ui_amount(snapshot.base_reserve, snapshot.mint_a.decimals)
        if rpc_data.get("quoteReserve") is not None:
            snapshot.quote_reserve = int(rpc_data["quoteReserve"])
            snapshot.amount_b = to_ui_amount(snapshot.quote_reserve, snapshot.mint_b.decimals)
        snapshot.raw = data
        return snapshot
