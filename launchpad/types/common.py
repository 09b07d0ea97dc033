"""
Common type definitions
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_FLOOR
from typing import Any, Dict, Optional, Union

from solders.pubkey import Pubkey

from ..errors import ValidationError


# Wrapped SOL mint, used as the quote side of every launched pool
NATIVE_MINT = "So11111111111111111111111111111111111111112"
NATIVE_DECIMALS = 9
LAMPORTS_PER_SOL = 10 ** NATIVE_DECIMALS

UNKNOWN_NAME = "Unknown"
UNKNOWN_SYMBOL = "UNK"

# Base58 alphabet (no 0, O, I, l), 32-44 characters
POOL_ID_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")

Number = Union[Decimal, float, int, str]


def is_valid_pool_id(pool_id: Optional[str]) -> bool:
    """Syntactic pool id check; performs no lookup"""
    if not pool_id or not isinstance(pool_id, str):
        return False
    return POOL_ID_PATTERN.match(pool_id) is not None


def is_valid_address(address: Optional[str]) -> bool:
    """Check that address decodes to a 32-byte public key"""
    if not is_valid_pool_id(address):
        return False
    try:
        Pubkey.from_string(address)
    except ValueError:
        return False
    return True


def to_decimal(value: Number) -> Decimal:
    """Convert through str so floats keep their printed value"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_amount(value: Number, field: str) -> Decimal:
    """
    Parse a caller-supplied amount

    Raises:
        ValidationError: Not a number, NaN or infinite
    """
    try:
        amount = to_decimal(value)
    except ArithmeticError:
        raise ValidationError.invalid(field, f"not a number: {value!r}")
    if not amount.is_finite():
        raise ValidationError.invalid(field, "must be a finite number")
    return amount


def to_raw_amount(ui_amount: Number, decimals: int) -> int:
    """
    Convert UI amount to integer base units

    Scales a decimal built from the string form of the amount and floors
    the result, so 0.1 with 9 decimals is exactly 100000000.
    """
    scaled = to_decimal(ui_amount) * (Decimal(10) ** decimals)
    return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


def to_ui_amount(raw_amount: Number, decimals: int) -> Decimal:
    """Convert base units to UI amount"""
    return to_decimal(raw_amount) / (Decimal(10) ** decimals)


def json_number(value: Optional[Number]) -> Union[int, float, None]:
    """Render a Decimal as a JSON number, keeping integers integral"""
    if value is None:
        return None
    d = to_decimal(value)
    if d == d.to_integral_value():
        return int(d)
    return float(d)


@dataclass(frozen=True)
class Token:
    """
    Token information

    Attributes:
        mint: Token mint address (base58)
        symbol: Token symbol (e.g., "SOL")
        decimals: Number of decimal places
        name: Full token name
    """
    mint: str
    symbol: str = UNKNOWN_SYMBOL
    decimals: int = 0
    name: str = UNKNOWN_NAME

    def __str__(self) -> str:
        return self.symbol

    def __repr__(self) -> str:
        return f"Token({self.symbol}, {self.mint[:8]}...)"

    def ui_amount(self, raw_amount: Number) -> Decimal:
        return to_ui_amount(raw_amount, self.decimals)

    def raw_amount(self, ui_amount: Number) -> int:
        return to_raw_amount(ui_amount, self.decimals)

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> "Token":
        """Build from a hosted-API mint object ({address, symbol, name, decimals})"""
        data = data or {}
        return cls(
            mint=data.get("address", ""),
            symbol=data.get("symbol") or UNKNOWN_SYMBOL,
            decimals=int(data.get("decimals") or 0),
            name=data.get("name") or UNKNOWN_NAME,
        )


SOL = Token(mint=NATIVE_MINT, symbol="SOL", decimals=NATIVE_DECIMALS, name="Solana")


@dataclass
class TokenInfo:
    """
    Token produced by the issuance service

    Attributes:
        mint: Mint address
        name: Token name
        symbol: Token symbol
        decimals: Mint decimals
        initial_supply: Supply minted to the operator at creation (UI units)
        token_account: Operator's associated token account
        description: Free text description
        metadata_uri: Off-chain metadata location
    """
    mint: str
    name: str = UNKNOWN_NAME
    symbol: str = UNKNOWN_SYMBOL
    decimals: int = 9
    initial_supply: Decimal = Decimal(0)
    token_account: Optional[str] = None
    description: Optional[str] = None
    metadata_uri: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.initial_supply = to_decimal(self.initial_supply)

    def as_token(self) -> Token:
        return Token(mint=self.mint, symbol=self.symbol, decimals=self.decimals, name=self.name)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "mint": self.mint,
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "initialSupply": json_number(self.initial_supply),
        })
        if self.token_account:
            data["tokenAccount"] = self.token_account
        if self.description:
            data["description"] = self.description
        if self.metadata_uri:
            data["metadataUri"] = self.metadata_uri
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenInfo":
        known = {"mint", "name", "symbol", "decimals", "initialSupply",
                 "tokenAccount", "description", "metadataUri"}
        return cls(
            mint=data["mint"],
            name=data.get("name") or UNKNOWN_NAME,
            symbol=data.get("symbol") or UNKNOWN_SYMBOL,
            decimals=int(data.get("decimals", 9)),
            initial_supply=to_decimal(data.get("initialSupply", 0)),
            token_account=data.get("tokenAccount"),
            description=data.get("description"),
            metadata_uri=data.get("metadataUri"),
            extra={k: v for k, v in data.items() if k not in known},
        )
