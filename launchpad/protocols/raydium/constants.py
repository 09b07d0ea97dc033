"""
Raydium AMM v4 / OpenBook constants
"""

from dataclasses import dataclass

# Raydium AMM v4
AMM_V4_PROGRAM_ID = "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8"
AMM_V4_DEVNET_PROGRAM_ID = "HWy1jotHpo6UqeQxx49dpYYdQB8wj9Qk9MdxwjLvDHB8"

# OpenBook (Serum v3 layout) market program
OPENBOOK_PROGRAM_ID = "srmqPvymJeFKQ4zGQed1GFppgkRHB9kaLCmR8D6wUAF"
OPENBOOK_DEVNET_PROGRAM_ID = "EoTcMgcDRTJVZDMZWBoU6rhYHZfkNTVEAfz3uUJRcYGj"

# Pool creation fee receiver
FEE_DESTINATION_ID = "7YttLkHDoNj9wyDur5pM1ejNaAvT9X4eqaYcHQqtj2G5"
FEE_DESTINATION_DEVNET_ID = "3XMrhbv989VxAMi3DErLV9eJht1pHppW5LbKxe9fkEFR"

# Pools owned by any other program are rejected for AMM operations
VALID_AMM_PROGRAM_IDS = frozenset({AMM_V4_PROGRAM_ID, AMM_V4_DEVNET_PROGRAM_ID})

# Trade fee: 25 / 10000
TRADE_FEE_NUMERATOR = 25
TRADE_FEE_DENOMINATOR = 10_000


@dataclass(frozen=True)
class ProgramIds:
    """Program set for one cluster"""
    amm: str
    market: str
    fee_destination: str


MAINNET_PROGRAMS = ProgramIds(
    amm=AMM_V4_PROGRAM_ID,
    market=OPENBOOK_PROGRAM_ID,
    fee_destination=FEE_DESTINATION_ID,
)

DEVNET_PROGRAMS = ProgramIds(
    amm=AMM_V4_DEVNET_PROGRAM_ID,
    market=OPENBOOK_DEVNET_PROGRAM_ID,
    fee_destination=FEE_DESTINATION_DEVNET_ID,
)


def programs_for(is_production: bool) -> ProgramIds:
    return MAINNET_PROGRAMS if is_production else DEVNET_PROGRAMS


def is_valid_amm(program_id: str) -> bool:
    return program_id in VALID_AMM_PROGRAM_IDS
