"""Base unit conversion and fixed-precision rendering of amounts"""
from decimal import Decimal, ROUND_HALF_EVEN, getcontext
from typing import Union

# Enough digits for uint256 wei amounts without falling back to exponents.
getcontext().prec = 80

WEI_PER_ETH = Decimal(10) ** 18
WEI_PER_GWEI = Decimal(10) ** 9

STAKE_PLACES = 0
AMOUNT_PLACES = 6
GAS_PLACES = 9


def wei_to_eth(wei: int) -> Decimal:
    """Convert an integer amount in wei to ETH (also used for 18-decimal ERC-20 tokens)"""
    return Decimal(wei) / WEI_PER_ETH


def wei_to_gwei(wei: int) -> Decimal:
    """Convert an integer amount in wei to gwei"""
    return Decimal(wei) / WEI_PER_GWEI


def to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    """Coerce a number to Decimal, going through str for floats"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def format_amount(value: Decimal, places: int = AMOUNT_PLACES) -> str:
    """Render a decimal with exactly `places` fractional digits, rounding half-even"""
    exponent = Decimal(1).scaleb(-places)
    quantized = to_decimal(value).quantize(exponent, rounding=ROUND_HALF_EVEN)
    if quantized.is_zero():
        quantized = quantized.copy_abs()
    return format(quantized, 'f')
