"""Utility functions for GasFree amounts and fees."""

from decimal import Decimal, InvalidOperation
from typing import Union

from ..errors import InvalidAmount


# USDT on TRON has 6 decimals
USDT_DECIMALS = 6


def format_token_amount(amount: int, decimals: int = USDT_DECIMALS) -> str:
    """Format a token amount in smallest units to a human readable string.

    Args:
        amount: Amount in smallest units (e.g., 1000000 = 1 USDT)
        decimals: Token decimals

    Returns:
        Human readable string (e.g., "1", "1.5")
    """
    text = f"{Decimal(amount).scaleb(-decimals):.{decimals}f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


def parse_token_amount(amount: Union[str, int, Decimal], decimals: int = USDT_DECIMALS) -> int:
    """Parse a human readable amount to smallest units.

    Args:
        amount: Human readable amount (e.g., "1.50")
        decimals: Token decimals

    Returns:
        Amount in smallest units (e.g., 1500000)

    Raises:
        InvalidAmount: If the amount is not a finite number, is negative or has
            more precision than the token
    """
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise InvalidAmount(f"Not a number: {amount!r}") from None
    if not value.is_finite():
        raise InvalidAmount(f"Not a finite amount: {amount!r}")
    scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise InvalidAmount(f"Too many decimal places for {decimals}-decimal token: {amount}")
    if scaled < 0:
        raise InvalidAmount(f"Negative amount: {amount}")
    return int(scaled)


def calculate_max_fee(transfer_fee: int, activate_fee: int, active: bool) -> int:
    """Fee bound for the next authorization of a proxy account.

    The first authorization activates the proxy account and pays the
    activation fee on top of the transfer fee.

    Args:
        transfer_fee: Per-transfer fee of the token
        activate_fee: One-time activation fee of the token
        active: Whether the proxy account is already activated

    Returns:
        Max fee in smallest units
    """
    return transfer_fee if active else activate_fee + transfer_fee


def calculate_required_balance(value: int, max_fee: int) -> int:
    """Balance the proxy account must hold for a transfer to be executable."""
    return value + max_fee
