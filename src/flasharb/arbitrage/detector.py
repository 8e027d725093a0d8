from collections.abc import Sequence

from flasharb.arbitrage.types import Quote, SpreadDecision
from flasharb.exceptions import FlashArbValueError


def detect(quotes: Sequence[Quote], min_spread: int) -> SpreadDecision | None:
    """
    Find the cheapest and richest venues among the quotes and decide if the spread between them is
    worth acting on.

    Returns `None` if fewer than two quotes are provided. Otherwise a decision is returned, with
    `act` set only if the spread is strictly greater than `min_spread`. If several quotes share the
    lowest or highest price, the first one in input order is selected.
    """

    if min_spread < 0:
        raise FlashArbValueError(message=f"Minimum spread {min_spread} is negative.")

    if len(quotes) < 2:
        return None

    # min() and max() keep the first of several equal items
    cheap = min(quotes, key=lambda quote: quote.price)
    rich = max(quotes, key=lambda quote: quote.price)
    spread = rich.price - cheap.price

    return SpreadDecision(
        cheap_venue=cheap.venue,
        rich_venue=rich.venue,
        cheap_price=cheap.price,
        rich_price=rich.price,
        spread=spread,
        act=spread > min_spread,
    )
