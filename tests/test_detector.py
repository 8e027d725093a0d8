import pytest

from flasharb.arbitrage import Quote, SpreadDecision, detect
from flasharb.exceptions import FlashArbValueError
from flasharb.venues import Venue

RESERVES = (300_000 * 10**6, 100 * 10**18)


def _quote(venue: Venue, price: int) -> Quote:
    return Quote(venue=venue, price=price, reserves=RESERVES)


def test_detect_requires_two_quotes():
    assert detect([], min_spread=0) is None
    assert detect([_quote(Venue.SUSHISWAP, 3_000_000_000)], min_spread=0) is None


def test_detect_negative_min_spread():
    with pytest.raises(FlashArbValueError):
        detect(
            [_quote(Venue.SUSHISWAP, 3_000_000_000), _quote(Venue.QUICKSWAP, 3_000_400_000)],
            min_spread=-1,
        )


def test_detect_selects_cheapest_and_richest():
    quotes = [
        _quote(Venue.SUSHISWAP, 3_000_000_000),
        _quote(Venue.QUICKSWAP, 3_000_400_000),
        _quote(Venue.APESWAP, 3_000_100_000),
    ]
    decision = detect(quotes, min_spread=200_000)
    assert decision == SpreadDecision(
        cheap_venue=Venue.SUSHISWAP,
        rich_venue=Venue.QUICKSWAP,
        cheap_price=3_000_000_000,
        rich_price=3_000_400_000,
        spread=400_000,
        act=True,
    )

    # The chosen venues bound every input quote
    for quote in quotes:
        assert decision.cheap_price <= quote.price <= decision.rich_price


def test_detect_small_spread_does_not_act():
    decision = detect(
        [_quote(Venue.SUSHISWAP, 3_000_000_000), _quote(Venue.QUICKSWAP, 3_000_050_000)],
        min_spread=200_000,
    )
    assert decision is not None
    assert decision.spread == 50_000
    assert decision.act is False


@pytest.mark.parametrize(
    ("spread", "act"),
    [
        (199_999, False),
        (200_000, False),
        (200_001, True),
    ],
)
def test_detect_threshold_is_strict(spread: int, act: bool):
    decision = detect(
        [_quote(Venue.SUSHISWAP, 3_000_000_000), _quote(Venue.APESWAP, 3_000_000_000 + spread)],
        min_spread=200_000,
    )
    assert decision is not None
    assert decision.spread == spread
    assert decision.act is act


def test_detect_ties_choose_first_in_input_order():
    quotes = [
        _quote(Venue.APESWAP, 3_000_000_000),
        _quote(Venue.SUSHISWAP, 3_000_000_000),
        _quote(Venue.QUICKSWAP, 3_000_400_000),
        _quote(Venue.UNISWAP_V2, 3_000_400_000),
    ]
    decision = detect(quotes, min_spread=0)
    assert decision is not None
    assert decision.cheap_venue is Venue.APESWAP
    assert decision.rich_venue is Venue.QUICKSWAP

    decision = detect(list(reversed(quotes)), min_spread=0)
    assert decision is not None
    assert decision.cheap_venue is Venue.SUSHISWAP
    assert decision.rich_venue is Venue.UNISWAP_V2


def test_detect_identical_prices():
    decision = detect(
        [_quote(Venue.SUSHISWAP, 3_000_000_000), _quote(Venue.QUICKSWAP, 3_000_000_000)],
        min_spread=0,
    )
    assert decision is not None
    assert decision.spread == 0
    assert decision.act is False


def test_spread_decision_invariants():
    with pytest.raises(AssertionError):
        SpreadDecision(
            cheap_venue=Venue.SUSHISWAP,
            rich_venue=Venue.QUICKSWAP,
            cheap_price=3_000_000_000,
            rich_price=3_000_400_000,
            spread=1,
            act=False,
        )
