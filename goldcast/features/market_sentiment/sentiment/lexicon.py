# goldcast/features/market_sentiment/sentiment/lexicon.py
"""
Fixed keyword lexicon for gold news sentiment.

Gold is a safe-haven asset: it tends to rise on geopolitical stress, economic
fear, inflation, dollar weakness and dovish central banks, and to fall on
dollar strength, hawkish policy, risk-on markets and de-escalation.

Matching is plain lower-case substring search. These lists, the unit
contribution and the multipliers are configuration data; keep them as-is.
"""

from typing import Dict, Tuple

# Signed contribution of one keyword match before its multiplier.
UNIT_CONTRIBUTION = 0.3

BULLISH_KEYWORDS: Tuple[str, ...] = (
    # Geopolitical
    "war", "attack", "missile", "military", "invasion", "conflict", "tension",
    "iran", "israel", "russia", "ukraine", "china", "taiwan", "north korea",
    "strike", "bomb", "escalation", "sanctions", "retaliation",
    # Economic uncertainty
    "crash", "crisis", "recession", "collapse", "panic", "fear", "uncertainty",
    "default", "bankruptcy", "layoff", "downturn",
    # Inflation hedge
    "inflation", "cpi", "rising prices", "cost of living", "stagflation",
    # Dollar weakness
    "dollar weak", "dollar fall", "dxy down", "dollar decline", "usd falls",
    # Dovish central banks
    "rate cut", "dovish", "quantitative easing", "qe", "stimulus",
    "lower rates", "money printing", "fed pause",
    # Gold-specific
    "gold rally", "gold surge", "gold record", "gold high", "gold demand",
    "central bank buying", "gold reserves", "safe haven", "safe-haven",
    "gold etf inflow", "gold price up", "gold bullish",
    # Market stress
    "volatility", "vix spike", "risk off", "flight to safety",
)

BEARISH_KEYWORDS: Tuple[str, ...] = (
    # Dollar strength
    "dollar strength", "dxy up", "dollar rally", "strong dollar", "usd rises",
    # Hawkish policy
    "rate hike", "hawkish", "taper", "tightening", "inflation cool",
    "fed raise", "higher rates", "interest rate increase",
    # Risk-on
    "market rally", "stocks surge", "risk on", "bull market", "optimism",
    "economic growth", "recovery", "strong jobs", "low unemployment",
    # Gold-specific
    "gold fall", "gold drop", "gold decline", "gold selloff", "gold outflow",
    "gold bearish", "gold price down", "gold etf outflow",
    # De-escalation
    "ceasefire", "peace deal", "de-escalation", "resolution", "stability",
)

# High-impact terms. "nuclear" and "fed" appear in neither list and so never
# fire on their own; they are kept for parity with the published table.
HIGH_IMPACT_MULTIPLIERS: Dict[str, float] = {
    "iran": 1.5,
    "israel": 1.5,
    "war": 2.0,
    "attack": 1.8,
    "missile": 1.7,
    "nuclear": 2.0,
    "rate cut": 1.5,
    "rate hike": 1.5,
    "recession": 1.8,
    "crash": 1.8,
    "fed": 1.3,
}


def multiplier_for(keyword: str) -> float:
    return HIGH_IMPACT_MULTIPLIERS.get(keyword, 1.0)
