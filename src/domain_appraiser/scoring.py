"""
Valuation Scoring Engine for domain names.

This module maps lexical features to scores, grades, price estimates and
market indicators. It is a heuristic approximation, not a pricing oracle.

Every function is a pure function of its Features argument apart from the
documented jitter, which is drawn from the engine's injected random source.
Two engines seeded identically produce identical output for identical
features; the fallback generator relies on this to produce data with the
same shape and plausibility as the generative path.

Score tables (base, then deltas, then jitter, then clamp):
- Brandability: 75; len<5 -5, 5-8 +5, >12 -2/char; hyphen/digit -10;
  ideal vowels +5; TLD best +10, mid +5; jitter ±5; clamp [1, 100]
- Memorability: 70; len<=4 +15, 5-6 +10, >10 -2/char; hyphen/digit -15;
  ideal vowels +5; TLD best +5, mid +2; jitter ±10; clamp [0, 100]
- Marketability: 65; len<5 +5, 5-8 +10, >12 -2/char; hyphen/digit -5;
  ideal vowels +3; TLD best +10, mid +5; jitter ±5; clamp [1, 100]
- Digital marketing value: 60; len<=6 +10, 7-10 +5, >15 -10;
  hyphen/digit -10; TLD best +15, mid +8; jitter ±10; clamp [1, 100]
"""

import random
import re
from typing import Optional

from .enums import Pronounceability, TLDTier
from .models import Features, IndustryMatch, PriceEstimate
from .tld_registry import TECH_FOCUSED_TLDS, get_profile


INVESTMENT_GRADES = ["AAA", "AA", "A", "BBB", "BB", "B", "CCC"]

# (max name length, min USD, max USD); None means no upper length bound.
# Both bounds strictly decrease as names get longer.
PRICE_BRACKETS: list[tuple[Optional[int], int, int]] = [
    (3, 10000, 50000),
    (5, 5000, 15000),
    (8, 1000, 5000),
    (12, 500, 1500),
    (None, 200, 500),
]

IDEAL_VOWEL_RATIO = (0.3, 0.5)

BASE_TRAFFIC_RANGE = (500, 5000)
PER_VISIT_VALUE_RANGE = (0.2, 0.7)

GROWTH_TRENDS = ("Rising", "Emerging", "Stable", "Declining")

INDUSTRY_KEYWORDS: dict[str, frozenset[str]] = {
    "Technology": frozenset({
        "tech", "soft", "app", "code", "data", "cloud", "bot", "web",
        "digital", "cyber", "dev", "byte", "pixel", "net", "smart",
    }),
    "Finance": frozenset({
        "pay", "bank", "coin", "cash", "fund", "invest", "money", "fin",
        "capital", "credit", "loan", "wealth",
    }),
    "Health & Wellness": frozenset({
        "health", "med", "care", "fit", "clinic", "doc", "pharma", "well",
        "vita", "yoga",
    }),
    "E-commerce": frozenset({
        "shop", "store", "buy", "sell", "market", "deal", "cart", "mart",
        "trade",
    }),
    "Education": frozenset({
        "learn", "edu", "school", "academy", "tutor", "study", "course",
        "class",
    }),
    "Travel & Hospitality": frozenset({
        "travel", "trip", "tour", "fly", "hotel", "stay", "voyage", "journey",
    }),
    "Food & Beverage": frozenset({
        "food", "eat", "cook", "chef", "recipe", "cafe", "kitchen", "bake",
        "meal", "brew",
    }),
    "Real Estate": frozenset({
        "home", "house", "realty", "estate", "property", "rent", "land",
    }),
    "Entertainment": frozenset({
        "game", "play", "fun", "music", "movie", "stream", "fan", "show",
    }),
    "Marketing & Media": frozenset({
        "brand", "media", "promo", "seo", "social", "buzz", "news",
    }),
}

VALUE_RANGE_PATTERN = re.compile(
    r"\$\s*([\d,]+)\s*(?:-|–|to)\s*\$?\s*([\d,]+)"
)


class ScoringEngine:
    """
    Heuristic valuation engine.

    All randomness comes from the random source passed at construction;
    pass ``random.Random(seed)`` for reproducible output.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        """
        Initialize the scoring engine.

        Args:
            rng: Random source for jitter; a fresh unseeded one if omitted
        """
        self._rng = rng if rng is not None else random.Random()

    @property
    def rng(self) -> random.Random:
        return self._rng

    # ------------------------------------------------------------------
    # Numeric scores
    # ------------------------------------------------------------------

    def brandability(self, features: Features) -> int:
        """Brandability score in [1, 100], jitter ±5."""
        score = 75
        length = features.length
        if length < 5:
            score -= 5
        elif length <= 8:
            score += 5
        elif length > 12:
            score -= (length - 12) * 2

        if features.has_hyphen_or_digit:
            score -= 10
        if self.has_ideal_vowel_ratio(features):
            score += 5
        score += self._tld_bonus(features.tld, best=10, mid=5)

        return self._finalize(score, jitter=5, low=1, high=100)

    def memorability(self, features: Features) -> int:
        """Memorability score in [0, 100], jitter ±10."""
        score = 70
        length = features.length
        if length <= 4:
            score += 15
        elif length <= 6:
            score += 10
        elif length > 10:
            score -= (length - 10) * 2

        if features.has_hyphen_or_digit:
            score -= 15
        if self.has_ideal_vowel_ratio(features):
            score += 5
        score += self._tld_bonus(features.tld, best=5, mid=2)

        return self._finalize(score, jitter=10, low=0, high=100)

    def marketability(self, features: Features) -> int:
        """Marketability/SEO score in [1, 100], jitter ±5."""
        score = 65
        length = features.length
        if length < 5:
            score += 5
        elif length <= 8:
            score += 10
        elif length > 12:
            score -= (length - 12) * 2

        if features.has_hyphen_or_digit:
            score -= 5
        if self.has_ideal_vowel_ratio(features):
            score += 3
        score += self._tld_bonus(features.tld, best=10, mid=5)

        return self._finalize(score, jitter=5, low=1, high=100)

    def digital_marketing_value(self, features: Features) -> int:
        """Digital marketing value score in [1, 100], jitter ±10."""
        score = 60
        length = features.length
        if length <= 6:
            score += 10
        elif length <= 10:
            score += 5
        elif length > 15:
            score -= 10

        if features.has_hyphen_or_digit:
            score -= 10
        score += self._tld_bonus(features.tld, best=15, mid=8)

        return self._finalize(score, jitter=10, low=1, high=100)

    def five_point_rating(self, features: Features) -> int:
        """
        Coarse 1-5 rating used for the detailed report's star metrics.

        Base by length (<=5: 4, <=12: 3, else 2), +1 for a best-tier TLD,
        jitter of one step either way, clamped to [1, 5].
        """
        if features.length <= 5:
            rating = 4
        elif features.length <= 12:
            rating = 3
        else:
            rating = 2

        if get_profile(features.tld).tier == TLDTier.BEST:
            rating += 1

        rating += self._rng.choice((-1, 0, 1))
        return max(1, min(5, rating))

    # ------------------------------------------------------------------
    # Categorical scores
    # ------------------------------------------------------------------

    def pronounceability(self, features: Features) -> Pronounceability:
        """
        Categorize how easy the name is to say.

        Cluster-count rules are checked before vowel-ratio rules so that
        every input resolves to exactly one category.
        """
        clusters = features.consonant_cluster_count
        ratio = features.vowel_ratio

        if clusters >= 2:
            return Pronounceability.DIFFICULT
        if clusters == 1 and ratio < 0.3:
            return Pronounceability.MODERATE
        if ratio < 0.2:
            return Pronounceability.MODERATE
        if ratio > 0.5:
            return Pronounceability.EASY
        return Pronounceability.GOOD

    def base_investment_grade_index(self, features: Features) -> int:
        """
        Investment grade index before jitter (0 = AAA, 6 = CCC).

        Monotonic in length for a fixed TLD; only .com reaches the A grades.
        """
        length = features.length
        is_com = features.tld == "com"

        if length <= 5 and is_com:
            return 0
        if length <= 8 and is_com:
            return 1
        if length <= 12 and is_com:
            return 2
        if length <= 15:
            return 3
        if length <= 20:
            return 4
        return min(5 + (length - 20) // 5, 6)

    def investment_grade(self, features: Features) -> str:
        """Investment grade with at most one rank of jitter."""
        index = self.base_investment_grade_index(features)
        index += self._rng.choice((-1, 0, 1))
        index = max(0, min(len(INVESTMENT_GRADES) - 1, index))
        return INVESTMENT_GRADES[index]

    def tld_strength(self, tld: str) -> str:
        """Human-readable strength rating of a TLD."""
        return get_profile(tld).strength

    @staticmethod
    def character_count_rating(length: int) -> str:
        if length <= 4:
            return "Excellent"
        if length <= 6:
            return "Very Good"
        if length <= 10:
            return "Good"
        if length <= 15:
            return "Average"
        return "Below Average"

    def growth_trend(self, features: Features) -> str:
        """Weighted-random growth trend; tech TLDs lean towards Rising."""
        if features.tld in TECH_FOCUSED_TLDS:
            weights = (6, 3, 1, 0)
        elif features.length <= 8:
            weights = (4, 1, 4, 1)
        else:
            weights = (2, 3, 3, 2)
        return self._rng.choices(GROWTH_TRENDS, weights=weights, k=1)[0]

    def global_appeal(self, features: Features) -> str:
        """
        Threshold-based global appeal.

        One point each for a generic TLD, a name of at most 8 characters,
        an ideal vowel ratio and no hyphens or digits.
        """
        points = 0
        if get_profile(features.tld).generic:
            points += 1
        if features.length <= 8:
            points += 1
        if self.has_ideal_vowel_ratio(features):
            points += 1
        if not features.has_hyphen_or_digit:
            points += 1

        if points >= 3:
            return "High"
        if points == 2:
            return "Medium"
        return "Low"

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    @staticmethod
    def price_bracket(length: int) -> tuple[int, int]:
        """Base USD range [min, max) for a name length."""
        for max_length, low, high in PRICE_BRACKETS:
            if max_length is None or length <= max_length:
                return low, high
        raise AssertionError("unreachable: last bracket is unbounded")

    def price_range(self, features: Features) -> tuple[float, float]:
        """Bracket range after the TLD multiplier, without sampling."""
        low, high = self.price_bracket(features.length)
        multiplier = get_profile(features.tld).price_multiplier
        return low * multiplier, high * multiplier

    def estimate_price(self, features: Features) -> PriceEstimate:
        """
        Sample a price from the length bracket and apply the TLD multiplier.

        Args:
            features: Features of the domain to price

        Returns:
            PriceEstimate whose amount lies within [low, high] after rounding
        """
        low, high = self.price_bracket(features.length)
        multiplier = get_profile(features.tld).price_multiplier
        base = low + self._rng.random() * (high - low)
        return PriceEstimate(
            amount=round(base * multiplier),
            low=low * multiplier,
            high=high * multiplier,
        )

    def estimate_monthly_traffic(self, features: Features) -> int:
        """monthly = random base traffic × TLD multiplier × length multiplier."""
        if features.length <= 5:
            length_multiplier = 3.0
        elif features.length <= 8:
            length_multiplier = 2.0
        elif features.length <= 12:
            length_multiplier = 1.0
        else:
            length_multiplier = 0.5

        base_traffic = self._rng.randint(*BASE_TRAFFIC_RANGE)
        tld_multiplier = get_profile(features.tld).price_multiplier
        return round(base_traffic * tld_multiplier * length_multiplier)

    def estimate_annual_revenue(self, monthly_traffic: int) -> int:
        """annual = monthly × 12 × random per-visit value in [0.2, 0.7]."""
        per_visit_value = self._rng.uniform(*PER_VISIT_VALUE_RANGE)
        return round(monthly_traffic * 12 * per_visit_value)

    @staticmethod
    def parse_value_range(text: str) -> Optional[tuple[int, int]]:
        """
        Extract the first "$min - $max" range from generated prose.

        Returns:
            (min, max) in USD, or None when absent or implausible
        """
        match = VALUE_RANGE_PATTERN.search(text or "")
        if not match:
            return None
        try:
            low = int(match.group(1).replace(",", ""))
            high = int(match.group(2).replace(",", ""))
        except ValueError:
            return None
        if low <= 0 or low > high:
            return None
        return low, high

    # ------------------------------------------------------------------
    # Industry classification
    # ------------------------------------------------------------------

    def classify_industries(self, features: Features) -> list[IndustryMatch]:
        """
        Match the name against industry keyword sets.

        A name matches an industry if it contains any of its keywords
        (case-insensitive). With no match, 2-3 distinct industries are
        picked as an inferred best guess, each with a 70-99% confidence.
        """
        name = features.name.lower()
        matches = [
            IndustryMatch(industry=industry)
            for industry, keywords in INDUSTRY_KEYWORDS.items()
            if any(keyword in name for keyword in keywords)
        ]
        if matches:
            return matches

        industries = list(INDUSTRY_KEYWORDS)
        picked = self._rng.sample(industries, self._rng.randint(2, 3))
        return [
            IndustryMatch(
                industry=industry,
                confidence=self._rng.randint(70, 99),
                inferred=True,
            )
            for industry in picked
        ]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def has_ideal_vowel_ratio(features: Features) -> bool:
        low, high = IDEAL_VOWEL_RATIO
        return low <= features.vowel_ratio <= high

    @staticmethod
    def _tld_bonus(tld: str, best: int, mid: int) -> int:
        tier = get_profile(tld).tier
        if tier == TLDTier.BEST:
            return best
        if tier == TLDTier.MID:
            return mid
        return 0

    def _finalize(self, score: int, jitter: int, low: int, high: int) -> int:
        """Clamp, add jitter in [-jitter, +jitter], clamp again."""
        score = max(low, min(high, score))
        score += self._rng.randint(-jitter, jitter)
        return max(low, min(high, score))
