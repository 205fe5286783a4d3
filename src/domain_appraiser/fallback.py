"""
Fallback Generator for unusable generative service output.

Produces data with the same schema and invariants as validated generative
output (non-negative prices, past dates, sorted order). All prices come from
the scoring engine so fallback results are as plausible as primary ones.
"""

from datetime import date, timedelta
from typing import Callable

from .enums import ReportKind
from .features import extract_features
from .models import DomainName, Features, SalesRecord, SimilarDomainRecord
from .scoring import ScoringEngine
from .tld_registry import COMMON_TLDS

VOWELS = "aeiou"
LETTERS = "abcdefghijklmnopqrstuvwxyz"


class FallbackGenerator:
    """
    Synthetic sales history, similar domains and summaries.

    Shares its random source with the scoring engine, so a seeded engine
    makes fallback output reproducible too.
    """

    PREFIXES = ("get", "try", "my", "best", "top", "pro", "go")
    SUFFIXES = ("app", "hub", "spot", "zone", "pro", "hq", "now")

    def __init__(
        self,
        engine: ScoringEngine,
        clock: Callable[[], date] = date.today,
    ) -> None:
        """
        Initialize the fallback generator.

        Args:
            engine: Scoring engine used for prices and features
            clock: Returns today's date; every synthetic sale is before it
        """
        self._engine = engine
        self._rng = engine.rng
        self._clock = clock

    def sales_count(self, features: Features) -> int:
        """
        Number of synthetic sales for a domain.

        Short .com names sell most often; long names usually never sold.
        """
        is_com = features.tld == "com"
        if features.length <= 5:
            return 3 + self._rng.randint(0, 2) if is_com else 1 + self._rng.randint(0, 1)
        if features.length <= 10:
            return 1 + self._rng.randint(0, 2) if is_com else self._rng.randint(0, 1)
        return 1 if self._rng.random() > 0.7 else 0

    def generate_fallback_sales(self, domain: DomainName) -> list[SalesRecord]:
        """
        Generate a plausible sales history.

        Args:
            domain: The domain to generate sales for

        Returns:
            Sales sorted by date descending; empty for low-value names
        """
        features = extract_features(domain)
        count = self.sales_count(features)
        if count == 0:
            return []

        base_price = self._engine.estimate_price(features).amount
        today = self._clock()

        # Each earlier sale lies at least two more years back
        sale_dates = sorted(
            (
                today - timedelta(days=self._rng.randint(30, 3650) + index * 730)
                for index in range(count)
            ),
            reverse=True,
        )

        sales = []
        for rank, sale_date in enumerate(sale_dates):
            # Most recent sale is priced highest (appreciation)
            multiplier = 1.2 - (rank / count) * 0.5
            sales.append(
                SalesRecord(date=sale_date, price=max(1, round(base_price * multiplier)))
            )
        return sales

    def generate_fallback_similar(self, domain: DomainName) -> list[SimilarDomainRecord]:
        """
        Generate similar domains priced by the scoring engine.

        Args:
            domain: The domain to find alternatives for

        Returns:
            Unique alternatives (never the domain itself) sorted by price descending
        """
        candidates = self.similar_candidates(domain)
        records = [
            SimilarDomainRecord(
                name=candidate.full,
                price=self._engine.estimate_price(extract_features(candidate)).amount,
            )
            for candidate in candidates
        ]
        records.sort(key=lambda record: (-record.price, record.name))
        return records

    def similar_candidates(self, domain: DomainName) -> list[DomainName]:
        """Name variations: other TLDs, prefixes, suffixes, vowel swap, insertion."""
        name = domain.name_only
        candidates: list[DomainName] = []

        for _ in range(3):
            new_tld = self._rng.choice(COMMON_TLDS)
            if new_tld != domain.tld:
                candidates.append(DomainName(name_only=name, tld=new_tld))

        for _ in range(2):
            prefix = self._rng.choice(self.PREFIXES)
            candidates.append(
                DomainName(name_only=f"{prefix}{name}", tld=self._rng.choice(COMMON_TLDS))
            )

        for _ in range(2):
            suffix = self._rng.choice(self.SUFFIXES)
            candidates.append(
                DomainName(name_only=f"{name}{suffix}", tld=self._rng.choice(COMMON_TLDS))
            )

        if len(name) > 3:
            for index, char in enumerate(name):
                if char in VOWELS:
                    swapped = name[:index] + self._rng.choice(VOWELS) + name[index + 1:]
                    candidates.append(
                        DomainName(name_only=swapped, tld=self._rng.choice(COMMON_TLDS))
                    )
                    break

            position = self._rng.randint(1, len(name) - 1)
            inserted = name[:position] + self._rng.choice(LETTERS) + name[position:]
            candidates.append(
                DomainName(name_only=inserted, tld=self._rng.choice(COMMON_TLDS))
            )

        unique: list[DomainName] = []
        seen = {domain.full}
        for candidate in candidates:
            if candidate.full not in seen:
                seen.add(candidate.full)
                unique.append(candidate)
        return unique

    def generate_fallback_summary(self, domain: DomainName, kind: ReportKind) -> str:
        """
        Compose an analysis text from scoring data.

        Used when the generative service returns no usable prose for a
        Basic or Detailed report.
        """
        features = extract_features(domain)
        low, high = self._engine.price_range(features)
        pronounceability = self._engine.pronounceability(features)
        tld_strength = self._engine.tld_strength(features.tld)
        length_rating = self._engine.character_count_rating(features.length)

        lines = [
            f"Automated assessment of {domain.full}.",
            "",
            f"Length: {features.length} characters ({length_rating}).",
            f"Pronounceability: {pronounceability.value}.",
            f"TLD strength: .{features.tld} is rated {tld_strength}.",
        ]
        if features.has_hyphen_or_digit:
            lines.append("Hyphens or digits reduce memorability and type-in traffic.")
        lines.append(f"Estimated value range: ${round(low):,} - ${round(high):,}.")

        if kind == ReportKind.DETAILED:
            industries = ", ".join(
                match.industry for match in self._engine.classify_industries(features)
            )
            lines.append(f"Relevant industries: {industries}.")
            lines.append(
                "Recommendation: compare against the similar domains below "
                "before setting an asking price."
            )
        return "\n".join(lines)
