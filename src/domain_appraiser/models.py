"""
Data models for the domain appraiser.

This module defines the parsed domain, its lexical features, valuation
outputs, the per-kind report results and the session that caches them.
"""

from dataclasses import dataclass, field
import datetime
from typing import Optional, Union

from .enums import ReportKind, ReportState, ResultSource


@dataclass(frozen=True)
class DomainName:
    """A domain split into its name label and top-level suffix."""

    name_only: str  # Everything before the last dot, never empty
    tld: str  # Lower-cased suffix without the dot

    @property
    def full(self) -> str:
        return f"{self.name_only}.{self.tld}"

    def __str__(self) -> str:
        return self.full


@dataclass(frozen=True)
class Features:
    """Normalized lexical features derived from a domain name."""

    name: str
    length: int
    vowel_ratio: float
    consonant_cluster_count: int
    has_hyphen_or_digit: bool
    tld: str


@dataclass(frozen=True)
class PriceEstimate:
    """Estimated price in USD with the range it was sampled from."""

    amount: int
    low: float
    high: float


@dataclass
class IndustryMatch:
    """An industry the domain name is relevant for."""

    industry: str
    confidence: Optional[int] = None  # Percentage, only set for inferred guesses
    inferred: bool = False

    def label(self) -> str:
        if self.confidence is None:
            return self.industry
        return f"{self.industry} ({self.confidence}% confidence)"


@dataclass
class MarketAnalysis:
    """Market-facing part of a detailed report."""

    industries: list[IndustryMatch]
    competing_domains: list[str]
    growth_trend: str
    global_appeal: str
    digital_marketing_value: str

    def to_dict(self) -> dict:
        return {
            "Industries": [match.label() for match in self.industries],
            "CompetingDomains": list(self.competing_domains),
            "GrowthTrend": self.growth_trend,
            "GlobalAppeal": self.global_appeal,
            "DigitalMarketingValue": self.digital_marketing_value,
        }


@dataclass
class SalesRecord:
    """A single historical sale of a domain."""

    date: datetime.date
    price: float

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "price": self.price}


@dataclass
class SimilarDomainRecord:
    """A comparable domain with its estimated price."""

    name: str
    price: float

    def to_dict(self) -> dict:
        return {"name": self.name, "price": self.price}


@dataclass
class AnalysisReport:
    """Narrative report with metrics (Basic and Detailed kinds)."""

    kind: ReportKind
    title: str
    content: str
    metrics: dict[str, str]
    market_analysis: Optional[MarketAnalysis] = None
    source: ResultSource = ResultSource.GENERATIVE

    def to_dict(self) -> dict:
        data = {
            "title": self.title,
            "content": self.content,
            "metrics": dict(self.metrics),
        }
        if self.market_analysis is not None:
            data["marketAnalysis"] = self.market_analysis.to_dict()
        return data


@dataclass
class SalesHistoryReport:
    """Sales history, sorted by date descending."""

    sales: list[SalesRecord]
    source: ResultSource = ResultSource.GENERATIVE
    dropped_records: int = 0

    def to_dict(self) -> dict:
        return {"sales": [sale.to_dict() for sale in self.sales]}


@dataclass
class SimilarDomainsReport:
    """Similar domains, sorted by price descending."""

    domains: list[SimilarDomainRecord]
    source: ResultSource = ResultSource.GENERATIVE
    dropped_records: int = 0

    def to_dict(self) -> dict:
        return {"domains": [record.to_dict() for record in self.domains]}


@dataclass
class BrandingReport:
    """Generated logo for the domain's brand."""

    domain: str
    image_url: str
    source: ResultSource = ResultSource.GENERATIVE

    def to_dict(self) -> dict:
        return {"imageUrl": self.image_url, "domain": self.domain}


ReportResult = Union[
    AnalysisReport,
    SalesHistoryReport,
    SimilarDomainsReport,
    BrandingReport,
]


@dataclass
class ReportCell:
    """State of one report kind for the current domain."""

    kind: ReportKind
    state: ReportState = ReportState.IDLE
    domain: Optional[str] = None
    result: Optional[ReportResult] = None
    error: Optional[str] = None


def _idle_cells() -> dict[ReportKind, ReportCell]:
    return {kind: ReportCell(kind=kind) for kind in ReportKind}


@dataclass
class ReportSession:
    """
    Report cache for a single user session.

    The session is owned by the aggregator: only the aggregator mutates
    cells, the export synthesizer only reads them. ``generation`` increases
    every time a domain is submitted and tags in-flight fetches so that
    late results for a previous domain can be recognised and discarded.
    """

    domain: Optional[DomainName] = None
    generation: int = 0
    cells: dict[ReportKind, ReportCell] = field(default_factory=_idle_cells)

    def reset(self, domain: DomainName) -> None:
        """Switch to a new domain, clearing every cell back to IDLE."""
        self.domain = domain
        self.generation += 1
        self.cells = _idle_cells()

    def cell(self, kind: ReportKind) -> ReportCell:
        return self.cells[kind]

    def is_loaded(self, kind: ReportKind) -> bool:
        return self.cells[kind].state == ReportState.LOADED


@dataclass
class ExportDocument:
    """A rendered, self-contained export artifact."""

    filename: str
    content: str
    media_type: str = "text/html"
    sections: list[ReportKind] = field(default_factory=list)
