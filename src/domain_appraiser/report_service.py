"""
Report Service - one handler per report kind.

Each handler takes a validated domain, asks the generative service for its
part of the report, validates the answer and, when the answer is unusable,
substitutes locally generated data. Numeric metrics always come from the
scoring engine, never from the generated prose.

Failure handling:
- ValidationError: the request domain is bad; raised before any other work
- MalformedResponseError: recovered here through the fallback generator
- UpstreamServiceError: propagated to the caller (the aggregator marks the
  report kind as errored)
"""

from collections.abc import Mapping
from datetime import date
from typing import Any, Callable, Optional

from .audit_logger import AuditLogger
from .domain_validator import DomainValidator
from .enums import LogLevel, ReportKind, ResultSource, UpstreamErrorCode
from .exceptions import MalformedResponseError, UpstreamServiceError, ValidationError
from .fallback import FallbackGenerator
from .features import extract_features
from .generative_client import GenerativeClient
from .models import (
    AnalysisReport,
    BrandingReport,
    DomainName,
    MarketAnalysis,
    ReportResult,
    SalesHistoryReport,
    SimilarDomainsReport,
)
from .response_validator import ResponseValidator
from .scoring import ScoringEngine


BASIC_SYSTEM_PROMPT = (
    "You are a domain name analysis expert with extensive knowledge of "
    "domain valuation, marketability, and business potential."
)

BASIC_USER_PROMPT = """Provide a basic analysis of the domain name "{domain}". Include the following sections:
1. Overall impression and potential use cases
2. Marketability assessment
3. Value estimation range (in USD, formatted as $min - $max)
4. Key strengths and weaknesses"""

DETAILED_SYSTEM_PROMPT = (
    "You are an expert in domain name valuation, branding, and digital "
    "marketing. Provide detailed, data-driven analysis with specific "
    "recommendations."
)

DETAILED_USER_PROMPT = """Generate a comprehensive analysis for the domain "{domain}". Include:
1. Detailed market analysis and potential industries this domain would be valuable for
2. Comparative analysis with similar domains
3. SEO potential analysis and keyword opportunities
4. Branding potential and target audience identification
5. Investment outlook (short and long term)
6. Specific recommendations for development or selling strategy
7. Detailed value assessment with multiple factors considered"""

SALES_SYSTEM_PROMPT = (
    "You are a domain name sales history database. Generate a plausible and "
    "realistic sales history for the given domain name. Consider the "
    "domain's characteristics (length, keywords, TLD). Respond ONLY with JSON data."
)

SALES_USER_PROMPT = """Generate a plausible sales history for the domain name "{domain}".
Response format:
{{"sales": [{{"date": "YYYY-MM-DD", "price": number}}]}}
Include between 0-5 sales depending on how likely this domain would have been sold before.
Dates must be in the past. More recent sales can have higher prices to show appreciation."""

SIMILAR_SYSTEM_PROMPT = (
    "You are a domain name suggestion API that finds similar, available, and "
    "relevant domain names based on a given domain. Generate plausible "
    "similar domains with realistic pricing. Respond ONLY with JSON data."
)

SIMILAR_USER_PROMPT = """Generate 8-12 similar domain names to "{domain}":
1. Mix of similar TLDs and alternate names
2. Logical variations, synonyms, and brandable alternatives
3. A realistic USD price for each (shorter names and premium TLDs cost more)
Response format:
{{"domains": [{{"name": "domain-name.tld", "price": number}}]}}"""

BRANDING_PROMPT = """Create a modern, professional logo for a brand called "{name}".
The logo should be minimal, memorable, and work well at different sizes.
Use a color palette that reflects the essence of the name.
Include a simple icon that represents the concept along with the name in a clean,
contemporary font. No text other than the brand name. White background, no borders."""

COMPETING_DOMAIN_LIMIT = 5


class ReportService:
    """
    Produces report results for a domain, one report kind at a time.

    The service owns no per-session state; caching and state tracking
    belong to the aggregator.
    """

    def __init__(
        self,
        client: GenerativeClient,
        engine: Optional[ScoringEngine] = None,
        logger: Optional[AuditLogger] = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        """
        Initialize the report service.

        Args:
            client: Client for the generative and image services
            engine: Scoring engine; a fresh unseeded one if omitted
            logger: Optional audit logger
            clock: Returns today's date (sale dates are checked against it)
        """
        self._client = client
        self._engine = engine or ScoringEngine()
        self._logger = logger
        self._domain_validator = DomainValidator()
        self._response_validator = ResponseValidator(clock=clock)
        self._fallback = FallbackGenerator(self._engine, clock=clock)

        self._handlers = {
            ReportKind.BASIC: self.basic_report,
            ReportKind.DETAILED: self.detailed_report,
            ReportKind.SALES_HISTORY: self.sales_history_report,
            ReportKind.SIMILAR_DOMAINS: self.similar_domains_report,
            ReportKind.BRANDING: self.branding_report,
        }

    @property
    def engine(self) -> ScoringEngine:
        return self._engine

    @property
    def domain_validator(self) -> DomainValidator:
        return self._domain_validator

    async def handle_request(self, kind: ReportKind, payload: Any) -> ReportResult:
        """
        Handle a report request of the form {"domain": str}.

        Raises:
            ValidationError: If the domain is missing or malformed
            UpstreamServiceError: If the service fails and the kind has no fallback
        """
        raw_domain = payload.get("domain") if isinstance(payload, Mapping) else None
        try:
            domain = self._domain_validator.parse(raw_domain)
        except ValidationError as e:
            self._log(LogLevel.WARN, "Rejected report request", {
                "kind": kind.value,
                "code": e.code,
                "reason": e.message,
            })
            raise
        return await self.generate(kind, domain)

    async def generate(self, kind: ReportKind, domain: DomainName) -> ReportResult:
        """Produce the report of the given kind for an already parsed domain."""
        return await self._handlers[kind](domain)

    async def basic_report(self, domain: DomainName) -> AnalysisReport:
        features = extract_features(domain)
        content, source = await self._narrative(
            ReportKind.BASIC,
            domain,
            BASIC_SYSTEM_PROMPT,
            BASIC_USER_PROMPT.format(domain=domain.full),
            max_tokens=1000,
        )

        value_range = self._engine.parse_value_range(content)
        if value_range is not None:
            estimated_value = round(sum(value_range) / 2)
        else:
            estimated_value = self._engine.estimate_price(features).amount

        metrics = {
            "Estimated Value": f"${estimated_value:,}",
            "Brandability": f"{self._engine.brandability(features)}/100",
            "Memorability": f"{self._engine.memorability(features)}/100",
            "Marketing Potential": f"{self._engine.digital_marketing_value(features)}/100",
            "SEO Friendliness": f"{self._engine.marketability(features)}/100",
        }

        return AnalysisReport(
            kind=ReportKind.BASIC,
            title=f"Basic Analysis: {domain.full}",
            content=content,
            metrics=metrics,
            source=source,
        )

    async def detailed_report(self, domain: DomainName) -> AnalysisReport:
        features = extract_features(domain)
        content, source = await self._narrative(
            ReportKind.DETAILED,
            domain,
            DETAILED_SYSTEM_PROMPT,
            DETAILED_USER_PROMPT.format(domain=domain.full),
        )

        engine = self._engine
        monthly_traffic = engine.estimate_monthly_traffic(features)
        annual_revenue = engine.estimate_annual_revenue(monthly_traffic)

        metrics = {
            "Domain Age Potential": f"{engine.five_point_rating(features)}/5",
            "Development ROI": f"{engine.five_point_rating(features)}/5",
            "Investment Grade": engine.investment_grade(features),
            "Market Demand": f"{engine.five_point_rating(features)}/5",
            "Keyword Value": f"{engine.five_point_rating(features)}/5",
            "TLD Strength": engine.tld_strength(features.tld),
            "Character Count": (
                f"{features.length} ({engine.character_count_rating(features.length)})"
            ),
            "Pronounceability": engine.pronounceability(features).value,
            "Estimated Monthly Traffic": f"{monthly_traffic:,}",
            "Estimated Annual Revenue": f"${annual_revenue:,}",
        }

        competing = [
            candidate.full
            for candidate in self._fallback.similar_candidates(domain)[:COMPETING_DOMAIN_LIMIT]
        ]
        market_analysis = MarketAnalysis(
            industries=engine.classify_industries(features),
            competing_domains=competing,
            growth_trend=engine.growth_trend(features),
            global_appeal=engine.global_appeal(features),
            digital_marketing_value=f"{engine.digital_marketing_value(features)}/100",
        )

        return AnalysisReport(
            kind=ReportKind.DETAILED,
            title=f"Detailed Analysis: {domain.full}",
            content=content,
            metrics=metrics,
            market_analysis=market_analysis,
            source=source,
        )

    async def sales_history_report(self, domain: DomainName) -> SalesHistoryReport:
        try:
            raw = await self._client.complete(
                SALES_SYSTEM_PROMPT,
                SALES_USER_PROMPT.format(domain=domain.full),
                json_mode=True,
            )
            return self._response_validator.validate_sales_history(raw)
        except MalformedResponseError as e:
            self._log_fallback(ReportKind.SALES_HISTORY, domain, e)
            return SalesHistoryReport(
                sales=self._fallback.generate_fallback_sales(domain),
                source=ResultSource.FALLBACK,
            )

    async def similar_domains_report(self, domain: DomainName) -> SimilarDomainsReport:
        try:
            raw = await self._client.complete(
                SIMILAR_SYSTEM_PROMPT,
                SIMILAR_USER_PROMPT.format(domain=domain.full),
                json_mode=True,
            )
            return self._response_validator.validate_similar_domains(raw)
        except MalformedResponseError as e:
            self._log_fallback(ReportKind.SIMILAR_DOMAINS, domain, e)
            return SimilarDomainsReport(
                domains=self._fallback.generate_fallback_similar(domain),
                source=ResultSource.FALLBACK,
            )

    async def branding_report(self, domain: DomainName) -> BrandingReport:
        raw_url = await self._client.generate_image(
            BRANDING_PROMPT.format(name=domain.name_only)
        )
        try:
            image_url = self._response_validator.validate_image_url(raw_url)
        except MalformedResponseError as e:
            # No local substitute exists for a generated image
            raise UpstreamServiceError(
                code=UpstreamErrorCode.EMPTY_RESULT.value,
                message=e.message,
                details={"domain": domain.full},
            )

        source = ResultSource.SIMULATED if self._client.simulation_mode else ResultSource.GENERATIVE
        return BrandingReport(domain=domain.full, image_url=image_url, source=source)

    async def _narrative(
        self,
        kind: ReportKind,
        domain: DomainName,
        system_prompt: str,
        user_prompt: str,
        max_tokens: Optional[int] = None,
    ) -> tuple[str, ResultSource]:
        """Fetch narrative text, substituting a local summary when unusable."""
        try:
            raw = await self._client.complete(system_prompt, user_prompt, max_tokens=max_tokens)
            content = self._response_validator.validate_text(raw)
        except MalformedResponseError as e:
            self._log_fallback(kind, domain, e)
            return self._fallback.generate_fallback_summary(domain, kind), ResultSource.FALLBACK

        if self._client.simulation_mode:
            return content, ResultSource.SIMULATED
        return content, ResultSource.GENERATIVE

    def _log_fallback(
        self,
        kind: ReportKind,
        domain: DomainName,
        error: MalformedResponseError,
    ) -> None:
        self._log(LogLevel.WARN, "Unusable generative output, using fallback data", {
            "kind": kind.value,
            "domain": domain.full,
            "code": error.code,
            "reason": error.message,
        })

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "report_service", message, data)
