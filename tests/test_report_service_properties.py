"""
Tests for the per-kind report handlers.

The generative client is replaced by a scripted fake so each test controls
exactly what the service answers.
"""

import asyncio
import io
import json
import random
from datetime import date

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_appraiser.audit_logger import AuditLogger
from domain_appraiser.config import GenerativeServiceConfig
from domain_appraiser.enums import (
    DomainValidationErrorCode,
    LogLevel,
    ReportKind,
    ResultSource,
    UpstreamErrorCode,
)
from domain_appraiser.exceptions import (
    MalformedResponseError,
    UpstreamServiceError,
    ValidationError,
)
from domain_appraiser.generative_client import GenerativeClient
from domain_appraiser.models import DomainName
from domain_appraiser.report_service import COMPETING_DOMAIN_LIMIT, ReportService
from domain_appraiser.scoring import ScoringEngine


TODAY = date(2026, 10, 18)


class ScriptedClient:
    """Stands in for GenerativeClient, replaying canned answers."""

    def __init__(self, text="", image_url="https://img.test/logo.png", simulation_mode=False):
        self.text = text
        self.image_url = image_url
        self.simulation_mode = simulation_mode
        self.calls = []

    async def complete(self, system_prompt, user_prompt, json_mode=False, max_tokens=None):
        self.calls.append(("complete", user_prompt, json_mode))
        if isinstance(self.text, Exception):
            raise self.text
        return self.text

    async def generate_image(self, prompt):
        self.calls.append(("image", prompt, False))
        if isinstance(self.image_url, Exception):
            raise self.image_url
        return self.image_url


def make_service(client, logger=None, seed=11) -> ReportService:
    return ReportService(
        client,
        engine=ScoringEngine(random.Random(seed)),
        logger=logger,
        clock=lambda: TODAY,
    )


def run(coro):
    return asyncio.run(coro)


EXAMPLE = DomainName("example", "com")


class TestBasicReport:
    """Basic analysis: generated prose plus locally computed metrics."""

    def test_metrics_present_and_value_from_range(self) -> None:
        client = ScriptedClient(text="Solid name. Estimated value: $10,000 - $20,000.")
        report = run(make_service(client).basic_report(EXAMPLE))

        assert report.title == "Basic Analysis: example.com"
        assert report.source == ResultSource.GENERATIVE
        assert report.metrics["Estimated Value"] == "$15,000"
        for label in ("Brandability", "Memorability", "Marketing Potential", "SEO Friendliness"):
            value = report.metrics[label]
            assert value.endswith("/100")
            assert 0 <= int(value.split("/")[0]) <= 100

    def test_value_falls_back_to_price_estimate(self) -> None:
        client = ScriptedClient(text="A decent name with no numbers in it.")
        report = run(make_service(client).basic_report(EXAMPLE))

        amount = int(report.metrics["Estimated Value"].lstrip("$").replace(",", ""))
        assert amount > 0

    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_text_replaced_by_summary(self, text: str) -> None:
        stream = io.StringIO()
        logger = AuditLogger(output_stream=stream)
        report = run(make_service(ScriptedClient(text=text), logger=logger).basic_report(EXAMPLE))

        assert report.source == ResultSource.FALLBACK
        assert "example.com" in report.content
        assert logger.entries[-1].level == LogLevel.WARN

    def test_upstream_failure_propagates(self) -> None:
        error = UpstreamServiceError(code=UpstreamErrorCode.TIMEOUT.value, message="slow")

        with pytest.raises(UpstreamServiceError):
            run(make_service(ScriptedClient(text=error)).basic_report(EXAMPLE))


class TestDetailedReport:
    """Detailed analysis carries the full metric set and a market analysis."""

    EXPECTED_METRICS = {
        "Domain Age Potential",
        "Development ROI",
        "Investment Grade",
        "Market Demand",
        "Keyword Value",
        "TLD Strength",
        "Character Count",
        "Pronounceability",
        "Estimated Monthly Traffic",
        "Estimated Annual Revenue",
    }

    def test_metrics_and_market_analysis(self) -> None:
        report = run(
            make_service(ScriptedClient(text="Long analysis.")).detailed_report(
                DomainName("techshop", "com")
            )
        )

        assert set(report.metrics) == self.EXPECTED_METRICS
        assert report.metrics["Character Count"].startswith("8 (")
        assert report.metrics["Estimated Annual Revenue"].startswith("$")
        market = report.market_analysis
        assert market is not None
        assert [m.industry for m in market.industries] == ["Technology", "E-commerce"]
        assert 0 < len(market.competing_domains) <= COMPETING_DOMAIN_LIMIT
        assert "techshop.com" not in market.competing_domains
        assert market.digital_marketing_value.endswith("/100")

        data = report.to_dict()
        assert set(data["marketAnalysis"]) == {
            "Industries", "CompetingDomains", "GrowthTrend",
            "GlobalAppeal", "DigitalMarketingValue",
        }

    @given(seed=st.integers(min_value=0, max_value=2**16))
    @settings(max_examples=30)
    def test_five_point_ratings_in_range(self, seed: int) -> None:
        report = run(make_service(ScriptedClient(text="x"), seed=seed).detailed_report(EXAMPLE))

        for label in ("Domain Age Potential", "Development ROI", "Market Demand", "Keyword Value"):
            assert report.metrics[label] in {"1/5", "2/5", "3/5", "4/5", "5/5"}


class TestStructuredReportsProperty:
    """Property 1: unusable structured output degrades to fallback data."""

    def test_sales_history_from_service(self) -> None:
        body = json.dumps({"sales": [
            {"date": "2019-01-01", "price": 500},
            {"date": "2022-06-01", "price": 1500},
        ]})
        client = ScriptedClient(text=body)
        report = run(make_service(client).sales_history_report(EXAMPLE))

        assert report.source == ResultSource.GENERATIVE
        assert [sale.price for sale in report.sales] == [1500, 500]
        assert client.calls[0][2] is True

    @pytest.mark.parametrize("text", ["{}", "not json", '{"suggestions": []}', "[1, 2]"])
    def test_similar_domains_fall_back(self, text: str) -> None:
        report = run(make_service(ScriptedClient(text=text)).similar_domains_report(EXAMPLE))

        assert report.source == ResultSource.FALLBACK
        assert report.domains
        assert "example.com" not in [record.name for record in report.domains]

    @pytest.mark.parametrize("text", ["{}", "garbage", '{"sales": "none"}'])
    def test_sales_history_falls_back(self, text: str) -> None:
        report = run(make_service(ScriptedClient(text=text)).sales_history_report(EXAMPLE))

        assert report.source == ResultSource.FALLBACK
        assert all(sale.date < TODAY for sale in report.sales)

    def test_malformed_envelope_falls_back(self) -> None:
        error = MalformedResponseError(code="schema_mismatch", message="no choices")
        report = run(make_service(ScriptedClient(text=error)).similar_domains_report(EXAMPLE))

        assert report.source == ResultSource.FALLBACK


class TestBrandingReport:
    """Branding returns the generated image URL; there is no local fallback."""

    def test_image_url_returned(self) -> None:
        client = ScriptedClient()
        report = run(make_service(client).branding_report(EXAMPLE))

        assert report.image_url == "https://img.test/logo.png"
        assert report.domain == "example.com"
        assert '"example"' in client.calls[0][1]

    def test_blank_url_is_upstream_error(self) -> None:
        with pytest.raises(UpstreamServiceError) as exc_info:
            run(make_service(ScriptedClient(image_url="  ")).branding_report(EXAMPLE))

        assert exc_info.value.code == UpstreamErrorCode.EMPTY_RESULT.value

    def test_simulation_mode_uses_placeholder(self) -> None:
        client = GenerativeClient(GenerativeServiceConfig(), simulation_mode=True)
        report = run(make_service(client).branding_report(EXAMPLE))

        assert report.source == ResultSource.SIMULATED
        assert report.image_url == GenerativeClient.PLACEHOLDER_IMAGE_URL


class TestRequestHandlingProperty:
    """Property 2: bad request payloads are rejected before any service call."""

    @pytest.mark.parametrize("payload", [None, {}, {"domain": None}, {"domain": 7}, "example.com"])
    def test_missing_domain(self, payload) -> None:
        client = ScriptedClient(text="unused")

        with pytest.raises(ValidationError) as exc_info:
            run(make_service(client).handle_request(ReportKind.BASIC, payload))

        assert exc_info.value.code == DomainValidationErrorCode.MISSING_DOMAIN.value
        assert client.calls == []

    def test_malformed_domain_logged(self) -> None:
        logger = AuditLogger(output_stream=io.StringIO())
        client = ScriptedClient(text="unused")

        with pytest.raises(ValidationError):
            run(make_service(client, logger=logger).handle_request(
                ReportKind.SALES_HISTORY, {"domain": "bad domain!.com"}
            ))

        assert client.calls == []
        assert logger.entries[-1].data["kind"] == "sales"

    @given(kind=st.sampled_from([ReportKind.BASIC, ReportKind.DETAILED]))
    @settings(max_examples=10)
    def test_valid_request_dispatches_by_kind(self, kind: ReportKind) -> None:
        result = run(make_service(ScriptedClient(text="Fine.")).handle_request(
            kind, {"domain": "  Example.COM "}
        ))

        assert result.kind == kind
        assert result.title.endswith("example.com")
