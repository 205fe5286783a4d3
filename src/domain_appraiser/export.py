"""
Export Synthesizer - merges the loaded reports of a session into one HTML
document.

Sections appear in a fixed order (Basic, Detailed, Sales History, Similar
Domains); kinds that are not LOADED are left out without a placeholder.
Branding is not part of the document. Every interpolated value is
HTML-escaped because report text comes from an untrusted generative service.
"""

from datetime import date
from html import escape
from typing import Callable, Optional

from .audit_logger import AuditLogger
from .config import ExportConfig
from .enums import ExportErrorCode, LogLevel, ReportKind, ReportState
from .exceptions import RenderError
from .models import (
    AnalysisReport,
    ExportDocument,
    ReportSession,
    SalesHistoryReport,
    SimilarDomainsReport,
)


SECTION_ORDER = (
    ReportKind.BASIC,
    ReportKind.DETAILED,
    ReportKind.SALES_HISTORY,
    ReportKind.SIMILAR_DOMAINS,
)

NO_SALES_NOTICE = "No sales history found for this domain."
NO_SIMILAR_NOTICE = "No similar domains found."

REPORT_STYLE = """
    body { font-family: Arial, sans-serif; max-width: 1200px; margin: 0 auto; padding: 20px; color: #333; }
    h1, h2, h3, h4 { color: #4F46E5; }
    h1 { text-align: center; margin-bottom: 30px; }
    .section { margin-bottom: 30px; border-bottom: 1px solid #e5e7eb; padding-bottom: 20px; }
    .metrics-grid { display: grid; grid-template-columns: repeat(3, 1fr); gap: 15px; margin: 20px 0; }
    .metric-item, .market-metric { background-color: #f9fafb; padding: 15px; border-radius: 8px; }
    .metric-label { font-weight: 600; margin-bottom: 5px; }
    .metric-value { font-size: 1.2em; color: #10B981; }
    .report-content { line-height: 1.6; white-space: pre-line; }
    .notice { color: #6B7280; font-style: italic; }
    table { width: 100%; border-collapse: collapse; }
    th { background-color: #f3f4f6; padding: 10px; border-bottom: 2px solid #e5e7eb; text-align: left; }
    td { padding: 10px; border-bottom: 1px solid #e5e7eb; }
    .price { text-align: right; }
    footer { text-align: center; margin-top: 50px; color: #6B7280; font-size: 0.9em; }
"""


def _metrics_grid(metrics: dict[str, str]) -> str:
    items = "".join(
        f"<div class='metric-item'><div class='metric-label'>{escape(label)}</div>"
        f"<div class='metric-value'>{escape(value)}</div></div>"
        for label, value in metrics.items()
    )
    return f"<div class='metrics-grid'>{items}</div>"


def _bullet_list(items: list[str]) -> str:
    return "<ul>" + "".join(f"<li>{escape(item)}</li>" for item in items) + "</ul>"


def _format_price(price: float) -> str:
    if isinstance(price, float) and not price.is_integer():
        return f"${price:,.2f}"
    return f"${int(price):,}"


def _price_table(header: str, rows: list[tuple[str, float]]) -> str:
    body = "".join(
        f"<tr><td>{escape(label)}</td><td class='price'>{_format_price(price)}</td></tr>"
        for label, price in rows
    )
    return (
        "<table><thead><tr>"
        f"<th>{escape(header)}</th><th class='price'>Price</th>"
        f"</tr></thead><tbody>{body}</tbody></table>"
    )


class ExportSynthesizer:
    """Renders a ReportSession into downloadable HTML documents."""

    def __init__(
        self,
        config: Optional[ExportConfig] = None,
        clock: Callable[[], date] = date.today,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._config = config or ExportConfig()
        self._clock = clock
        self._logger = logger

    def synthesize(self, session: ReportSession) -> ExportDocument:
        """
        Render the full analysis report.

        Args:
            session: Session whose LOADED cells are exported

        Returns:
            ExportDocument listing the sections it contains

        Raises:
            RenderError: If no domain is set or the Basic report is not loaded
        """
        domain = self._require_exportable(session)

        sections: list[ReportKind] = []
        parts: list[str] = []
        for kind in SECTION_ORDER:
            cell = session.cell(kind)
            if cell.state != ReportState.LOADED or cell.result is None:
                continue
            parts.append(self._render_section(kind, cell.result))
            sections.append(kind)

        title = escape(domain)
        generated_on = self._clock().isoformat()
        content = (
            "<!DOCTYPE html>\n<html>\n<head>\n<meta charset='utf-8'>\n"
            f"<title>Domain Analysis Report - {title}</title>\n"
            f"<style>{REPORT_STYLE}</style>\n</head>\n<body>\n"
            f"<h1>Domain Analysis Report: {title}</h1>\n"
            + "\n".join(parts)
            + "\n<footer><p>Report generated by "
            f"{escape(self._config.generator_name)} on {generated_on}</p></footer>\n"
            "</body>\n</html>\n"
        )

        if self._logger:
            self._logger.log(LogLevel.INFO, "export", "Report exported", {
                "domain": domain,
                "sections": [kind.value for kind in sections],
            })

        return ExportDocument(
            filename=self._config.report_filename,
            content=content,
            sections=sections,
        )

    def render_landing_template(self, session: ReportSession) -> ExportDocument:
        """Render the landing-page starter; it carries only the domain name."""
        domain = escape(self._require_exportable(session))
        content = (
            "<!DOCTYPE html>\n<html>\n<head>\n<meta charset='utf-8'>\n"
            f"<title>{domain}</title>\n"
            "<style>\n    /* Add landing page styling here */\n</style>\n"
            "</head>\n<body>\n"
            f"<header>\n    <h1>{domain}</h1>\n</header>\n"
            "<main>\n    <!-- Add landing page content here -->\n</main>\n"
            "</body>\n</html>\n"
        )
        return ExportDocument(
            filename=self._config.template_filename,
            content=content,
        )

    def _require_exportable(self, session: ReportSession) -> str:
        if session.domain is None:
            raise RenderError(
                code=ExportErrorCode.NO_DOMAIN.value,
                message="Cannot export: no domain has been analyzed",
            )
        if not session.is_loaded(ReportKind.BASIC):
            raise RenderError(
                code=ExportErrorCode.BASIC_NOT_LOADED.value,
                message="Cannot export: the basic report is not loaded",
                details={
                    "domain": session.domain.full,
                    "basic_state": session.cell(ReportKind.BASIC).state.value,
                },
            )
        return session.domain.full

    def _render_section(self, kind, result) -> str:
        if kind == ReportKind.BASIC:
            return self._render_analysis("Overview", "Key Metrics", result)
        if kind == ReportKind.DETAILED:
            return self._render_analysis("Detailed Analysis", "Performance Metrics", result)
        if kind == ReportKind.SALES_HISTORY:
            return self._render_sales(result)
        return self._render_similar(result)

    def _render_analysis(self, heading: str, metrics_heading: str, report: AnalysisReport) -> str:
        html = [
            f"<div class='section'><h2>{escape(heading)}</h2>",
            f"<div class='report-content'>{escape(report.content)}</div>",
        ]
        if report.metrics:
            html.append(f"<h3>{escape(metrics_heading)}</h3>")
            html.append(_metrics_grid(report.metrics))

        market = report.market_analysis
        if market is not None:
            html.append("<h3>Market Analysis</h3>")
            if market.industries:
                html.append("<h4>Relevant Industries</h4>")
                html.append(_bullet_list([match.label() for match in market.industries]))
            if market.competing_domains:
                html.append("<h4>Competing Domains</h4>")
                html.append(_bullet_list(market.competing_domains))
            html.append(_metrics_grid({
                "Growth Trend": market.growth_trend or "N/A",
                "Global Appeal": market.global_appeal or "N/A",
                "Digital Marketing Value": market.digital_marketing_value or "N/A",
            }))

        html.append("</div>")
        return "".join(html)

    def _render_sales(self, report: SalesHistoryReport) -> str:
        if report.sales:
            body = _price_table(
                "Date",
                [(sale.date.isoformat(), sale.price) for sale in report.sales],
            )
        else:
            body = f"<p class='notice'>{escape(NO_SALES_NOTICE)}</p>"
        return f"<div class='section'><h2>Sales History</h2>{body}</div>"

    def _render_similar(self, report: SimilarDomainsReport) -> str:
        if report.domains:
            body = _price_table(
                "Domain",
                [(record.name, record.price) for record in report.domains],
            )
        else:
            body = f"<p class='notice'>{escape(NO_SIMILAR_NOTICE)}</p>"
        return f"<div class='section'><h2>Similar Domains</h2>{body}</div>"
