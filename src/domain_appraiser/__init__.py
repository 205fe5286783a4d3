"""
Domain Appraiser - domain name valuation and report synthesis.

This package scores and prices domain names from their lexical features,
combines generated analysis with locally computed metrics, falls back to
synthetic data when the generative service returns unusable output, and
merges whichever reports succeeded into one exportable HTML document.
"""

__version__ = "0.1.0"
__author__ = "Domain Appraiser Team"

from domain_appraiser.exceptions import (
    DomainAppraiserError,
    ValidationError,
    MalformedResponseError,
    UpstreamServiceError,
    RenderError,
    ConfigurationError,
)
from domain_appraiser.enums import (
    ReportKind,
    ReportState,
    ResultSource,
    Pronounceability,
    TLDTier,
    LogLevel,
    DomainValidationErrorCode,
    UpstreamErrorCode,
    MalformedResponseCode,
    ExportErrorCode,
    ConfigErrorCode,
)
from domain_appraiser.config import (
    GenerativeServiceConfig,
    LoggingConfig,
    ExportConfig,
    SystemConfig,
)
from domain_appraiser.models import (
    DomainName,
    Features,
    PriceEstimate,
    IndustryMatch,
    MarketAnalysis,
    SalesRecord,
    SimilarDomainRecord,
    AnalysisReport,
    SalesHistoryReport,
    SimilarDomainsReport,
    BrandingReport,
    ReportCell,
    ReportSession,
    ExportDocument,
)
from domain_appraiser.domain_validator import (
    DomainValidator,
    DomainValidationResult,
)
from domain_appraiser.tld_registry import (
    TLDProfile,
    get_profile,
)
from domain_appraiser.features import extract_features
from domain_appraiser.scoring import (
    ScoringEngine,
    INVESTMENT_GRADES,
)
from domain_appraiser.response_validator import ResponseValidator
from domain_appraiser.fallback import FallbackGenerator
from domain_appraiser.audit_logger import (
    AuditLogger,
    LogEntry,
)
from domain_appraiser.generative_client import GenerativeClient
from domain_appraiser.report_service import ReportService
from domain_appraiser.aggregator import (
    ReportAggregator,
    AggregateResult,
)
from domain_appraiser.export import ExportSynthesizer
from domain_appraiser.cli import (
    main as cli_main,
    create_parser,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
    apply_env_overrides,
)

__all__ = [
    # Exceptions
    "DomainAppraiserError",
    "ValidationError",
    "MalformedResponseError",
    "UpstreamServiceError",
    "RenderError",
    "ConfigurationError",
    # Enums
    "ReportKind",
    "ReportState",
    "ResultSource",
    "Pronounceability",
    "TLDTier",
    "LogLevel",
    "DomainValidationErrorCode",
    "UpstreamErrorCode",
    "MalformedResponseCode",
    "ExportErrorCode",
    "ConfigErrorCode",
    # Configuration
    "GenerativeServiceConfig",
    "LoggingConfig",
    "ExportConfig",
    "SystemConfig",
    # Models
    "DomainName",
    "Features",
    "PriceEstimate",
    "IndustryMatch",
    "MarketAnalysis",
    "SalesRecord",
    "SimilarDomainRecord",
    "AnalysisReport",
    "SalesHistoryReport",
    "SimilarDomainsReport",
    "BrandingReport",
    "ReportCell",
    "ReportSession",
    "ExportDocument",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    # TLD Registry
    "TLDProfile",
    "get_profile",
    # Valuation
    "extract_features",
    "ScoringEngine",
    "INVESTMENT_GRADES",
    "ResponseValidator",
    "FallbackGenerator",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Services
    "GenerativeClient",
    "ReportService",
    "ReportAggregator",
    "AggregateResult",
    "ExportSynthesizer",
    # CLI
    "cli_main",
    "create_parser",
    "create_default_config",
    "load_config_from_file",
    "save_config_to_file",
    "apply_env_overrides",
]
