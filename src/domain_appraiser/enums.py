"""
Enumeration types for the domain appraiser.

These enums provide type-safe constants for report kinds, cell states,
categorical scores and error codes.
"""

from enum import Enum


class ReportKind(Enum):
    """Kinds of report that can be produced for a domain."""

    BASIC = "basic"
    DETAILED = "detailed"
    SALES_HISTORY = "sales"
    SIMILAR_DOMAINS = "similar"
    BRANDING = "branding"


class ReportState(Enum):
    """Lifecycle state of a single (domain, report kind) cell."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


class ResultSource(Enum):
    """Where the data of a report result came from."""

    GENERATIVE = "generative"
    FALLBACK = "fallback"
    SIMULATED = "simulated"


class Pronounceability(Enum):
    """Categorical pronounceability of a domain name."""

    EASY = "Easy"
    GOOD = "Good"
    MODERATE = "Moderate"
    DIFFICULT = "Difficult"


class TLDTier(Enum):
    """Scoring tier of a top-level domain."""

    BEST = "best"
    MID = "mid"
    BASELINE = "baseline"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    MISSING_DOMAIN = "missing_domain"
    EMPTY_INPUT = "empty_input"
    FORBIDDEN_CHARS = "forbidden_chars"
    EMPTY_LABEL = "empty_label"
    IDNA_ERROR = "idna_error"


class UpstreamErrorCode(Enum):
    """Error codes for generative and image service failures."""

    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    AUTH_ERROR = "auth_error"
    SERVER_ERROR = "server_error"
    EMPTY_RESULT = "empty_result"


class MalformedResponseCode(Enum):
    """Error codes for structured-response validation failures."""

    PARSE_ERROR = "parse_error"
    SCHEMA_MISMATCH = "schema_mismatch"
    EMPTY_CONTENT = "empty_content"


class ExportErrorCode(Enum):
    """Error codes for export rendering failures."""

    NO_DOMAIN = "no_domain"
    BASIC_NOT_LOADED = "basic_not_loaded"


class ConfigErrorCode(Enum):
    """Error codes for configuration loading failures."""

    FILE_NOT_FOUND = "file_not_found"
    INVALID_JSON = "invalid_json"
    INVALID_VALUE = "invalid_value"
