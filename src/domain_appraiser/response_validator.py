"""
Structured-response validation for generative service output.

The generative service is an untrusted data source. This module checks that
its output matches the schema expected for a report kind and coerces it into
the report models. Whole-response defects raise MalformedResponseError;
defects in a single list element only drop that element.
"""

import json
import math
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Callable, Optional, Union

from .enums import MalformedResponseCode, ReportKind, ResultSource
from .exceptions import MalformedResponseError
from .models import (
    SalesHistoryReport,
    SalesRecord,
    SimilarDomainRecord,
    SimilarDomainsReport,
)

ParsedResponse = Union[str, SalesHistoryReport, SimilarDomainsReport]


class ResponseValidator:
    """
    Validates generative service responses per report kind.

    - SALES_HISTORY: object with a 'sales' array of {date, price}
    - SIMILAR_DOMAINS: object with a 'domains' array of {name, price}
    - BASIC / DETAILED: non-empty analysis text
    - BRANDING: non-empty image URL
    """

    DATE_FORMATS = ("%Y-%m-%d", "%B %d, %Y", "%b %d, %Y", "%m/%d/%Y")

    def __init__(self, clock: Callable[[], date] = date.today) -> None:
        """
        Initialize the validator.

        Args:
            clock: Returns today's date; sale dates after it are rejected
        """
        self._clock = clock

    def validate(self, kind: ReportKind, raw: Any) -> ParsedResponse:
        """
        Validate a raw response for a report kind.

        Args:
            kind: The report kind the response was requested for
            raw: JSON text or an already decoded object

        Returns:
            The parsed response (text, URL or report model)

        Raises:
            MalformedResponseError: If the response cannot be used at all
        """
        if kind == ReportKind.SALES_HISTORY:
            return self.validate_sales_history(raw)
        if kind == ReportKind.SIMILAR_DOMAINS:
            return self.validate_similar_domains(raw)
        if kind == ReportKind.BRANDING:
            return self.validate_image_url(raw)
        return self.validate_text(raw)

    def validate_sales_history(self, raw: Any) -> SalesHistoryReport:
        """Validate a {"sales": [...]} payload, sorted by date descending."""
        items = self._require_array(self._decode(raw), "sales")

        today = self._clock()
        sales: list[SalesRecord] = []
        dropped = 0
        for item in items:
            if not isinstance(item, Mapping):
                dropped += 1
                continue
            sale_date = self._parse_date(item.get("date"))
            price = self._parse_price(item.get("price"))
            if sale_date is None or sale_date > today or price is None:
                dropped += 1
                continue
            sales.append(SalesRecord(date=sale_date, price=price))

        sales.sort(key=lambda sale: sale.date, reverse=True)
        return SalesHistoryReport(
            sales=sales,
            source=ResultSource.GENERATIVE,
            dropped_records=dropped,
        )

    def validate_similar_domains(self, raw: Any) -> SimilarDomainsReport:
        """Validate a {"domains": [...]} payload, sorted by price descending."""
        items = self._require_array(self._decode(raw), "domains")

        domains: list[SimilarDomainRecord] = []
        dropped = 0
        for item in items:
            if not isinstance(item, Mapping):
                dropped += 1
                continue
            name = item.get("name")
            price = self._parse_price(item.get("price"))
            if not isinstance(name, str) or not name.strip() or price is None:
                dropped += 1
                continue
            domains.append(SimilarDomainRecord(name=name.strip(), price=price))

        domains.sort(key=lambda record: (-record.price, record.name))
        return SimilarDomainsReport(
            domains=domains,
            source=ResultSource.GENERATIVE,
            dropped_records=dropped,
        )

    def validate_text(self, raw: Any) -> str:
        """Validate free-text analysis content."""
        if not isinstance(raw, str) or not raw.strip():
            raise MalformedResponseError(
                code=MalformedResponseCode.EMPTY_CONTENT.value,
                message="Generative service returned no analysis text",
                details={"type": type(raw).__name__},
            )
        return raw.strip()

    def validate_image_url(self, raw: Any) -> str:
        """Only non-empty-string presence is checked for image URLs."""
        if not isinstance(raw, str) or not raw.strip():
            raise MalformedResponseError(
                code=MalformedResponseCode.EMPTY_CONTENT.value,
                message="Image service returned no image URL",
                details={"type": type(raw).__name__},
            )
        return raw.strip()

    def _decode(self, raw: Any) -> Any:
        if isinstance(raw, (str, bytes)):
            try:
                return json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise MalformedResponseError(
                    code=MalformedResponseCode.PARSE_ERROR.value,
                    message=f"Failed to parse JSON response: {e}",
                    details={"raw_preview": str(raw)[:200]},
                )
        return raw

    def _require_array(self, data: Any, key: str) -> list:
        if not isinstance(data, Mapping):
            raise MalformedResponseError(
                code=MalformedResponseCode.SCHEMA_MISMATCH.value,
                message="Response is not a JSON object",
                details={"expected_key": key, "type": type(data).__name__},
            )
        items = data.get(key)
        if not isinstance(items, list):
            raise MalformedResponseError(
                code=MalformedResponseCode.SCHEMA_MISMATCH.value,
                message=f"Response is missing the '{key}' array",
                details={"expected_key": key, "keys": sorted(str(k) for k in data)},
            )
        return items

    def _parse_date(self, value: Any) -> Optional[date]:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if not isinstance(value, str):
            return None

        text = value.strip()
        for date_format in self.DATE_FORMATS:
            try:
                return datetime.strptime(text, date_format).date()
            except ValueError:
                continue
        return None

    @staticmethod
    def _parse_price(value: Any) -> Optional[Union[int, float]]:
        if isinstance(value, bool):
            return None
        if isinstance(value, str):
            value = value.strip().lstrip("$").replace(",", "")
            try:
                value = float(value)
            except ValueError:
                return None
        if not isinstance(value, (int, float)):
            return None
        if isinstance(value, float) and not math.isfinite(value):
            return None
        if value < 0:
            return None
        # Integral amounts stay ints; fractional amounts are kept as given
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value
