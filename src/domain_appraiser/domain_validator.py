"""
Domain validation and parsing module.

Validates the domain carried by a report request and parses it into a
DomainName (name label plus lower-cased TLD). A request whose domain fails
here is rejected before any scoring or service call happens.
"""

import re
from dataclasses import dataclass
from typing import Any, Optional

import idna

from .enums import DomainValidationErrorCode
from .exceptions import ValidationError
from .models import DomainName


# Forbidden characters in domain names (control chars, spaces, special symbols)
# Valid domain characters: a-z, 0-9, hyphen (-), dot (.), and non-ASCII for IDN
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'           # Control characters
    r'\s'                        # Whitespace
    r'!@#$%^&*()+=\[\]{}|\\:;"\'<>,?/`~_]'
)

DEFAULT_TLD = "com"


@dataclass
class DomainValidationResult:
    """Result of a non-raising validation."""

    valid: bool
    domain: Optional[DomainName]
    error: Optional[ValidationError]


class DomainValidator:
    """
    Validates and parses raw domain input.

    Handles:
    - Missing, non-string and blank input
    - Forbidden characters
    - Empty labels ('.com', 'a..com')
    - IDNA encoding of international names
    - Splitting on the last dot, defaulting the TLD to 'com'
    """

    def parse(self, raw_domain: Any) -> DomainName:
        """
        Parse a raw domain into a DomainName.

        Args:
            raw_domain: The value received in the request's 'domain' field

        Returns:
            DomainName with a non-empty name and lower-cased TLD

        Raises:
            ValidationError: If the input is missing or malformed
        """
        if raw_domain is None or not isinstance(raw_domain, str):
            raise ValidationError(
                code=DomainValidationErrorCode.MISSING_DOMAIN.value,
                message="Domain name is required",
                details={"raw_input": repr(raw_domain)},
            )

        domain = raw_domain.strip()
        if domain.endswith("."):
            domain = domain[:-1]

        if not domain:
            raise ValidationError(
                code=DomainValidationErrorCode.EMPTY_INPUT.value,
                message="Domain input is empty",
                details={"raw_input": raw_domain},
            )

        forbidden_found = FORBIDDEN_CHARS_PATTERN.findall(domain)
        if forbidden_found:
            raise ValidationError(
                code=DomainValidationErrorCode.FORBIDDEN_CHARS.value,
                message="Domain contains forbidden characters",
                details={"raw_input": raw_domain, "forbidden_chars": forbidden_found},
            )

        if any(not label for label in domain.split(".")):
            raise ValidationError(
                code=DomainValidationErrorCode.EMPTY_LABEL.value,
                message="Domain contains an empty label",
                details={"raw_input": raw_domain},
            )

        canonical = self.normalize_to_canonical(domain)
        return self.split_domain(canonical)

    def validate(self, raw_domain: Any) -> DomainValidationResult:
        """
        Validate a raw domain without raising.

        Args:
            raw_domain: The value received in the request's 'domain' field

        Returns:
            DomainValidationResult with the parsed domain or the error
        """
        try:
            domain = self.parse(raw_domain)
        except ValidationError as e:
            return DomainValidationResult(valid=False, domain=None, error=e)
        return DomainValidationResult(valid=True, domain=domain, error=None)

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Convert domain to canonical form (lowercase, IDNA-encoded).

        Raises:
            ValidationError: If IDNA encoding fails
        """
        domain_lower = domain.lower()

        if any(ord(c) > 127 for c in domain_lower):
            try:
                return idna.encode(domain_lower, uts46=True).decode("ascii")
            except idna.IDNAError as e:
                raise ValidationError(
                    code=DomainValidationErrorCode.IDNA_ERROR.value,
                    message=f"IDNA encoding failed: {e}",
                    details={"domain": domain, "idna_error": str(e)},
                )

        return domain_lower

    @staticmethod
    def split_domain(domain: str) -> DomainName:
        """
        Split a canonical domain on its last dot.

        A domain without a dot is treated as a bare name on the default TLD.
        """
        if "." not in domain:
            return DomainName(name_only=domain, tld=DEFAULT_TLD)

        name_only, tld = domain.rsplit(".", 1)
        return DomainName(name_only=name_only, tld=tld.lower() or DEFAULT_TLD)
