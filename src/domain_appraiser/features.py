"""Lexical feature extraction for domain names."""

import re
from typing import Union

import idna

from .domain_validator import DomainValidator
from .models import DomainName, Features

VOWELS = frozenset("aeiou")

CONSONANT_CLUSTER_PATTERN = re.compile(r"[bcdfghjklmnpqrstvwxyz]{3,}")


def _unicode_label(label: str) -> str:
    if not label.startswith("xn--"):
        return label
    try:
        return idna.decode(label)
    except UnicodeError:
        # IDNAError included
        return label


def extract_features(domain: Union[DomainName, str]) -> Features:
    """
    Derive normalized lexical features from a domain.

    Never fails: a raw string without a usable TLD is scored as '.com'.
    Punycode labels are scored in their Unicode form.

    Args:
        domain: A parsed DomainName or a raw domain string

    Returns:
        Features of the name label and TLD
    """
    if isinstance(domain, str):
        domain = DomainValidator.split_domain(domain.strip().lower())

    name = ".".join(_unicode_label(label) for label in domain.name_only.lower().split("."))
    length = len(name)

    vowel_count = sum(1 for c in name if c in VOWELS)
    vowel_ratio = vowel_count / length if length else 0.0

    return Features(
        name=name,
        length=length,
        vowel_ratio=vowel_ratio,
        consonant_cluster_count=len(CONSONANT_CLUSTER_PATTERN.findall(name)),
        has_hyphen_or_digit=any(c == "-" or c.isdigit() for c in name),
        tld=domain.tld.lower() or "com",
    )
