"""
TLD Registry - valuation profiles for top-level domains.

Each profile carries the scoring tier, the human-readable strength rating
and the price multiplier applied to length-based base prices. TLDs not
listed here fall back to DEFAULT_PROFILE.
"""

from dataclasses import dataclass

from .enums import TLDTier


@dataclass(frozen=True)
class TLDProfile:
    """Valuation profile of a single TLD."""

    tld: str
    tier: TLDTier
    strength: str  # 'Excellent', 'Good' or 'Average'
    price_multiplier: float
    generic: bool = False  # Recognised worldwide, not tied to a country or niche


# ============================================================================
# PREMIUM TLDs
# ============================================================================
PREMIUM_TLDS = [
    TLDProfile(tld="com", tier=TLDTier.BEST, strength="Excellent", price_multiplier=1.0, generic=True),
    TLDProfile(tld="ai", tier=TLDTier.BEST, strength="Excellent", price_multiplier=0.7, generic=True),
]


# ============================================================================
# ESTABLISHED GENERIC TLDs
# ============================================================================
GENERIC_TLDS = [
    TLDProfile(tld="net", tier=TLDTier.MID, strength="Good", price_multiplier=0.4, generic=True),
    TLDProfile(tld="org", tier=TLDTier.MID, strength="Good", price_multiplier=0.4, generic=True),
    TLDProfile(tld="io", tier=TLDTier.MID, strength="Good", price_multiplier=0.7, generic=True),
]


# ============================================================================
# NEW gTLDs - Tech & Startup
# ============================================================================
TECH_TLDS = [
    TLDProfile(tld="co", tier=TLDTier.BASELINE, strength="Good", price_multiplier=0.5, generic=True),
    TLDProfile(tld="app", tier=TLDTier.BASELINE, strength="Good", price_multiplier=0.7),
    TLDProfile(tld="dev", tier=TLDTier.BASELINE, strength="Good", price_multiplier=0.5),
    TLDProfile(tld="tech", tier=TLDTier.BASELINE, strength="Good", price_multiplier=0.3),
]


DEFAULT_MULTIPLIER = 0.3
DEFAULT_STRENGTH = "Average"

ALL_PROFILES = PREMIUM_TLDS + GENERIC_TLDS + TECH_TLDS

TLD_PROFILES: dict[str, TLDProfile] = {profile.tld: profile for profile in ALL_PROFILES}

# TLDs whose audience skews towards startups and developer tooling
TECH_FOCUSED_TLDS = frozenset({"io", "ai", "app", "dev", "tech"})

# TLDs offered as alternatives when suggesting similar domains
COMMON_TLDS = ["com", "net", "org", "io", "co", "app", "dev", "ai"]


def get_profile(tld: str) -> TLDProfile:
    """
    Get the valuation profile for a TLD.

    Args:
        tld: Top-level domain without leading dot (case-insensitive)

    Returns:
        The registered profile, or a baseline profile for unknown TLDs
    """
    tld_lower = tld.lower().lstrip(".")
    profile = TLD_PROFILES.get(tld_lower)
    if profile is not None:
        return profile
    return TLDProfile(
        tld=tld_lower,
        tier=TLDTier.BASELINE,
        strength=DEFAULT_STRENGTH,
        price_multiplier=DEFAULT_MULTIPLIER,
    )
