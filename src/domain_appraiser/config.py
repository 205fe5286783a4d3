"""
Configuration dataclasses for the domain appraiser.

This module defines the settings for the generative/image service,
logging, export artifacts and the system as a whole.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class GenerativeServiceConfig:
    """Connection settings for the generative text and image service."""

    base_url: str = "https://api.openai.com/v1"
    api_key: str = ""
    text_model: str = "gpt-4o"
    image_model: str = "dall-e-3"
    timeout_seconds: float = 60.0
    temperature: float = 0.7
    max_tokens: int = 2000
    image_size: str = "1024x1024"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class ExportConfig:
    """Names and labels used for exported artifacts."""

    report_filename: str = "domain-analysis.html"
    template_filename: str = "landing-template.html"
    generator_name: str = "Domain Appraiser"


@dataclass
class SystemConfig:
    """Main system configuration combining all sub-configurations."""

    generative: GenerativeServiceConfig = field(default_factory=GenerativeServiceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    simulation_mode: bool = False
    random_seed: Optional[int] = None
