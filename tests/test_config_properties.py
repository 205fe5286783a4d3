"""
Property-based tests for configuration loading.

Covers the JSON file round trip, rejection of invalid files and the
environment variable overrides.
"""

import json
import tempfile
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_appraiser.cli import (
    ENV_PREFIX,
    apply_env_overrides,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
    validate_config,
)
from domain_appraiser.config import (
    ExportConfig,
    GenerativeServiceConfig,
    LoggingConfig,
    SystemConfig,
)
from domain_appraiser.enums import ConfigErrorCode, LogLevel
from domain_appraiser.exceptions import ConfigurationError


# Strategies for generating valid configuration objects

def simple_text(min_size: int = 1, max_size: int = 30) -> st.SearchStrategy[str]:
    return st.text(
        alphabet="abcdefghijklmnopqrstuvwxyz0123456789-_.",
        min_size=min_size,
        max_size=max_size,
    )


@st.composite
def generative_config_strategy(draw) -> GenerativeServiceConfig:
    """Generate valid GenerativeServiceConfig objects."""
    return GenerativeServiceConfig(
        base_url=draw(simple_text().map(lambda s: f"https://{s}.example/v1")),
        api_key=draw(st.one_of(st.just(""), simple_text(min_size=8))),
        text_model=draw(simple_text()),
        image_model=draw(simple_text()),
        timeout_seconds=draw(st.floats(min_value=0.5, max_value=600, allow_nan=False)),
        temperature=draw(st.floats(min_value=0, max_value=2, allow_nan=False)),
        max_tokens=draw(st.integers(min_value=1, max_value=32000)),
        image_size=draw(st.sampled_from(["256x256", "512x512", "1024x1024"])),
    )


@st.composite
def system_config_strategy(draw) -> SystemConfig:
    """Generate valid SystemConfig objects."""
    return SystemConfig(
        generative=draw(generative_config_strategy()),
        logging=LoggingConfig(
            level=draw(st.sampled_from([level.value for level in LogLevel])),
            output_format=draw(st.sampled_from(["json", "text", "both"])),
        ),
        export=ExportConfig(
            report_filename=draw(simple_text().map(lambda s: f"{s}.html")),
            template_filename=draw(simple_text().map(lambda s: f"{s}-template.html")),
            generator_name=draw(st.text(min_size=1, max_size=40)),
        ),
        simulation_mode=draw(st.booleans()),
        random_seed=draw(st.one_of(st.none(), st.integers(min_value=0, max_value=2**32))),
    )


class TestConfigurationRoundTripProperty:
    """Property 1: saving then loading a configuration preserves every value."""

    @given(config=system_config_strategy())
    @settings(max_examples=100)
    def test_config_round_trip_preserves_data(self, config: SystemConfig) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "config.json"

            assert save_config_to_file(config, path)
            loaded = load_config_from_file(path)

        assert loaded == config

    @given(config=system_config_strategy())
    @settings(max_examples=50)
    def test_saved_file_is_plain_json(self, config: SystemConfig) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            save_config_to_file(config, path)
            data = json.loads(path.read_text(encoding="utf-8"))

        assert set(data) == {"generative", "logging", "export", "simulation_mode", "random_seed"}
        assert data["generative"]["api_key"] == config.generative.api_key

    def test_missing_keys_take_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text('{"generative": {"api_key": "sk-1"}}', encoding="utf-8")

        config = load_config_from_file(path)

        assert config.generative.api_key == "sk-1"
        assert config.generative.text_model == GenerativeServiceConfig().text_model
        assert config.export == ExportConfig()
        assert config.random_seed is None


class TestInvalidConfigurationProperty:
    """Property 2: unusable configuration files raise ConfigurationError."""

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            load_config_from_file(tmp_path / "absent.json")

        assert exc_info.value.code == ConfigErrorCode.FILE_NOT_FOUND.value

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{generative: ", encoding="utf-8")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config_from_file(path)

        assert exc_info.value.code == ConfigErrorCode.INVALID_JSON.value

    @pytest.mark.parametrize("data", [
        {"generative": {"timeout_seconds": "soon"}},
        {"generative": {"timeout_seconds": 0}},
        {"generative": {"max_tokens": -5}},
        {"generative": {"base_url": "ftp://files.example"}},
        {"generative": "not a table"},
        {"logging": {"level": "verbose"}},
        {"logging": {"output_format": "xml"}},
        {"random_seed": "abc"},
    ])
    def test_invalid_values(self, tmp_path: Path, data: dict) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config_from_file(path)

        assert exc_info.value.code == ConfigErrorCode.INVALID_VALUE.value

    def test_default_config_is_valid(self) -> None:
        validate_config(create_default_config())


class TestEnvironmentOverrideProperty:
    """Property 3: DOMAIN_APPRAISER_* variables override file values."""

    @given(
        api_key=simple_text(min_size=8),
        model=simple_text(),
        seed=st.integers(min_value=0, max_value=10**6),
    )
    @settings(max_examples=50)
    def test_overrides_applied(self, api_key: str, model: str, seed: int) -> None:
        environ = {
            f"{ENV_PREFIX}API_KEY": api_key,
            f"{ENV_PREFIX}TEXT_MODEL": model,
            f"{ENV_PREFIX}SEED": str(seed),
            f"{ENV_PREFIX}SIMULATION": "true",
        }

        config = apply_env_overrides(create_default_config(), environ)

        assert config.generative.api_key == api_key
        assert config.generative.text_model == model
        assert config.generative.image_model == GenerativeServiceConfig().image_model
        assert config.random_seed == seed
        assert config.simulation_mode is True

    def test_empty_environment_changes_nothing(self) -> None:
        config = create_default_config(simulation_mode=True, random_seed=4)

        assert apply_env_overrides(config, {}) is config

    @pytest.mark.parametrize("value, expected", [
        ("1", True), ("YES", True), (" on ", True), ("0", False), ("off", False),
    ])
    def test_simulation_flag_values(self, value: str, expected: bool) -> None:
        config = apply_env_overrides(
            create_default_config(),
            {f"{ENV_PREFIX}SIMULATION": value},
        )

        assert config.simulation_mode is expected

    def test_bad_seed_rejected(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            apply_env_overrides(create_default_config(), {f"{ENV_PREFIX}SEED": "lucky"})

        assert exc_info.value.code == ConfigErrorCode.INVALID_VALUE.value
