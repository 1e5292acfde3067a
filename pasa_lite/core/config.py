#!/usr/bin/env python3

"""
Configuration management for the alignment validation pipeline.

Centralized configuration with support for file-based configuration
and environment variable overrides.
"""

import os
import json
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any

import yaml

from .exceptions import ConfigurationError


def _as_bool(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes')


@dataclass
class ValidatorConfig:
    """Centralized configuration for alignment validation."""

    # Concurrency
    cpu: int = 2

    # Validation rules
    min_per_id: float = 95.0
    transcribed_is_aligned_orient: bool = False
    discard_unspliced_transcripts: bool = False
    require_consensus_splicesites: bool = False

    # Output settings
    out_prefix: str = "pasa_lite"

    # Index storage (None = system temporary directory)
    index_dir: Optional[str] = None

    # Monitoring
    memory_limit_mb: int = 4096
    enable_memory_monitoring: bool = True
    debug_mode: bool = False

    @classmethod
    def from_file(cls, config_path: str) -> 'ValidatorConfig':
        """Load configuration from file (JSON or YAML)."""
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r') as f:
                if config_path.lower().endswith(('.yaml', '.yml')):
                    config_data = yaml.safe_load(f)
                else:
                    config_data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Invalid configuration file format: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error loading configuration: {e}")

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'ValidatorConfig':
        """Create configuration from dictionary."""
        # Filter out unknown keys
        known_keys = set(cls.__dataclass_fields__.keys())
        filtered_dict = {k: v for k, v in config_dict.items() if k in known_keys}

        try:
            return cls(**filtered_dict)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration parameters: {e}")

    @classmethod
    def from_env(cls) -> 'ValidatorConfig':
        """Load configuration from environment variables."""
        config = cls()

        env_mappings = {
            'PASA_LITE_CPU': ('cpu', int),
            'PASA_LITE_MIN_PER_ID': ('min_per_id', float),
            'PASA_LITE_OUT_PREFIX': ('out_prefix', str),
            'PASA_LITE_INDEX_DIR': ('index_dir', str),
            'PASA_LITE_MEMORY_LIMIT_MB': ('memory_limit_mb', int),
            'PASA_LITE_TRANSCRIBED_IS_ALIGNED_ORIENT': ('transcribed_is_aligned_orient', _as_bool),
            'PASA_LITE_DISCARD_UNSPLICED': ('discard_unspliced_transcripts', _as_bool),
            'PASA_LITE_REQUIRE_CONSENSUS': ('require_consensus_splicesites', _as_bool),
            'PASA_LITE_DEBUG_MODE': ('debug_mode', _as_bool),
        }

        for env_var, (field_name, converter) in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value:
                try:
                    setattr(config, field_name, converter(env_value))
                except (ValueError, TypeError) as e:
                    raise ConfigurationError(f"Invalid environment variable {env_var}: {e}")

        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def save_to_file(self, config_path: str) -> None:
        """Save configuration to file."""
        config_dict = self.to_dict()

        try:
            with open(config_path, 'w') as f:
                if config_path.lower().endswith(('.yaml', '.yml')):
                    yaml.safe_dump(config_dict, f, default_flow_style=False)
                else:
                    json.dump(config_dict, f, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Error saving configuration: {e}")

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.cpu < 1:
            raise ConfigurationError("cpu must be >= 1")

        if not 0 <= self.min_per_id <= 100:
            raise ConfigurationError("min_per_id must be between 0 and 100 (inclusive)")

        if not self.out_prefix:
            raise ConfigurationError("out_prefix cannot be empty")

        if self.memory_limit_mb < 100:
            raise ConfigurationError("memory_limit_mb must be >= 100")

        if self.index_dir is not None and not os.path.isdir(self.index_dir):
            raise ConfigurationError(f"index_dir is not a directory: {self.index_dir}")

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.validate()


def load_config(config_path: Optional[str] = None,
                use_env: bool = True) -> ValidatorConfig:
    """
    Load configuration with priority: file > environment > defaults.

    Args:
        config_path: Path to configuration file (optional)
        use_env: Whether to load environment variables

    Returns:
        ValidatorConfig: Loaded configuration
    """
    config = ValidatorConfig()

    if use_env:
        env_config = ValidatorConfig.from_env()
        # Merge non-default values from environment
        for field_name in ValidatorConfig.__dataclass_fields__:
            env_value = getattr(env_config, field_name)
            if env_value != getattr(config, field_name):
                setattr(config, field_name, env_value)

    if config_path:
        file_config = ValidatorConfig.from_file(config_path)
        for field_name in ValidatorConfig.__dataclass_fields__:
            setattr(config, field_name, getattr(file_config, field_name))

    config.validate()
    return config
