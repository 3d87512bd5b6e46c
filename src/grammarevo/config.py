"""
Configuration management for grammarevo.

This module defines the evolution parameters and handles loading them from
defaults, configuration files and environment variables.
"""
import os
import json
from enum import Enum
from typing import Dict, Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from grammarevo.constants import CONFIG_ENV_PREFIX
from grammarevo.utils.errors import ConfigurationError
from grammarevo.utils.logging import logger

# Default configuration file paths
DEFAULT_CONFIG_PATHS = [
    "./grammarevo.yaml",
    "./grammarevo.yml",
    "./grammarevo.json",
    "~/.config/grammarevo/config.yaml",
]

# Global configuration instance
_config = None


class SelectionMethod(str, Enum):
    """Parent selection strategies."""
    TOURNAMENT = "tournament"
    ROULETTE = "roulette"
    RANK = "rank"
    PARETO = "pareto"


class PopulationParams(BaseModel):
    """Population sizing and diversity settings."""

    size: int = Field(50, description="Number of genomes per generation")
    elite_ratio: float = Field(0.1, description="Fraction of parents carried over unconditionally")
    diversity_threshold: float = Field(
        0.8, description="Maximum similarity tolerated between retained genomes"
    )

    @field_validator('size')
    @classmethod
    def validate_size(cls, v):
        """Validate population size."""
        if v <= 0:
            raise ValueError("Population size must be positive")
        return v

    @field_validator('elite_ratio', 'diversity_threshold')
    @classmethod
    def validate_unit_interval(cls, v):
        """Validate ratios that live in [0, 1]."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("Value must be between 0 and 1")
        return v


class SelectionParams(BaseModel):
    """Parent selection settings."""

    method: SelectionMethod = Field(SelectionMethod.TOURNAMENT, description="Selection strategy")


class CrossoverParams(BaseModel):
    """Crossover settings."""

    rate: float = Field(0.7, description="Probability of producing offspring by crossover")
    blend_alpha: float = Field(0.5, description="Weight of the first parent when blending parameters")

    @field_validator('rate', 'blend_alpha')
    @classmethod
    def validate_unit_interval(cls, v):
        """Validate probabilities."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("Value must be between 0 and 1")
        return v


class MutationParams(BaseModel):
    """Mutation settings."""

    structural_rate: float = Field(0.3, description="Probability of one structural edit")
    parametric_rate: float = Field(0.2, description="Probability and base strength of parameter noise")

    @field_validator('structural_rate', 'parametric_rate')
    @classmethod
    def validate_unit_interval(cls, v):
        """Validate probabilities."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("Mutation rate must be between 0 and 1")
        return v


class ConstraintParams(BaseModel):
    """Structural constraints on genomes."""

    max_nodes: int = Field(20, description="Maximum number of nodes a mutation may grow to")

    @field_validator('max_nodes')
    @classmethod
    def validate_max_nodes(cls, v):
        """Validate node limit."""
        if v < 1:
            raise ValueError("max_nodes must be at least 1")
        return v


class TerminationParams(BaseModel):
    """Termination thresholds."""

    max_generations: int = Field(100, description="Hard generation limit")
    fitness_threshold: float = Field(0.95, description="Stop once the best fitness reaches this")
    stagnation_limit: int = Field(20, description="Window of generations checked for a flat best fitness")

    @field_validator('max_generations', 'stagnation_limit')
    @classmethod
    def validate_positive(cls, v):
        """Validate counts."""
        if v < 1:
            raise ValueError("Value must be at least 1")
        return v


class EvaluationParams(BaseModel):
    """Fitness evaluation settings."""

    parallelism: int = Field(4, description="Maximum concurrent evaluator calls")

    @field_validator('parallelism')
    @classmethod
    def validate_parallelism(cls, v):
        """Validate parallelism."""
        if v < 1:
            raise ValueError("Parallelism must be at least 1")
        return v


class TransparencyParams(BaseModel):
    """Progress reporting settings."""

    report_interval: int = Field(25, description="Generations between progress reports")
    log_level: str = Field("info", description="Logging level")

    @field_validator('report_interval')
    @classmethod
    def validate_interval(cls, v):
        """Validate report interval."""
        if v < 1:
            raise ValueError("Report interval must be at least 1")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed = ['debug', 'info', 'warning', 'error', 'critical']
        if v.lower() not in allowed:
            raise ValueError(f"Log level must be one of {allowed}")
        return v.lower()


class EvolutionParams(BaseModel):
    """Process-wide evolution parameters.

    Fixed for a run except for the rates the meta-optimizer adjusts.
    """

    population: PopulationParams = Field(default_factory=PopulationParams)
    selection: SelectionParams = Field(default_factory=SelectionParams)
    crossover: CrossoverParams = Field(default_factory=CrossoverParams)
    mutation: MutationParams = Field(default_factory=MutationParams)
    constraints: ConstraintParams = Field(default_factory=ConstraintParams)
    termination: TerminationParams = Field(default_factory=TerminationParams)
    evaluation: EvaluationParams = Field(default_factory=EvaluationParams)
    transparency: TransparencyParams = Field(default_factory=TransparencyParams)
    seed: Optional[int] = Field(None, description="Seed for the engine's random source")


def expand_path(path: str) -> str:
    """Expand user and variables in path.

    Args:
        path: Path to expand

    Returns:
        Expanded path
    """
    expanded = os.path.expanduser(path)
    expanded = os.path.expandvars(expanded)
    return expanded


def find_config_file() -> Optional[str]:
    """Find the first available configuration file from default paths.

    Returns:
        Path to config file or None if not found
    """
    for path in DEFAULT_CONFIG_PATHS:
        expanded_path = expand_path(path)
        if os.path.isfile(expanded_path):
            return expanded_path
    return None


def load_config_from_file(path: str) -> Dict[str, Any]:
    """Load configuration from a file.

    Args:
        path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If file does not exist
        ValueError: If file format is invalid
    """
    path = expand_path(path)

    if not os.path.isfile(path):
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.debug(f"Loading configuration from {path}", component="config", operation="load_config")

    with open(path, 'r') as f:
        if path.endswith(('.yaml', '.yml')):
            try:
                return yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in configuration file: {e}")
        elif path.endswith('.json'):
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in configuration file: {e}")
        else:
            raise ValueError(f"Unsupported configuration file format: {path}")


def _coerce_env_value(value: str) -> Any:
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    if value.lstrip('-').isdigit():
        return int(value)
    stripped = value.lstrip('-')
    if stripped.replace('.', '', 1).isdigit() and stripped.count('.') == 1:
        return float(value)
    return value


def load_config_from_env(prefix: str = CONFIG_ENV_PREFIX) -> Dict[str, Any]:
    """Load configuration from environment variables.

    Nested keys are separated by double underscore.
    Example: GRAMMAREVO_POPULATION__SIZE=40

    Args:
        prefix: Environment variable prefix

    Returns:
        Configuration dictionary
    """
    config: Dict[str, Any] = {}

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        key_parts = key[len(prefix):].lower().split('__')
        current = config
        for part in key_parts[:-1]:
            current = current.setdefault(part, {})
        current[key_parts[-1]] = _coerce_env_value(value)

    return config


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge configuration dictionaries.

    Args:
        base: Base configuration dictionary
        override: Override configuration dictionary

    Returns:
        Merged configuration dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def load_config(
    config_file: Optional[str] = None,
    env_override: bool = True,
    defaults: Optional[Dict[str, Any]] = None,
) -> EvolutionParams:
    """Load and validate evolution parameters.

    Sources are merged in order: defaults, configuration file (explicit or
    discovered), environment variables.

    Args:
        config_file: Optional path to configuration file
        env_override: Whether to allow environment variables to override file config
        defaults: Optional default values

    Returns:
        Validated EvolutionParams instance

    Raises:
        FileNotFoundError: If specified config file is not found
        ConfigurationError: If configuration validation fails
    """
    global _config

    config_data = defaults or {}

    if config_file:
        config_data = merge_configs(config_data, load_config_from_file(config_file))
    else:
        default_file = find_config_file()
        if default_file:
            try:
                config_data = merge_configs(config_data, load_config_from_file(default_file))
                logger.debug(
                    f"Loaded configuration from {default_file}",
                    component="config",
                    operation="load_config",
                )
            except (ValueError, FileNotFoundError) as e:
                logger.warning(
                    f"Error loading default config file: {e}",
                    component="config",
                    operation="load_config",
                )

    if env_override:
        env_config = load_config_from_env()
        if env_config:
            config_data = merge_configs(config_data, env_config)
            logger.debug(
                "Applied environment variable configuration overrides",
                component="config",
                operation="load_config",
            )

    try:
        _config = EvolutionParams(**config_data)
    except ValueError as e:
        logger.error(
            "Failed to load configuration",
            component="config",
            operation="load_config",
            exception=e,
        )
        raise ConfigurationError(f"Configuration validation failed: {e}") from e

    logger.set_level(_config.transparency.log_level)
    logger.success(
        "Configuration loaded successfully",
        component="config",
        operation="load_config",
        context={
            "population_size": _config.population.size,
            "selection": _config.selection.method.value,
        },
    )
    return _config


def get_config() -> EvolutionParams:
    """Get the current configuration, loading defaults on first use.

    Returns:
        Current configuration instance
    """
    if _config is None:
        return load_config()
    return _config


def save_config(params: EvolutionParams, path: str) -> None:
    """Save evolution parameters to a YAML or JSON file.

    Args:
        params: Parameters to save
        path: Path to save configuration to

    Raises:
        ValueError: If the file extension is not supported
    """
    data = params.model_dump(mode="json")
    path = expand_path(path)

    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)

    if path.endswith(('.yaml', '.yml')):
        with open(path, 'w') as f:
            yaml.safe_dump(data, f, default_flow_style=False)
    elif path.endswith('.json'):
        with open(path, 'w') as f:
            json.dump(data, f, indent=2)
    else:
        raise ValueError(f"Unsupported file format for saving configuration: {path}")
