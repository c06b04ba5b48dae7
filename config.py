#!/usr/bin/env python3
"""
Configuration Management for Minimum-Cardinality Threshold Cover

This module provides structured configuration loading, validation,
and management for the subset search. It handles the problem
parameters (threshold, minimum row sum), random matrix generation,
file paths and search options.

Features:
- YAML-based configuration with comprehensive validation
- Optional sections with defaults
- Automatic creation of the results folder
- Clear error messages for configuration issues

"""

import math
import yaml
import os
from typing import Optional
from dataclasses import dataclass, asdict

from search import SEARCH_MODES


@dataclass
class ProblemConfig:
    """Threshold applied to every score dimension and the item filter."""
    threshold: float
    min_row_sum: float = 0.0


@dataclass
class GeneratorConfig:
    """Random score matrix settings (used when no matrix file is given)."""
    n_items: int = 50
    seed: Optional[int] = None
    max_score: float = 0.5
    resolution: float = 0.01


@dataclass
class PathConfig:
    """File paths for input and output."""
    score_matrix: str = ""
    results_folder: str = "output/results"


@dataclass
class SearchConfig:
    """Search options."""
    search_mode: str = "branch-bound"
    use_dominance: bool = True
    show_progress_bar: bool = True
    save_results: bool = True


@dataclass
class VisualizationConfig:
    """Display settings."""
    verbose_output: bool = False


@dataclass
class Config:
    """Complete configuration container."""
    problem: ProblemConfig
    generator: GeneratorConfig
    paths: PathConfig
    search: SearchConfig
    visualization: VisualizationConfig

    # Internal tracking
    _config_path: str = "config.yaml"


def load_config(config_path: str = "config.yaml") -> Config:
    """
    Load and validate configuration from YAML file.

    Args:
        config_path: Path to configuration YAML file

    Returns:
        Validated Config object with all settings

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If configuration is invalid
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML configuration: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration file must contain a mapping of sections")

    # Validate required sections exist
    required_sections = ['problem']
    missing_sections = [section for section in required_sections if section not in raw_config]
    if missing_sections:
        raise ValueError(f"Missing required configuration sections: {missing_sections}")

    # Parse configuration sections
    try:
        problem = ProblemConfig(**raw_config['problem'])
    except TypeError as e:
        raise ValueError(f"Error parsing problem configuration: {e}")

    # Optional sections with defaults
    sections = {}
    for name, cls in [('generator', GeneratorConfig), ('paths', PathConfig),
                      ('search', SearchConfig), ('visualization', VisualizationConfig)]:
        try:
            sections[name] = cls(**(raw_config.get(name) or {}))
        except TypeError as e:
            raise ValueError(f"Error parsing {name} configuration: {e}")

    # Create complete configuration object
    config = Config(problem, sections['generator'], sections['paths'],
                    sections['search'], sections['visualization'], config_path)

    # Validate the complete configuration
    validate_config(config)

    return config


def validate_config(config: Config) -> None:
    """
    Perform comprehensive validation of configuration.

    Args:
        config: Configuration object to validate

    Raises:
        ValueError: If any validation check fails
    """
    problem = config.problem

    def check_number(value, name: str):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{name} must be a number, got {value!r}")
        if not math.isfinite(value):
            raise ValueError(f"{name} must be finite, got {value}")

    check_number(problem.threshold, "threshold")
    check_number(problem.min_row_sum, "min_row_sum")

    # The empty selection is never reported, so it must never be the answer
    if problem.threshold < 0:
        raise ValueError(f"threshold must be non-negative, got {problem.threshold}")
    if problem.min_row_sum < 0:
        raise ValueError(f"min_row_sum must be non-negative, got {problem.min_row_sum}")

    # Generator settings
    gen = config.generator
    if isinstance(gen.n_items, bool) or not isinstance(gen.n_items, int) or gen.n_items <= 0:
        raise ValueError(f"n_items must be a positive integer, got {gen.n_items!r}")
    if gen.seed is not None and (isinstance(gen.seed, bool) or not isinstance(gen.seed, int)):
        raise ValueError(f"seed must be an integer or null, got {gen.seed!r}")
    check_number(gen.max_score, "max_score")
    check_number(gen.resolution, "resolution")
    if gen.max_score <= 0:
        raise ValueError("max_score must be positive")
    if gen.resolution <= 0 or gen.resolution > gen.max_score:
        raise ValueError(
            f"resolution must be positive and at most max_score "
            f"(resolution={gen.resolution}, max_score={gen.max_score})"
        )

    # Search settings
    if config.search.search_mode not in SEARCH_MODES:
        raise ValueError(
            f"Unknown search_mode '{config.search.search_mode}' (expected one of {SEARCH_MODES})"
        )

    if config.search.save_results and not config.paths.results_folder:
        raise ValueError("results_folder cannot be empty when save_results is enabled")


def print_config_summary(config: Config) -> None:
    """Print human-readable configuration summary."""
    problem = config.problem
    gen = config.generator

    print(f"\nConfiguration Summary:")
    print(f"  Config file: {config._config_path}")
    print(f"  Threshold (every dimension): {problem.threshold}")
    print(f"  Minimum row sum: {problem.min_row_sum}")

    if config.paths.score_matrix:
        print(f"  Score matrix: {config.paths.score_matrix}")
    else:
        seed = gen.seed if gen.seed is not None else "random"
        print(f"  Random matrix: {gen.n_items} items, scores in [0, {gen.max_score}) "
              f"step {gen.resolution}, seed={seed}")

    print(f"  Search: mode={config.search.search_mode}, dominance={config.search.use_dominance}")
    if config.search.save_results:
        print(f"  Results folder: {config.paths.results_folder}")


def create_default_config(output_path: str = "config.yaml") -> None:
    """
    Create a default configuration file with common settings.

    Args:
        output_path: Path where to save the default config
    """
    default_config = {
        'problem': asdict(ProblemConfig(threshold=6.5, min_row_sum=0.025)),
        'generator': asdict(GeneratorConfig()),
        'paths': asdict(PathConfig()),
        'search': asdict(SearchConfig()),
        'visualization': asdict(VisualizationConfig())
    }

    with open(output_path, 'w') as f:
        yaml.dump(default_config, f, default_flow_style=False, indent=2, sort_keys=False)

    print(f"Default configuration saved to: {output_path}")
