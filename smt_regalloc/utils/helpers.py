"""
Utility Functions

Helper functions for configuration, logging, and I/O.
"""

import yaml
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional, Union
from datetime import datetime


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML config file

    Returns:
        Configuration dictionary
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    return config or {}


def save_config(config: Dict[str, Any],
                config_path: Union[str, Path]) -> None:
    """Save configuration to YAML file."""
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False)


def save_results(results: Dict[str, Any],
                 output_dir: Union[str, Path],
                 name: str = "results",
                 formats: tuple = ('json', 'csv')) -> Dict[str, Path]:
    """
    Save results to multiple formats.

    Args:
        results: Results dictionary
        output_dir: Output directory
        name: Base filename
        formats: Output formats ('json', 'csv', 'yaml')

    Returns:
        Dictionary of format -> output path
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    base_name = f"{name}_{timestamp}"

    output_paths = {}

    if 'json' in formats:
        json_path = output_dir / f"{base_name}.json"
        with open(json_path, 'w') as f:
            json.dump(results, f, indent=2, default=str)
        output_paths['json'] = json_path

    if 'yaml' in formats:
        yaml_path = output_dir / f"{base_name}.yaml"
        with open(yaml_path, 'w') as f:
            yaml.safe_dump(json.loads(json.dumps(results, default=str)), f,
                           default_flow_style=False)
        output_paths['yaml'] = yaml_path

    if 'csv' in formats:
        csv_path = output_dir / f"{base_name}.csv"
        _save_results_csv(results, csv_path)
        output_paths['csv'] = csv_path

    return output_paths


def _save_results_csv(results: Dict[str, Any], filepath: Path) -> None:
    """Save results to CSV format."""
    import csv

    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)

        # Flatten results for CSV
        for key, value in results.items():
            if isinstance(value, dict):
                for sub_key, sub_value in value.items():
                    writer.writerow([f"{key}.{sub_key}", sub_value])
            else:
                writer.writerow([key, value])


def setup_logging(level: str = "INFO",
                  log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Setup logging configuration.

    Args:
        level: Logging level
        log_file: Optional log file path

    Returns:
        Logger instance
    """
    logger = logging.getLogger("smt_regalloc")
    logger.setLevel(getattr(logging, level.upper()))

    # Drop handlers from an earlier call
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_format = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(log_format)
    logger.addHandler(console_handler)

    # File handler (if specified)
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(log_format)
        logger.addHandler(file_handler)

    return logger


def format_number(n: Union[int, float], precision: int = 2) -> str:
    """Format large numbers with K/M/B suffixes."""
    if abs(n) >= 1e9:
        return f"{n/1e9:.{precision}f}B"
    elif abs(n) >= 1e6:
        return f"{n/1e6:.{precision}f}M"
    elif abs(n) >= 1e3:
        return f"{n/1e3:.{precision}f}K"
    else:
        return f"{n:.{precision}f}"


def get_project_root() -> Path:
    """Get project root directory."""
    current = Path(__file__).resolve()

    # Walk up until we find project markers
    for parent in current.parents:
        if (parent / "config").exists() or (parent / "pyproject.toml").exists():
            return parent

    return current.parent.parent.parent


def default_config_path() -> Path:
    """Path of the bundled default configuration."""
    return get_project_root() / "config" / "default.yaml"


class Timer:
    """Simple timer context manager."""

    def __init__(self, name: str = "Operation"):
        self.name = name
        self.start_time = None
        self.elapsed = None

    def __enter__(self):
        import time
        self.start_time = time.time()
        return self

    def __exit__(self, *args):
        import time
        self.elapsed = time.time() - self.start_time
        logging.getLogger("smt_regalloc").info("%s: %.2fs", self.name, self.elapsed)


def create_allocator_from_config(config: Dict[str, Any],
                                 scoring_policy: Optional[str] = None):
    """
    Create allocator instance from configuration.

    Args:
        config: Full configuration dictionary (uses its 'allocator' section)
        scoring_policy: Optional policy name overriding the configuration

    Returns:
        SMTRegisterAllocator instance
    """
    from ..allocator.allocator import SMTRegisterAllocator
    from ..allocator.config import AllocatorConfig
    from ..allocator.scoring import create_scoring_policy

    allocator_config = AllocatorConfig.from_dict(config.get('allocator', config))

    policy = None
    if scoring_policy:
        policy = create_scoring_policy(scoring_policy)

    return SMTRegisterAllocator(allocator_config, scoring_policy=policy)
