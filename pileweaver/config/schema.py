"""
PileWeaver v0.1.0

Configuration schema for PileWeaver.

Defines all available configuration parameters with defaults and validation.

Author: PileWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


class ConfigValidationError(Exception):
    """Raised when a configuration file cannot be loaded."""
    pass


# Default configuration values
DEFAULT_CONFIG = {
    # ========================================================================
    # Windowing (alignment piles)
    # ========================================================================
    'piles': {
        'min_support': 4,       # Minimum coverage per base, template included
        'window_size': 500,     # Window length (bp)
        'window_overlap': 50,   # Bases shared by consecutive windows
    },

    # ========================================================================
    # K-mer graph linking
    # ========================================================================
    'dbg': {
        'mer_size': 9,              # Base k-mer order
        'min_order': 5,             # Smallest order tried by order reduction
        'solid_threshold': 4,       # Minimum count of a solid k-mer
        'max_branches': 50,         # Branch budget per search
        'max_distance_ratio': 1.5,  # Max bases added relative to window length
        'order_step': 1,            # Order decrement between retries
    },

    # ========================================================================
    # Read end extension
    # ========================================================================
    'extension': {
        'enabled': False,
        'max_extension': 1000,  # Max bases added at each read end
    },

    # ========================================================================
    # Output
    # ========================================================================
    'output': {
        'line_width': 80,
        'logging': {
            'level': 'INFO',
            'log_file': 'pileweaver.log',
        },
    },
}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Path to YAML config file (None = use defaults)

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config_path does not exist
        ConfigValidationError: If the file is not valid YAML
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path) as f:
                user_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in config file {config_path}: {e}")

        if user_config:
            if not isinstance(user_config, dict):
                raise ConfigValidationError(
                    f"Config file {config_path} must contain a mapping at top level"
                )
            # Deep merge user config into defaults
            config = _deep_merge(config, user_config)

    return config


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        # An empty section in YAML (`dbg:`) keeps the defaults
        if value is None and isinstance(result.get(key), dict):
            continue
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def save_config_template(output_path: Path):
    """
    Save the default configuration to file.

    Args:
        output_path: Output file path
    """
    with open(output_path, 'w') as f:
        yaml.dump(DEFAULT_CONFIG, f, default_flow_style=False, sort_keys=False)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_int(errors: List[str], name: str, value: Any, minimum: int) -> bool:
    """Append an error unless *value* is an integer >= *minimum*."""
    if not _is_int(value) or value < minimum:
        errors.append(f"{name} must be an integer >= {minimum}, got {value!r}")
        return False
    return True


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration dictionary.

    Missing settings fall back to their defaults; empty (null) sections
    count as empty mappings.

    Args:
        config: Configuration to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    sections = {}
    for section in ('piles', 'dbg', 'extension', 'output'):
        values = config.get(section) or {}
        if not isinstance(values, dict):
            errors.append(f"{section} must be a mapping, got {values!r}")
            values = {}
        # Unknown keys would fail when building the parameter dataclasses
        if section != 'output':
            for key in values:
                if key not in DEFAULT_CONFIG[section]:
                    errors.append(f"Unknown setting: {section}.{key}")
        sections[section] = {**DEFAULT_CONFIG[section], **values}

    piles = sections['piles']
    if _check_int(errors, 'piles.window_size', piles['window_size'], 1):
        window_overlap = piles['window_overlap']
        if not _is_int(window_overlap) or not 0 <= window_overlap < piles['window_size']:
            errors.append(
                f"piles.window_overlap must be in [0, window_size), got {window_overlap!r}"
            )
    _check_int(errors, 'piles.min_support', piles['min_support'], 1)

    # Validate k-mer orders
    dbg = sections['dbg']
    mer_size = dbg['mer_size']
    min_order = dbg['min_order']
    if not (_is_int(mer_size) and _is_int(min_order)) or not 1 <= min_order <= mer_size:
        errors.append(
            f"Invalid k-mer orders: need 1 <= min_order <= mer_size, "
            f"got min_order={min_order!r}, mer_size={mer_size!r}"
        )
    _check_int(errors, 'dbg.solid_threshold', dbg['solid_threshold'], 0)
    _check_int(errors, 'dbg.max_branches', dbg['max_branches'], 0)
    ratio = dbg['max_distance_ratio']
    if isinstance(ratio, bool) or not isinstance(ratio, (int, float)) or ratio <= 0:
        errors.append(f"dbg.max_distance_ratio must be a number > 0, got {ratio!r}")
    _check_int(errors, 'dbg.order_step', dbg['order_step'], 1)

    extension = sections['extension']
    if not isinstance(extension['enabled'], bool):
        errors.append(f"extension.enabled must be true or false, got {extension['enabled']!r}")
    _check_int(errors, 'extension.max_extension', extension['max_extension'], 0)

    output = sections['output']
    _check_int(errors, 'output.line_width', output['line_width'], 0)
    logging_config = output['logging'] if isinstance(output['logging'], dict) else {}
    level = logging_config.get('level', 'INFO')
    if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
        errors.append(f"Invalid logging level: {level}")

    return errors
