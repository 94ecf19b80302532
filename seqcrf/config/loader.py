# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Config loader: reads YAML from disk and produces a validated, frozen SeqCRFConfig.

The pipeline is linear:
  1. Read the file
  2. Parse it as YAML into a plain dict
  3. Hand the dict to pydantic for validation
  4. Return the frozen config

Any failure stops right there with a ConfigError subclass. There are no
fallback defaults for a broken file.
"""

from pathlib import Path
from typing import Any, Iterable

import yaml
from pydantic import ValidationError

from seqcrf.config.exceptions import ConfigLoadError, ConfigValidationError
from seqcrf.config.schema import SeqCRFConfig


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML file and return the parsed mapping.

    Existence is checked up front because yaml.safe_load gives unhelpful
    errors for a missing file.

    Raises:
        ConfigLoadError: If the file doesn't exist, isn't readable, isn't valid
            YAML, or doesn't contain a mapping at the top level.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping (dict), got {type(parsed).__name__}"
        )

    return parsed


_SECTIONS = ("global", "train", "predict")


def _check_sections(raw_data: dict[str, Any], config_path: Path, required: Iterable[str]) -> None:
    """
    Section-level checks that read better than pydantic's field errors.

    Raises:
        ConfigLoadError: If a section is present but is not a mapping.
        ConfigValidationError: If a section the command needs is absent.
    """
    for section in _SECTIONS:
        value = raw_data.get(section)
        if section in raw_data and not isinstance(value, dict):
            raise ConfigLoadError(
                f"Section '{section}' in {config_path} must be a mapping, got {type(value).__name__}"
            )

    missing = [s for s in required if s not in raw_data]
    if missing:
        raise ConfigValidationError(
            f"{config_path} has no {', '.join(missing)} section; add one describing the data, "
            f"columns and model file for this run"
        )


def load_config(config_path: Path, required: Iterable[str] = ()) -> SeqCRFConfig:
    """
    Load, validate, and freeze a config file.

    Args:
        config_path: Path to a YAML config file.
        required: Sections that must be present, e.g. ("train",) for a
            training run.

    Returns:
        A validated, frozen SeqCRFConfig.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures, or a section that
            is not a mapping.
        ConfigValidationError: Schema violations (missing fields, wrong types,
            unknown keys, unsupported training method) or a missing
            required section.
    """
    raw_data = _read_yaml_file(config_path)
    _check_sections(raw_data, config_path, tuple(required))

    try:
        config = SeqCRFConfig.model_validate(raw_data)
    except ValidationError as err:
        raise ConfigValidationError(
            f"Config validation failed for {config_path}:\n{err}"
        ) from err

    return config
