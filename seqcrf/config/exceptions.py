# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions raised while loading run configuration.

Kept apart from seqcrf.exceptions so the CLI can tell "your YAML is wrong"
(exit code 2) from "training blew up" (exit code 3) without importing the
training machinery.
"""


class ConfigError(Exception):
    """Base for all configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when a config file cannot be read from disk or parsed as YAML."""


class ConfigValidationError(ConfigError):
    """
    Raised when a config file parses fine but fails schema validation:
    missing required fields, wrong types, unknown keys, unknown methods.
    """
