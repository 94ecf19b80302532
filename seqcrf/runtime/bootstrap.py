# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for seqcrf commands.

Runs once before a CLI command does real work:
  1. Validate the interpreter
  2. Configure every seqcrf logger from the global config
  3. Log what we're running on, engine version included
"""

import logging
from pathlib import Path
from typing import Optional

from seqcrf.config.schema import GlobalConfig
from seqcrf.logging.logger import get_logger, set_package_level
from seqcrf.runtime.environment import check_minimum_python, get_system_info


def bootstrap(config: GlobalConfig, log_level: Optional[str] = None) -> logging.Logger:
    """
    Put the process into a known state and return the runtime logger.

    Args:
        config: The validated global configuration.
        log_level: Overrides config.log_level when given, e.g. from --log-level.
    """
    check_minimum_python()

    level = log_level or config.log_level
    log_file = None
    if config.log_file is not None:
        log_file = Path(config.log_file).expanduser()

    set_package_level(level, log_file=log_file)
    logger = get_logger("seqcrf.runtime", log_level=level, log_file=log_file)

    system_info = get_system_info()
    logger.info(
        "seqcrf bootstrap complete",
        extra={
            "project": config.project_name,
            "log_level": level,
            "log_file": str(log_file) if log_file is not None else None,
            "python_version": system_info.python_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
            "engine_version": system_info.engine_version,
        },
    )
    return logger
