# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the seqcrf CLI.

Each function here corresponds to one subcommand and returns an exit code.
No print() calls. Everything goes through the structured logger.

Input tables are CSV files with one row per token. They're read with every
column as a string: attributes are strings to CRFsuite anyway, and group
identifiers round-trip exactly as written in the file.
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from seqcrf.cli.exit_codes import (
    CONFIG_ERROR,
    RUNTIME_ERROR,
    SUCCESS,
    USER_ERROR,
    VALIDATION_ERROR,
)
from seqcrf.config.exceptions import ConfigError
from seqcrf.config.loader import load_config
from seqcrf.config.schema import SeqCRFConfig
from seqcrf.exceptions import (
    DiagnosticSinkError,
    EngineError,
    SeqCRFError,
    ShapeMismatch,
)
from seqcrf.logging.logger import get_logger, set_package_level
from seqcrf.runtime.bootstrap import bootstrap

DEFAULT_LOG_LEVEL = "INFO"


def _load_and_bootstrap(
    args: argparse.Namespace,
    command_name: str,
    required: tuple[str, ...] = (),
) -> tuple[int, Optional[SeqCRFConfig], logging.Logger]:
    """
    The shared setup every command needs: load config, run bootstrap.

    Returns (exit_code, config, logger). If exit_code is not SUCCESS the
    caller should return it immediately.
    """
    logger = get_logger(f"seqcrf.cli.{command_name}", log_level=args.log_level or DEFAULT_LOG_LEVEL)

    config = None
    if args.config is not None:
        try:
            config = load_config(Path(args.config), required=required)
        except ConfigError as err:
            logger.error(
                "Configuration error",
                extra={"command": command_name, "error": str(err)},
            )
            return CONFIG_ERROR, None, logger

    # An explicit --log-level wins over the config file.
    if config is not None:
        bootstrap(config.global_config, log_level=args.log_level)
    else:
        set_package_level(args.log_level or DEFAULT_LOG_LEVEL)
        logger.debug(
            "No config provided, running with defaults",
            extra={"command": command_name},
        )

    return SUCCESS, config, logger


def _exit_code_for(err: SeqCRFError) -> int:
    """Data that doesn't line up is a validation error; engine and sink trouble is runtime."""
    if isinstance(err, ShapeMismatch):
        return VALIDATION_ERROR
    if isinstance(err, (EngineError, DiagnosticSinkError)):
        return RUNTIME_ERROR
    return USER_ERROR


def _read_table(data_file: str, columns: list[str]) -> pd.DataFrame:
    """
    Read a token CSV with all columns as strings.

    Empty cells become missing values, which the encoder skips. Literal
    strings like "NA" stay as they are.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ShapeMismatch: If a required column is absent.
    """
    path = Path(data_file).expanduser()
    if not path.is_file():
        raise FileNotFoundError(f"Data file not found: {path}")

    frame = pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[""])
    missing = [c for c in columns if c not in frame.columns]
    if missing:
        raise ShapeMismatch(f"{path} is missing columns: {', '.join(missing)}")
    return frame


def handle_train(args: argparse.Namespace) -> int:
    """Train a CRF as described by the train section of the config."""
    exit_code, config, logger = _load_and_bootstrap(args, "train", required=("train",))
    if exit_code != SUCCESS:
        return exit_code

    if config is None or config.train is None:
        logger.error("A config with a train section is required", extra={"command": "train"})
        return CONFIG_ERROR

    train_config = config.train
    try:
        frame = _read_table(
            train_config.data_file,
            [*train_config.attribute_columns, train_config.label_column, train_config.group_column],
        )
        x = frame[train_config.attribute_columns]
        y = frame[train_config.label_column]
        group = frame[train_config.group_column]

        logger.info(
            "Starting training",
            extra={
                "command": "train",
                "method": train_config.method.value,
                "rows": len(frame),
                "dry_run": args.dry_run,
            },
        )

        if args.dry_run:
            from seqcrf.encoding.core import encode

            encoded = encode(x, y, group)
            logger.info(
                "Dry run, would train",
                extra={
                    "sequences": len(encoded),
                    "labels": list(encoded.labels),
                    "model_file": train_config.model_file,
                },
            )
            return SUCCESS

        from seqcrf.api import fit

        result = fit(
            x,
            y,
            group,
            method=train_config.method,
            options=train_config.options,
            file=train_config.model_file,
            trace=train_config.trace,
        )

        diagnostics = result.diagnostics
        logger.info(
            "Training complete",
            extra={
                "model_file": str(result.model.path),
                "iterations": len(diagnostics.iterations),
                "final_loss": diagnostics.final_loss,
                "active_features": diagnostics.active.features,
                "labels": list(result.model.labels()),
            },
        )
        return SUCCESS

    except FileNotFoundError as err:
        logger.error("Input not found", extra={"error": str(err)})
        return USER_ERROR
    except SeqCRFError as err:
        logger.error("Training failed", extra={"error": str(err)})
        return _exit_code_for(err)
    except Exception as err:
        logger.error("Training failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_predict(args: argparse.Namespace) -> int:
    """Label the predict section's data file with a trained model."""
    exit_code, config, logger = _load_and_bootstrap(args, "predict", required=("predict",))
    if exit_code != SUCCESS:
        return exit_code

    if config is None or config.predict is None:
        logger.error("A config with a predict section is required", extra={"command": "predict"})
        return CONFIG_ERROR

    predict_config = config.predict
    try:
        from seqcrf.model.handle import ModelHandle

        model = ModelHandle.open(predict_config.model_file)
        frame = _read_table(
            predict_config.data_file,
            [*predict_config.attribute_columns, predict_config.group_column],
        )
        x = frame[predict_config.attribute_columns]
        group = frame[predict_config.group_column]

        if args.dry_run:
            from seqcrf.encoding.core import encode

            encoded = encode(x, None, group)
            logger.info(
                "Dry run, would predict",
                extra={
                    "model_file": str(model.path),
                    "sequences": len(encoded),
                    "rows": encoded.n_rows,
                    "output_type": predict_config.output_type,
                },
            )
            return SUCCESS

        from seqcrf.api import predict

        result = predict(
            model,
            x,
            group,
            type=predict_config.output_type,
            trace=predict_config.trace,
        )

        if predict_config.output_file is None:
            logger.info(
                "Prediction complete, no output_file configured so nothing was written",
                extra={"rows": len(result), "output_type": predict_config.output_type},
            )
            return SUCCESS

        from seqcrf.utils.filesystem import atomic_write

        output = Path(predict_config.output_file).expanduser()
        atomic_write(output, result.to_frame().to_csv(index=False))
        logger.info(
            "Prediction complete",
            extra={
                "rows": len(result),
                "output_type": predict_config.output_type,
                "output_file": str(output),
            },
        )
        return SUCCESS

    except FileNotFoundError as err:
        logger.error("Input not found", extra={"error": str(err)})
        return USER_ERROR
    except SeqCRFError as err:
        logger.error("Prediction failed", extra={"error": str(err)})
        return _exit_code_for(err)
    except Exception as err:
        logger.error("Prediction failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_options(args: argparse.Namespace) -> int:
    """Log a training method's hyperparameters, one line per parameter."""
    exit_code, _config, logger = _load_and_bootstrap(args, "options")
    if exit_code != SUCCESS:
        return exit_code

    try:
        from seqcrf.options.core import schema_for
        from seqcrf.options.methods import TrainingMethod

        method = TrainingMethod.parse(args.method)
        schema = schema_for(method)
        logger.info(
            "Training method",
            extra={
                "method": method.value,
                "description": method.description,
                "graphical_model": schema.type,
                "parameters": schema.names(),
            },
        )
        for _, row in schema.to_frame().iterrows():
            logger.info(
                "Hyperparameter",
                extra={
                    "method": schema.method,
                    "arg": row["arg"],
                    "arg_default": row["arg_default"],
                    "description": row["description"],
                },
            )
        return SUCCESS

    except SeqCRFError as err:
        logger.error("Cannot list hyperparameters", extra={"error": str(err)})
        return _exit_code_for(err)
    except Exception as err:
        logger.error("Cannot list hyperparameters", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def _summary_model_file(args: argparse.Namespace, config: Optional[SeqCRFConfig]) -> Optional[str]:
    if args.model is not None:
        return args.model
    if config is not None and config.predict is not None:
        return config.predict.model_file
    if config is not None and config.train is not None:
        return config.train.model_file
    return None


def handle_summary(args: argparse.Namespace) -> int:
    """Describe a trained model and dump CRFsuite's report of it."""
    exit_code, config, logger = _load_and_bootstrap(args, "summary")
    if exit_code != SUCCESS:
        return exit_code

    model_file = _summary_model_file(args, config)
    if model_file is None:
        logger.error("No model given, pass --model or a config with a model_file")
        return USER_ERROR

    try:
        from seqcrf.model.handle import ModelHandle

        model = ModelHandle.open(model_file)
        logger.info(
            "Model summary",
            extra={
                "model_file": str(model.path),
                "size_bytes": model.size_bytes(),
                "method": model.method,
                "labels": list(model.labels()),
                "attributes": list(model.attribute_names()),
            },
        )

        if args.dry_run:
            logger.info("Dry run, would dump model", extra={"output": args.output})
            return SUCCESS

        report = model.dump(args.output)
        logger.info("Model dump written", extra={"report": str(report)})
        return SUCCESS

    except SeqCRFError as err:
        logger.error("Summary failed", extra={"error": str(err)})
        return _exit_code_for(err)
    except Exception as err:
        logger.error("Summary failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_info(args: argparse.Namespace) -> int:
    """Display environment and engine information."""
    logger = get_logger("seqcrf.cli.info", log_level=args.log_level or DEFAULT_LOG_LEVEL)

    from seqcrf import __version__
    from seqcrf.options.methods import TrainingMethod
    from seqcrf.runtime.environment import get_system_info

    system_info = get_system_info()

    logger.info(
        "System information",
        extra={
            "seqcrf_version": __version__,
            "python_version": system_info.python_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
            "engine_version": system_info.engine_version,
            "methods": {m.value: m.description for m in TrainingMethod},
            "config": args.config,
        },
    )
    return SUCCESS
