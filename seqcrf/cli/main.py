# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for seqcrf.

One root command, every operation a subcommand. The global options
(--config, --log-level, --dry-run) are inherited by every subcommand
through argparse's parent parser mechanism.

Usage:
    seqcrf train --config configs/ner.yaml
    seqcrf predict --config configs/ner.yaml
    seqcrf options --method l2sgd
    seqcrf summary --model annotator.crfsuite --output modeldetails.txt
    seqcrf info
"""

import argparse
import sys
from typing import Optional, Sequence

from seqcrf.cli.commands import (
    handle_info,
    handle_options,
    handle_predict,
    handle_summary,
    handle_train,
)
from seqcrf.cli.exit_codes import USER_ERROR
from seqcrf.options.methods import TrainingMethod


def _build_global_parser() -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    It's a separate parser with add_help=False so its help text doesn't
    collide with the subcommand parsers that inherit from it.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (default: global.log_level from the config, else INFO).",
    )
    parent.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        dest="dry_run",
        help="Validate inputs and report what would happen without training or writing.",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    """
    Register all subcommands with their handler functions.

    Each subcommand sets its handler via set_defaults(func=...), so after
    parsing args.func is the function to call.
    """
    commands = [
        ("train", "Train a CRF from the train section of the config.", handle_train),
        ("predict", "Label data with a trained model.", handle_predict),
        ("options", "List a training method's hyperparameters and defaults.", handle_options),
        ("summary", "Describe a trained model and dump its internals.", handle_summary),
        ("info", "Display environment and engine info.", handle_info),
    ]

    for name, help_text, handler in commands:
        parser = subparsers.add_parser(name, parents=[parent], help=help_text)
        parser.set_defaults(func=handler)

    subparsers.choices["options"].add_argument(
        "--method",
        type=str,
        default=TrainingMethod.LBFGS.value,
        choices=[m.value for m in TrainingMethod],
        help="Training method to list hyperparameters for.",
    )

    summary_parser = subparsers.choices["summary"]
    summary_parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Model artifact. Defaults to model_file from the config.",
    )
    summary_parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Where to copy the model dump. Without it the dump stays in a temp file.",
    )


def build_parser() -> argparse.ArgumentParser:
    parent = _build_global_parser()

    root_parser = argparse.ArgumentParser(
        prog="seqcrf",
        description="seqcrf: train and apply linear-chain CRFs for sequence labelling.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)
    return root_parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    Parses the command line, calls the chosen subcommand's handler and exits
    with its return code. Without a subcommand, shows help and exits with
    USER_ERROR.
    """
    root_parser = build_parser()
    args = root_parser.parse_args(argv)

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
