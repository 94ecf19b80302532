# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for seqcrf runs.

Each section of a run config gets its own frozen pydantic model:
  - frozen=True: a loaded config can't be mutated halfway through a run
  - extra="forbid": a typo in a key fails loudly instead of being ignored
  - validate_default=True: defaults get type-checked too

A config file holds `global:` plus whichever of `train:` / `predict:` the
command needs. Missing sections stay None and the command decides whether
that's a problem.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from seqcrf.options.methods import TrainingMethod


class GlobalConfig(BaseModel):
    """Cross-cutting settings: project identity and logging."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    project_name: str = Field(
        default="seqcrf", description="Human-readable project identifier"
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )


class TrainConfig(BaseModel):
    """
    Where the training table lives, which columns mean what, and how to
    train. The table is a CSV with one row per token.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(description="Schema version")
    data_file: str = Field(description="CSV file with one row per token")
    attribute_columns: list[str] = Field(
        min_length=1,
        description="Columns whose cell values are the token attributes",
    )
    label_column: str = Field(default="label", description="Column holding the label sequence")
    group_column: str = Field(
        default="doc_id",
        description="Column identifying the sequence (sentence/document) a row belongs to",
    )
    method: TrainingMethod = Field(
        default=TrainingMethod.LBFGS,
        description="Training algorithm",
    )
    options: dict[str, Union[bool, int, float, str]] = Field(
        default_factory=dict,
        description="Hyperparameters overriding the method defaults, e.g. {max_iterations: 50}",
    )
    model_file: str = Field(
        default="annotator.crfsuite",
        description="Where the trained model artifact gets written",
    )
    trace: bool = Field(default=False, description="Echo the engine's training log")


class PredictConfig(BaseModel):
    """Inputs and outputs for labelling new data with a trained model."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(description="Schema version")
    data_file: str = Field(description="CSV file with one row per token")
    attribute_columns: list[str] = Field(
        min_length=1,
        description="Columns holding the token attributes, same as at training time",
    )
    group_column: str = Field(default="doc_id", description="Column identifying the sequence")
    model_file: str = Field(
        default="annotator.crfsuite",
        description="Trained model artifact to label with",
    )
    output_type: Literal["marginal", "sequence"] = Field(
        default="marginal",
        description="'marginal' for one row per token, 'sequence' for one row per group",
    )
    output_file: Optional[str] = Field(
        default=None,
        description="CSV path for the predictions; nothing is written when unset",
    )
    trace: bool = Field(default=False, description="Log per-sequence tagging progress")


class SeqCRFConfig(BaseModel):
    """Top-level config container."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(alias="global")
    train: Optional[TrainConfig] = Field(default=None)
    predict: Optional[PredictConfig] = Field(default=None)
