# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The contract between seqcrf and the CRF engine.

seqcrf never optimizes anything itself. It prepares inputs for, and reads
outputs from, an engine that can do exactly four things:

  build(sequences, method, options, output_path, trace, sink)
      train a model and write it to output_path, writing free-text progress
      to sink as it goes
  dump(model_path, report_path)
      render a human-readable report of a trained model
  schema(method)
      list a method's hyperparameters with defaults and descriptions
  predict(model_path, sequences, trace)
      Viterbi-decode each sequence, with per-token marginals and the joint
      probability of the decoded path

Everything that crosses this boundary is one of the plain value types below.
Group keys crossing it are always integers; mapping them to and from the
caller's identifiers is the encoder's and decoder's business, not the
engine's.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence, runtime_checkable

import pandas as pd


@dataclass(frozen=True)
class SequenceRecord:
    """
    One sequence (sentence, document, ...) ready for the engine.

    Attributes:
        key: Integer group key handed to the engine.
        positions: Row index of each item in the caller's original table.
        items: Attribute strings for each item, in column order.
        labels: One label per item, or None at inference time.
    """

    key: int
    positions: tuple[int, ...]
    items: tuple[tuple[str, ...], ...]
    labels: Optional[tuple[str, ...]] = None

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class ParameterSpec:
    """One hyperparameter: its name, default (as the engine reports it), and help text."""

    name: str
    default: str
    description: str


@dataclass(frozen=True)
class HyperparameterSchema:
    """The ordered hyperparameter table of one training method."""

    method: str
    type: str
    params: tuple[ParameterSpec, ...]

    def names(self) -> list[str]:
        return [p.name for p in self.params]

    def to_frame(self) -> pd.DataFrame:
        """Parameter table with columns arg, arg_default, description."""
        return pd.DataFrame(
            {
                "arg": [p.name for p in self.params],
                "arg_default": [p.default for p in self.params],
                "description": [p.description for p in self.params],
            }
        )


@dataclass(frozen=True)
class EngineScores:
    """
    Raw inference output, in the same record order the engine received.

    Attributes:
        tokens: Per record, one (viterbi label, marginal probability) pair per item.
        sequences: Per record, (engine group key, joint probability of the viterbi path).
    """

    tokens: tuple[tuple[tuple[str, float], ...], ...]
    sequences: tuple[tuple[int, float], ...]


class LogSink(Protocol):
    """Where an engine writes its free-text training progress."""

    def write(self, text: str) -> int: ...


@runtime_checkable
class CRFEngine(Protocol):
    """Anything that can train, dump, describe, and apply a linear-chain CRF."""

    def build(
        self,
        sequences: Sequence[SequenceRecord],
        method: str,
        options: dict[str, str],
        output_path: Path,
        trace: bool,
        sink: LogSink,
    ) -> None: ...

    def dump(self, model_path: Path, report_path: Path) -> None: ...

    def schema(self, method: str) -> HyperparameterSchema: ...

    def predict(
        self,
        model_path: Path,
        sequences: Sequence[SequenceRecord],
        trace: bool,
    ) -> EngineScores: ...
