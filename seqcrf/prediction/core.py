# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Prediction decoder.

The engine labels every encoded sequence with its Viterbi path and returns
scores in record order, keyed by integer group keys. Callers get back one
of two shapes:

  marginal  one row per input row, in the caller's original row order:
            the predicted label and that label's marginal probability
  sequence  one row per group, in first-appearance order: the caller's own
            group identifier and the joint probability of the whole path

For the sequence shape every engine key goes back through the GroupIndex
built at encode time. A key the index doesn't know is an error, never a
bare integer leaking out to the caller.
"""

import logging
from collections.abc import Hashable
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import pandas as pd

from seqcrf.encoding.core import EncodedSequences
from seqcrf.engine import get_default_engine
from seqcrf.engine.interfaces import CRFEngine, EngineScores
from seqcrf.exceptions import EngineError, InvalidOutputType, ModelNotFound
from seqcrf.logging.logger import get_logger
from seqcrf.model.handle import ModelHandle

logger: logging.Logger = get_logger(__name__)


class OutputType(str, Enum):
    MARGINAL = "marginal"
    SEQUENCE = "sequence"

    @classmethod
    def parse(cls, value: "str | OutputType") -> "OutputType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as err:
            raise InvalidOutputType(
                f"Unknown output type '{value}'. Must be 'marginal' or 'sequence'"
            ) from err


@dataclass(frozen=True)
class MarginalPrediction:
    """Per-row Viterbi labels with their marginal probabilities."""

    labels: tuple[str, ...]
    marginals: tuple[float, ...]

    def __len__(self) -> int:
        return len(self.labels)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"label": list(self.labels), "marginal": list(self.marginals)})


@dataclass(frozen=True)
class SequencePrediction:
    """Per-group probability of the Viterbi path, keyed by the caller's identifiers."""

    groups: tuple[Hashable, ...]
    probabilities: tuple[float, ...]

    def __len__(self) -> int:
        return len(self.groups)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"group": list(self.groups), "probability": list(self.probabilities)})


PredictionResult = Union[MarginalPrediction, SequencePrediction]


def _decode_marginal(encoded: EncodedSequences, scores: EngineScores) -> MarginalPrediction:
    if len(scores.tokens) != len(encoded.records):
        raise EngineError(
            f"Engine scored {len(scores.tokens)} sequences, expected {len(encoded.records)}"
        )

    labels: list[Optional[str]] = [None] * encoded.n_rows
    marginals: list[float] = [0.0] * encoded.n_rows

    for record, tokens in zip(encoded.records, scores.tokens):
        if len(tokens) != len(record.positions):
            raise EngineError(
                f"Engine labelled {len(tokens)} items of group {record.key}, expected {len(record)}"
            )
        for position, (label, marginal) in zip(record.positions, tokens):
            labels[position] = label
            marginals[position] = marginal

    return MarginalPrediction(labels=tuple(labels), marginals=tuple(marginals))


def _decode_sequence(encoded: EncodedSequences, scores: EngineScores) -> SequencePrediction:
    groups = []
    probabilities = []
    for key, probability in scores.sequences:
        try:
            groups.append(encoded.groups.identifier_for(key))
        except KeyError as err:
            raise EngineError(f"Engine returned group key {key}, which this encoding never produced") from err
        probabilities.append(probability)
    return SequencePrediction(groups=tuple(groups), probabilities=tuple(probabilities))


def predict(
    encoded: EncodedSequences,
    model: ModelHandle,
    output_type: Union[str, OutputType] = OutputType.MARGINAL,
    trace: bool = False,
    engine: Optional[CRFEngine] = None,
) -> PredictionResult:
    """
    Label encoded sequences with a trained model.

    Labels on the encoded sequences, if any, are ignored.

    Raises:
        InvalidOutputType: If output_type is neither marginal nor sequence.
        ModelNotFound: If the model artifact is gone.
        EngineError: If the engine can't read the model, fails to score the
            data, or returns a group key this encoding never made.
    """
    kind = OutputType.parse(output_type)
    if not model.exists():
        raise ModelNotFound(f"No model artifact at {model.path}")

    scores = (engine or get_default_engine()).predict(model.path, encoded.records, trace)

    if kind is OutputType.MARGINAL:
        result: PredictionResult = _decode_marginal(encoded, scores)
    else:
        result = _decode_sequence(encoded, scores)

    logger.info(
        "Prediction finished",
        extra={
            "model": str(model.path),
            "output_type": kind.value,
            "sequences": len(encoded),
            "rows": len(result),
        },
    )
    return result
