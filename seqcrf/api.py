# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Two-call interface for the common case.

    result = fit(x, y, group=doc_ids, method="lbfgs", options={"max_iterations": 50})
    result.model          # ModelHandle
    result.diagnostics    # TrainingDiagnostics

    scores = predict(result.model, newdata, group=new_doc_ids, type="marginal")
    scores.to_frame()     # label, marginal

Both are thin: encode, then hand off to the training orchestrator or the
prediction decoder. Use those modules directly when you need the engine
hook or the intermediate EncodedSequences.
"""

from collections.abc import Hashable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

from seqcrf.encoding.core import AttributeTable, encode
from seqcrf.engine.interfaces import CRFEngine
from seqcrf.model.handle import ModelHandle
from seqcrf.options.methods import TrainingMethod
from seqcrf.prediction import core as prediction
from seqcrf.prediction.core import OutputType, PredictionResult
from seqcrf.training import core as training
from seqcrf.training.diagnostics import TrainingDiagnostics


@dataclass(frozen=True)
class FitResult:
    """A trained model and what its training log said."""

    model: ModelHandle
    diagnostics: TrainingDiagnostics


def fit(
    x: AttributeTable,
    y: Sequence[Any],
    group: Sequence[Hashable],
    method: Union[str, TrainingMethod] = TrainingMethod.LBFGS,
    options: Optional[Mapping[str, Any]] = None,
    file: Union[str, Path] = training.DEFAULT_MODEL_FILE,
    trace: bool = False,
    engine: Optional[CRFEngine] = None,
) -> FitResult:
    """
    Train a linear-chain CRF from a token table.

    Args:
        x: Attribute table, one row per token.
        y: One label per row.
        group: One sequence identifier per row. Any hashable works.
        method: Training algorithm.
        options: Hyperparameter overrides; see seqcrf.options.defaults_for().
        file: Where to write the model artifact.
        trace: Echo the engine's training progress to the log.
        engine: Engine to use; CRFsuite when omitted.
    """
    encoded = encode(x, y, group)
    model, diagnostics = training.train(
        encoded,
        method=method,
        options=options,
        output_path=file,
        trace=trace,
        engine=engine,
    )
    return FitResult(model=model, diagnostics=diagnostics)


def predict(
    model: Union[ModelHandle, str, Path],
    newdata: AttributeTable,
    group: Sequence[Hashable],
    type: Union[str, OutputType] = OutputType.MARGINAL,
    trace: bool = False,
    engine: Optional[CRFEngine] = None,
) -> PredictionResult:
    """
    Label new data with a trained model.

    `model` may be a handle or a path to an artifact. `type` is 'marginal'
    (one row per token) or 'sequence' (one row per group).
    """
    if not isinstance(model, ModelHandle):
        model = ModelHandle.open(model)
    encoded = encode(newdata, None, group)
    return prediction.predict(encoded, model, output_type=type, trace=trace, engine=engine)
