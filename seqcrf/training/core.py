# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Training orchestrator.

One train() call:

  1. checks the method and that every sequence carries labels
  2. resolves options against the method's defaults
  3. opens a fresh DiagnosticSink next to the output artifact
  4. runs engine.build with that sink
  5. reads the log back and deletes it (whatever happened in step 4)
  6. parses the log into TrainingDiagnostics
  7. builds the ModelHandle and writes its metadata sidecar

Nothing here knows how CRFs are optimized. All of that is the engine's.
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from seqcrf.encoding.core import EncodedSequences
from seqcrf.engine import get_default_engine
from seqcrf.engine.interfaces import CRFEngine
from seqcrf.exceptions import ShapeMismatch
from seqcrf.logging.logger import get_logger
from seqcrf.model.handle import ModelHandle, ModelMetadata
from seqcrf.options.core import resolve
from seqcrf.options.methods import TrainingMethod
from seqcrf.training.diagnostics import TrainingDiagnostics, parse_training_log
from seqcrf.training.sink import DiagnosticSink

logger: logging.Logger = get_logger(__name__)

DEFAULT_MODEL_FILE = "annotator.crfsuite"


def train(
    encoded: EncodedSequences,
    method: Union[str, TrainingMethod] = TrainingMethod.LBFGS,
    options: Optional[Mapping[str, Any]] = None,
    output_path: Union[str, Path] = DEFAULT_MODEL_FILE,
    trace: bool = False,
    engine: Optional[CRFEngine] = None,
) -> tuple[ModelHandle, TrainingDiagnostics]:
    """
    Train a linear-chain CRF on encoded sequences.

    Args:
        encoded: Output of encode() with labels.
        method: One of the TrainingMethod values.
        options: Hyperparameters to override. Anything not given keeps the
            method's default.
        output_path: Where the model artifact goes. Overwritten if present.
        trace: Echo engine progress to the log while training.
        engine: Engine to use; CRFsuite when omitted.

    Returns:
        (handle to the trained model, diagnostics parsed from the training log)

    Raises:
        UnknownMethod: If method isn't supported.
        ShapeMismatch: If the sequences carry no labels.
        EngineError: If the engine rejects options or fails to train.
        DiagnosticSinkError: If the training log can't be created, written,
            read, or deleted.
    """
    parsed_method = TrainingMethod.parse(method)
    if not encoded.has_labels:
        raise ShapeMismatch("Training needs a label for every row, got unlabelled sequences")

    engine = engine or get_default_engine()
    resolved = resolve(parsed_method, options, engine)

    model_path = Path(output_path).expanduser().resolve()
    model_path.parent.mkdir(parents=True, exist_ok=True)

    logger.info(
        "Training started",
        extra={
            "method": parsed_method.value,
            "sequences": len(encoded),
            "rows": encoded.n_rows,
            "labels": len(encoded.labels),
            "output": str(model_path),
        },
    )

    with DiagnosticSink(model_path) as sink:
        engine.build(encoded.records, parsed_method.value, resolved, model_path, trace, sink)
        sink.raise_if_failed()
    raw_log = sink.text

    diagnostics = parse_training_log(raw_log)

    handle = ModelHandle(
        path=model_path,
        metadata=ModelMetadata(
            labels=encoded.labels,
            attribute_names=encoded.attribute_names,
            method=parsed_method.value,
            options=resolved,
            log=raw_log,
        ),
    )
    handle.save_metadata()

    logger.info(
        "Training finished",
        extra={
            "method": parsed_method.value,
            "iterations": len(diagnostics.iterations),
            "final_loss": diagnostics.final_loss,
            "output": str(model_path),
        },
    )
    return handle, diagnostics
