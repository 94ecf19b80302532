# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
seqcrf: training and inference orchestration for linear-chain CRFs.

CRFsuite does the learning. seqcrf turns token tables into sequences for
it, resolves hyperparameters, captures and parses the training log, and
maps predictions back onto the caller's rows and group identifiers.
"""

__version__ = "0.1.0"

from seqcrf.api import FitResult, fit, predict
from seqcrf.encoding.core import EncodedSequences, GroupIndex, encode
from seqcrf.exceptions import (
    DiagnosticSinkError,
    EngineError,
    InvalidOutputType,
    ModelNotFound,
    SeqCRFError,
    ShapeMismatch,
    UnknownMethod,
)
from seqcrf.model.handle import ModelHandle, ModelMetadata
from seqcrf.options.core import Number, Text, defaults_for, resolve, schema_for
from seqcrf.options.methods import TrainingMethod
from seqcrf.prediction.core import MarginalPrediction, OutputType, SequencePrediction
from seqcrf.training.diagnostics import TrainingDiagnostics, parse_training_log

__all__ = [
    "__version__",
    "fit",
    "predict",
    "FitResult",
    "encode",
    "EncodedSequences",
    "GroupIndex",
    "TrainingMethod",
    "Number",
    "Text",
    "schema_for",
    "defaults_for",
    "resolve",
    "ModelHandle",
    "ModelMetadata",
    "OutputType",
    "MarginalPrediction",
    "SequencePrediction",
    "TrainingDiagnostics",
    "parse_training_log",
    "SeqCRFError",
    "ShapeMismatch",
    "UnknownMethod",
    "ModelNotFound",
    "EngineError",
    "DiagnosticSinkError",
    "InvalidOutputType",
]
