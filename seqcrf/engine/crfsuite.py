# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CRFsuite engine, backed by the python-crfsuite binding.

This is the only module that imports pycrfsuite. It translates the
CRFEngine contract into BaseTrainer / Tagger calls:

  - Items go in as lists of bare attribute strings. CRFsuite then treats
    equal strings as one attribute no matter which column they came from,
    and nothing here tries to change that.
  - Training progress arrives through BaseTrainer.message(). We override it
    to write into the sink the orchestrator handed us, so each build call
    has its own log and no global state is involved.
  - Whatever pycrfsuite raises is re-raised as EngineError with the
    original message, so callers only need to know one exception type.
"""

import logging
from pathlib import Path
from typing import Sequence

import pycrfsuite

from seqcrf.engine.interfaces import (
    EngineScores,
    HyperparameterSchema,
    LogSink,
    ParameterSpec,
    SequenceRecord,
)
from seqcrf.exceptions import EngineError, SeqCRFError
from seqcrf.logging.logger import get_logger
from seqcrf.options.methods import GRAPHICAL_MODEL_TYPE

logger: logging.Logger = get_logger(__name__)


class _SinkTrainer(pycrfsuite.BaseTrainer):
    """BaseTrainer that streams CRFsuite's messages into a per-call sink."""

    sink: LogSink
    trace: bool = False

    def message(self, message: str) -> None:
        self.sink.write(message)
        if self.trace:
            for line in message.splitlines():
                if line.strip():
                    logger.info("crfsuite", extra={"line": line})


def _render_default(value: object) -> str:
    # BaseTrainer.get() casts flags to bool; CRFsuite reads them back as integers.
    if isinstance(value, bool):
        return str(int(value))
    return str(value)


def _xseq(record: SequenceRecord) -> list[list[str]]:
    return [list(item) for item in record.items]


class CRFSuiteEngine:
    """CRFEngine implementation on top of pycrfsuite."""

    def build(
        self,
        sequences: Sequence[SequenceRecord],
        method: str,
        options: dict[str, str],
        output_path: Path,
        trace: bool,
        sink: LogSink,
    ) -> None:
        """
        Train a linear-chain CRF and write it to output_path.

        Raises:
            EngineError: Unknown option names, invalid option values, or any
                failure inside CRFsuite.
        """
        trainer = _SinkTrainer(verbose=trace)
        trainer.sink = sink
        trainer.trace = trace

        try:
            trainer.select(method, GRAPHICAL_MODEL_TYPE)
            trainer.set_params(options)
            for record in sequences:
                if record.labels is None:
                    raise EngineError(f"Sequence {record.key} has no labels to train on")
                trainer.append(_xseq(record), list(record.labels), record.key)
            trainer.train(str(output_path), -1)
        except SeqCRFError:
            raise
        except Exception as err:
            raise EngineError(str(err)) from err
        finally:
            trainer.clear()

    def dump(self, model_path: Path, report_path: Path) -> None:
        """Write CRFsuite's text dump of the model (labels, attributes, weights)."""
        tagger = pycrfsuite.Tagger()
        try:
            tagger.open(str(model_path))
            tagger.dump(str(report_path))
        except Exception as err:
            raise EngineError(str(err)) from err
        finally:
            tagger.close()

    def schema(self, method: str) -> HyperparameterSchema:
        """Ask CRFsuite which parameters the method takes, with defaults and help text."""
        trainer = pycrfsuite.BaseTrainer(verbose=False)
        try:
            trainer.select(method, GRAPHICAL_MODEL_TYPE)
            params = tuple(
                ParameterSpec(
                    name=name,
                    default=_render_default(trainer.get(name)),
                    description=str(trainer.help(name)).strip(),
                )
                for name in trainer.params()
            )
        except Exception as err:
            raise EngineError(str(err)) from err

        return HyperparameterSchema(method=method, type=GRAPHICAL_MODEL_TYPE, params=params)

    def predict(
        self,
        model_path: Path,
        sequences: Sequence[SequenceRecord],
        trace: bool,
    ) -> EngineScores:
        """
        Viterbi-decode every sequence.

        For each item the marginal is that of the decoded label at its
        position; for each sequence the probability is that of the whole
        decoded path.
        """
        tagger = pycrfsuite.Tagger()
        tokens: list[tuple[tuple[str, float], ...]] = []
        probabilities: list[tuple[int, float]] = []

        try:
            tagger.open(str(model_path))
            for record in sequences:
                tagger.set(_xseq(record))
                path = tagger.tag()
                tokens.append(
                    tuple((label, float(tagger.marginal(label, pos))) for pos, label in enumerate(path))
                )
                probabilities.append((record.key, float(tagger.probability(path))))
                if trace:
                    logger.info(
                        "Labelled sequence",
                        extra={"group": record.key, "items": len(record)},
                    )
        except Exception as err:
            raise EngineError(str(err)) from err
        finally:
            tagger.close()

        return EngineScores(tokens=tuple(tokens), sequences=tuple(probabilities))
