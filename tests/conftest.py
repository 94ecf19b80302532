# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for seqcrf tests.

Most tests run against FakeEngine, a stand-in for CRFsuite that writes a
canned training log to the sink and a few bytes as the "model". It lets us
test the orchestration, including the failure paths, without the native
library. Tests that need the real engine skip themselves when pycrfsuite
isn't installed.
"""

import logging
import textwrap
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd
import pytest

from seqcrf.engine.interfaces import (
    EngineScores,
    HyperparameterSchema,
    LogSink,
    ParameterSpec,
    SequenceRecord,
)
from seqcrf.logging import logger as logger_module

LBFGS_LOG = textwrap.dedent("""\
    Feature generation
    type: CRF1d
    feature.minfreq: 0.000000
    feature.possible_states: 0
    feature.possible_transitions: 0
    Number of features: 20
    Seconds required: 0.001

    L-BFGS optimization
    c1: 0.000000
    c2: 1.000000
    num_memories: 6
    max_iterations: 3
    epsilon: 0.000010
    stop: 10
    delta: 0.000010
    linesearch: MoreThuente
    linesearch.max_iterations: 20

    ***** Iteration #1 *****
    Loss: 12.345678
    Feature norm: 1.000000
    Error norm: 8.123456
    Active features: 20
    Line search trials: 1
    Line search step: 0.125000
    Seconds required for this iteration: 0.000

    ***** Iteration #2 *****
    Loss: 9.876543
    Feature norm: 1.500000
    Error norm: 4.000000
    Active features: 20
    Line search trials: 1
    Line search step: 1.000000
    Seconds required for this iteration: 0.000

    ***** Iteration #3 *****
    Loss: 7.500000
    Feature norm: 2.250000
    Error norm: 1.000000
    Active features: 18
    Line search trials: 2
    Line search step: 0.500000
    Seconds required for this iteration: 0.001

    L-BFGS terminated with the maximum number of iterations
    Total seconds required for training: 0.003

    Storing the model
    Number of active features: 18 (20)
    Number of active attributes: 9 (11)
    Number of active labels: 3 (3)
    Writing labels
    Writing attributes
    Writing feature references for transitions
    Writing feature references for attributes
    Seconds required: 0.000

""")

FAKE_PARAMS = (
    ParameterSpec("feature.minfreq", "0.000000", "The minimum frequency of features."),
    ParameterSpec("feature.possible_states", "0", "Force to generate possible state features."),
    ParameterSpec("c2", "1.000000", "Coefficient for L2 regularization."),
    ParameterSpec("max_iterations", "2147483647", "The maximum number of iterations."),
    ParameterSpec("linesearch", "MoreThuente", "The line search algorithm used in L-BFGS updates."),
    ParameterSpec("averaging", "1", "Enable the averaging of feature weights."),
)


class FakeEngine:
    """
    In-memory CRFEngine.

    Set `fail` to an exception to make build() raise it after the log has
    been written. Every call is recorded so tests can look at what the
    orchestrator handed over.
    """

    def __init__(self, log: str = LBFGS_LOG) -> None:
        self.log = log
        self.fail: Optional[BaseException] = None
        self.build_calls: list[dict] = []
        self.sink_paths: list[Path] = []
        self.schema_calls: list[str] = []
        self.key_offset = 0

    def build(
        self,
        sequences: Sequence[SequenceRecord],
        method: str,
        options: dict[str, str],
        output_path: Path,
        trace: bool,
        sink: LogSink,
    ) -> None:
        self.build_calls.append(
            {
                "sequences": list(sequences),
                "method": method,
                "options": dict(options),
                "output_path": output_path,
                "trace": trace,
            }
        )
        self.sink_paths.append(sink.path)
        sink.write(self.log)
        if self.fail is not None:
            raise self.fail
        output_path.write_bytes(b"FAKECRF\x00" * 16)

    def dump(self, model_path: Path, report_path: Path) -> None:
        report_path.write_text(f"FILEHEADER = {{\n  magic: lCRF\n}}\nmodel: {model_path.name}\n")

    def schema(self, method: str) -> HyperparameterSchema:
        self.schema_calls.append(method)
        return HyperparameterSchema(method=method, type="crf1d", params=FAKE_PARAMS)

    def predict(
        self,
        model_path: Path,
        sequences: Sequence[SequenceRecord],
        trace: bool,
    ) -> EngineScores:
        # Capitalised first attribute means an entity; marginals shrink along the sequence.
        tokens = []
        probabilities = []
        for record in sequences:
            labelled = []
            for pos, item in enumerate(record.items):
                label = "ENT" if item and item[0][:1].isupper() else "O"
                labelled.append((label, round(0.9 - 0.1 * pos, 6)))
            tokens.append(tuple(labelled))
            probabilities.append((record.key + self.key_offset, round(0.5 ** len(record), 6)))
        return EngineScores(tokens=tuple(tokens), sequences=tuple(probabilities))


@pytest.fixture()
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture()
def lbfgs_log() -> str:
    return LBFGS_LOG


@pytest.fixture()
def ner_frame() -> pd.DataFrame:
    """
    Two tiny documents, one row per token. Document ids are strings so
    they get relabelled on the way to the engine.
    """
    return pd.DataFrame(
        {
            "token": ["Paris", "is", "nice", "John", "lives", "in", "Rome"],
            "pos": ["NNP", "VBZ", "JJ", "NNP", "VBZ", "IN", "NNP"],
            "label": ["B-LOC", "O", "O", "B-PER", "O", "O", "B-LOC"],
            "doc_id": ["doc-a", "doc-a", "doc-a", "doc-b", "doc-b", "doc-b", "doc-b"],
        }
    )


@pytest.fixture()
def ner_csv(tmp_path: Path, ner_frame: pd.DataFrame) -> Path:
    path = tmp_path / "ner.csv"
    ner_frame.to_csv(path, index=False)
    return path


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """The smallest config that passes schema validation."""
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          project_name: "seqcrf-test"
          log_level: "DEBUG"
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """Valid YAML that fails schema validation (missing config_version)."""
    config_content = textwrap.dedent("""\
        global:
          project_name: "seqcrf-test"
    """)
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file


@pytest.fixture()
def isolated_package_logging(monkeypatch: pytest.MonkeyPatch):  # type: ignore[no-untyped-def]
    """
    Package-wide log settings are process state. Start each test from none
    and close any log files the test attached.
    """
    monkeypatch.setattr(logger_module, "_PACKAGE_SETTINGS", {})
    yield
    for name, candidate in list(logging.Logger.manager.loggerDict.items()):
        if not isinstance(candidate, logging.Logger):
            continue
        for handler in list(candidate.handlers):
            if isinstance(handler, logging.FileHandler):
                candidate.removeHandler(handler)
                handler.close()
