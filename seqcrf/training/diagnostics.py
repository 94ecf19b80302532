# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Training diagnostics: CRFsuite's free-text training log as numeric series.

CRFsuite reports progress as blocks like

    ***** Iteration #12 *****
    Loss: 1234.567890
    Feature norm: 12.345678
    Error norm: 98.765432
    Active features: 4321
    Line search trials: 1
    Line search step: 1.000000
    Seconds required for this iteration: 0.012

(SGD writes "Epoch #n", "Feature L2-norm", "Learning rate (eta)" and
friends instead.) Parsing is one linear pass over the lines with a fixed
table of (prefix, series, parser) entries. A prefix that never shows up
simply produces no series; sparse diagnostics are normal, e.g. the
perceptron has no line search.
"""

import re
from dataclasses import dataclass, field
from typing import Optional


_NUMBER = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?|[-+]?(?:inf|nan)", re.IGNORECASE)


def _leading_number(text: str) -> Optional[float]:
    match = _NUMBER.match(text.strip())
    return float(match.group()) if match else None


_BOUNDARY = re.compile(r"^\*+\s*(?:Iteration|Epoch)\s+#(\d+)\s*\*+\s*$")

# Order matters only where one prefix could shadow another; none do.
_SERIES_TABLE: tuple[tuple[str, str, type], ...] = (
    ("Loss: ", "loss", float),
    ("Feature norm: ", "feature_norm", float),
    ("Feature L2-norm: ", "feature_norm", float),
    ("Error norm: ", "error_norm", float),
    ("Active features: ", "active_features", int),
    ("Line search trials: ", "linesearch_trials", int),
    ("Line search step: ", "linesearch_step", float),
    ("Improvement ratio: ", "improvement_ratio", float),
    ("Learning rate (eta): ", "learning_rate", float),
    ("Total number of feature updates: ", "feature_updates", int),
    ("Seconds required for this iteration: ", "seconds", float),
)

_ACTIVE_TABLE: tuple[tuple[str, str], ...] = (
    ("Number of active features: ", "features"),
    ("Number of active attributes: ", "attributes"),
    ("Number of active labels: ", "labels"),
)

SERIES_NAMES: tuple[str, ...] = tuple(dict.fromkeys(name for _, name, _ in _SERIES_TABLE))


@dataclass(frozen=True)
class ActiveCounts:
    """How many features, attributes and labels ended up in the model."""

    features: Optional[int] = None
    attributes: Optional[int] = None
    labels: Optional[int] = None


@dataclass(frozen=True)
class TrainingDiagnostics:
    """
    Read-only structured view over one training log.

    Attributes:
        iterations: Iteration (or epoch) numbers, in log order.
        series: Metric name to per-iteration values, only for metrics that
            appeared inside an iteration block.
        active: Final active feature/attribute/label counts.
        last_iteration: Verbatim text of the final iteration block.
        raw_log: The full log the rest was parsed from.
    """

    iterations: tuple[int, ...] = ()
    series: dict[str, tuple[float, ...]] = field(default_factory=dict)
    active: ActiveCounts = field(default_factory=ActiveCounts)
    last_iteration: str = ""
    raw_log: str = field(default="", repr=False)

    def get(self, name: str) -> tuple[float, ...]:
        """A metric series, or an empty tuple when the log never reported it."""
        return self.series.get(name, ())

    @property
    def loss(self) -> tuple[float, ...]:
        return self.get("loss")

    @property
    def final_loss(self) -> Optional[float]:
        losses = self.loss
        return losses[-1] if losses else None

    def to_dict(self) -> dict[str, object]:
        return {
            "iterations": list(self.iterations),
            **{name: list(values) for name, values in self.series.items()},
            "active": {
                "features": self.active.features,
                "attributes": self.active.attributes,
                "labels": self.active.labels,
            },
            "last_iteration": self.last_iteration,
        }


def parse_training_log(raw_log: str) -> TrainingDiagnostics:
    """
    Parse a CRFsuite training log.

    Never fails on content: lines that match nothing are skipped, and a log
    without a single iteration header gives empty diagnostics.
    """
    lines = raw_log.splitlines()
    iterations: list[int] = []
    series: dict[str, list[float]] = {}
    active: dict[str, int] = {}
    last_boundary: Optional[int] = None
    in_block = False

    for number, line in enumerate(lines):
        stripped = line.strip()
        if not stripped:
            in_block = False
            continue

        boundary = _BOUNDARY.match(stripped)
        if boundary:
            iterations.append(int(boundary.group(1)))
            last_boundary = number
            in_block = True
            continue

        for prefix, name, kind in _SERIES_TABLE:
            if stripped.startswith(prefix):
                # Only per-iteration values; SGD repeats the final loss after terminating.
                value = _leading_number(stripped[len(prefix):])
                if in_block and value is not None:
                    series.setdefault(name, []).append(kind(value))
                break
        else:
            for prefix, name in _ACTIVE_TABLE:
                if stripped.startswith(prefix):
                    # "Number of active features: 1234 (5678)" is used (total).
                    value = _leading_number(stripped[len(prefix):])
                    if value is not None:
                        active[name] = int(value)
                    break

    return TrainingDiagnostics(
        iterations=tuple(iterations),
        series={name: tuple(values) for name, values in series.items()},
        active=ActiveCounts(**active),
        last_iteration=_last_iteration_block(lines, last_boundary),
        raw_log=raw_log,
    )


def _last_iteration_block(lines: list[str], boundary: Optional[int]) -> str:
    """Lines strictly after the last boundary up to the next blank line."""
    if boundary is None:
        return ""
    block = []
    for line in lines[boundary + 1:]:
        if not line.strip():
            break
        block.append(line)
    return "\n".join(block)
