# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Hyperparameter resolution.

CRFsuite only accepts string-valued parameters, while callers naturally
write `max_iterations=50` or `c2=0.1`. Option values are therefore an
explicit two-variant type:

  Number  a value that parsed (or was given) as a number
  Text    anything else, kept as the original string

Defaults come from the engine's schema as strings and are parsed into
Number where possible, Text otherwise. At the engine boundary every value is
projected back to a string.

Unknown option names are not checked against the schema. They go to the
engine as-is and the engine decides what to do with them.
"""

import numbers
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from seqcrf.engine import get_default_engine
from seqcrf.engine.interfaces import CRFEngine, HyperparameterSchema
from seqcrf.options.methods import TrainingMethod


@dataclass(frozen=True)
class Number:
    """A numeric option value."""

    value: Union[int, float]

    def to_engine(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Text:
    """A string option value that isn't a number."""

    value: str

    def to_engine(self) -> str:
        return self.value


OptionValue = Union[Number, Text]
TrainingOptions = dict[str, OptionValue]


def parse_option_value(raw: str) -> OptionValue:
    """Parse a string as an integer, then a float; fall back to Text."""
    text = raw.strip()
    try:
        return Number(int(text))
    except ValueError:
        pass
    try:
        return Number(float(text))
    except ValueError:
        return Text(raw)


def to_option_value(value: Any) -> OptionValue:
    """
    Wrap a caller-supplied value without guessing.

    Booleans become 1/0 since CRFsuite flags are integers. Strings stay Text
    even if they look numeric; they reach the engine unchanged either way.
    """
    if isinstance(value, (Number, Text)):
        return value
    if isinstance(value, bool):
        return Number(int(value))
    if isinstance(value, numbers.Integral):
        return Number(int(value))
    if isinstance(value, numbers.Real):
        return Number(float(value))
    return Text(str(value))


def schema_for(
    method: Union[str, TrainingMethod],
    engine: Optional[CRFEngine] = None,
) -> HyperparameterSchema:
    """
    The hyperparameter table of a training method.

    Raises:
        UnknownMethod: If the method isn't supported.
    """
    parsed = TrainingMethod.parse(method)
    return (engine or get_default_engine()).schema(parsed.value)


def defaults_for(
    method: Union[str, TrainingMethod],
    engine: Optional[CRFEngine] = None,
) -> TrainingOptions:
    """Default option set of a method, usable directly as training input."""
    schema = schema_for(method, engine)
    return {spec.name: parse_option_value(spec.default) for spec in schema.params}


def resolve(
    method: Union[str, TrainingMethod],
    user_options: Optional[Mapping[str, Any]] = None,
    engine: Optional[CRFEngine] = None,
) -> dict[str, str]:
    """
    Overlay user options on the method's defaults and stringify everything.

    Returns:
        Parameter name to string value, ready for the engine.

    Raises:
        UnknownMethod: If the method isn't supported.
    """
    merged: TrainingOptions = defaults_for(method, engine)
    for name, value in (user_options or {}).items():
        merged[str(name)] = to_option_value(value)
    return {name: value.to_engine() for name, value in merged.items()}
