# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for training methods and hyperparameter resolution.

Defaults arrive from the engine as strings and get parsed to Number or
Text; resolution overlays user values and stringifies everything for the
engine.
"""

import pytest

from seqcrf.engine.interfaces import HyperparameterSchema, ParameterSpec
from seqcrf.exceptions import UnknownMethod
from seqcrf.options.core import (
    Number,
    Text,
    defaults_for,
    parse_option_value,
    resolve,
    schema_for,
    to_option_value,
)
from seqcrf.options.methods import TrainingMethod


class TestTrainingMethod:
    @pytest.mark.parametrize(
        "name", ["lbfgs", "l2sgd", "averaged-perceptron", "passive-aggressive", "arow"]
    )
    def test_every_supported_name_parses(self, name: str) -> None:
        assert TrainingMethod.parse(name).value == name

    def test_parse_is_case_insensitive(self) -> None:
        assert TrainingMethod.parse(" LBFGS ") is TrainingMethod.LBFGS

    def test_unknown_method_is_rejected(self) -> None:
        with pytest.raises(UnknownMethod, match="sgd-momentum"):
            TrainingMethod.parse("sgd-momentum")

    def test_every_method_has_a_description(self) -> None:
        for method in TrainingMethod:
            assert method.description


class TestOptionValues:
    def test_integer_string_parses_as_integer(self) -> None:
        assert parse_option_value("100") == Number(100)

    def test_float_string_parses_as_float(self) -> None:
        assert parse_option_value("0.000010") == Number(1e-05)

    def test_non_numeric_string_stays_text(self) -> None:
        assert parse_option_value("MoreThuente") == Text("MoreThuente")

    def test_booleans_become_flags(self) -> None:
        assert to_option_value(True).to_engine() == "1"
        assert to_option_value(False).to_engine() == "0"

    def test_strings_from_callers_are_not_reinterpreted(self) -> None:
        assert to_option_value("0.5") == Text("0.5")


class TestSchema:
    def test_schema_comes_from_the_engine(self, fake_engine) -> None:  # type: ignore[no-untyped-def]
        schema = schema_for("lbfgs", engine=fake_engine)
        assert schema.method == "lbfgs"
        assert schema.type == "crf1d"
        assert "c2" in schema.names()

    def test_schema_is_idempotent(self, fake_engine) -> None:  # type: ignore[no-untyped-def]
        assert schema_for("arow", engine=fake_engine) == schema_for("arow", engine=fake_engine)

    def test_schema_frame_columns(self, fake_engine) -> None:  # type: ignore[no-untyped-def]
        frame = schema_for("lbfgs", engine=fake_engine).to_frame()
        assert list(frame.columns) == ["arg", "arg_default", "description"]
        assert len(frame) == len(schema_for("lbfgs", engine=fake_engine).params)

    def test_unknown_method_never_reaches_the_engine(self, fake_engine) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(UnknownMethod):
            schema_for("nope", engine=fake_engine)
        assert fake_engine.schema_calls == []


class TestDefaultsAndResolve:
    def test_defaults_are_typed(self, fake_engine) -> None:  # type: ignore[no-untyped-def]
        defaults = defaults_for("lbfgs", engine=fake_engine)
        assert defaults["max_iterations"] == Number(2147483647)
        assert defaults["c2"] == Number(1.0)
        assert defaults["linesearch"] == Text("MoreThuente")

    def test_flag_defaults_are_numbers(self, fake_engine) -> None:  # type: ignore[no-untyped-def]
        defaults = defaults_for("passive-aggressive", engine=fake_engine)
        assert defaults["averaging"] == Number(1)
        assert resolve("passive-aggressive", engine=fake_engine)["averaging"] == "1"

    def test_resolve_overlays_user_values(self, fake_engine) -> None:  # type: ignore[no-untyped-def]
        resolved = resolve("lbfgs", {"max_iterations": 50, "c2": 0.1}, engine=fake_engine)
        assert resolved["max_iterations"] == "50"
        assert resolved["c2"] == "0.1"
        assert resolved["linesearch"] == "MoreThuente"

    def test_resolve_stringifies_everything(self, fake_engine) -> None:  # type: ignore[no-untyped-def]
        resolved = resolve(
            "lbfgs", {"feature.possible_states": True, "linesearch": "Backtracking"}, engine=fake_engine
        )
        assert all(isinstance(v, str) for v in resolved.values())
        assert resolved["feature.possible_states"] == "1"

    def test_unknown_option_names_pass_through(self, fake_engine) -> None:  # type: ignore[no-untyped-def]
        resolved = resolve("lbfgs", {"no.such.option": 3}, engine=fake_engine)
        assert resolved["no.such.option"] == "3"


class _FlagEngine:
    """Just enough engine to hand out a schema with a numeric and a text default."""

    def schema(self, method: str) -> HyperparameterSchema:
        return HyperparameterSchema(
            method=method,
            type="crf1d",
            params=(
                ParameterSpec("period", "5", "Duration of iterations to test the stopping criterion."),
                ParameterSpec("calibration", "true", "Whether to calibrate the learning rate."),
            ),
        )


class TestDefaultParsing:
    def test_numeric_and_text_defaults(self) -> None:
        defaults = defaults_for("l2sgd", engine=_FlagEngine())  # type: ignore[arg-type]
        assert defaults["period"] == Number(5)
        assert defaults["calibration"] == Text("true")
