# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The fixed set of training algorithms CRFsuite offers for linear-chain CRFs.

The method picks both the optimizer and which hyperparameters are valid for
it, so it gets parsed and checked before anything else touches the engine.
"""

from enum import Enum

from seqcrf.exceptions import UnknownMethod

# The graphical model type. Only the first-order linear chain is supported.
GRAPHICAL_MODEL_TYPE = "crf1d"


class TrainingMethod(str, Enum):
    """Supported training algorithms, valued by their CRFsuite names."""

    LBFGS = "lbfgs"
    L2SGD = "l2sgd"
    AVERAGED_PERCEPTRON = "averaged-perceptron"
    PASSIVE_AGGRESSIVE = "passive-aggressive"
    AROW = "arow"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @classmethod
    def parse(cls, value: "str | TrainingMethod") -> "TrainingMethod":
        """
        Turn a method name into a TrainingMethod.

        Raises:
            UnknownMethod: If the name isn't one of the supported algorithms.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as err:
            valid = ", ".join(m.value for m in cls)
            raise UnknownMethod(
                f"Unknown training method '{value}'. Must be one of: {valid}"
            ) from err


_DESCRIPTIONS = {
    TrainingMethod.LBFGS: "L-BFGS with L1/L2 regularization",
    TrainingMethod.L2SGD: "SGD with L2-regularization",
    TrainingMethod.AVERAGED_PERCEPTRON: "Averaged Perceptron",
    TrainingMethod.PASSIVE_AGGRESSIVE: "Passive Aggressive",
    TrainingMethod.AROW: "Adaptive Regularization of Weights (AROW)",
}
