# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for training log parsing.

The log is free text, so the interesting cases are the shapes it comes in:
L-BFGS blocks, SGD epochs, a log with no iterations at all, and lines that
look almost like metrics.
"""

import textwrap

from seqcrf.training.diagnostics import SERIES_NAMES, parse_training_log


class TestLbfgsLog:
    def test_one_loss_per_iteration(self, lbfgs_log: str) -> None:
        diagnostics = parse_training_log(lbfgs_log)
        assert diagnostics.iterations == (1, 2, 3)
        assert diagnostics.loss == (12.345678, 9.876543, 7.5)
        assert diagnostics.final_loss == 7.5

    def test_every_lbfgs_series_is_captured(self, lbfgs_log: str) -> None:
        diagnostics = parse_training_log(lbfgs_log)
        assert diagnostics.get("feature_norm") == (1.0, 1.5, 2.25)
        assert diagnostics.get("error_norm") == (8.123456, 4.0, 1.0)
        assert diagnostics.get("active_features") == (20, 20, 18)
        assert diagnostics.get("linesearch_trials") == (1, 1, 2)
        assert diagnostics.get("linesearch_step") == (0.125, 1.0, 0.5)
        assert diagnostics.get("seconds") == (0.0, 0.0, 0.001)

    def test_series_the_method_never_reports_are_absent(self, lbfgs_log: str) -> None:
        diagnostics = parse_training_log(lbfgs_log)
        assert "learning_rate" not in diagnostics.series
        assert diagnostics.get("learning_rate") == ()

    def test_active_counts_come_from_the_summary(self, lbfgs_log: str) -> None:
        active = parse_training_log(lbfgs_log).active
        assert active.features == 18
        assert active.attributes == 9
        assert active.labels == 3

    def test_last_iteration_block_is_verbatim(self, lbfgs_log: str) -> None:
        block = parse_training_log(lbfgs_log).last_iteration
        assert block.splitlines()[0] == "Loss: 7.500000"
        assert block.splitlines()[-1] == "Seconds required for this iteration: 0.001"
        assert "Iteration #3" not in block

    def test_raw_log_is_kept(self, lbfgs_log: str) -> None:
        assert parse_training_log(lbfgs_log).raw_log == lbfgs_log


class TestSgdLog:
    LOG = textwrap.dedent("""\
        Stochastic Gradient Descent (SGD)
        c2: 1.000000

        ***** Epoch #1 *****
        Loss: 40.5
        Feature L2-norm: 3.25
        Learning rate (eta): 0.0500
        Total number of feature updates: 120
        Seconds required for this iteration: 0.002

        ***** Epoch #2 *****
        Loss: 30.25
        Improvement ratio: 0.339
        Feature L2-norm: 4.5
        Learning rate (eta): 0.0250
        Total number of feature updates: 240
        Seconds required for this iteration: 0.002
    """)

    def test_epochs_count_as_iterations(self) -> None:
        diagnostics = parse_training_log(self.LOG)
        assert diagnostics.iterations == (1, 2)
        assert diagnostics.loss == (40.5, 30.25)

    def test_sgd_specific_series(self) -> None:
        diagnostics = parse_training_log(self.LOG)
        assert diagnostics.get("feature_norm") == (3.25, 4.5)
        assert diagnostics.get("learning_rate") == (0.05, 0.025)
        assert diagnostics.get("feature_updates") == (120, 240)
        assert diagnostics.get("improvement_ratio") == (0.339,)

    def test_loss_after_termination_is_not_an_epoch(self) -> None:
        log = self.LOG + (
            "\nSGD terminated with the maximum number of iterations\n"
            "Loss: 30.25\n"
            "Total seconds required for training: 0.004\n"
        )
        diagnostics = parse_training_log(log)
        assert diagnostics.loss == (40.5, 30.25)
        assert len(diagnostics.get("seconds")) == len(diagnostics.iterations)

    def test_last_block_runs_to_end_of_log(self) -> None:
        block = parse_training_log(self.LOG).last_iteration
        assert block.splitlines()[0] == "Loss: 30.25"
        assert block.endswith("Seconds required for this iteration: 0.002")


class TestDegenerateLogs:
    def test_empty_log(self) -> None:
        diagnostics = parse_training_log("")
        assert diagnostics.iterations == ()
        assert diagnostics.series == {}
        assert diagnostics.last_iteration == ""
        assert diagnostics.final_loss is None

    def test_log_without_boundaries_has_empty_last_iteration(self) -> None:
        diagnostics = parse_training_log("Feature generation\nNumber of features: 10\n")
        assert diagnostics.iterations == ()
        assert diagnostics.last_iteration == ""
        assert diagnostics.active.features is None

    def test_malformed_metric_values_are_skipped(self) -> None:
        log = "***** Iteration #1 *****\nLoss: n/a\nLoss: 3.0\n"
        assert parse_training_log(log).loss == (3.0,)

    def test_last_summary_occurrence_wins(self) -> None:
        log = "Number of active features: 5 (9)\nNumber of active features: 4 (9)\n"
        assert parse_training_log(log).active.features == 4

    def test_k_boundaries_give_k_losses(self) -> None:
        blocks = "".join(
            f"***** Iteration #{i} *****\nLoss: {100 - i}.0\n\n" for i in range(1, 8)
        )
        diagnostics = parse_training_log(blocks)
        assert len(diagnostics.iterations) == len(diagnostics.loss) == 7


class TestSerialisation:
    def test_to_dict_contains_series_and_active(self, lbfgs_log: str) -> None:
        data = parse_training_log(lbfgs_log).to_dict()
        assert data["iterations"] == [1, 2, 3]
        assert data["loss"] == [12.345678, 9.876543, 7.5]
        assert data["active"]["labels"] == 3

    def test_series_names_are_unique(self) -> None:
        assert len(SERIES_NAMES) == len(set(SERIES_NAMES))
        assert "feature_norm" in SERIES_NAMES
