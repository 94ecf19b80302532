# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Error taxonomy for seqcrf.

Every failure this layer can report is one of the classes below. Nothing is
retried and nothing is swallowed: each error goes straight to the immediate
caller. The CLI maps them onto exit codes, library users catch SeqCRFError
(or a specific subclass) if they want to.
"""


class SeqCRFError(Exception):
    """Base for all seqcrf errors."""


class ShapeMismatch(SeqCRFError):
    """
    Raised when the attribute rows, labels and groups disagree in length,
    or when attribute rows don't share the same column set.

    Always detected before the engine is touched, so it never leaves
    anything behind on disk.
    """


class UnknownMethod(SeqCRFError):
    """Raised when a training method name is not one of the supported algorithms."""


class ModelNotFound(SeqCRFError):
    """Raised when an operation needs a model artifact that isn't on disk."""


class EngineError(SeqCRFError):
    """
    Opaque failure reported by the CRF engine (bad options, training failure,
    unreadable model). The engine's own message is kept verbatim.
    """


class DiagnosticSinkError(SeqCRFError):
    """Raised when the transient training log cannot be created, read, or deleted."""


class InvalidOutputType(SeqCRFError, ValueError):
    """Raised when a prediction output type is neither 'marginal' nor 'sequence'."""
