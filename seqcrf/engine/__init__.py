# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CRF engine boundary.

  - interfaces: the CRFEngine protocol and the value types crossing it
  - crfsuite: the pycrfsuite-backed implementation
"""

from functools import lru_cache

from seqcrf.engine.interfaces import CRFEngine


@lru_cache(maxsize=1)
def get_default_engine() -> CRFEngine:
    """The CRFsuite engine, created on first use so pycrfsuite loads lazily."""
    from seqcrf.engine.crfsuite import CRFSuiteEngine

    return CRFSuiteEngine()
