# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
seqcrf training package.

  - core: train(), the orchestrator around engine.build
  - sink: the per-call transient training log
  - diagnostics: parsing that log into numeric series
"""
