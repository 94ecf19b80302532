# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Prediction decoding: marginal (per token) and sequence (per group) output.
"""
