# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Sequence encoder: flat token table in, per-group sequence records out.

The caller thinks in tables: one row per token, some attribute columns, a
label column, and a group column saying which sentence or document each
token belongs to. The engine thinks in sequences with integer keys. This
module is the translation, and it is strict about three things:

  1. Shapes. Rows, labels and groups must line up one to one. Anything else
     is a ShapeMismatch, raised before the engine is called.
  2. Order. Rows with the same group become one sequence in the order they
     appear in the table, even if the group's rows are scattered. Sequences
     are emitted in order of each group's first appearance.
  3. Identity. The engine only takes integer group keys. When the caller's
     identifiers aren't already a contiguous run of integers they get
     relabelled 1..k by first appearance, and the GroupIndex built here is
     what maps results back to the caller's keys later. It travels with the
     encoded sequences; nothing tries to guess it back from engine output.

Attribute cells are passed on as bare strings. Two equal strings in
different columns are the same attribute to CRFsuite; if you want them
distinct, make the strings distinct upstream (e.g. "pos=NN", "token=NN").
"""

import logging
import numbers
from collections.abc import Hashable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import pandas as pd

from seqcrf.engine.interfaces import SequenceRecord
from seqcrf.exceptions import ShapeMismatch
from seqcrf.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)

AttributeTable = Union[pd.DataFrame, Sequence[Mapping[str, Any]]]


@dataclass(frozen=True)
class GroupIndex:
    """
    Bidirectional map between caller group identifiers and engine keys.

    Built once per encode call. When the caller's identifiers were already
    contiguous integers the map is the identity and `relabelled` is False.
    """

    identifiers: tuple[Hashable, ...]
    keys: tuple[int, ...]
    relabelled: bool
    _to_key: dict[Hashable, int] = field(repr=False, compare=False)
    _to_identifier: dict[int, Hashable] = field(repr=False, compare=False)

    @classmethod
    def from_assignment(cls, group: Sequence[Hashable]) -> "GroupIndex":
        """Enumerate distinct identifiers in order of first appearance."""
        distinct = list(dict.fromkeys(group))

        if _is_contiguous_integers(distinct):
            keys = [int(g) for g in distinct]
            relabelled = False
        else:
            keys = list(range(1, len(distinct) + 1))
            relabelled = True

        return cls(
            identifiers=tuple(distinct),
            keys=tuple(keys),
            relabelled=relabelled,
            _to_key=dict(zip(distinct, keys)),
            _to_identifier=dict(zip(keys, distinct)),
        )

    def key_for(self, identifier: Hashable) -> int:
        return self._to_key[identifier]

    def identifier_for(self, key: int) -> Hashable:
        """
        Map an engine key back to the caller's identifier.

        Raises:
            KeyError: If the key was never produced by this index.
        """
        try:
            return self._to_identifier[key]
        except KeyError:
            raise KeyError(f"Group key {key} is not part of this encoding") from None

    def __len__(self) -> int:
        return len(self.keys)


def _is_contiguous_integers(values: list[Hashable]) -> bool:
    if not values:
        return False
    if not all(isinstance(v, numbers.Integral) and not isinstance(v, bool) for v in values):
        return False
    ints = [int(v) for v in values]
    return max(ints) - min(ints) + 1 == len(set(ints))


@dataclass(frozen=True)
class EncodedSequences:
    """
    The encoder's output: engine-ready records plus everything needed to
    interpret results later.

    Attributes:
        records: One SequenceRecord per group, in first-appearance order.
        groups: Group identifier map for decoding.
        attribute_names: Column names of the attribute table, in order.
        labels: Distinct labels in first-appearance order (empty at inference).
        n_rows: Total number of rows (tokens) encoded.
    """

    records: tuple[SequenceRecord, ...]
    groups: GroupIndex
    attribute_names: tuple[str, ...]
    labels: tuple[str, ...]
    n_rows: int

    @property
    def has_labels(self) -> bool:
        return all(r.labels is not None for r in self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)


def _as_list(values: Any) -> list[Any]:
    if isinstance(values, (pd.Series, pd.Index)):
        return values.tolist()
    return list(values)


def _cell_to_attribute(value: Any) -> Optional[str]:
    """Cell value as an attribute string; None for missing cells."""
    if value is None:
        return None
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    return str(value)


def _table_rows(x: AttributeTable) -> tuple[tuple[str, ...], list[tuple[str, ...]]]:
    """
    Split an attribute table into (column names, rows of attribute strings).

    Raises:
        ShapeMismatch: If mapping rows don't all have the same keys.
    """
    if isinstance(x, pd.DataFrame):
        columns = tuple(str(c) for c in x.columns)
        raw_rows = x.itertuples(index=False, name=None)
    else:
        rows_in = list(x)
        columns = tuple(str(c) for c in rows_in[0].keys()) if rows_in else ()
        expected = set(rows_in[0].keys()) if rows_in else set()
        for position, row in enumerate(rows_in):
            if set(row.keys()) != expected:
                raise ShapeMismatch(
                    f"Row {position} has columns {sorted(map(str, row.keys()))}, "
                    f"expected {sorted(map(str, expected))}"
                )
        keys = list(rows_in[0].keys()) if rows_in else []
        raw_rows = (tuple(row[k] for k in keys) for row in rows_in)

    rows = []
    for raw in raw_rows:
        rows.append(tuple(a for a in (_cell_to_attribute(v) for v in raw) if a is not None))
    return columns, rows


def encode(
    x: AttributeTable,
    y: Optional[Sequence[Any]] = None,
    group: Optional[Sequence[Hashable]] = None,
) -> EncodedSequences:
    """
    Encode a token table into per-group sequence records.

    Args:
        x: Attribute table, a DataFrame or a sequence of row mappings.
        y: One label per row, or None when encoding for prediction.
        group: One group identifier per row. Required.

    Returns:
        EncodedSequences ready for training (with y) or prediction (without).

    Raises:
        ShapeMismatch: When lengths disagree, the table is empty, or the
            rows don't share a column set.
    """
    if group is None:
        raise ShapeMismatch("A group assignment is required, one identifier per row")

    groups = _as_list(group)
    labels = _as_list(y) if y is not None else None

    if labels is not None and len(groups) != len(labels):
        raise ShapeMismatch(
            f"Group assignment has {len(groups)} entries but the label sequence has {len(labels)}"
        )

    columns, rows = _table_rows(x)
    if len(rows) != len(groups):
        raise ShapeMismatch(
            f"Attribute table has {len(rows)} rows but the group assignment has {len(groups)} entries"
        )
    if not rows:
        raise ShapeMismatch("Attribute table has no rows")

    index = GroupIndex.from_assignment(groups)

    positions_by_key: dict[int, list[int]] = {key: [] for key in index.keys}
    for position, identifier in enumerate(groups):
        positions_by_key[index.key_for(identifier)].append(position)

    records = []
    for key in index.keys:
        positions = positions_by_key[key]
        records.append(
            SequenceRecord(
                key=key,
                positions=tuple(positions),
                items=tuple(rows[p] for p in positions),
                labels=tuple(str(labels[p]) for p in positions) if labels is not None else None,
            )
        )

    distinct_labels = tuple(dict.fromkeys(str(v) for v in labels)) if labels is not None else ()

    logger.debug(
        "Encoded sequences",
        extra={
            "rows": len(rows),
            "sequences": len(records),
            "attributes": len(columns),
            "labelled": labels is not None,
            "relabelled_groups": index.relabelled,
        },
    )

    return EncodedSequences(
        records=tuple(records),
        groups=index,
        attribute_names=columns,
        labels=distinct_labels,
        n_rows=len(rows),
    )
