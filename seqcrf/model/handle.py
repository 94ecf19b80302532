# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Model handle: a trained CRF on disk plus what we know about it.

The artifact itself is CRFsuite's binary format and opaque to us. Labels,
attribute names, method, options and the raw training log can't be read
back out of it, so training writes them to a JSON sidecar next to the
artifact (`annotator.crfsuite.meta.json`). open() picks the sidecar up when
it's there.

Handles are immutable and never delete their artifact.
"""

import json
import logging
import os
import shutil
import tempfile
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from seqcrf.engine import get_default_engine
from seqcrf.engine.interfaces import CRFEngine
from seqcrf.exceptions import ModelNotFound, SeqCRFError
from seqcrf.logging.logger import get_logger
from seqcrf.utils.filesystem import atomic_write, safe_delete, safe_read

logger: logging.Logger = get_logger(__name__)

METADATA_SUFFIX = ".meta.json"


@dataclass(frozen=True)
class ModelMetadata:
    """
    Everything about a model that the artifact doesn't tell us.

    For adopted artifacts this is whatever the caller said. Nothing here
    checks it against the model.
    """

    labels: tuple[str, ...] = ()
    attribute_names: tuple[str, ...] = ()
    method: Optional[str] = None
    options: dict[str, str] = field(default_factory=dict)
    log: str = field(default="", repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModelMetadata":
        return cls(
            labels=tuple(str(v) for v in data.get("labels", ())),
            attribute_names=tuple(str(v) for v in data.get("attribute_names", ())),
            method=data.get("method"),
            options={str(k): str(v) for k, v in (data.get("options") or {}).items()},
            log=str(data.get("log", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["labels"] = list(self.labels)
        data["attribute_names"] = list(self.attribute_names)
        return data


def metadata_path_for(model_path: Path) -> Path:
    return model_path.with_name(model_path.name + METADATA_SUFFIX)


@dataclass(frozen=True)
class ModelHandle:
    """A persisted model artifact and its cached metadata."""

    path: Path
    metadata: ModelMetadata = field(default_factory=ModelMetadata)

    @classmethod
    def open(cls, path: Union[str, Path]) -> "ModelHandle":
        """
        Open an existing artifact.

        Raises:
            ModelNotFound: If there's no file at path.
            SeqCRFError: If a sidecar exists but isn't valid metadata JSON.
        """
        model_path = Path(path).expanduser().resolve()
        if not model_path.is_file():
            raise ModelNotFound(f"No model artifact at {model_path}")

        sidecar = metadata_path_for(model_path)
        if not sidecar.is_file():
            logger.warning(
                "No metadata found next to model, labels and attributes are unknown",
                extra={"path": str(model_path)},
            )
            return cls(path=model_path)

        try:
            data = json.loads(safe_read(sidecar))
        except json.JSONDecodeError as err:
            raise SeqCRFError(f"Invalid model metadata in {sidecar}: {err}") from err
        if not isinstance(data, dict):
            raise SeqCRFError(f"Model metadata in {sidecar} must be a JSON object")

        return cls(path=model_path, metadata=ModelMetadata.from_dict(data))

    @classmethod
    def adopt(
        cls,
        path: Union[str, Path],
        metadata: Union[ModelMetadata, Mapping[str, Any], None] = None,
    ) -> "ModelHandle":
        """
        Wrap an artifact trained elsewhere, trusting the caller's metadata.

        Raises:
            ModelNotFound: If there's no file at path.
        """
        model_path = Path(path).expanduser().resolve()
        if not model_path.is_file():
            raise ModelNotFound(f"No model artifact at {model_path}")
        if metadata is None:
            metadata = ModelMetadata()
        elif not isinstance(metadata, ModelMetadata):
            metadata = ModelMetadata.from_dict(metadata)
        logger.info("Adopted model", extra={"path": str(model_path), "labels": len(metadata.labels)})
        return cls(path=model_path, metadata=metadata)

    @property
    def metadata_path(self) -> Path:
        return metadata_path_for(self.path)

    @property
    def method(self) -> Optional[str]:
        return self.metadata.method

    @property
    def options(self) -> dict[str, str]:
        return dict(self.metadata.options)

    @property
    def log(self) -> str:
        return self.metadata.log

    def exists(self) -> bool:
        return self.path.is_file()

    def size_bytes(self) -> int:
        if not self.exists():
            raise ModelNotFound(f"No model artifact at {self.path}")
        return self.path.stat().st_size

    def labels(self) -> tuple[str, ...]:
        return self.metadata.labels

    def attribute_names(self) -> tuple[str, ...]:
        return self.metadata.attribute_names

    def save_metadata(self) -> Path:
        """Write the sidecar atomically and return its path."""
        atomic_write(self.metadata_path, json.dumps(self.metadata.to_dict(), indent=2))
        return self.metadata_path

    def describe(self) -> str:
        size_mb = round(self.size_bytes() / (2**20), 2)
        labels = self.labels()
        return "\n".join(
            [
                f"Conditional Random Field saved at {self.path}",
                f"  size of the model in Mb: {size_mb}",
                f"  number of categories: {len(labels)}",
                f"  category labels: {', '.join(labels)}",
                "To inspect the model in detail, dump it with handle.dump('modeldetails.txt') "
                "and inspect the modeldetails.txt file",
            ]
        )

    def __str__(self) -> str:
        return self.describe()

    def dump(
        self,
        destination: Union[str, Path, None] = None,
        engine: Optional[CRFEngine] = None,
    ) -> Path:
        """
        Render CRFsuite's text report of the model (labels, attributes,
        transition and state weights).

        The engine writes to a transient `crfsuite_*.txt` file. With a
        destination the report is copied there and the transient file
        removed; without one the transient path is returned and it's yours
        to clean up.

        Raises:
            ModelNotFound: If the artifact is gone.
            EngineError: If the engine can't read the model.
        """
        if not self.exists():
            raise ModelNotFound(f"No model artifact at {self.path}")

        fd, name = tempfile.mkstemp(prefix="crfsuite_", suffix=".txt")
        # The engine opens the path itself.
        os.close(fd)
        report = Path(name)

        try:
            (engine or get_default_engine()).dump(self.path, report)
        except BaseException:
            safe_delete(report)
            raise
        logger.info("Dumped model summary", extra={"model": str(self.path), "report": str(report)})

        if destination is None:
            return report

        target = Path(destination).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            shutil.copyfile(report, target)
        finally:
            safe_delete(report)
        logger.info("Copied model summary", extra={"report": str(target)})
        return target
