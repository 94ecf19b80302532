# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Small filesystem helpers shared by the training and model-handle code.

Model metadata is written atomically: a temp file in the same directory,
then a rename. A crash mid-write leaves a stray temp file rather than a
half-written sidecar next to a perfectly good model.
"""

import tempfile
from pathlib import Path


def atomic_write(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write text to a file atomically.

    The temp file lives in the target's directory so the final rename stays
    on one filesystem, which is what makes it atomic on POSIX.

    Raises:
        OSError: If the write or rename fails. The target is untouched then.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd = tempfile.NamedTemporaryFile(
        mode="w",
        encoding=encoding,
        dir=str(target_path.parent),
        prefix=".seqcrf_tmp_",
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(temp_fd.name)

    try:
        temp_fd.write(content)
        temp_fd.flush()
        temp_fd.close()
        temp_path.replace(target_path)
    except BaseException:
        temp_fd.close()
        if temp_path.exists():
            temp_path.unlink()
        raise


def safe_read(file_path: Path, encoding: str = "utf-8") -> str:
    """
    Read a text file with a clear error for the two common mistakes.

    Raises:
        FileNotFoundError: If the path doesn't exist.
        IsADirectoryError: If the path is a directory.
        OSError: For other I/O errors.
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    if not file_path.is_file():
        raise IsADirectoryError(f"Expected a file, got a directory: {file_path}")
    return file_path.read_text(encoding=encoding, errors="replace")


def safe_delete(file_path: Path) -> bool:
    """
    Delete a file if it exists. Returns whether anything was deleted.

    A missing file is not an error.

    Raises:
        OSError: If the file exists but can't be deleted.
    """
    if file_path.exists():
        file_path.unlink()
        return True
    return False
