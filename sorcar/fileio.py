"""
Atomic replacement of output files.

Every file is first written to a temporary file in its target directory.
Only when all of them are written are they renamed over their targets, in
the given order, so a failed write leaves the previous outputs in place
and no temporary files behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Sequence, Tuple, Type, Union

from .errors import OutputFileError, SorcarError

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def replace_files(contents: Sequence[Tuple[PathLike, str]],
                  error_type: Type[SorcarError] = OutputFileError) -> None:
    """Write each ``(path, text)`` pair, then rename all of them into place."""
    staged: List[Tuple[str, Path]] = []
    path = None
    try:
        for target, text in contents:
            path = Path(target)
            with tempfile.NamedTemporaryFile("w", dir=path.parent,
                                             prefix=path.name + ".", suffix=".tmp",
                                             delete=False) as f:
                staged.append((f.name, path))
                f.write(text)

        while staged:
            tmp_name, path = staged[0]
            os.replace(tmp_name, path)
            staged.pop(0)
            logger.debug("Wrote %s", path)
    except OSError as e:
        for tmp_name, _ in staged:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
        raise error_type(f"Error writing {path}: {e}") from e
