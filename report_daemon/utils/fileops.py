"""Byte-for-byte file copy helpers."""

import logging
import os
import shutil


COPY_BUFFER_SIZE = 64 * 1024


def copy_file(src, dst, exclusive: bool = False) -> None:
    """Copy the contents of ``src`` to ``dst``.

    Args:
        src: Source file path.
        dst: Destination file path.
        exclusive: Refuse to write when ``dst`` already exists.

    Raises:
        OSError: If reading or writing fails. A partially written
                 destination is removed before the error propagates.
    """
    mode = 'xb' if exclusive else 'wb'
    with open(src, 'rb') as src_file:
        with open(dst, mode) as dst_file:
            try:
                shutil.copyfileobj(src_file, dst_file, COPY_BUFFER_SIZE)
            except OSError:
                dst_file.close()
                _remove_quietly(dst)
                raise


def _remove_quietly(path) -> None:
    try:
        os.unlink(path)
    except OSError as e:
        logging.getLogger(__name__).debug(f"Could not remove partial copy {path}: {e}")
