import logging
import os
import struct

import numpy as np

logger = logging.getLogger(__name__)

# file header: number of tables, then per table its element count
COUNT_FORMAT = "=I"
SIZE_FORMAT = "=Q"


class WeightFileError(Exception):
    """Raised when a weight file cannot be read or written."""


class WeightTable:
    def __init__(self, size=0, value=None):
        """ A dense float32 lookup table addressed by feature code. """
        if value is None:
            value = np.zeros(size, dtype=np.float32)
        self.value = value

    @property
    def size(self):
        return len(self.value)

    def _check(self, code):
        # negative codes would wrap around in numpy, so they are rejected too
        if not 0 <= code < len(self.value):
            raise IndexError("feature code %d out of range [0, %d)" % (code, len(self.value)))

    def get(self, code):
        self._check(code)
        return float(self.value[code])

    def add(self, code, delta):
        self._check(code)
        self.value[code] += delta

    def __getitem__(self, code):
        return self.get(code)

    def __len__(self):
        return len(self.value)

    def __eq__(self, other):
        if not isinstance(other, WeightTable):
            return NotImplemented
        # bitwise comparison, so saved and reloaded tables must match exactly
        return self.value.tobytes() == other.value.tobytes()

    def write(self, f):
        f.write(struct.pack(SIZE_FORMAT, len(self.value)))
        f.write(self.value.astype(np.float32).tobytes())

    @classmethod
    def read(cls, f):
        raw = f.read(struct.calcsize(SIZE_FORMAT))
        if len(raw) != struct.calcsize(SIZE_FORMAT):
            raise WeightFileError("truncated table header")
        (size,) = struct.unpack(SIZE_FORMAT, raw)
        nbytes = size * np.dtype(np.float32).itemsize
        # a corrupt size field must not drive the read past the end of the file
        pos = f.tell()
        remaining = f.seek(0, os.SEEK_END) - pos
        f.seek(pos)
        if nbytes > remaining:
            raise WeightFileError("table of %d entries exceeds the %d bytes left in the file" % (size, remaining))
        payload = f.read(nbytes)
        if len(payload) != nbytes:
            raise WeightFileError("truncated table payload: expected %d bytes, got %d" % (nbytes, len(payload)))
        return cls(value=np.frombuffer(payload, dtype=np.float32).copy())


def save_weights(path, tables):
    """
    Write the tables as a uint32 table count followed by each table's
    uint64 element count and raw float32 payload, table 0 first.
    """
    try:
        with open(path, "wb") as f:
            f.write(struct.pack(COUNT_FORMAT, len(tables)))
            for table in tables:
                table.write(f)
    except OSError as e:
        raise WeightFileError("cannot save weights to %s: %s" % (path, e)) from e
    logger.info("Saved %d weight tables to %s", len(tables), path)


def load_weights(path, expected_sizes=None):
    """
    Read tables written by save_weights. The stored table count decides how
    many tables are read. When expected_sizes is given, the file must hold
    exactly that many tables with exactly those sizes.
    """
    try:
        with open(path, "rb") as f:
            raw = f.read(struct.calcsize(COUNT_FORMAT))
            if len(raw) != struct.calcsize(COUNT_FORMAT):
                raise WeightFileError("truncated weight file %s" % path)
            (count,) = struct.unpack(COUNT_FORMAT, raw)
            tables = [WeightTable.read(f) for _ in range(count)]
            if f.read(1):
                raise WeightFileError("trailing data after %d tables in %s" % (count, path))
    except OSError as e:
        raise WeightFileError("cannot load weights from %s: %s" % (path, e)) from e

    if expected_sizes is not None:
        sizes = [len(t) for t in tables]
        if sizes != list(expected_sizes):
            raise WeightFileError("weight file %s holds tables %s, expected %s" % (path, sizes, list(expected_sizes)))
    logger.info("Loaded %d weight tables from %s", len(tables), path)
    return tables
