"""s3checksums: keeps per-artifact SHA-1 records in an S3-compatible bucket honest.

Every ``.zip``/``.tar`` artifact under a source prefix is expected to have a
sibling record at ``.checksums/<key>.sha1`` holding the hex digest of its
bytes.  A run finds artifacts whose record is missing, empty or corrupt and
regenerates exactly those.
"""

__version__ = "0.1.0"
