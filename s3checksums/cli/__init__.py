"""Command-line interface (``s3checksums``)."""
