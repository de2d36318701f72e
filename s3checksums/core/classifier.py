"""Record classifier: double verification against remote listing and mirror.

Order of checks per artifact key:

1. absent from the remote record inventory            -> missing
2. sync failed, or absent from the local mirror        -> missing
3. mirrored content with all whitespace removed:
   empty string                                        -> empty
   equals the empty-input digest                       -> empty
   not a hex digest of the expected length             -> corrupt
   otherwise                                           -> valid

Remote existence dominates local content; emptiness is checked before
format.  Every key lands in exactly one bucket.
"""

from __future__ import annotations

import logging
import re

from s3checksums.core.hasher import Hasher
from s3checksums.core.mirror import LocalMirror
from s3checksums.models.classification import Classification, ClassificationOutcome
from s3checksums.models.inventory import ArtifactInventory, RecordInventory

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def classify_content(content: bytes | None, hasher: Hasher) -> ClassificationOutcome:
    """Classify raw record bytes (``None`` means the record is absent)."""
    if content is None:
        return ClassificationOutcome.MISSING
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        return ClassificationOutcome.CORRUPT
    text = _WHITESPACE.sub("", text)
    if not text:
        return ClassificationOutcome.EMPTY
    if text.lower() == hasher.sentinel:
        return ClassificationOutcome.EMPTY
    if len(text) != hasher.hex_length or not re.fullmatch(r"[0-9a-fA-F]+", text):
        return ClassificationOutcome.CORRUPT
    return ClassificationOutcome.VALID


class Classifier:
    """Partitions the artifact inventory by record state.

    Parameters
    ----------
    mirror:
        Local mirror holding synced record bytes.
    hasher:
        Supplies the sentinel digest and expected digest length.
    """

    def __init__(self, mirror: LocalMirror, hasher: Hasher) -> None:
        self._mirror = mirror
        self._hasher = hasher

    def classify_key(
        self,
        key: str,
        remote_keys: frozenset[str],
        unavailable: frozenset[str] = frozenset(),
    ) -> ClassificationOutcome:
        if key not in remote_keys:
            return ClassificationOutcome.MISSING
        if key in unavailable:
            return ClassificationOutcome.MISSING
        try:
            content = self._mirror.read_bytes(key)
        except (OSError, ValueError) as exc:
            logger.warning("Cannot read mirrored record for %s: %s", key, exc)
            return ClassificationOutcome.MISSING
        return classify_content(content, self._hasher)

    def classify(
        self,
        artifacts: ArtifactInventory,
        records: RecordInventory,
        unavailable: frozenset[str] | set[str] | tuple[str, ...] = frozenset(),
    ) -> Classification:
        """Classify every artifact key, preserving inventory order.

        *unavailable* lists record keys whose sync failed this run; their
        mirrored copies (if any) are stale and are never trusted.
        """
        logger.info("Classifying records with double verification (remote + local)...")
        remote_keys = records.key_set()
        unavailable = frozenset(unavailable)
        buckets: dict[ClassificationOutcome, list[str]] = {o: [] for o in ClassificationOutcome}

        for key in artifacts.keys:
            buckets[self.classify_key(key, remote_keys, unavailable)].append(key)

        classification = Classification(
            valid=tuple(buckets[ClassificationOutcome.VALID]),
            missing=tuple(buckets[ClassificationOutcome.MISSING]),
            empty=tuple(buckets[ClassificationOutcome.EMPTY]),
            corrupt=tuple(buckets[ClassificationOutcome.CORRUPT]),
        )
        logger.info(
            "Classification: valid=%d missing=%d empty=%d corrupt=%d",
            len(classification.valid),
            len(classification.missing),
            len(classification.empty),
            len(classification.corrupt),
        )
        return classification
