"""Object URI and scratch-file naming helpers.

Object keys use ``/`` as a separator but are not filesystem paths, so they
must never be joined onto a local directory directly. These helpers build
the canonical ``gs://bucket/key`` URI used by the classifier and flatten
keys into single path components for transient artifacts.
"""

from __future__ import annotations

import re

OBJECT_URI_SCHEME = "gs"

_UNSAFE_COMPONENT_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_MAX_COMPONENT_LENGTH = 200


def object_uri(bucket: str, key: str) -> str:
    """Build the canonical URI for an object.

    Parameters
    ----------
    bucket:
        Bucket holding the object.
    key:
        Object key within the bucket.

    Returns
    -------
    str
        URI in ``gs://bucket/key`` format.

    Examples
    --------
    >>> object_uri("uploads", "cats/tabby.jpg")
    'gs://uploads/cats/tabby.jpg'

    """
    return f"{OBJECT_URI_SCHEME}://{bucket}/{key}"


def flatten_key(key: str) -> str:
    """Flatten an object key into a single safe filename component.

    Separators and any character outside ``[A-Za-z0-9._-]`` become ``_``.
    The tail of the key is kept when truncating so the file extension
    survives; ImageMagick picks the output format from it.

    Examples
    --------
    >>> flatten_key("cats/tabby cat.jpg")
    'cats_tabby_cat.jpg'

    """
    flattened = _UNSAFE_COMPONENT_CHARS.sub("_", key).lstrip(".")
    if not flattened:
        flattened = "object"
    return flattened[-_MAX_COMPONENT_LENGTH:]


def scratch_file_name(key: str, token: str, *, prefix: str = "") -> str:
    """Return a scratch filename unique to one invocation.

    Examples
    --------
    >>> scratch_file_name("cats/tabby.jpg", "1f2e", prefix="blurred-")
    'blurred-1f2e-cats_tabby.jpg'

    """
    return f"{prefix}{token}-{flatten_key(key)}"
