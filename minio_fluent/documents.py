"""
JSON Documents

Document is an insertion-ordered JSON-like mapping with a right-biased
structural merge. build() constructs one from key/value data or decodes
one from bytes, streams, files and URLs.

Merging never mutates its operands: ``a + b`` and ``a.merge(b)`` both
return a new Document.
"""

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple, Union

import requests

from .config import config

logger = logging.getLogger(__name__)

MergeSource = Union[None, Mapping, Tuple[str, Any], Iterable[Tuple[str, Any]]]


def _as_mapping(source: MergeSource) -> Mapping:
    if source is None:
        return {}
    if isinstance(source, Mapping):
        return source
    if isinstance(source, tuple) and len(source) == 2 and isinstance(source[0], str):
        return {source[0]: source[1]}
    return dict(source)


class Document(dict):
    """JSON object value supporting ``+`` as a right-biased merge."""

    def merge(self, other: MergeSource) -> "Document":
        """
        Combine this document with other.

        Keys from other win on conflict. Neither operand is modified.

        Args:
            other: Document, mapping, (key, value) pair or iterable of pairs

        Returns:
            New Document holding the merged entries
        """
        merged = Document(self)
        merged.update(_as_mapping(other))
        return merged

    def __add__(self, other: MergeSource) -> "Document":
        return self.merge(other)

    def __radd__(self, other: MergeSource) -> "Document":
        return Document(_as_mapping(other)).merge(self)

    def to_json(self, pretty: bool = False) -> str:
        return json.dumps(self, indent=2 if pretty else None, default=str)

    def to_bytes(self) -> bytes:
        return self.to_json().encode("utf-8")

    def __str__(self) -> str:
        return self.to_json()


def decode(data: Union[str, bytes, bytearray]) -> Document:
    """
    Decode JSON text into a Document.

    Nested JSON objects are decoded as Documents too.

    Raises:
        json.JSONDecodeError: If data is not valid JSON
        TypeError: If the top-level JSON value is not an object
    """
    value = json.loads(data, object_pairs_hook=Document)
    if not isinstance(value, Document):
        raise TypeError(f"Expected a JSON object, got {type(value).__name__}")
    return value


def decode_stream(stream, done: bool = True) -> Document:
    """
    Decode a text or binary stream into a Document.

    Args:
        stream: Object with a read() method
        done: Close the stream once decoded (default: True)
    """
    try:
        return decode(stream.read())
    finally:
        if done:
            stream.close()


def decode_path(path: Union[str, os.PathLike]) -> Document:
    """Decode a local JSON file into a Document."""
    return decode(Path(path).read_bytes())


def decode_url(url: str, timeout: Optional[int] = None) -> Document:
    """
    Fetch a URL and decode its body into a Document.

    Raises:
        requests.RequestException: If the request fails or returns an error status
    """
    logger.info(f"Fetching JSON document from '{url}'")
    response = requests.get(url, timeout=timeout or config.url_timeout)
    response.raise_for_status()
    return decode(response.content)


def _is_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def build(*args: Any, done: bool = True) -> Document:
    """
    Build a Document.

    - ``build()``: empty document
    - ``build(key, value)``: single entry
    - ``build(mapping)``: copy of the mapping
    - ``build((key, value))`` or ``build([(k1, v1), (k2, v2)])``: from pairs
    - ``build(b"...")``: decoded JSON bytes
    - ``build(stream, done=True)``: decoded text or binary stream
    - ``build(Path(...))`` or ``build("data/zips.json")``: decoded local file
    - ``build("https://...")``: decoded HTTP(S) response body
    - ``build('{"a": 1}')``: decoded JSON text (a string naming an existing
      file is read as a path first)

    Parse and transport errors propagate unchanged.
    """
    if not args:
        return Document()
    if len(args) == 2 and isinstance(args[0], str):
        return Document({args[0]: args[1]})
    if len(args) > 1:
        raise TypeError(f"build() takes at most 2 positional arguments ({len(args)} given)")

    source = args[0]
    if isinstance(source, Mapping):
        return Document(source)
    if isinstance(source, (bytes, bytearray)):
        return decode(source)
    if isinstance(source, str):
        if _is_url(source):
            return decode_url(source)
        if os.path.isfile(source):
            return decode_path(source)
        return decode(source)
    if isinstance(source, os.PathLike):
        return decode_path(source)
    if hasattr(source, "read"):
        return decode_stream(source, done=done)
    return Document(_as_mapping(source))
