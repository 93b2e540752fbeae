"""
Item Codecs

Protocols for the legacy MySQLPlayerDataBridge blob decoder and the
destination item codec, plus the JSON codec used for destination storage.
"""

import base64
import binascii
import importlib
import json
from typing import Any, Protocol, runtime_checkable

from pydantic import ValidationError

from mpdb_migrator.core.models import ItemList, ItemStack


class CodecError(Exception):
    """Raised when a blob cannot be decoded or items cannot be encoded."""
    pass


@runtime_checkable
class LegacyCodec(Protocol):
    """Decodes opaque legacy serialized item blobs."""

    def decode_items(self, blob: str) -> ItemList:
        ...


@runtime_checkable
class ItemCodec(Protocol):
    """Encodes item containers into the destination's serialized form."""

    def encode_items(self, items: ItemList) -> str:
        ...

    def decode_items(self, serialized: str) -> ItemList:
        ...


class JsonItemCodec:
    """
    Destination item codec.

    Containers are written as a base64-encoded JSON array with one entry per
    slot; empty slots are ``null``.

    Example:
        >>> codec = JsonItemCodec()
        >>> blob = codec.encode_items([ItemStack(material="STONE", amount=64), None])
        >>> codec.decode_items(blob)[1] is None
        True
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def encode_items(self, items: ItemList) -> str:
        payload = [item.model_dump() if item is not None else None for item in items]
        try:
            raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise CodecError(f"Cannot encode items: {e}") from e
        return base64.b64encode(raw.encode(self.encoding)).decode("ascii")

    def decode_items(self, serialized: str) -> ItemList:
        if not serialized:
            return []
        try:
            raw = base64.b64decode(serialized, validate=True).decode(self.encoding)
            payload = json.loads(raw)
        except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CodecError(f"Cannot decode item data: {e}") from e

        if not isinstance(payload, list):
            raise CodecError("Item data must be a list of slots")

        try:
            return [ItemStack.model_validate(slot) if slot is not None else None for slot in payload]
        except ValidationError as e:
            raise CodecError(f"Invalid item in container: {e}") from e


def load_codec(path: str, **kwargs: Any) -> Any:
    """
    Load a codec from an import path of the form ``package.module:attribute``.

    Classes and factory functions are called with ``kwargs``; any other
    attribute is returned as the codec instance itself.

    Raises:
        CodecError: If the path is malformed or cannot be imported
    """
    module_name, sep, attr_name = path.partition(":")
    if not sep or not module_name or not attr_name:
        raise CodecError(f"Codec path must look like 'package.module:attribute', got '{path}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise CodecError(f"Cannot import codec module '{module_name}': {e}") from e

    try:
        target = getattr(module, attr_name)
    except AttributeError as e:
        raise CodecError(f"Module '{module_name}' has no attribute '{attr_name}'") from e

    return target(**kwargs) if callable(target) else target
