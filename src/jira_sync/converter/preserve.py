"""
Preservation Markers

Nodes that markdown has no syntax for (media, panels, macros, ...) are written
as an HTML comment triplet carrying the node's JSON, base64 encoded:

    <!-- PRESERVED: Inline image — Do not edit this block; it is restored on push. -->
    <!-- data:eyJ0eXBlIjoibWVkaWFTaW5nbGUiLC4uLn0= -->
    <!-- /PRESERVED -->

On push the block is decoded back into the exact original node.

Where the node sits inside a line (inline nodes, table cells, the first
paragraph of a list item) the same three comments are written on one line,
separated by single spaces, and picked out of the text by ``INLINE_MARKER``.
"""

import base64
import binascii
import json
import re
from typing import List, Optional, Sequence, Tuple

from jira_sync.adf.nodes import Node
from jira_sync.constants import (
    COMMENT_CLOSE,
    PRESERVE_DATA,
    PRESERVE_END,
    PRESERVE_FAILED_NOTICE,
    PRESERVE_NOTICE,
    PRESERVE_START,
    PRESERVED_DESCRIPTIONS,
)
from jira_sync.exceptions import MarkerDecodeError, NodeSerializationError
from jira_sync.logger import logger

INLINE_MARKER = re.compile(
    re.escape(PRESERVE_START) + r'[^>]*?' + re.escape(COMMENT_CLOSE)
    + r' (' + re.escape(PRESERVE_DATA) + r'\S*' + re.escape(COMMENT_CLOSE) + r')'
    + r' ' + re.escape(PRESERVE_END)
)


def describe(node_type: str) -> str:
    """Human-readable label for a preserved node type."""
    return PRESERVED_DESCRIPTIONS.get(node_type) or node_type


def is_marker_start(line: str) -> bool:
    """True for the open line of a three-line marker block."""
    stripped = line.strip()
    return stripped.startswith(PRESERVE_START) and PRESERVE_END not in stripped


def encode_marker(node: Node) -> List[str]:
    """Encode a node as marker lines.

    Returns the three marker lines, or a single explanatory comment line when
    the node cannot be serialized (its content is lost in that case).
    """
    desc = describe(node.type)
    try:
        payload = node.to_json()
    except NodeSerializationError as e:
        logger.warning(f"{desc} could not be preserved: {e}")
        return [f"{PRESERVE_START} {desc} — {PRESERVE_FAILED_NOTICE}{COMMENT_CLOSE}"]

    encoded = base64.b64encode(payload.encode("utf-8")).decode("ascii")
    return [
        f"{PRESERVE_START} {desc} — {PRESERVE_NOTICE}{COMMENT_CLOSE}",
        f"{PRESERVE_DATA}{encoded}{COMMENT_CLOSE}",
        PRESERVE_END,
    ]


def encode_inline_marker(node: Node) -> str:
    """Encode a node as a marker that fits on one line."""
    return " ".join(encode_marker(node))


def decode_payload(data_line: str) -> Node:
    """Decode the node carried by a marker data line.

    Raises:
        MarkerDecodeError: the line is not a well-formed data line
    """
    line = data_line.strip()
    if not line.startswith(PRESERVE_DATA):
        raise MarkerDecodeError("missing data prefix")

    encoded = line[len(PRESERVE_DATA):]
    if encoded.endswith(COMMENT_CLOSE):
        encoded = encoded[:-len(COMMENT_CLOSE)]
    encoded = encoded.strip()

    try:
        raw = base64.b64decode(encoded, validate=True)
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise MarkerDecodeError(f"bad payload: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("type"), str):
        raise MarkerDecodeError("payload is not a node object")
    return Node.from_dict(data)


def decode_marker(lines: Sequence[str], start: int) -> Tuple[Optional[Node], int]:
    """Try to read a marker block starting at ``lines[start]``.

    Returns:
        (node, index after the close line) on success, otherwise
        (None, start + 1) and the caller treats the lines as ordinary text.
    """
    if start + 2 >= len(lines) or not is_marker_start(lines[start]):
        return None, start + 1

    if lines[start + 2].strip() != PRESERVE_END:
        logger.debug(f"Marker at line {start + 1} has no close line, kept as text")
        return None, start + 1

    try:
        node = decode_payload(lines[start + 1])
    except MarkerDecodeError as e:
        logger.debug(f"Marker at line {start + 1} kept as text: {e}")
        return None, start + 1

    return node, start + 3
