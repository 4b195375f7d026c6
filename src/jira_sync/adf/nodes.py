"""
ADF Node Model

In-memory form of an Atlassian Document Format tree. Attribute names follow
the JSON wire keys so a node maps 1:1 onto what the REST API sends:

    {"type": "paragraph", "content": [{"type": "text", "text": "Hi",
                                        "marks": [{"type": "strong"}]}]}

Empty fields are left out of the serialized form, matching the service.
"""

import json
from typing import Any, Dict, List, Optional

from jira_sync.exceptions import NodeSerializationError


class Mark:
    """Inline decoration on a text node (strong, em, link, ...)."""

    __slots__ = ("type", "attrs")

    def __init__(self, type: str, attrs: Optional[Dict[str, Any]] = None):
        self.type = type
        self.attrs = attrs if attrs is not None else {}

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type}
        if self.attrs:
            data["attrs"] = self.attrs
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Mark":
        return cls(data.get("type", ""), dict(data.get("attrs") or {}))

    def __eq__(self, other):
        if not isinstance(other, Mark):
            return NotImplemented
        return self.type == other.type and self.attrs == other.attrs

    def __repr__(self):
        if self.attrs:
            return f"Mark({self.type!r}, {self.attrs!r})"
        return f"Mark({self.type!r})"


class Node:
    """A node of the document tree.

    Only ``text`` nodes carry ``text`` and ``marks``; every other type uses
    ``content`` and ``attrs``.
    """

    __slots__ = ("type", "content", "text", "attrs", "marks")

    def __init__(
        self,
        type: str,
        content: Optional[List["Node"]] = None,
        text: str = "",
        attrs: Optional[Dict[str, Any]] = None,
        marks: Optional[List[Mark]] = None,
    ):
        self.type = type
        self.content = content if content is not None else []
        self.text = text
        self.attrs = attrs if attrs is not None else {}
        self.marks = marks if marks is not None else []

    @classmethod
    def text_node(cls, text: str, marks: Optional[List[Mark]] = None) -> "Node":
        return cls("text", text=text, marks=marks)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the wire shape (key order: type, content, text, attrs, marks)."""
        data: Dict[str, Any] = {"type": self.type}
        if self.content:
            data["content"] = [child.to_dict() for child in self.content]
        if self.text:
            data["text"] = self.text
        if self.attrs:
            data["attrs"] = self.attrs
        if self.marks:
            data["marks"] = [mark.to_dict() for mark in self.marks]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        """Build a node tree from decoded JSON. Unknown top-level keys are ignored."""
        return cls(
            data.get("type", ""),
            content=[cls.from_dict(child) for child in data.get("content") or []],
            text=data.get("text") or "",
            attrs=dict(data.get("attrs") or {}),
            marks=[Mark.from_dict(mark) for mark in data.get("marks") or []],
        )

    def to_json(self, indent: Optional[int] = None) -> str:
        """Serialize to JSON text.

        Raises:
            NodeSerializationError: an attribute value is not JSON serializable
        """
        separators = (",", ":") if indent is None else (",", ": ")
        try:
            return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent, separators=separators)
        except (TypeError, ValueError) as e:
            raise NodeSerializationError(f"cannot serialize {self.type!r} node: {e}") from e

    @classmethod
    def from_json(cls, raw: str) -> "Node":
        return cls.from_dict(json.loads(raw))

    def plain_text(self) -> str:
        """Concatenated text of all descendant text nodes."""
        if self.type == "text":
            return self.text
        return "".join(child.plain_text() for child in self.content)

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return (
            self.type == other.type
            and self.text == other.text
            and self.attrs == other.attrs
            and self.marks == other.marks
            and self.content == other.content
        )

    def __repr__(self):
        parts = [repr(self.type)]
        if self.text:
            parts.append(f"text={self.text!r}")
        if self.attrs:
            parts.append(f"attrs={self.attrs!r}")
        if self.marks:
            parts.append(f"marks={self.marks!r}")
        if self.content:
            parts.append(f"content={self.content!r}")
        return f"Node({', '.join(parts)})"
