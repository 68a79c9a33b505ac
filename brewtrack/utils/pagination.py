# brewtrack/utils/pagination.py
"""
Offset cursors for forward pagination.

A cursor is ``base64({"offset": N})``. The cursor of an item encodes its
1-based position in the ordered set, so passing it back as ``after`` starts
the next page right behind that item.
"""
import base64
import binascii
import json
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from brewtrack.errors import MalformedCursorError, ValidationError

# {"offset": N} never needs more than this
MAX_CURSOR_LENGTH = 128


def encode_cursor(offset: int) -> str:
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise ValidationError("Cursor offset must be a non-negative integer.", field="offset")
    raw = json.dumps({"offset": offset})
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(token: str) -> Optional[int]:
    """
    Returns the offset stored in ``token``, or None when the envelope has no
    offset. Unknown keys are ignored.
    """
    if not isinstance(token, str) or len(token) > MAX_CURSOR_LENGTH:
        raise MalformedCursorError()
    try:
        raw = base64.b64decode(token, validate=True)
        data = json.loads(raw)
    except (binascii.Error, ValueError, TypeError, RecursionError) as exc:
        raise MalformedCursorError() from exc

    if not isinstance(data, dict):
        raise MalformedCursorError()

    offset = data.get("offset")
    if offset is None:
        return None
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise MalformedCursorError()
    return offset


@dataclass
class Edge:
    cursor: str
    node: Any


@dataclass
class Connection:
    edges: List[Edge] = field(default_factory=list)
    has_next_page: bool = False
    has_previous_page: bool = False

    @property
    def items(self) -> List[Any]:
        return [edge.node for edge in self.edges]

    @property
    def end_cursor(self) -> Optional[str]:
        return self.edges[-1].cursor if self.edges else None

    def to_dict(self, serialize: Callable[[Any], Any] = lambda node: node.to_dict()):
        return {
            "edges": [{"cursor": edge.cursor, "node": serialize(edge.node)} for edge in self.edges],
            "page_info": {
                "has_next_page": self.has_next_page,
                "has_previous_page": self.has_previous_page,
                "end_cursor": self.end_cursor,
            },
        }


def paginate(collection, first: Optional[int] = None, after: Optional[str] = None) -> Connection:
    """
    Slices one page out of an already ordered collection.

    ``collection`` only needs slice support: a list, or a SQLAlchemy Query
    (whose slicing becomes LIMIT/OFFSET). One extra row is fetched to learn
    whether another page exists.
    """
    if first is not None and first < 0:
        raise ValidationError("first must not be negative.", field="first")

    offset = 0
    if after:
        offset = decode_cursor(after) or 0

    if first is None:
        rows = list(collection[offset:])
    else:
        rows = list(collection[offset:offset + first + 1])

    has_next_page = first is not None and len(rows) > first
    if has_next_page:
        rows = rows[:first]

    edges = [Edge(cursor=encode_cursor(offset + i + 1), node=row) for i, row in enumerate(rows)]
    return Connection(edges=edges, has_next_page=has_next_page, has_previous_page=offset > 0)
