"""File attachments and the ``multipart/form-data`` fields used to upload them.

A message with attachments is sent as one multipart request: a
``payload_json`` field holding exactly the JSON document that would have
been sent without attachments, followed by one ``files[i]`` field per file.
The body itself is encoded by httpx::

    data, files = multipart_fields({"content": "report"}, [File(raw, "a.csv")])
    await http.post(path, data=data, files=files)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any, Optional, Sequence, Union

FileField = tuple[str, tuple[str, bytes, Optional[str]]]


class File:
    """A file to attach to a message.

    Args:
        content: Raw bytes, or a binary file object which is read once.
        filename: Name shown to recipients.
        content_type: MIME type. When omitted httpx guesses it from
            *filename*, falling back to ``application/octet-stream``.
    """

    def __init__(
        self,
        content: Union[bytes, IO[bytes]],
        filename: str = "file",
        content_type: Optional[str] = None,
    ) -> None:
        if not isinstance(content, bytes):
            content = content.read()
        self.content: bytes = content
        self.filename = filename
        self.content_type = content_type

    @classmethod
    def from_path(cls, path: Union[str, Path], filename: Optional[str] = None) -> File:
        path = Path(path)
        return cls(path.read_bytes(), filename or path.name)

    def __repr__(self) -> str:
        return f"File(filename={self.filename!r}, size={len(self.content)})"

    def to_field(self, index: int) -> FileField:
        """Return the httpx ``files`` entry uploading this file as ``files[index]``."""
        return f"files[{index}]", (self.filename, self.content, self.content_type)


def multipart_fields(
    payload: dict[str, Any],
    files: Sequence[File],
) -> tuple[dict[str, str], list[FileField]]:
    """Split a message into the ``data`` and ``files`` arguments of an httpx request."""
    return {"payload_json": json.dumps(payload)}, [f.to_field(i) for i, f in enumerate(files)]
