# User value: This file describes a candidate upload so admission checks work the same for local files and received uploads.
import mimetypes
import os
from dataclasses import dataclass
from typing import BinaryIO, Optional


# eq=False keeps identity hashing: two uploads with equal metadata are still two files.
@dataclass(frozen=True, eq=False)
class UploadCandidate:
    filename: str
    content_type: Optional[str] = None
    size: Optional[int] = None
    path: Optional[str] = None
    stream: Optional[BinaryIO] = None

    # User value: builds a candidate straight from disk so scripts can run the same checks as the UI.
    @classmethod
    def from_path(cls, path: str, content_type: Optional[str] = None) -> "UploadCandidate":
        guessed, _ = mimetypes.guess_type(path)
        return cls(
            filename=os.path.basename(path),
            content_type=content_type or guessed,
            size=os.path.getsize(path),
            path=path,
        )

    # Matches the attribute FastAPI's UploadFile exposes for the underlying stream.
    @property
    def file(self) -> Optional[BinaryIO]:
        return self.stream
