from __future__ import annotations

import mimetypes
from email.utils import quote
from typing import NamedTuple, Optional
from urllib.parse import quote as url_quote, unquote, urlsplit

MEDIA_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/gif",
        "video/mp4",
        "video/mpeg",
        "video/webm",
        "video/quicktime",
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "audio/mpeg",
        "audio/wav",
        "audio/ogg",
        "audio/midi",
        "application/ogg",
        "application/x-7z-compressed",
        "application/zip",
        "application/x-rar-compressed",
        "application/x-tar",
        "application/x-bzip2",
        "application/x-gzip",
        "application/x-zip-compressed",
        "application/x-tar-gz",
        "application/x-compressed-tar",
    }
)

# extensions the interpreter's built-in table lacks or maps to a legacy alias
_EXTRA_TYPES = {
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".webm": "video/webm",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".oga": "audio/ogg",
    ".ogx": "application/ogg",
    ".mid": "audio/midi",
    ".midi": "audio/midi",
    ".7z": "application/x-7z-compressed",
    ".rar": "application/x-rar-compressed",
}

# compressed files with no inner type (e.g. "dump.gz") resolve through their encoding
_ENCODING_TYPES = {
    "gzip": "application/x-gzip",
    "bzip2": "application/x-bzip2",
}


def _build_types() -> mimetypes.MimeTypes:
    # a private table: only the interpreter defaults, never /etc/mime.types
    types = mimetypes.MimeTypes()
    for ext, mime in _EXTRA_TYPES.items():
        types.add_type(mime, ext)
    return types


_TYPES = _build_types()


class RequestClass(NamedTuple):
    path: str
    is_directory: bool
    forces_download: bool
    filename: str


def request_path(target: str) -> str:
    """Decoded URL path of a request target, without query or fragment."""
    return unquote(urlsplit(target).path)


def guess_type(filename: str) -> Optional[str]:
    mime, encoding = _TYPES.guess_type(filename, strict=False)
    if mime is None and encoding is not None:
        mime = _ENCODING_TYPES.get(encoding)
    return mime


def is_media(filename: str) -> bool:
    """True when ``filename`` maps to a type served as an attachment."""
    return guess_type(filename) in MEDIA_TYPES


def classify(target: str) -> RequestClass:
    """
    Classify a request target.

    A target whose decoded path ends with "/" is a directory request and never
    forces a download. Otherwise the final path segment decides: it forces a
    download when its guessed type is in MEDIA_TYPES.
    """
    path = request_path(target)
    filename = path.rsplit("/", 1)[-1]
    if path.endswith("/"):
        return RequestClass(path, True, False, filename)
    return RequestClass(path, False, bool(filename) and is_media(filename), filename)


def content_disposition(filename: str) -> str:
    """
    Render an ``attachment`` Content-Disposition value for ``filename``.

    Quotes and backslashes are escaped inside the quoted string. Names outside
    printable ASCII get an ASCII fallback plus an RFC 5987 ``filename*``.
    """
    if filename.isascii() and filename.isprintable():
        return 'attachment; filename="%s"' % quote(filename)
    fallback = "".join(c if c.isascii() and c.isprintable() else "_" for c in filename)
    return "attachment; filename=\"%s\"; filename*=UTF-8''%s" % (quote(fallback), url_quote(filename, safe=""))
