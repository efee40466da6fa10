"""
Static mapping from file extension to Content-Type.

The table is read-only; lookups never fail, they return None for
extensions that are not listed.
"""

import os
from types import MappingProxyType
from typing import Mapping, Optional, Union

from .exceptions import ExtensionError


CONTENT_TYPES: Mapping[str, str] = MappingProxyType({
    "avi": "video/x-msvideo",
    "css": "text/css;charset=UTF-8",
    "csv": "text/csv;charset=UTF-8",
    "dcm": "application/dicom",
    "gif": "image/gif",
    "htm": "text/html;charset=UTF-8",
    "html": "text/html;charset=UTF-8",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "js": "text/javascript;charset=UTF-8",
    "md": "application/unknown",
    "mp4": "video/mp4",
    "mpeg": "video/mpg",
    "mpg": "video/mpg",
    "oga": "audio/oga",
    "ogg": "video/ogg",
    "ogv": "video/ogg",
    "pdf": "application/pdf",
    "png": "image/png",
    "swf": "application/x-shockwave-flash",
    "txt": "text/plain;charset=UTF-8",
    "wav": "audio/wav",
    "xml": "text/xml;charset=UTF-8",
    "zip": "application/zip",
})


def lookup_content_type(extension: str) -> Optional[str]:
    """
    Look up the Content-Type for an extension.

    Args:
        extension: Extension without the leading dot, any case

    Returns:
        The Content-Type, or None if the extension is unknown
    """
    return CONTENT_TYPES.get(extension.lower())


def extension_of(path: Union[str, "os.PathLike[str]"]) -> str:
    """
    Get the text after the last '.' in a file's name.

    Args:
        path: File path; only its final component is considered

    Returns:
        The extension, possibly empty for names ending in '.'

    Raises:
        ExtensionError: If the file name contains no '.'
    """
    name = os.path.basename(os.fspath(path))
    dot = name.rfind(".")
    if dot == -1:
        raise ExtensionError(name)
    return name[dot + 1:]
