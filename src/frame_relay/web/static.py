"""
Static Files
============

Serves files from a sandboxed web root.

Design Rules:
    - The root is resolved once at startup; failure is fatal
    - Every request path is fully resolved (symlinks included) before use
    - Missing -> NotFoundError, outside the root -> PathEscapeError,
      unreadable -> TemplateOrFileReadError
"""

import logging
from pathlib import Path
from typing import Tuple, Union

from frame_relay.errors import (
    NotFoundError,
    PathEscapeError,
    StaticRootError,
    TemplateOrFileReadError,
)


logger = logging.getLogger(__name__)


CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",
    "html": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "txt": "text/plain",
}

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def content_type_for_path(path: Union[str, Path]) -> str:
    """Content type from the file extension."""
    suffix = Path(path).suffix.lower().lstrip(".")
    return CONTENT_TYPES.get(suffix, DEFAULT_CONTENT_TYPE)


class StaticFileResolver:
    """
    Resolves request paths to files under the web root.

    Example:
        static = StaticFileResolver("./httpdocs")
        data, content_type = static.read("/style.css")
    """

    def __init__(self, root: Union[str, Path]) -> None:
        try:
            self.root = Path(root).resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise StaticRootError(f"Cannot resolve web root {root!r}: {e}") from e
        if not self.root.is_dir():
            raise StaticRootError(f"Web root {str(self.root)!r} is not a directory")
        logger.info(f"Serving static files from {self.root}")

    def resolve(self, request_path: str) -> Path:
        """
        Resolve a request path inside the web root.

        Raises:
            NotFoundError: Path does not exist
            PathEscapeError: Path resolves outside the web root
            TemplateOrFileReadError: Path could not be resolved
        """
        candidate = self.root / request_path.lstrip("/")
        try:
            resolved = candidate.resolve(strict=True)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFoundError(request_path) from e
        except (OSError, RuntimeError) as e:
            raise TemplateOrFileReadError(f"Cannot resolve {request_path!r}: {e}") from e

        if resolved != self.root and self.root not in resolved.parents:
            logger.warning(f"Refusing path outside web root: {request_path!r} -> {resolved}")
            raise PathEscapeError(request_path)

        return resolved

    def read(self, request_path: str) -> Tuple[bytes, str]:
        """
        Read a static file.

        Returns:
            (file bytes, content type)
        """
        resolved = self.resolve(request_path)
        try:
            data = resolved.read_bytes()
        except OSError as e:
            raise TemplateOrFileReadError(f"Cannot read {request_path!r}: {e}") from e
        return data, content_type_for_path(resolved)
