"""
Web Module
==========

Viewer-facing helpers that do not touch the fetch loop:
    - StaticFileResolver: sandboxed static file lookup
    - IndexPage: viewer page template rendering
"""

from frame_relay.web.index_page import IndexPage, error_retry_timeout, update_interval
from frame_relay.web.static import StaticFileResolver, content_type_for_path


__all__ = [
    "IndexPage",
    "error_retry_timeout",
    "update_interval",
    "StaticFileResolver",
    "content_type_for_path",
]
