"""
Index Page
==========

Renders the viewer page. The template carries two placeholders the
viewer's script uses to pace itself:

    {{ERROR_RETRY_TIMEOUT}}  backoff interval + mean fetch duration
    {{UPDATE_INTERVAL}}      min(refresh interval, mean fetch duration)

Both are whole milliseconds.
"""

import logging
import math
from pathlib import Path
from typing import Optional, Union

from frame_relay.errors import TemplateOrFileReadError


logger = logging.getLogger(__name__)


def error_retry_timeout(backoff_interval_ms: float, mean_fetch_duration_ms: float) -> int:
    return math.floor(backoff_interval_ms + mean_fetch_duration_ms)


def update_interval(refresh_interval_ms: float, mean_fetch_duration_ms: float) -> int:
    return int(min(refresh_interval_ms, math.floor(mean_fetch_duration_ms)))


class IndexPage:
    """Viewer page template, read once and cached."""

    def __init__(self, template_path: Union[str, Path]) -> None:
        self.template_path = Path(template_path)
        self._template: Optional[str] = None

    def _load(self) -> str:
        if self._template is None:
            try:
                self._template = self.template_path.read_text(encoding="utf-8")
            except OSError as e:
                logger.error(f"Cannot read index template {self.template_path}: {e}")
                raise TemplateOrFileReadError(str(e)) from e
        return self._template

    def render(self, error_retry_timeout_ms: int, update_interval_ms: int) -> str:
        return (
            self._load()
            .replace("{{ERROR_RETRY_TIMEOUT}}", str(error_retry_timeout_ms))
            .replace("{{UPDATE_INTERVAL}}", str(update_interval_ms))
        )
