"""
Content Protector

Parses an HTML document once and passes the tree through an ordered list
of protection stages.
"""

import logging
from typing import Callable, List, Optional

from bs4 import BeautifulSoup

from config import ContentProtectionConfig
from . import html_document


logger = logging.getLogger(__name__)

Stage = Callable[[BeautifulSoup], BeautifulSoup]


def add_guardian_metadata(soup: BeautifulSoup) -> BeautifulSoup:
    html_document.add_meta(soup, "guardian-protected", "true")
    return soup


def mark_protected_body(soup: BeautifulSoup) -> BeautifulSoup:
    html_document.add_class(html_document.ensure_body(soup))
    return soup


class ContentProtector:
    """Apply protection stages to outgoing HTML"""

    def __init__(self, config: Optional[ContentProtectionConfig] = None,
                 stages: Optional[List[Stage]] = None):
        self.config = config or ContentProtectionConfig()
        self.stages = stages if stages is not None else self._default_stages()

    def _default_stages(self) -> List[Stage]:
        stages: List[Stage] = []
        if self.config.add_meta_tags:
            stages.append(add_guardian_metadata)
        if self.config.mark_protected:
            stages.append(mark_protected_body)
        return stages

    def protect(self, content: str) -> str:
        if not html_document.looks_like_html(content):
            return content

        soup = html_document.parse(content)
        for stage in self.stages:
            soup = stage(soup)

        logger.debug(f"Applied {len(self.stages)} content protection stage(s)")
        return str(soup)
