#!/usr/bin/env python3

import logging
from typing import Dict, Any, Optional

import requests

from ..config.manager import PublishConfig

logger = logging.getLogger(__name__)

class PublishVerifier:
    def __init__(self, config: PublishConfig, session: Optional[requests.Session] = None, timeout: int = 30):
        self.config = config
        self.session = session or requests.Session()
        self.timeout = timeout

    def release_url(self) -> str:
        return f"{self.config.mirror_url}dists/{self.config.os_codename}/Release"

    def _parse_release(self, text: str) -> Dict[str, str]:
        """Top-level fields of a Release file; continuation lines are skipped"""
        fields = {}
        for line in text.splitlines():
            if not line or line[0].isspace() or ':' not in line:
                continue
            key, _, value = line.partition(':')
            fields[key.strip()] = value.strip()
        return fields

    def verify(self) -> Dict[str, Any]:
        """Check that the published Release file is served for the codename"""
        url = self.release_url()
        result = {
            'url': url,
            'codename': self.config.os_codename,
            'verified': False,
            'details': ''
        }

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Failed to fetch {url}: {e}")
            result['details'] = f'Request failed: {e}'
            return result

        if response.status_code != 200:
            result['details'] = f'HTTP {response.status_code} for {url}'
            return result

        fields = self._parse_release(response.text)
        published = fields.get('Codename') or fields.get('Suite')
        if published != self.config.os_codename:
            result['details'] = f'Release file is for {published!r}, expected {self.config.os_codename!r}'
            return result

        result['verified'] = True
        result['components'] = fields.get('Components', '').split()
        result['architectures'] = fields.get('Architectures', '').split()
        result['details'] = 'Release file published'
        return result
