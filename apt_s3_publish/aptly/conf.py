#!/usr/bin/env python3

import os
import json
import shutil
import logging
from typing import Dict, Any

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

class AptlyConfigPatcher:
    """Registers the S3 publish endpoint for a bucket in aptly's JSON config.

    The existing document is kept as-is apart from the
    ``S3PublishEndpoints[<bucket>]`` entry, which is inserted or replaced.
    The file found before patching is preserved next to it as ``.orig``.
    """

    def __init__(self, config_path: str):
        self.config_path = config_path
        self.backup_path = f"{config_path}.orig"

    def _read(self, path: str) -> Dict[str, Any]:
        if not os.path.exists(path):
            return {}

        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid aptly config {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid aptly config {path}: expected a JSON object")
        return data

    def patch(self, bucket: str, region: str, acl: str, prefix: str) -> Dict[str, Any]:
        data = self._read(self.config_path)

        if os.path.exists(self.config_path):
            shutil.copy2(self.config_path, self.backup_path)
            logger.debug(f"Backed up {self.config_path} to {self.backup_path}")

        endpoints = data.get('S3PublishEndpoints') or {}
        endpoints[bucket] = {
            'region': region,
            'bucket': bucket,
            'acl': acl,
            'prefix': prefix
        }
        data['S3PublishEndpoints'] = endpoints

        config_dir = os.path.dirname(self.config_path)
        if config_dir:
            os.makedirs(config_dir, exist_ok=True)

        with open(self.config_path, 'w') as f:
            json.dump(data, f, indent=2)
            f.write('\n')

        logger.info(f"Registered S3 publish endpoint {bucket} in {self.config_path}")
        return data
