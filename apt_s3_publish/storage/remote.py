#!/usr/bin/env python3

import logging
from typing import List

from ..config.manager import PublishConfig
from ..tools.runner import CommandRunner

logger = logging.getLogger(__name__)

class RemoteStorage:
    def __init__(self, config: PublishConfig, runner: CommandRunner):
        self.config = config
        self.runner = runner

    def list_distributions(self) -> List[str]:
        """Names of the distributions published under the repository's dists/ tree.

        `aws s3 ls` exits non-zero when nothing matches the prefix, which is
        the normal state of a bucket that has never been published to, so a
        failed listing is reported as an empty one.
        """
        result = self.runner.run([
            self.config.aws_binary, 's3', 'ls', self.config.dists_url,
            '--region', self.config.region
        ], check=False)

        if not result.ok:
            logger.debug(f"Listing {self.config.dists_url} failed, treating as empty")
            return []

        names = []
        for line in result.lines():
            parts = line.split()
            # Directory entries look like "PRE bionic/"
            if len(parts) == 2 and parts[0] == 'PRE':
                names.append(parts[1].rstrip('/'))
        return names

    def repository_exists(self, codename: str) -> bool:
        return codename in self.list_distributions()
