#!/usr/bin/env python3

import logging
from dataclasses import dataclass
from typing import List, Sequence

from ..config.manager import PublishConfig
from ..tools.runner import CommandRunner, CommandResult

logger = logging.getLogger(__name__)

@dataclass
class PublishedRepo:
    storage_prefix: str  # e.g. "s3:my-bucket:." as printed by aptly
    distribution: str

    def on_endpoint(self, endpoint: str) -> bool:
        return self.storage_prefix.startswith(endpoint)

class AptlyClient:
    def __init__(self, config: PublishConfig, runner: CommandRunner):
        self.config = config
        self.runner = runner

    def _aptly(self, *args: str) -> CommandResult:
        return self.runner.run([self.config.aptly_binary, *args])

    # Queries

    def list_repos(self) -> List[str]:
        return self._aptly('repo', 'list', '-raw').lines()

    def list_mirrors(self) -> List[str]:
        return self._aptly('mirror', 'list', '-raw').lines()

    def list_published(self) -> List[PublishedRepo]:
        published = []
        for line in self._aptly('publish', 'list', '-raw').lines():
            parts = line.split()
            if len(parts) != 2:
                logger.warning(f"Ignoring unexpected publish list line: {line}")
                continue
            published.append(PublishedRepo(storage_prefix=parts[0], distribution=parts[1]))
        return published

    def repo_exists(self, name: str) -> bool:
        return name in self.list_repos()

    def mirror_exists(self, name: str) -> bool:
        return name in self.list_mirrors()

    def published_exists(self, endpoint: str, distribution: str) -> bool:
        return any(p.on_endpoint(endpoint) and p.distribution == distribution
                   for p in self.list_published())

    # Mutations

    def create_repo(self, name: str, distribution: str, component: str) -> None:
        logger.info(f"Creating local repository {name}")
        self._aptly('repo', 'create', f'-distribution={distribution}',
                    f'-component={component}', name)

    def create_mirror(self, name: str, url: str, distribution: str, component: str) -> None:
        logger.info(f"Creating mirror {name} of {url}")
        self._aptly('mirror', 'create', '-ignore-signatures', name, url, distribution, component)

    def update_mirror(self, name: str) -> None:
        logger.info(f"Updating mirror {name}")
        self._aptly('mirror', 'update', '-ignore-signatures', name)

    def import_mirror(self, mirror: str, repo: str, query: str = 'Name') -> None:
        logger.info(f"Importing packages from mirror {mirror} into {repo}")
        self._aptly('repo', 'import', mirror, repo, query)

    def add_packages(self, repo: str, packages: Sequence[str]) -> None:
        logger.info(f"Adding {len(packages)} package(s) to {repo}")
        self._aptly('repo', 'add', '-force-replace', repo, *packages)

    def publish_repo(self, repo: str, endpoint: str, passphrase: str) -> None:
        logger.info(f"Publishing {repo} to {endpoint}")
        self._aptly('publish', 'repo', '-batch', '-force-overwrite',
                    f'-passphrase={passphrase}', repo, endpoint)

    def publish_update(self, distribution: str, endpoint: str, passphrase: str) -> None:
        logger.info(f"Updating published {distribution} on {endpoint}")
        self._aptly('publish', 'update', '-batch', '-force-overwrite',
                    f'-passphrase={passphrase}', distribution, endpoint)
