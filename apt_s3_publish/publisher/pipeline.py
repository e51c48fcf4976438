#!/usr/bin/env python3

import os
import glob
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..config.manager import ConfigManager, PublishConfig
from ..errors import ConfigurationError
from ..tools.runner import CommandRunner
from ..storage.remote import RemoteStorage
from ..aptly.client import AptlyClient
from ..aptly.conf import AptlyConfigPatcher

logger = logging.getLogger(__name__)

@dataclass
class PublishResult:
    codename: str
    remote_existed: bool = False
    repo_created: bool = False
    mirror_created: bool = False
    mirror_imported: bool = False
    packages: List[str] = field(default_factory=list)
    publish_action: Optional[str] = None  # 'created' or 'updated'

class Publisher:
    """Merges local .deb files into the S3-hosted APT repository for one codename.

    Every step runs only after the previous one succeeded; the first failing
    tool call aborts the run with a ToolInvocationError.
    """

    def __init__(self, config_manager: ConfigManager, runner: Optional[CommandRunner] = None):
        self.config_manager = config_manager
        self.config: PublishConfig = config_manager.get_config()
        self.runner = runner or CommandRunner(
            env=self.config.tool_environment(),
            secrets=self.config.secrets()
        )
        self.storage = RemoteStorage(self.config, self.runner)
        self.aptly = AptlyClient(self.config, self.runner)
        self.aptly_conf = AptlyConfigPatcher(self.config.aptly_config_path)

    def find_packages(self) -> List[str]:
        packages = sorted(glob.glob(os.path.join(self.config.deb_path, '*.deb')))
        if not packages:
            raise ConfigurationError(f"No .deb packages found in {self.config.deb_path}")
        return packages

    def publish(self) -> PublishResult:
        config = self.config_manager.validate()
        packages = self.find_packages()
        codename = config.os_codename
        result = PublishResult(codename=codename)

        result.remote_existed = self.storage.repository_exists(codename)
        if result.remote_existed:
            logger.info("Repo Exists! Defaulting to publish update...")
        else:
            logger.info("First time uploading repo!")

        self.aptly_conf.patch(
            bucket=config.repo_name,
            region=config.region,
            acl=config.acl,
            prefix=config.prefix
        )

        if not self.aptly.repo_exists(config.local_repo_name):
            self.aptly.create_repo(config.local_repo_name, codename, config.component)
            result.repo_created = True

        if result.remote_existed:
            if not self.aptly.mirror_exists(config.mirror_name):
                self.aptly.create_mirror(config.mirror_name, config.mirror_url,
                                         codename, config.component)
                result.mirror_created = True

            # Previously published packages become the baseline of the new publish
            self.aptly.update_mirror(config.mirror_name)
            self.aptly.import_mirror(config.mirror_name, config.local_repo_name)
            result.mirror_imported = True

        self.aptly.add_packages(config.local_repo_name, packages)
        result.packages = [os.path.basename(p) for p in packages]

        if not self.aptly.published_exists(config.publish_endpoint, codename):
            self.aptly.publish_repo(config.local_repo_name, config.publish_endpoint,
                                    config.gpg_passphrase)
            result.publish_action = 'created'
        else:
            self.aptly.publish_update(codename, config.publish_endpoint,
                                      config.gpg_passphrase)
            result.publish_action = 'updated'

        logger.info(f"Published {len(packages)} package(s) to {config.publish_endpoint} {codename} "
                    f"({result.publish_action})")
        return result

    def status(self) -> dict:
        """Read-only view of the remote and local state for the configured codename"""
        config = self.config_manager.validate()
        distributions = self.storage.list_distributions()
        return {
            'codename': config.os_codename,
            'remote_exists': config.os_codename in distributions,
            'remote_distributions': distributions,
            'local_repo': self.aptly.repo_exists(config.local_repo_name),
            'mirror': self.aptly.mirror_exists(config.mirror_name),
            'published': self.aptly.published_exists(config.publish_endpoint, config.os_codename)
        }
