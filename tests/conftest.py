#!/usr/bin/env python3

"""
Pytest configuration and shared fixtures for apt-s3-publish test suite.
"""

import os
import sys
import tempfile
import pytest
from pathlib import Path
from typing import Dict, List, Optional, Set

# Add the project root to Python path for imports
root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path))

from apt_s3_publish.config.manager import ConfigManager
from apt_s3_publish.errors import ToolInvocationError
from apt_s3_publish.tools.runner import CommandResult


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that gets cleaned up after test"""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir

    # Cleanup
    import shutil
    if os.path.exists(temp_dir):
        shutil.rmtree(temp_dir)


@pytest.fixture
def deb_dir(temp_dir):
    """Provide a package directory holding a single .deb file"""
    path = os.path.join(temp_dir, "debs")
    os.makedirs(path)
    Path(path, "cargio-db-dev_1.0.0_amd64.deb").write_bytes(b"!<arch>\n")
    return path


@pytest.fixture
def publish_env(temp_dir, deb_dir):
    """Provide a complete set of publishing environment variables"""
    return {
        'PLUGIN_GPG_KEY': 'ABCDEF0123456789',
        'PLUGIN_GPG_PASS': 'gpg-secret',
        'PLUGIN_REGION': 'us-east-2',
        'PLUGIN_REPO_NAME': 'repo.example.com',
        'PLUGIN_ACL': 'public-read',
        'PLUGIN_PREFIX': 'releases',
        'AWS_ACCESS_KEY_ID': 'AKIAEXAMPLE',
        'AWS_SECRET_ACCESS_KEY': 'aws-secret',
        'PLUGIN_DEB_PATH': deb_dir,
        'PLUGIN_OS_CODENAME': 'bionic',
    }


@pytest.fixture
def config_manager(temp_dir, publish_env):
    """Provide a ConfigManager reading only the test environment"""
    manager = ConfigManager(os.path.join(temp_dir, "config.yaml"), environ=publish_env)
    manager.get_config().aptly_config_path = os.path.join(temp_dir, ".aptly.conf")
    return manager


class FakeAptWorld:
    """In-memory stand-in for aptly's database and the S3 bucket.

    Answers the same command lines the real tools receive, so tests can
    drive the publisher end to end and inspect the resulting state.
    """

    def __init__(self, bucket: str = 'repo.example.com'):
        self.bucket = bucket
        self.calls: List[List[str]] = []
        self.failures: Dict[tuple, int] = {}
        # distribution -> package file names published to S3
        self.remote: Dict[str, Set[str]] = {}
        # repo name -> {'distribution': str, 'packages': set}
        self.repos: Dict[str, Dict] = {}
        # mirror name -> {'distribution': str, 'packages': set}
        self.mirrors: Dict[str, Dict] = {}
        # (endpoint, distribution) -> repo name
        self.published: Dict[tuple, str] = {}

    def fail(self, *prefix: str, returncode: int = 1):
        self.failures[tuple(prefix)] = returncode

    def commands(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if tuple(c[:len(prefix)]) == prefix]

    def run(self, args, check: bool = True) -> CommandResult:
        args = [str(a) for a in args]
        self.calls.append(args)

        for prefix, code in self.failures.items():
            if tuple(args[:len(prefix)]) == prefix:
                if check:
                    raise ToolInvocationError(args, code, "simulated failure")
                return CommandResult(args=args, returncode=code, stderr="simulated failure")

        stdout = self._dispatch(args)
        if stdout is None:
            if check:
                raise ToolInvocationError(args, 1, "simulated error")
            return CommandResult(args=args, returncode=1)
        return CommandResult(args=args, returncode=0, stdout=stdout)

    def _dispatch(self, args: List[str]) -> Optional[str]:
        tool, rest = args[0], args[1:]
        if tool == 'aws':
            if not self.remote:
                return None
            return "".join(f"                           PRE {d}/\n" for d in sorted(self.remote))

        command = tuple(rest[:2])
        positional = [a for a in rest[2:] if not a.startswith('-')]
        flags = dict(a.lstrip('-').split('=', 1) for a in rest[2:] if a.startswith('-') and '=' in a)

        if command == ('repo', 'list'):
            return "".join(f"{name}\n" for name in sorted(self.repos))
        if command == ('repo', 'create'):
            name = positional[0]
            if name in self.repos:
                return None
            self.repos[name] = {'distribution': flags['distribution'], 'packages': set()}
            return ""
        if command == ('mirror', 'list'):
            return "".join(f"{name}\n" for name in sorted(self.mirrors))
        if command == ('mirror', 'create'):
            name, _url, distribution = positional[0], positional[1], positional[2]
            if name in self.mirrors:
                return None
            self.mirrors[name] = {'distribution': distribution, 'packages': set()}
            return ""
        if command == ('mirror', 'update'):
            mirror = self.mirrors.get(positional[0])
            if mirror is None:
                return None
            mirror['packages'] = set(self.remote.get(mirror['distribution'], set()))
            return ""
        if command == ('repo', 'import'):
            mirror, repo = self.mirrors.get(positional[0]), self.repos.get(positional[1])
            if mirror is None or repo is None:
                return None
            repo['packages'] |= mirror['packages']
            return ""
        if command == ('repo', 'add'):
            repo = self.repos.get(positional[0])
            if repo is None:
                return None
            repo['packages'] |= {os.path.basename(p) for p in positional[1:]}
            return ""
        if command == ('publish', 'list'):
            return "".join(f"{endpoint}. {dist}\n" for endpoint, dist in sorted(self.published))
        if command == ('publish', 'repo'):
            repo_name, endpoint = positional
            repo = self.repos.get(repo_name)
            if repo is None or (endpoint, repo['distribution']) in self.published:
                return None
            self.published[(endpoint, repo['distribution'])] = repo_name
            self.remote[repo['distribution']] = set(repo['packages'])
            return ""
        if command == ('publish', 'update'):
            distribution, endpoint = positional
            repo_name = self.published.get((endpoint, distribution))
            if repo_name is None:
                return None
            self.remote[distribution] = set(self.repos[repo_name]['packages'])
            return ""
        return None


@pytest.fixture
def fake_world():
    """Provide an empty simulated aptly database and S3 bucket"""
    return FakeAptWorld()


@pytest.fixture(autouse=True)
def setup_logging():
    """Set up logging for tests"""
    import logging

    logging.basicConfig(
        level=logging.WARNING,  # Only show warnings and errors in tests
        format="%(name)s - %(levelname)s - %(message)s"
    )
