#!/usr/bin/env python3

import os
import yaml
from typing import Dict, List, Any, Mapping, Optional
from dataclasses import dataclass, fields

from ..errors import ConfigurationError

DEFAULT_OS_CODENAME = "bionic"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Field name -> environment variable, in the order they are validated
ENV_VARS = {
    'gpg_key': 'PLUGIN_GPG_KEY',
    'gpg_passphrase': 'PLUGIN_GPG_PASS',
    'region': 'PLUGIN_REGION',
    'repo_name': 'PLUGIN_REPO_NAME',
    'acl': 'PLUGIN_ACL',
    'prefix': 'PLUGIN_PREFIX',
    'aws_secret_access_key': 'AWS_SECRET_ACCESS_KEY',
    'aws_access_key_id': 'AWS_ACCESS_KEY_ID',
    'deb_path': 'PLUGIN_DEB_PATH',
    'os_codename': 'PLUGIN_OS_CODENAME',
}

@dataclass
class PublishConfig:
    gpg_key: str = None
    gpg_passphrase: str = None
    region: str = None
    repo_name: str = None  # S3 bucket, also the public hostname of the repo
    acl: str = None
    prefix: str = None
    aws_access_key_id: str = None
    aws_secret_access_key: str = None
    deb_path: str = None
    os_codename: str = DEFAULT_OS_CODENAME
    component: str = "main"
    aptly_config_path: str = None
    aptly_binary: str = "aptly"
    aws_binary: str = "aws"
    log_level: str = "INFO"

    def __post_init__(self):
        if not self.os_codename:
            self.os_codename = DEFAULT_OS_CODENAME

        if self.aptly_config_path is None:
            self.aptly_config_path = os.path.expanduser("~/.aptly.conf")

    @property
    def local_repo_name(self) -> str:
        return f"release-{self.os_codename}"

    @property
    def mirror_name(self) -> str:
        return f"local-repo-{self.os_codename}"

    @property
    def publish_endpoint(self) -> str:
        return f"s3:{self.repo_name}:"

    @property
    def clean_prefix(self) -> str:
        return str(self.prefix or "").strip('/')

    @property
    def mirror_url(self) -> str:
        return f"https://{self.repo_name}/{self.clean_prefix}/"

    @property
    def dists_url(self) -> str:
        if self.clean_prefix:
            return f"s3://{self.repo_name}/{self.clean_prefix}/dists/"
        return f"s3://{self.repo_name}/dists/"

    def missing_fields(self) -> List[str]:
        """Environment variable names of required settings that are empty"""
        return [env for name, env in ENV_VARS.items() if not getattr(self, name)]

    def secrets(self) -> List[str]:
        return [s for s in (self.gpg_passphrase, self.aws_secret_access_key) if s]

    def tool_environment(self, base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """Environment for aws/aptly subprocesses, carrying the S3 credentials"""
        env = dict(os.environ if base is None else base)
        if self.aws_access_key_id:
            env['AWS_ACCESS_KEY_ID'] = self.aws_access_key_id
        if self.aws_secret_access_key:
            env['AWS_SECRET_ACCESS_KEY'] = self.aws_secret_access_key
        if self.region:
            env['AWS_DEFAULT_REGION'] = self.region
        return env

class ConfigManager:
    def __init__(self, config_path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None):
        self.config_path = config_path or self._get_default_config_path()
        self.environ = os.environ if environ is None else environ
        self._config: Optional[PublishConfig] = None

    def _get_default_config_path(self) -> str:
        xdg_config = os.environ.get('XDG_CONFIG_HOME', '~/.config')
        return os.path.expanduser(f"{xdg_config}/apt-s3-publish/config.yaml")

    def _load_file(self) -> Dict[str, Any]:
        if not os.path.exists(self.config_path):
            return {}

        try:
            with open(self.config_path, 'r') as f:
                data = yaml.safe_load(f) or {}

            if not isinstance(data, dict):
                raise ValueError("top-level document must be a mapping")

            known = {f.name for f in fields(PublishConfig)}
            unknown = sorted(set(data) - known)
            if unknown:
                raise ValueError(f"unknown settings: {', '.join(unknown)}")

            if 'log_level' in data and str(data['log_level']).upper() not in LOG_LEVELS:
                raise ValueError(f"invalid log_level {data['log_level']!r}, expected one of {', '.join(LOG_LEVELS)}")

            return data

        except Exception as e:
            raise ValueError(f"Error loading config from {self.config_path}: {e}")

    def load_config(self) -> PublishConfig:
        if self._config is not None:
            return self._config

        data = self._load_file()

        # Environment wins over the file
        for name, env in ENV_VARS.items():
            value = self.environ.get(env)
            if value:
                data[name] = value

        self._config = PublishConfig(**data)
        return self._config

    def get_config(self) -> PublishConfig:
        if self._config is None:
            return self.load_config()
        return self._config

    def validate(self) -> PublishConfig:
        config = self.get_config()
        missing = config.missing_fields()
        if missing:
            raise ConfigurationError(
                f"Environment Variable Missing: {', '.join(missing)}",
                missing=missing
            )
        return config
