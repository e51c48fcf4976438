#!/usr/bin/env python3

"""
APT S3 Publisher

Publishes Debian packages to an S3-hosted APT repository by driving
aptly and the AWS CLI, merging with whatever is already published.
"""

__version__ = "1.0.0"
__author__ = "APT S3 Publish Project"
