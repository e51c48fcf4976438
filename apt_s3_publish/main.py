#!/usr/bin/env python3

import sys
import os
import argparse
import logging

from .config.manager import ConfigManager, LOG_LEVELS
from .errors import ConfigurationError, ToolInvocationError
from .publisher.pipeline import Publisher
from .verification.checker import PublishVerifier

def setup_logging(level: str = "INFO"):
    """Configure logging for the application"""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Determine log file path
    if os.geteuid() == 0:
        log_file = "/var/log/apt-s3-publish.log"
    else:
        log_file = os.path.expanduser("~/.local/log/apt-s3-publish.log")
        # Ensure the log directory exists
        os.makedirs(os.path.dirname(log_file), exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=log_format,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ]
    )

def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser"""
    parser = argparse.ArgumentParser(
        description="Publish Debian packages to an S3-hosted APT repository",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Settings are read from the environment (PLUGIN_GPG_KEY, PLUGIN_GPG_PASS,
PLUGIN_REGION, PLUGIN_REPO_NAME, PLUGIN_ACL, PLUGIN_PREFIX, PLUGIN_DEB_PATH,
PLUGIN_OS_CODENAME, AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY) and, for
anything not set there, from the YAML config file.

Examples:
  %(prog)s                                    # Publish PLUGIN_DEB_PATH/*.deb
  %(prog)s publish                            # Same as above
  %(prog)s status                             # Show remote and local repository state
  %(prog)s status --verify                    # Also fetch the published Release file
        """
    )

    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
        default=None
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=list(LOG_LEVELS),
        default=None,
        help="Set logging level (default: from config, INFO)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("publish", help="Add packages and publish the repository")

    status_parser = subparsers.add_parser("status", help="Show repository state")
    status_parser.add_argument("--verify", action="store_true",
                               help="Fetch the published Release file over HTTPS")

    return parser

def tool_exit_code(returncode: int) -> int:
    """Exit status for a failed tool, using the shell's 128+N for signals"""
    if returncode < 0:
        return 128 - returncode
    return returncode

def cmd_publish(publisher: Publisher):
    """Handle publish command"""
    result = publisher.publish()

    print(f"\n{result.codename}:")
    print(f"  remote repository: {'existing' if result.remote_existed else 'new'}")
    if result.repo_created:
        print(f"  ✓ local repository created")
    if result.mirror_created:
        print(f"  ✓ mirror created")
    if result.mirror_imported:
        print(f"  ✓ existing packages imported from mirror")
    print(f"  ✓ {len(result.packages)} package(s) added:")
    for package in result.packages:
        print(f"    - {package}")
    print(f"  ✓ publish {result.publish_action}")

    return 0

def cmd_status(args, publisher: Publisher):
    """Handle status command"""
    status = publisher.status()

    def mark(flag: bool) -> str:
        return "✓" if flag else "✗"

    print(f"=== {status['codename']} ===")
    print(f"  {mark(status['remote_exists'])} remote repository")
    if status['remote_distributions']:
        print(f"    published distributions: {', '.join(status['remote_distributions'])}")
    print(f"  {mark(status['local_repo'])} local repository")
    print(f"  {mark(status['mirror'])} mirror")
    print(f"  {mark(status['published'])} publish target")

    if args.verify:
        verifier = PublishVerifier(publisher.config)
        verification = verifier.verify()
        print(f"  {mark(verification['verified'])} {verification['url']}: {verification['details']}")
        if not verification['verified']:
            return 1

    return 0

def main():
    """Main entry point"""
    parser = create_argument_parser()
    args = parser.parse_args()

    logger = logging.getLogger(__name__)

    try:
        config_manager = ConfigManager(args.config)
        config = config_manager.get_config()
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    # Setup logging
    setup_logging(args.log_level or config.log_level)

    try:
        publisher = Publisher(config_manager)

        if args.command == "status":
            return cmd_status(args, publisher)

        return cmd_publish(publisher)

    except ConfigurationError as e:
        if e.missing:
            print("ERROR: Environment Variable Missing!", file=sys.stderr)
            print(f"  {', '.join(e.missing)}", file=sys.stderr)
        else:
            print(f"ERROR: {e}", file=sys.stderr)
        return 1

    except ToolInvocationError as e:
        logger.error(f"{' '.join(e.command)} failed: {e}")
        return tool_exit_code(e.returncode)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if (args.log_level or config.log_level).upper() == "DEBUG":
            import traceback
            traceback.print_exc()
        return 1

if __name__ == "__main__":
    sys.exit(main())
