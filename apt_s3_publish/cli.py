#!/usr/bin/env python3

"""Console-script entry point for apt-s3-publish."""

def main():
    """Entry point for the apt-s3-publish CLI command."""
    from .main import main as main_func
    return main_func()

if __name__ == "__main__":
    main()
