#!/usr/bin/env python3

"""
SCC Admission Webhook
Main entry point for the application
"""

from src.cli.main import cli


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
