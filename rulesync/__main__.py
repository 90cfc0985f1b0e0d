"""
Main entry point for the rulesync CLI.
"""

from rulesync.cli import cli


def main() -> None:
    """Main function for the rulesync CLI."""
    cli()


if __name__ == "__main__":
    main()
