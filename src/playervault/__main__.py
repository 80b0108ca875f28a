"""
playervault CLI entry point.

Usage:
    playervault db init
    playervault db ddl [--backend NAME]
    playervault show OWNER_ID
    playervault clear OWNER_ID [--yes]
    playervault config show
    playervault backends
"""

from playervault.cli import cli


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
