#!/usr/bin/env python3
"""
gbtiles - Game Boy tile exporter for RGBDS.

This is the main entry point when running from a source checkout.
See gbtiles.cli for the available options.
"""

import sys

from gbtiles.cli import main as cli_main


def main():
    """Main entry point for the application."""
    try:
        cli_main()
    except KeyboardInterrupt:
        print("\nExiting gbtiles...")
    except Exception as e:
        print(f"An error occurred: {e}")
        print("Exiting gbtiles...")
        sys.exit(1)


if __name__ == "__main__":
    main()
