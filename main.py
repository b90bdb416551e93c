#!/usr/bin/env python3
"""
Image Browser - Main Entry

Usage:
    python main.py                          # Interactive browse mode
    python main.py --dir ./photos           # Interactive, open a folder
    python main.py list ./photos            # List images with their ids
    python main.py rename ./photos ...      # Batch rename
    python main.py delete ./photos 3        # Send one image to the trash
"""

import sys
from pathlib import Path

# Ensure the current directory is in the Python path
sys.path.insert(0, str(Path(__file__).parent))


def main():
    """Main entry point"""
    from cli import main as cli_main
    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
