"""
Desktop entry point for the Minesweeper board client.

Loads configuration, starts the Qt/asyncio loop via desktop_ui.app.main()
and returns its exit code.
"""
import sys
from desktop_ui.app import main

if __name__ == "__main__":
    sys.exit(main())
