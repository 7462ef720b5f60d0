"""Main module for feed_ingest.

This module allows the CLI to be run as a Python module using:
python -m feed_ingest

It delegates to the CLI's main function.
"""

from feed_ingest.cli import main

if __name__ == "__main__":
    main()
