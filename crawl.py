"""Site capture script - Screenshot every page of a site, public and logged in."""

import signal
import sys

from sitesnap.cli import main


def handle_interrupt(signum, frame):
    """Exit on Ctrl+C; run logs are flushed row by row so they stay usable."""
    print("\n\n⚠️  Crawl interrupted by user. Run logs contain every page captured so far.")
    sys.exit(130)


signal.signal(signal.SIGINT, handle_interrupt)
signal.signal(signal.SIGTERM, handle_interrupt)


if __name__ == "__main__":
    sys.exit(main())
