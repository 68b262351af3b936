"""
Entry point for the markdown to WordPress publisher.
"""

import sys

from wp_publisher.cli import main

if __name__ == "__main__":
    sys.exit(main())
