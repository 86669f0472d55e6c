"""File and directory path constants."""

import re
from pathlib import Path

# Directory names
STREAM_DIR = Path("stream")
PACKAGE_DIR = Path(__file__).parent.parent
STATIC_DIR = PACKAGE_DIR / "static"
TEMPLATES_DIR = PACKAGE_DIR / "templates"

# Stream files are named with exactly nine digits, e.g. "000000001.json"
STREAM_FILENAME_PATTERN = re.compile(r"^[0-9]{9}\.json\Z")
STREAM_PLACEHOLDER_FILENAME = ".gitkeep"

# Listing
ITEMS_PER_PAGE = 5
