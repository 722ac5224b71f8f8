"""
Central configuration for ignore file processing and directory walking
"""

import os
import sys

# Single source of truth for the default ignore filename
IGNORE_FILENAME = ".gitignore"

# Ignore files read while walking unless the caller asks for others
DEFAULT_IGNORE_FILES = (IGNORE_FILENAME,)

# Always-present rule registered at the walk root
VCS_METADATA_RULE = "/.git/"

# Environment variable holding comma separated ignore filenames for the CLI
IGNORE_FILES_ENV = "IGNOREWALK_IGNORE_FILES"

# Limits for security and performance
MAX_IGNORE_FILE_SIZE = 1024 * 1024  # 1MB
MAX_PATTERNS_PER_FILE = 10000

# Result cap used by the listing helpers
DEFAULT_RESULT_LIMIT = 200

# Paths compare case-insensitively where the host normalises case
CASE_INSENSITIVE_PATHS = os.path.normcase("A") == "a"

# Symlinks are never followed on Windows, whatever the caller asks for
SYMLINKS_SUPPORTED = sys.platform != "win32"
