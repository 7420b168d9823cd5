"""
Root pytest configuration for the outcomes service.

Sets up Python path and test environment variables for all test directories.
"""

import os
import sys
from pathlib import Path

# Set test environment variables before anything else imports settings
os.environ.setdefault("OUTCOMES_SERVICE_ENV", "development")
os.environ.setdefault("OUTCOMES_SERVICE_LOG_LEVEL", "DEBUG")
os.environ.setdefault("OBSERVABILITY_LOG_FORMAT", "console")

# Project root
project_root = Path(__file__).parent

# Add src directory to path for imports
src_path = project_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))
