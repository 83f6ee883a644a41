"""
Global constants used throughout the project
"""

import logging

# Logging defaults, applied by whoever configures the root logger
LOG_FORMAT = "%(levelname)s | %(name)s | %(message)s"
LOG_LEVEL = logging.INFO

# Ratio of the bottom extent a concept must keep to survive an iceberg cut
DEFAULT_ICEBERG_THRESHOLD = 0.5
