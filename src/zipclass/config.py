"""Global configuration defaults for zipclass."""

import os

# Default working directory for downloads and extraction
DEFAULT_DATA_DIR = os.path.join(os.path.expanduser("~"), ".cache", "zipclass")

# Default batch size used by the CLI when walking a dataset
DEFAULT_BATCH_SIZE = 16

# Download parameters
DOWNLOAD_CHUNK_SIZE = 8192
DOWNLOAD_TIMEOUT = 3600
MAX_DOWNLOAD_RETRIES = 3
