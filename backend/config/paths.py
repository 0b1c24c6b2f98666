"""
Centralized path configuration for K3s Suite
Only the log directory lives on disk; registry configuration is memory-only
"""

import os

# The /app/data directory is mounted as a volume when running in a container
DATA_DIR = os.getenv('K3S_SUITE_DATA_DIR', '/app/data')

LOG_DIR = os.path.join(DATA_DIR, 'logs')


def ensure_data_dirs():
    """Create data directories if they don't exist"""
    for directory in [DATA_DIR, LOG_DIR]:
        os.makedirs(directory, exist_ok=True)
        try:
            os.chmod(directory, 0o700)
        except OSError:
            pass  # May not have permission in some environments


# For development/testing outside a container
if 'K3S_SUITE_DATA_DIR' not in os.environ and not os.path.exists('/app'):
    DATA_DIR = './data'
    LOG_DIR = os.path.join(DATA_DIR, 'logs')
