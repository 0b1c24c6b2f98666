"""
Root conftest.py: makes the flat backend modules (main, registry, system,
config, models) importable before pytest collects any test module.
"""
import sys
import os

backend_dir = os.path.dirname(os.path.abspath(__file__))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

# Keep log files out of the source tree during test runs
os.environ.setdefault('K3S_SUITE_DATA_DIR', os.path.join(backend_dir, '.pytest-data'))

# tests/unit/registry_tests must never shadow the real `registry` package,
# so import the application packages first
import registry  # noqa: E402,F401
import system  # noqa: E402,F401
