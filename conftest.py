"""Root conftest.py to configure test environment."""
import os
import sys
from pathlib import Path

# Add the root directory to Python path for proper imports
root_dir = Path(__file__).parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

# Keep tests away from any real database or secret configured in .env
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.setdefault("LOG_LEVEL", "WARNING")


def pytest_configure(config):
    config.addinivalue_line("markers", "api: tests exercising the HTTP API")
