"""Pytest configuration for deploy notifier tests.

Puts the project root on the Python path so ``deploy_notifier`` and ``common``
import without installation.
"""

import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture(autouse=True)
def aws_region(monkeypatch):
    """Keep boto3 from looking up a region or credentials on the test machine."""
    monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-central-1")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
