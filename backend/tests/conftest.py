"""
Shared test fixtures for the Campaign Payout Engine test suite.

`output_dir` redirects every report write to a per-test temp directory so
tests never touch the configured OUTPUT_DIR.
"""

import os
import sys
from unittest.mock import patch

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture
def output_dir(tmp_path):
    """Override OUTPUT_DIR (main + excel_export) with a temp directory."""
    with patch("main.config.OUTPUT_DIR", str(tmp_path)):
        with patch("services.excel_export.config.OUTPUT_DIR", str(tmp_path)):
            yield str(tmp_path)
