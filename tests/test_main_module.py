"""Test for running the packager as a module."""

import runpy
from unittest.mock import patch


def test_main_module_entrypoint() -> None:
    """Tests that `python -m buildpack.packager` calls the CLI."""
    with patch("buildpack.packager.cli.cli") as mock_cli:
        runpy.run_module("buildpack.packager", run_name="__main__")
    mock_cli.assert_called_once()
