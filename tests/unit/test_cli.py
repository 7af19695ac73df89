"""
Unit tests for the command-line extractor.
"""

import importlib.util
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "extract_email_json.py"


@pytest.fixture(scope="module")
def cli():
    """Load the script as a module."""
    spec = importlib.util.spec_from_file_location("extract_email_json", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.mark.unit
class TestExtractCommand:
    """Test exit codes and console output of extract()."""

    @pytest.mark.asyncio
    async def test_found(self, cli, make_email, write_email, capsys):
        """Test a JSON attachment is printed to stdout."""
        path = write_email(make_email(text="x", attachments=(("application/json", "data.json", b'{"a": 1}'),)))

        code = await cli.extract(path)

        assert code == 0
        assert '"a": 1' in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_no_json(self, cli, make_email, write_email, capsys):
        """Test an email without JSON exits with 1."""
        path = write_email(make_email(text="no links, no attachments"))

        code = await cli.extract(path)

        assert code == 1
        assert "Not found:" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_markup_in_message_printed_literally(self, cli, tmp_path, capsys):
        """
        Test error messages containing console markup

        Given: A missing file whose path contains a closing markup tag
        When: extract() is called
        Then: The failure is reported with exit code 2 and the tag is not interpreted
        """
        # Arrange
        path = str(tmp_path / "[/x]" / "missing.eml")

        # Act
        code = await cli.extract(path)

        # Assert
        err = capsys.readouterr().err.replace("\n", "")
        assert code == 2
        assert "not_found:" in err
        assert "[/x]" in err
