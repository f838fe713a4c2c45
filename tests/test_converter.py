"""Tests for the LibreOffice conversion service (subprocess is patched)."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from docconvert.pipeline.errors import ConversionError
from docconvert.processing.converter import LibreOfficeConverter


def _process(returncode=0, stdout=b"", stderr=b""):
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    proc.wait = AsyncMock(return_value=returncode)
    return proc


class TestBuildCommand:
    def test_headless_convert_to_with_private_profile(self, tmp_path):
        converter = LibreOfficeConverter(binary="/opt/lo/soffice")
        cmd = converter.build_command(
            tmp_path / "in" / "doc.docx",
            tmp_path / "out",
            "pdf",
            tmp_path / "lo-profile",
        )

        assert cmd[0] == "/opt/lo/soffice"
        assert "--headless" in cmd
        assert cmd[cmd.index("--convert-to") + 1] == "pdf"
        assert cmd[cmd.index("--outdir") + 1] == str(tmp_path / "out")
        assert cmd[-1] == str(tmp_path / "in" / "doc.docx")
        assert f"-env:UserInstallation={(tmp_path / 'lo-profile').resolve().as_uri()}" in cmd


class TestConvert:
    @pytest.mark.asyncio
    async def test_returns_expected_output_path(self, tmp_path):
        converter = LibreOfficeConverter(binary="soffice")
        proc = _process(stdout=b"convert doc.docx -> doc.pdf")

        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)) as spawn:
            output = await converter.convert(tmp_path / "input" / "doc.docx", tmp_path / "output")

        assert output == tmp_path / "output" / "doc.pdf"
        args = spawn.call_args.args
        assert args[0] == "soffice"
        assert str(tmp_path / "input" / "doc.docx") in args

    @pytest.mark.asyncio
    async def test_non_zero_exit_surfaces_stderr(self, tmp_path):
        converter = LibreOfficeConverter()
        proc = _process(returncode=1, stderr=b"Error: source file could not be loaded\n")

        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with pytest.raises(ConversionError) as exc_info:
                await converter.convert(tmp_path / "doc.docx", tmp_path / "out")

        assert str(exc_info.value) == "Error: source file could not be loaded"
        assert exc_info.value.returncode == 1

    @pytest.mark.asyncio
    async def test_missing_binary_is_conversion_error(self, tmp_path):
        converter = LibreOfficeConverter(binary="/nonexistent/soffice")

        with patch(
            "asyncio.create_subprocess_exec",
            AsyncMock(side_effect=FileNotFoundError(2, "No such file")),
        ):
            with pytest.raises(ConversionError, match="Could not start"):
                await converter.convert(tmp_path / "doc.docx", tmp_path / "out")

    @pytest.mark.asyncio
    async def test_timeout_kills_engine(self, tmp_path):
        converter = LibreOfficeConverter(timeout=0.01)
        proc = _process()

        async def hang():
            await asyncio.sleep(10)

        proc.communicate = hang

        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with pytest.raises(ConversionError, match="timed out"):
                await converter.convert(Path(tmp_path / "doc.docx"), tmp_path / "out")

        proc.kill.assert_called_once()
