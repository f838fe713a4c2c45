"""
Conversion service — LibreOffice in headless mode.

    soffice --headless --norestore \
        -env:UserInstallation=file:///<workdir>/lo-profile \
        --convert-to pdf --outdir <output dir> <input file>

Each call gets its own LibreOffice profile directory: two soffice
processes sharing a profile block on its lock file.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from docconvert.core.config import settings
from docconvert.core.logging import get_logger
from docconvert.pipeline.errors import ConversionError

logger = get_logger(__name__)

DEFAULT_TARGET_FORMAT = "pdf"


class LibreOfficeConverter:
    """Runs `soffice --convert-to` as a subprocess."""

    def __init__(
        self,
        binary: str = settings.SOFFICE_BINARY,
        timeout: float | None = settings.CONVERSION_TIMEOUT_SECONDS,
    ) -> None:
        self.binary = binary
        self.timeout = timeout

    def build_command(
        self,
        input_path: Path,
        output_dir: Path,
        target_format: str,
        profile_dir: Path,
    ) -> list[str]:
        return [
            self.binary,
            "--headless",
            "--norestore",
            f"-env:UserInstallation={profile_dir.resolve().as_uri()}",
            "--convert-to",
            target_format,
            "--outdir",
            str(output_dir),
            str(input_path),
        ]

    async def convert(
        self,
        input_path: str | Path,
        output_dir: str | Path,
        target_format: str = DEFAULT_TARGET_FORMAT,
    ) -> Path:
        """
        Convert `input_path` into `output_dir`.

        Returns the path the engine is expected to have written
        (input stem + target extension).  Existence is NOT checked here.

        Raises:
            ConversionError: missing binary, non-zero exit, or timeout.
        """
        input_path = Path(input_path)
        output_dir = Path(output_dir)
        profile_dir = output_dir.parent / "lo-profile"
        cmd = self.build_command(input_path, output_dir, target_format, profile_dir)

        log = logger.bind(input_path=str(input_path), target_format=target_format)
        log.info("Conversion started", command=cmd)

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ConversionError(f"Could not start '{self.binary}': {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise ConversionError(
                f"Conversion of '{input_path.name}' timed out after {self.timeout}s",
            ) from None

        stderr_text = stderr.decode(errors="replace").strip()
        if proc.returncode != 0:
            log.error("Conversion failed", returncode=proc.returncode, stderr=stderr_text)
            raise ConversionError(
                stderr_text or f"{self.binary} exited with status {proc.returncode}",
                returncode=proc.returncode,
                stderr=stderr_text,
            )

        output_path = output_dir / f"{input_path.stem}.{target_format}"
        log.info(
            "Conversion finished",
            output_path=str(output_path),
            stdout=stdout.decode(errors="replace").strip(),
        )
        return output_path
