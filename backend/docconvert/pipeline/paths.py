"""
Naming rules for scratch files and destination keys.

    file name   ← final path segment of the source URL / object key
    input path  ← {scratch}/{execution_id}/input/{file name}
    output path ← {scratch}/{execution_id}/output/{file name with .pdf}
    output key  ← conversions/{epoch ms}/{file name with .pdf}   (URL flow)
                  {source key with .pdf}                          (storage flow)
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlsplit

from docconvert.core.constants import PDF_EXTENSION, URL_CONVERSIONS_PREFIX


@dataclass(frozen=True)
class WorkingPaths:
    """Scratch locations for one invocation."""

    workdir: Path
    input_path: Path
    output_path: Path

    @property
    def output_dir(self) -> Path:
        return self.output_path.parent

    @classmethod
    def build(cls, scratch_root: str | Path, execution_id: str, file_name: str) -> WorkingPaths:
        workdir = Path(scratch_root) / execution_id
        return cls(
            workdir=workdir,
            input_path=workdir / "input" / file_name,
            output_path=workdir / "output" / swap_extension(file_name),
        )

    def prepare(self) -> None:
        """Create the input/output directories."""
        self.input_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)


def swap_extension(name: str, extension: str = PDF_EXTENSION) -> str:
    """
    Replace the extension of the last path segment.

    Only the final segment is touched, so "v1.2/report" becomes
    "v1.2/report.pdf" rather than "v1.pdf".
    """
    root, _ = posixpath.splitext(name)
    return root + extension


def file_name_from_url(url: str) -> str:
    """Final path segment of `url`, percent-decoded; "" when there is none."""
    path = urlsplit(url).path
    segment = unquote(path.rsplit("/", 1)[-1])
    # a decoded %2F must not smuggle a directory in
    name = posixpath.basename(segment)
    return "" if name in (".", "..") else name


def file_name_from_key(key: str) -> str:
    name = posixpath.basename(key)
    return "" if name in (".", "..") else name


def url_output_key(file_name: str, epoch_millis: int) -> str:
    return f"{URL_CONVERSIONS_PREFIX}/{epoch_millis}/{swap_extension(file_name)}"


def storage_output_key(source_key: str) -> str:
    return swap_extension(source_key)
