"""Tests for scratch path and destination key naming."""

from pathlib import Path

from docconvert.pipeline.paths import (
    WorkingPaths,
    file_name_from_key,
    file_name_from_url,
    storage_output_key,
    swap_extension,
    url_output_key,
)


class TestSwapExtension:
    def test_replaces_last_extension(self):
        assert swap_extension("report.docx") == "report.pdf"
        assert swap_extension("archive.tar.gz") == "archive.tar.pdf"

    def test_appends_when_no_extension(self):
        assert swap_extension("README") == "README.pdf"

    def test_only_touches_final_segment(self):
        assert swap_extension("v1.2/report") == "v1.2/report.pdf"
        assert swap_extension("upload/doc.docx") == "upload/doc.pdf"


class TestFileNames:
    def test_url_final_segment(self):
        assert file_name_from_url("https://example.com/files/deck.pptx") == "deck.pptx"

    def test_url_query_and_fragment_ignored(self):
        assert file_name_from_url("https://example.com/a/b.docx?sig=abc#p2") == "b.docx"

    def test_url_percent_decoded(self):
        assert file_name_from_url("https://example.com/My%20Report.docx") == "My Report.docx"

    def test_url_encoded_slash_cannot_escape(self):
        assert file_name_from_url("https://example.com/..%2F..%2Fetc.docx") == "etc.docx"

    def test_url_without_file_name(self):
        assert file_name_from_url("https://example.com/folder/") == ""
        assert file_name_from_url("https://example.com") == ""

    def test_key_base_name(self):
        assert file_name_from_key("upload/custom-fonts.pptx") == "custom-fonts.pptx"
        assert file_name_from_key("upload/") == ""


class TestOutputKeys:
    def test_url_output_key_is_timestamp_namespaced(self):
        assert url_output_key("deck.pptx", 1700000000123) == "conversions/1700000000123/deck.pdf"

    def test_storage_output_key_overwrites_in_place(self):
        assert storage_output_key("upload/doc.docx") == "upload/doc.pdf"


class TestWorkingPaths:
    def test_paths_are_scoped_by_execution_id(self, tmp_path):
        paths = WorkingPaths.build(tmp_path, "exec-1", "doc.docx")

        assert paths.workdir == tmp_path / "exec-1"
        assert paths.input_path == tmp_path / "exec-1" / "input" / "doc.docx"
        assert paths.output_path == tmp_path / "exec-1" / "output" / "doc.pdf"
        assert paths.output_dir == tmp_path / "exec-1" / "output"

    def test_same_file_name_never_collides(self, tmp_path):
        a = WorkingPaths.build(tmp_path, "exec-a", "doc.docx")
        b = WorkingPaths.build(tmp_path, "exec-b", "doc.docx")
        assert a.input_path != b.input_path
        assert a.output_path != b.output_path

    def test_pdf_source_does_not_overwrite_itself(self, tmp_path):
        paths = WorkingPaths.build(tmp_path, "exec-1", "already.pdf")
        assert paths.input_path != paths.output_path

    def test_prepare_creates_directories(self, tmp_path):
        paths = WorkingPaths.build(tmp_path, "exec-1", "doc.docx")
        paths.prepare()
        assert Path(paths.input_path.parent).is_dir()
        assert Path(paths.output_dir).is_dir()
