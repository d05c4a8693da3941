"""Tests for .zosattributes parsing."""

import pytest

from zosctl.errors import ValidationError
from zosctl.files import TransferMode, ZosFilesAttributes

ATTRIBUTES = """
# comment lines and blank lines are ignored

*.bin     binary
*.txt     ISO8859-1  IBM-1047
*.cbl     IBM-1047   IBM-1047
secret*   -
build/    -
build/keep.txt ISO8859-1 IBM-1047
"""


@pytest.fixture
def attributes():
    return ZosFilesAttributes(ATTRIBUTES, base_path="/work")


class TestZosFilesAttributes:
    def test_skip_rule(self, attributes):
        assert attributes.file_should_be_uploaded("/work/secret.key") is False
        assert attributes.file_should_be_uploaded("/work/readme.txt") is True

    def test_directory_rule_covers_children(self, attributes):
        assert attributes.file_should_be_uploaded("/work/build/out.o") is False

    def test_later_rule_wins(self, attributes):
        assert attributes.file_should_be_uploaded("/work/build/keep.txt") is True

    def test_binary_encoding(self, attributes):
        assert attributes.get_file_transfer_mode("/work/a.bin") == TransferMode.BINARY

    def test_text_when_encodings_differ(self, attributes):
        assert attributes.get_file_transfer_mode("/work/sub/a.txt") == TransferMode.TEXT
        assert attributes.get_remote_encoding("/work/sub/a.txt") == "IBM-1047"
        assert attributes.get_local_encoding("/work/sub/a.txt") == "ISO8859-1"

    def test_binary_when_encodings_match(self, attributes):
        assert attributes.get_file_transfer_mode("/work/prog.cbl") == TransferMode.BINARY

    def test_unmatched_file_defaults(self, attributes):
        assert attributes.get_file_transfer_mode("/work/notes.md") == TransferMode.BINARY
        assert attributes.get_file_transfer_mode("/work/notes.md", False) == TransferMode.TEXT
        assert attributes.get_remote_encoding("/work/notes.md") == "ISO8859-1"

    def test_syntax_error_names_line(self):
        with pytest.raises(ValidationError, match="2"):
            ZosFilesAttributes("*.bin binary\n*.txt a b c\n")

    def test_from_file_missing(self, tmp_path):
        with pytest.raises(ValidationError, match="does not exist"):
            ZosFilesAttributes.from_file(tmp_path / ".zosattributes")

    def test_from_file(self, tmp_path):
        path = tmp_path / ".zosattributes"
        path.write_text("*.bin binary\n")
        attributes = ZosFilesAttributes.from_file(path, base_path=str(tmp_path))
        assert attributes.get_file_transfer_mode(str(tmp_path / "x.bin")) == TransferMode.BINARY


class TestRelativeBasePath:
    @pytest.fixture(autouse=True)
    def in_tmp_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

    @pytest.mark.parametrize("base_path", ["./work", "work/", "work"])
    def test_nested_pattern_matches(self, base_path):
        attributes = ZosFilesAttributes("sub/*.bin binary\n", base_path=base_path)
        assert attributes.get_file_transfer_mode("work/sub/x.bin", False) == TransferMode.BINARY
        assert attributes.get_file_transfer_mode("./work/sub/x.bin", False) == TransferMode.BINARY

    def test_directory_skip_rule(self):
        attributes = ZosFilesAttributes("build/*.o -\n", base_path="./work")
        assert attributes.file_should_be_uploaded("work/build/out.o") is False
        assert attributes.file_should_be_uploaded("work/src/main.c") is True

    def test_absolute_path_under_relative_base(self, tmp_path):
        attributes = ZosFilesAttributes("sub/*.bin binary\n", base_path="work")
        path = str(tmp_path / "work" / "sub" / "x.bin")
        assert attributes.get_file_transfer_mode(path, False) == TransferMode.BINARY

    def test_path_outside_base_only_matches_base_name_rules(self):
        attributes = ZosFilesAttributes("*.bin binary\nsub/*.txt -\n", base_path="work")
        assert attributes.get_file_transfer_mode("other/a.bin", False) == TransferMode.BINARY
        assert attributes.file_should_be_uploaded("other/sub/a.txt") is True
