"""Tests for uploads to data sets and USS."""

from unittest.mock import MagicMock, patch

import pytest

from zosctl.errors import ValidationError, ZosError
from zosctl.files import Download, Upload, ZosFilesAttributes
from zosctl.files.upload import FilesMap, TransferOptions, upload_headers

BINARY_CONTENT = b"\x00\x01\r\n\xff\xfe"
TEXT_CONTENT = b"line one\r\nline two\r\n"


class FakeUssServer:
    """In-memory stand-in for the z/OSMF USS file endpoints."""

    def __init__(self):
        self.files: dict[str, bytes] = {}
        self.headers: dict[str, dict] = {}
        self.tags: dict[str, dict] = {}

    def put(self, session, resource, headers, payload):
        self.files[resource] = payload
        self.headers[resource] = headers
        return MagicMock(headers={})

    def put_json(self, session, resource, headers, payload):
        self.tags[resource] = payload
        return {}

    def get_streamed(self, session, resource, headers, stream, normalize_newlines=False):
        data = self.files[resource]
        if normalize_newlines:
            data = data.replace(b"\r\n", b"\n")
        stream.write(data)
        return MagicMock(headers={})


@pytest.fixture
def server():
    fake = FakeUssServer()
    with (
        patch("zosctl.files.upload.ZosmfRestClient.put_expect_full_response", side_effect=fake.put),
        patch("zosctl.files.upload.ZosmfRestClient.put_expect_json", side_effect=fake.put_json),
        patch("zosctl.files.upload.ZosmfRestClient.get_expect_json", return_value={"items": [{"name": "."}]}),
        patch("zosctl.files.download.ZosmfRestClient.get_streamed", side_effect=fake.get_streamed),
    ):
        yield fake


class TestUploadHeaders:
    def test_binary(self):
        headers = upload_headers(TransferOptions(binary=True))
        assert headers["Content-Type"] == "application/octet-stream"
        assert headers["X-IBM-Data-Type"] == "binary"

    def test_text_with_encodings(self):
        headers = upload_headers(TransferOptions(encoding="IBM-1047", local_encoding="ISO8859-1"))
        assert headers["X-IBM-Data-Type"] == "text;fileEncoding=IBM-1047"
        assert headers["Content-Type"] == "ISO8859-1"

    def test_etag_and_timeout(self):
        headers = upload_headers(TransferOptions(), response_timeout=30, etag="abc", return_etag=True)
        assert headers["If-Match"] == "abc"
        assert headers["X-IBM-Return-Etag"] == "true"
        assert headers["X-IBM-Response-Timeout"] == "30"


class TestDirToUssDir:
    def test_files_map_overrides_uniform_mode(self, server, session, tmp_path):
        local = tmp_path / "src"
        local.mkdir()
        (local / "a.bin").write_bytes(BINARY_CONTENT)
        (local / "b.txt").write_bytes(TEXT_CONTENT)

        response = Upload.dir_to_uss_dir(
            session,
            str(local),
            "/u/ibmuser/up",
            binary=False,
            files_map=FilesMap(binary=True, file_names=["a.bin"]),
        )

        assert response.success is True
        binary_resource = "/zosmf/restfiles/fs/u%2Fibmuser%2Fup%2Fa.bin"
        text_resource = "/zosmf/restfiles/fs/u%2Fibmuser%2Fup%2Fb.txt"
        assert server.headers[binary_resource]["Content-Type"] == "application/octet-stream"
        assert server.files[binary_resource] == BINARY_CONTENT
        assert server.headers[text_resource]["X-IBM-Data-Type"] == "text"
        assert server.files[text_resource] == b"line one\nline two\n"
        assert server.tags[binary_resource]["type"] == "binary"

    def test_round_trip_preserves_content(self, server, session, tmp_path):
        local = tmp_path / "src"
        local.mkdir()
        (local / "a.bin").write_bytes(BINARY_CONTENT)
        (local / "b.txt").write_bytes(TEXT_CONTENT)
        Upload.dir_to_uss_dir(
            session,
            str(local),
            "/u/ibmuser/up",
            files_map=FilesMap(binary=True, file_names=["a.bin"]),
        )

        out = tmp_path / "out"
        Download.uss_file(session, "/u/ibmuser/up/a.bin", file=str(out / "a.bin"), binary=True)
        Download.uss_file(session, "/u/ibmuser/up/b.txt", file=str(out / "b.txt"))

        assert (out / "a.bin").read_bytes() == BINARY_CONTENT
        assert (out / "b.txt").read_text().splitlines() == TEXT_CONTENT.decode().splitlines()

    def test_hidden_files_skipped_by_default(self, server, session, tmp_path):
        (tmp_path / ".hidden").write_text("x")
        (tmp_path / "shown").write_text("y")

        response = Upload.dir_to_uss_dir(session, str(tmp_path), "/u/ibmuser/up")

        assert [r.target for r in response.api_response.results] == ["/u/ibmuser/up/shown"]

    def test_record_rejected(self, session, tmp_path):
        with pytest.raises(ValidationError):
            Upload.dir_to_uss_dir(session, str(tmp_path), "/u/ibmuser/up", record=True)

    def test_partial_failure_reports_count(self, server, session, tmp_path):
        (tmp_path / "a.txt").write_text("a")
        (tmp_path / "b.txt").write_text("b")

        def put(session, resource, headers, payload):
            if resource.endswith("b.txt"):
                raise ZosError("disk full")
            return server.put(session, resource, headers, payload)

        with patch("zosctl.files.upload.ZosmfRestClient.put_expect_full_response", side_effect=put):
            response = Upload.dir_to_uss_dir(session, str(tmp_path), "/u/ibmuser/up")

        assert response.success is False
        assert len(response.api_response.failed) == 1
        assert len(response.api_response.succeeded) == 1

    def test_failed_subdirectory_is_reported(self, server, session, tmp_path):
        (tmp_path / "top.txt").write_text("t")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "inner.txt").write_text("i")

        def create_uss(session, uss_name, *args, **kwargs):
            if uss_name.endswith("/sub"):
                raise ZosError("EDC5111I Permission denied.")

        with (
            patch("zosctl.files.upload.ZosmfRestClient.get_expect_json", return_value={}),
            patch("zosctl.files.upload.Create.uss", side_effect=create_uss),
        ):
            response = Upload.dir_to_uss_dir(session, str(tmp_path), "/u/ibmuser/up", recursive=True)

        assert response.success is False
        [failure] = response.api_response.failed
        assert failure.target == "/u/ibmuser/up/sub"
        assert "Permission denied" in str(failure.error)
        assert [r.target for r in response.api_response.succeeded] == ["/u/ibmuser/up/top.txt"]
        assert "/zosmf/restfiles/fs/u%2Fibmuser%2Fup%2Fsub%2Finner.txt" not in server.files


class TestDirToUssDirWithAttributes:
    @pytest.fixture
    def work(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        work = tmp_path / "work"
        (work / "build").mkdir(parents=True)
        (work / "build" / "out.o").write_bytes(BINARY_CONTENT)
        (work / "build" / "keep.c").write_text("int main;\n")
        (work / "a.bin").write_bytes(TEXT_CONTENT)
        (work / "b.dat").write_bytes(BINARY_CONTENT)
        (work / "c.txt").write_bytes(TEXT_CONTENT)
        return work

    def test_skip_rule_with_relative_directory(self, server, session, work):
        attributes = ZosFilesAttributes("build/*.o -\n", base_path="./work")

        response = Upload.dir_to_uss_dir(
            session, "./work", "/u/x", recursive=True, attributes=attributes
        )

        assert response.success is True
        assert "/zosmf/restfiles/fs/u%2Fx%2Fbuild%2Fout.o" not in server.files
        assert "/zosmf/restfiles/fs/u%2Fx%2Fbuild%2Fkeep.c" in server.files
        targets = [r.target for r in response.api_response.results]
        assert "/u/x/build/out.o" not in targets

    def test_attributes_beat_files_map_which_beats_flag(self, server, session, work):
        attributes = ZosFilesAttributes("a.bin ISO8859-1 IBM-1047\nbuild/ -\n", base_path="work/")

        Upload.dir_to_uss_dir(
            session,
            "work",
            "/u/x",
            binary=False,
            files_map=FilesMap(binary=True, file_names=["a.bin", "b.dat"]),
            attributes=attributes,
        )

        rule_resource = "/zosmf/restfiles/fs/u%2Fx%2Fa.bin"
        map_resource = "/zosmf/restfiles/fs/u%2Fx%2Fb.dat"
        flag_resource = "/zosmf/restfiles/fs/u%2Fx%2Fc.txt"
        assert server.headers[rule_resource]["X-IBM-Data-Type"] == "text;fileEncoding=IBM-1047"
        assert server.headers[map_resource]["Content-Type"] == "application/octet-stream"
        assert server.files[map_resource] == BINARY_CONTENT
        assert server.headers[flag_resource]["X-IBM-Data-Type"].startswith("text")

    def test_nested_binary_rule_with_relative_directory(self, server, session, work):
        attributes = ZosFilesAttributes("build/*.o binary\n", base_path="./work")

        Upload.dir_to_uss_dir(session, "./work", "/u/x", recursive=True, attributes=attributes)

        resource = "/zosmf/restfiles/fs/u%2Fx%2Fbuild%2Fout.o"
        assert server.headers[resource]["Content-Type"] == "application/octet-stream"
        assert server.files[resource] == BINARY_CONTENT


class TestPathToDataSet:
    @pytest.fixture
    def pds_listing(self):
        listing = {"returnedRows": 1, "items": [{"dsname": "IBMUSER.SRC", "dsorg": "PO"}]}
        with patch("zosctl.files.list.ZosmfRestClient.get_expect_json", return_value=listing):
            yield

    def test_stops_after_first_failure(self, pds_listing, session, tmp_path):
        for name in ("a.txt", "b.txt", "c.txt"):
            (tmp_path / name).write_text(name)
        put = MagicMock(side_effect=[MagicMock(headers={}), ZosError("member in use"), MagicMock(headers={})])

        with patch("zosctl.files.upload.ZosmfRestClient.put_expect_full_response", put):
            response = Upload.dir_to_pds(session, str(tmp_path), "ibmuser.src")

        assert response.success is False
        assert response.command_response == "member in use"
        assert [r.success for r in response.api_response] == [True, False, None]
        assert [r.target for r in response.api_response] == [
            "IBMUSER.SRC(A)",
            "IBMUSER.SRC(B)",
            "IBMUSER.SRC(C)",
        ]
        assert put.call_count == 2

    def test_text_newlines_normalized(self, pds_listing, session, tmp_path):
        source = tmp_path / "member.txt"
        source.write_bytes(TEXT_CONTENT)
        put = MagicMock(return_value=MagicMock(headers={}))

        with patch("zosctl.files.upload.ZosmfRestClient.put_expect_full_response", put):
            response = Upload.file_to_data_set(session, str(source), "IBMUSER.SRC")

        assert response.success is True
        resource, headers, payload = put.call_args.args[1:]
        assert resource == "/zosmf/restfiles/ds/IBMUSER.SRC(MEMBER)"
        assert payload == b"line one\nline two\n"

    def test_masked_name_rejected(self, session, tmp_path):
        with pytest.raises(ValidationError):
            Upload.path_to_data_set(session, str(tmp_path), "IBMUSER.*")

    def test_directory_to_member_rejected(self, pds_listing, session, tmp_path):
        with pytest.raises(ValidationError):
            Upload.path_to_data_set(session, str(tmp_path), "IBMUSER.SRC(MEM)")

    def test_file_without_usable_member_name_rejected(self, pds_listing, session, tmp_path):
        (tmp_path / "123.txt").write_text("x")
        with patch("zosctl.files.upload.ZosmfRestClient.put_expect_full_response") as put:
            with pytest.raises(ValidationError):
                Upload.dir_to_pds(session, str(tmp_path), "IBMUSER.SRC")
        put.assert_not_called()
