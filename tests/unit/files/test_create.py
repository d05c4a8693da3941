"""Tests for data set, VSAM, USS and zFS creation."""

from unittest.mock import patch

import pytest

from zosctl.errors import ValidationError
from zosctl.files import Create, CreateDataSetType, build_options
from zosctl.files.constants import DATA_SET_DSNTYPES, DATA_SET_RECFMS
from zosctl.files.response import ZosFilesResponse

REQUIRED_FIELDS = ("dsorg", "alcunit", "primary", "lrecl", "recfm")


@pytest.fixture
def mock_post():
    with patch("zosctl.files.create.ZosmfRestClient.post_expect_string", return_value="") as mock:
        yield mock


class TestBuildOptions:
    def test_drops_none_values(self):
        assert build_options({"lrecl": 80, "recfm": None}, primary=5, dirblk=None) == {
            "lrecl": 80,
            "primary": 5,
        }

    def test_keeps_falsy_values(self):
        assert build_options(dirblk=0, secondary=0) == {"dirblk": 0, "secondary": 0}


class TestCreateDataSet:
    @pytest.mark.parametrize(
        "ds_type",
        [
            CreateDataSetType.PARTITIONED,
            CreateDataSetType.SEQUENTIAL,
            CreateDataSetType.CLASSIC,
            CreateDataSetType.C,
            CreateDataSetType.BINARY,
        ],
    )
    def test_defaults_produce_complete_payload(self, session, mock_post, ds_type):
        Create.data_set(session, ds_type, "IBMUSER.NEW")

        payload = mock_post.call_args.args[3]
        for name in REQUIRED_FIELDS:
            assert payload.get(name) is not None, name
        assert payload["dsorg"] in ("PO", "PS")
        assert payload["alcunit"] in ("CYL", "TRK")
        assert payload["recfm"] in DATA_SET_RECFMS

    def test_resource_and_default_secondary(self, session, mock_post):
        Create.data_set(session, "SEQUENTIAL", "IBMUSER.NEW")
        resource, payload = mock_post.call_args.args[1], mock_post.call_args.args[3]
        assert resource == "/zosmf/restfiles/ds/IBMUSER.NEW"
        assert payload["secondary"] == 1

    def test_binary_default_secondary(self, session, mock_post):
        Create.data_set(session, CreateDataSetType.BINARY, "IBMUSER.LOAD")
        assert mock_post.call_args.args[3]["secondary"] == 10

    def test_caller_options_override_defaults(self, session, mock_post):
        Create.data_set(session, "PARTITIONED", "IBMUSER.PDS", {"lrecl": 133, "dirblk": 10})
        payload = mock_post.call_args.args[3]
        assert payload["lrecl"] == 133
        assert payload["dirblk"] == 10
        assert payload["blksize"] == 6160

    def test_size_sets_alcunit_primary_and_secondary(self, session, mock_post):
        Create.data_set(session, "SEQUENTIAL", "IBMUSER.NEW", {"size": "50trk"})
        payload = mock_post.call_args.args[3]
        assert payload["alcunit"] == "TRK"
        assert payload["primary"] == 50
        assert payload["secondary"] == 5
        assert "size" not in payload

    def test_blksize_raised_for_variable_records(self, session, mock_post):
        Create.data_set(
            session, "SEQUENTIAL", "IBMUSER.NEW", {"recfm": "VB", "lrecl": 255, "blksize": 100}
        )
        assert mock_post.call_args.args[3]["blksize"] == 259

    def test_show_attributes_prefixes_response(self, session, mock_post):
        response = Create.data_set(session, "SEQUENTIAL", "IBMUSER.NEW", {"show_attributes": True})
        assert isinstance(response, ZosFilesResponse)
        assert '"dsorg": "PS"' in response.command_response
        assert response.command_response.endswith("Data set created successfully.")

    @pytest.mark.parametrize(
        "options, message",
        [
            ({"alcunit": "MB"}, "alcunit"),
            ({"dsorg": "DA"}, "dsorg"),
            ({"recfm": "XYZ"}, "recfm"),
            ({"dsntype": "FANCY"}, "dsntype"),
            ({"primary": 16777216}, "Maximum allocation quantity"),
            ({"colour": "blue"}, "colour"),
        ],
    )
    def test_invalid_values_fail_before_any_request(self, session, mock_post, options, message):
        with pytest.raises(ValidationError, match=message):
            Create.data_set(session, "SEQUENTIAL", "IBMUSER.NEW", options)
        mock_post.assert_not_called()

    def test_ps_with_directory_blocks_rejected(self, session, mock_post):
        with pytest.raises(ValidationError):
            Create.data_set(session, "SEQUENTIAL", "IBMUSER.NEW", {"dirblk": 5})
        mock_post.assert_not_called()

    def test_unknown_type_rejected(self, session, mock_post):
        with pytest.raises(ValidationError, match="Unsupported data set type"):
            Create.data_set(session, "HUGE", "IBMUSER.NEW")

    def test_missing_name_rejected(self, session, mock_post):
        with pytest.raises(ValidationError, match="data set name"):
            Create.data_set(session, "SEQUENTIAL", None)

    def test_dsntype_values_accepted(self, session, mock_post):
        for dsntype in DATA_SET_DSNTYPES:
            Create.data_set(session, "PARTITIONED", "IBMUSER.PDS", {"dsntype": dsntype})
        assert mock_post.call_count == len(DATA_SET_DSNTYPES)

    def test_like(self, session, mock_post):
        Create.data_set_like(session, "IBMUSER.NEW", "IBMUSER.OLD")
        assert mock_post.call_args.args[3] == {"like": "IBMUSER.OLD"}


class TestCreateVsam:
    def test_define_statement_has_only_given_clauses(self):
        statement = Create.vsam_define_statement(
            "ibmuser.vsam",
            {"dsorg": "INDEXED", "alcunit": "KB", "primary": 640, "secondary": 64},
        )
        assert statement == (
            "DEFINE CLUSTER -\n"
            "(NAME('IBMUSER.VSAM') -\n"
            "INDEXED -\n"
            "KB(640 64) -\n"
            ")"
        )
        assert statement.count("DEFINE CLUSTER") == 1
        assert "TO(" not in statement
        assert "FOR(" not in statement

    def test_retention_clauses(self):
        statement = Create.vsam_define_statement(
            "X.Y",
            {"dsorg": "NUMBERED", "alcunit": "CYL", "primary": 1, "secondary": 1, "retain_for": 30},
        )
        assert "FOR(30) -\n" in statement
        assert "TO(" not in statement

    def test_size_parsing(self):
        options = Create.vsam_idcams_options({"size": "5MB"})
        assert options["alcunit"] == "MB"
        assert options["primary"] == 5
        assert options["secondary"] == 1

    def test_derived_secondary_is_ten_percent(self):
        assert Create.vsam_idcams_options({"primary": 840})["secondary"] == 84
        assert Create.vsam_idcams_options({"primary": 25})["secondary"] == 3

    def test_vsam_invokes_idcams(self, session):
        with patch("zosctl.files.create.Invoke.ams_statements") as ams:
            ams.return_value = ZosFilesResponse(success=True, api_response={})
            response = Create.vsam(
                session, "IBMUSER.VSAM", {"alcunit": "KB", "primary": 640, "secondary": 64}
            )
        assert response.success
        statements = ams.call_args.args[1]
        assert len(statements) == 1
        assert "KB(640 64)" in statements[0]

    def test_retain_for_out_of_range(self, session):
        with patch("zosctl.files.create.Invoke.ams_statements") as ams:
            with pytest.raises(ValidationError, match="retain_for"):
                Create.vsam(session, "IBMUSER.VSAM", {"retain_for": 99999})
        ams.assert_not_called()


class TestCreateUssAndZfs:
    def test_uss_directory(self, session, mock_post):
        Create.uss(session, "/u/ibmuser/dir", "directory", "rwxr-xr-x")
        resource, _, payload = mock_post.call_args.args[1:4]
        assert resource == "/zosmf/restfiles/fs/u%2Fibmuser%2Fdir"
        assert payload == {"type": "directory", "mode": "rwxr-xr-x"}

    def test_uss_requires_type(self, session, mock_post):
        with pytest.raises(ValidationError):
            Create.uss(session, "/u/ibmuser/dir", None)

    def test_zfs_defaults(self, session, mock_post):
        Create.zfs(session, "IBMUSER.ZFS", {"volumes": "VOL1, VOL2"})
        resource, _, payload = mock_post.call_args.args[1:4]
        assert resource == "/zosmf/restfiles/mfs/zfs/IBMUSER.ZFS?timeout=20"
        assert payload["perms"] == 755
        assert payload["cylsPri"] == 10
        assert payload["cylsSec"] == 2
        assert payload["volumes"] == ["VOL1", "VOL2"]
        assert payload["JSONversion"] == 1

    def test_zfs_invalid_perms(self, session, mock_post):
        with pytest.raises(ValidationError, match="perms"):
            Create.zfs(session, "IBMUSER.ZFS", {"perms": 999})
