"""Create data sets, VSAM clusters, USS files and z/OS file systems.

Option bags use z/OSMF attribute names for data set attributes (alcunit,
dsorg, lrecl, ...) and snake_case for client-side options (size,
show_attributes, response_timeout, retain_for, ...). Callers build them with
build_options(), which copies only the keys that carry a value.
"""

import json
import logging
import math
import posixpath
import re
from collections.abc import Mapping
from typing import Any

from zosctl.errors import ValidationError, ZosError
from zosctl.files import messages
from zosctl.files.constants import (
    DATA_SET_DEFAULTS,
    DATA_SET_DSNTYPES,
    DATA_SET_RECFMS,
    FILES_CONFIG,
    VARIABLE_RECFMS,
    VSAM_DEFAULTS,
    ZFS_DEFAULTS,
    CreateDataSetType,
    FilesConfig,
)
from zosctl.files.invoke import Invoke
from zosctl.files.response import ZosFilesResponse
from zosctl.files.utils import encode, response_timeout_header
from zosctl.rest_client import ZosmfHeaders, ZosmfRestClient
from zosctl.session import Session

logger = logging.getLogger(__name__)

TEN_PERCENT = 0.10

# Attributes accepted by the data set create endpoint without further checks
_DATA_SET_PASSTHROUGH = ("avgblk", "mgntclass", "storclass", "dataclass", "unit", "volser", "like")
_VSAM_PASSTHROUGH = ("retain_to", "volumes", "storclass", "mgntclass", "dataclass")
_ZFS_PASSTHROUGH = ("owner", "group", "storclass", "mgntclass", "dataclass", "volumes", "timeout")

# snake_case client option -> z/OSMF zFS attribute
_ZFS_WIRE_NAMES = {"cyls_pri": "cylsPri", "cyls_sec": "cylsSec"}


def build_options(source: Mapping[str, Any] | None = None, **values: Any) -> dict[str, Any]:
    """Return a new option dict holding only the keys whose value is not None.

    Examples:
        >>> build_options({"lrecl": 80, "recfm": None}, primary=5)
        {'lrecl': 80, 'primary': 5}
    """
    options: dict[str, Any] = {}
    for mapping in (source or {}, values):
        for key, value in mapping.items():
            if value is not None:
                options[key] = value
    return options


def _ten_percent(primary: int) -> int:
    # Round half up
    return int(math.floor(int(primary) * TEN_PERCENT + 0.5))


def _pretty(options: Mapping[str, Any]) -> str:
    return json.dumps(dict(options), indent=2, default=str) + "\n"


class Create:
    """Create data sets and file system objects."""

    # -- data sets -------------------------------------------------------

    @classmethod
    def data_set(
        cls,
        session: Session,
        data_set_type: CreateDataSetType | str | None,
        data_set_name: str | None,
        options: Mapping[str, Any] | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Create a data set, merging caller options over the type's defaults.

        Args:
            session: z/OSMF connection
            data_set_type: PARTITIONED, SEQUENTIAL, CLASSIC, C, BINARY or BLANK
            data_set_name: Name of the data set to create
            options: Attribute overrides; "size" such as "5CYL" sets alcunit and
                primary, "show_attributes" prefixes the effective attributes to
                the response, "response_timeout" is sent as a header

        Raises:
            ValidationError: Before any request, if the type or an attribute is invalid
        """
        if data_set_type is None:
            raise ValidationError(messages.MISSING_DATASET_TYPE)
        if data_set_name is None:
            raise ValidationError(messages.MISSING_DATASET_NAME)
        try:
            ds_type = CreateDataSetType(str(getattr(data_set_type, "value", data_set_type)).upper())
        except ValueError as e:
            raise ValidationError(messages.UNSUPPORTED_DATASET_TYPE) from e

        caller_options = build_options(options)
        response_timeout = caller_options.pop("response_timeout", None)
        show_attributes = caller_options.pop("show_attributes", None)
        attributes = {**DATA_SET_DEFAULTS[ds_type], **caller_options}

        size = attributes.pop("size", None)
        if size is not None:
            alcunit = "".join(re.findall(r"[a-zA-Z]+", str(size)))
            if alcunit:
                attributes["alcunit"] = alcunit.upper()
            primary = "".join(re.findall(r"[0-9]+", str(size)))
            if primary:
                attributes["primary"] = int(primary)
                if attributes.get("secondary") is None:
                    attributes["secondary"] = _ten_percent(attributes["primary"])
        elif attributes.get("secondary") is None and ds_type != CreateDataSetType.BLANK:
            attributes["secondary"] = 10 if ds_type == CreateDataSetType.BINARY else 1

        response_text = _pretty(attributes) if show_attributes else ""

        cls.validate_data_set_options(attributes, config)

        resource = f"{config.resource}{config.res_ds_files}/{encode(data_set_name)}"
        headers = {**ZosmfHeaders.ACCEPT_ENCODING, **response_timeout_header(response_timeout)}
        logger.debug(f"Creating {ds_type.value} data set {data_set_name}")
        ZosmfRestClient.post_expect_string(session, resource, headers, attributes)

        return ZosFilesResponse(
            success=True,
            command_response=response_text + messages.DATASET_CREATED,
            api_response=attributes,
        )

    @classmethod
    def data_set_like(
        cls,
        session: Session,
        data_set_name: str | None,
        like_data_set_name: str | None,
        options: Mapping[str, Any] | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Create a data set with the attributes of an existing one."""
        if data_set_name is None:
            raise ValidationError(messages.MISSING_DATASET_NAME)
        if like_data_set_name is None:
            raise ValidationError(messages.MISSING_DATASET_LIKE_NAME)

        attributes = {"like": like_data_set_name, **build_options(options)}
        response_timeout = attributes.pop("response_timeout", None)
        attributes.pop("show_attributes", None)
        cls.validate_data_set_options(attributes, config)

        resource = f"{config.resource}{config.res_ds_files}/{encode(data_set_name)}"
        headers = {**ZosmfHeaders.ACCEPT_ENCODING, **response_timeout_header(response_timeout)}
        ZosmfRestClient.post_expect_string(session, resource, headers, attributes)
        return ZosFilesResponse(success=True, command_response=messages.DATASET_CREATED)

    @classmethod
    def validate_data_set_options(
        cls, options: dict[str, Any], config: FilesConfig = FILES_CONFIG
    ) -> None:
        """Validate, and where z/OSMF would default, complete data set attributes.

        Mutates options in place: blksize is raised to fit lrecl (plus the
        4-byte descriptor word for variable formats).

        Raises:
            ValidationError: Unknown key or invalid value
        """
        for key in list(options):
            value = options[key]

            if key == "alcunit":
                if value is None:
                    options[key] = value = "TRK"
                if str(value).upper() not in ("CYL", "TRK"):
                    raise ValidationError(messages.INVALID_ALCUNIT_OPTION + str(value))

            elif key == "blksize":
                if value is None:
                    options[key] = value = options.get("lrecl")
                lrecl = options.get("lrecl")
                if lrecl is not None and value is not None and int(value) <= int(lrecl):
                    blksize = int(lrecl)
                    if options.get("recfm") is None:
                        options["recfm"] = "FB"
                    if str(options["recfm"]).upper() in VARIABLE_RECFMS:
                        blksize += 4
                    options[key] = blksize

            elif key == "lrecl":
                if value is None:
                    raise ValidationError(messages.MISSING_RECORD_LENGTH)

            elif key == "dirblk":
                if value != 0 and options.get("dsorg") == "PS":
                    raise ValidationError(messages.INVALID_PS_DSORG_DIRBLK)
                if value == 0 and options.get("dsorg") == "PO":
                    raise ValidationError(messages.INVALID_PO_DSORG_DIRBLK)

            elif key == "dsntype":
                if str(value).upper() not in DATA_SET_DSNTYPES:
                    raise ValidationError(messages.INVALID_DSNTYPE_OPTION + str(value))

            elif key == "dsorg":
                if str(value).upper() not in ("PO", "PS"):
                    raise ValidationError(messages.INVALID_DSORG_OPTION + str(value))

            elif key == "primary":
                if value is None:
                    raise ValidationError(messages.MISSING_PRIMARY)
                if int(value) > config.max_alloc_quantity:
                    raise ValidationError(messages.MAX_ALLOCATION_EXCEEDED + " for 'primary'.")

            elif key == "secondary":
                if value is None:
                    options[key] = value = 0
                if int(value) > config.max_alloc_quantity:
                    raise ValidationError(messages.MAX_ALLOCATION_EXCEEDED + " for 'secondary'.")

            elif key == "recfm":
                if value is None:
                    options[key] = value = "F"
                if str(value).upper() not in DATA_SET_RECFMS:
                    raise ValidationError(messages.INVALID_RECFM_OPTION + str(value))

            elif key in _DATA_SET_PASSTHROUGH:
                pass

            else:
                raise ValidationError(messages.INVALID_CREATE_OPTION + key)

    # -- VSAM ------------------------------------------------------------

    @classmethod
    def vsam(
        cls,
        session: Session,
        data_set_name: str | None,
        options: Mapping[str, Any] | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Define a VSAM cluster by invoking IDCAMS.

        Raises:
            ValidationError: Before any request, if an option is missing or invalid
            ZosError: IDCAMS failed; the message is prefixed with the attributes
                when show_attributes was requested
        """
        if data_set_name is None:
            raise ValidationError(messages.MISSING_DATASET_NAME)

        idcams_options = cls.vsam_idcams_options(options)
        response_timeout = idcams_options.pop("response_timeout", None)
        show_attributes = idcams_options.pop("show_attributes", None)
        attrib_text = messages.ATTRIBUTE_TITLE + _pretty(idcams_options) if show_attributes else ""

        try:
            cls.validate_vsam_options(idcams_options, config)
            statement = cls.vsam_define_statement(data_set_name, idcams_options)
            logger.debug(f"Invoking this IDCAMS command:\n{statement}")
            idcams_response = Invoke.ams_statements(
                session, [statement], response_timeout=response_timeout, config=config
            )
        except ZosError as e:
            logger.error(f"VSAM creation failed for {data_set_name}: {e.msg}")
            if not attrib_text:
                raise
            raise ZosError(
                attrib_text + e.msg,
                additional_details=e.additional_details,
                cause_errors=e.cause_errors,
            ) from e

        return ZosFilesResponse(
            success=True,
            command_response=attrib_text + messages.DATASET_CREATED,
            api_response=idcams_response.api_response,
        )

    @classmethod
    def vsam_idcams_options(cls, options: Mapping[str, Any] | None) -> dict[str, Any]:
        """Convert client options to IDCAMS options, applying VSAM defaults.

        Examples:
            >>> Create.vsam_idcams_options({"size": "5mb"})
            {'dsorg': 'INDEXED', 'alcunit': 'MB', 'primary': 5, 'secondary': 1}
        """
        idcams_options = build_options(options)
        size = idcams_options.pop("size", None)
        if size:
            size = str(size).upper()
            alcunit = re.findall(r"[A-Z]+", size)
            if alcunit:
                idcams_options["alcunit"] = alcunit[0]
            primary = re.findall(r"[0-9]+", size)
            if primary:
                idcams_options["primary"] = int(primary[0])

        idcams_options = {**VSAM_DEFAULTS, **idcams_options}
        if idcams_options.get("secondary") is None:
            idcams_options["secondary"] = _ten_percent(idcams_options["primary"])
        return idcams_options

    @classmethod
    def validate_vsam_options(cls, options: Mapping[str, Any], config: FilesConfig = FILES_CONFIG) -> None:
        for required in ("dsorg", "alcunit", "primary", "secondary"):
            if options.get(required) is None:
                raise ValidationError(messages.MISSING_VSAM_OPTION + required)

        for key, value in options.items():
            if key == "dsorg":
                if str(value).upper() not in config.vsam_dsorg_choices:
                    raise ValidationError(messages.INVALID_DSORG_OPTION + str(value))
            elif key == "alcunit":
                if str(value).upper() not in config.vsam_alcunit_choices:
                    raise ValidationError(messages.INVALID_ALCUNIT_OPTION + str(value))
            elif key in ("primary", "secondary"):
                if int(value) > config.max_alloc_quantity:
                    raise ValidationError(
                        f"{messages.MAX_ALLOCATION_EXCEEDED} for '{key}' with value = {value}."
                    )
            elif key == "retain_for":
                if not config.min_retain_days <= int(value) <= config.max_retain_days:
                    raise ValidationError(
                        messages.VALUE_OUT_OF_BOUNDS.format(
                            option=key,
                            value=value,
                            min_value=config.min_retain_days,
                            max_value=config.max_retain_days,
                        )
                    )
            elif key in _VSAM_PASSTHROUGH:
                pass
            else:
                raise ValidationError(messages.INVALID_CREATE_OPTION + key)

    @classmethod
    def vsam_define_statement(cls, data_set_name: str, options: Mapping[str, Any]) -> str:
        """Build the IDCAMS DEFINE CLUSTER statement.

        Optional clauses are left out entirely when their option is unset.
        """
        statement = (
            "DEFINE CLUSTER -\n"
            f"(NAME('{data_set_name.upper()}') -\n"
            f"{str(options['dsorg']).upper()} -\n"
            f"{str(options['alcunit']).upper()}({options['primary']} {options['secondary']}) -\n"
        )
        if options.get("retain_to"):
            statement += f"TO({options['retain_to']}) -\n"
        if options.get("retain_for"):
            statement += f"FOR({options['retain_for']}) -\n"
        if options.get("volumes"):
            statement += f"VOLUMES({str(options['volumes']).upper()}) -\n"
        if options.get("storclass"):
            statement += f"STORAGECLASS({options['storclass']}) -\n"
        if options.get("mgntclass"):
            statement += f"MANAGEMENTCLASS({options['mgntclass']}) -\n"
        if options.get("dataclass"):
            statement += f"DATACLASS({options['dataclass']}) -\n"
        return statement + ")"

    # -- USS and zFS -----------------------------------------------------

    @classmethod
    def uss(
        cls,
        session: Session,
        uss_path: str,
        file_type: str | None,
        mode: str | None = None,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Create a USS file or directory.

        Args:
            file_type: "file" or "directory"
            mode: Permission string such as "rwxr-xr-x"
        """
        if not file_type:
            raise ValidationError(messages.MISSING_REQUEST_TYPE)

        normalized = posixpath.normpath(uss_path)
        if normalized.startswith("/"):
            normalized = normalized[1:]
        resource = f"{config.resource}{config.res_uss_files}/{encode(normalized)}"
        headers = {
            **ZosmfHeaders.APPLICATION_JSON,
            **ZosmfHeaders.ACCEPT_ENCODING,
            **response_timeout_header(response_timeout),
        }
        payload = build_options(type=file_type, mode=mode)
        data = ZosmfRestClient.post_expect_string(session, resource, headers, payload)
        return ZosFilesResponse(success=True, command_response=messages.USS_CREATED, api_response=data)

    @classmethod
    def zfs(
        cls,
        session: Session,
        file_system_name: str | None,
        options: Mapping[str, Any] | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Create a z/OS file system (zFS)."""
        if file_system_name is None:
            raise ValidationError(messages.MISSING_FILE_SYSTEM_NAME)

        caller_options = {
            _ZFS_WIRE_NAMES.get(key, key): value for key, value in build_options(options).items()
        }
        response_timeout = caller_options.pop("response_timeout", None)
        zfs_options = {**ZFS_DEFAULTS, **caller_options}
        volumes = zfs_options.get("volumes")
        if isinstance(volumes, str):
            zfs_options["volumes"] = [v.strip() for v in volumes.split(",") if v.strip()]

        cls.validate_zfs_options(zfs_options, config)

        resource = f"{config.resource}{config.res_zfs_files}/{encode(file_system_name)}"
        timeout = zfs_options.pop("timeout", None)
        if timeout is not None:
            resource += f"?timeout={encode(timeout)}"
        zfs_options["JSONversion"] = 1

        headers = {**ZosmfHeaders.ACCEPT_ENCODING, **response_timeout_header(response_timeout)}
        data = ZosmfRestClient.post_expect_string(session, resource, headers, zfs_options)
        return ZosFilesResponse(success=True, command_response=messages.ZFS_CREATED, api_response=data)

    @classmethod
    def validate_zfs_options(cls, options: Mapping[str, Any], config: FilesConfig = FILES_CONFIG) -> None:
        for required, label in (
            ("perms", "perms"),
            ("cylsPri", "cyls-pri"),
            ("cylsSec", "cyls-sec"),
            ("timeout", "timeout"),
        ):
            if options.get(required) is None:
                raise ValidationError(messages.MISSING_ZFS_OPTION + label)

        for key, value in options.items():
            if key == "perms":
                if not 0 <= int(value) <= 777:
                    raise ValidationError(messages.INVALID_PERMS_OPTION + str(value))
            elif key in ("cylsPri", "cylsSec"):
                if int(value) > config.max_alloc_quantity:
                    raise ValidationError(
                        f"{messages.MAX_ALLOCATION_EXCEEDED} for '{key}' with value = {value}."
                    )
            elif key in _ZFS_PASSTHROUGH:
                pass
            else:
                raise ValidationError(messages.INVALID_CREATE_OPTION + key)
