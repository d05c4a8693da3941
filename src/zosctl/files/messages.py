"""User-facing messages for file operations."""

from zosctl.files.constants import FILES_CONFIG

UNSUPPORTED_DATASET_TYPE = "Unsupported data set type."
UNSUPPORTED_MASKING_IN_DATASET_NAME = "Unsupported masking character found in data set name."
UNSUPPORTED_DATA_TYPE = "Unsupported data type 'record' specified for USS file operation."
MISSING_DATASET_TYPE = "Specify the data set type."
MISSING_DATASET_NAME = "Specify the data set name."
MISSING_DATASET_LIKE_NAME = 'Specify the name of the data set to "allocate like" from.'
MISSING_USS_FILE_NAME = "Specify the USS file name."
MISSING_USS_DIRECTORY_NAME = "Specify the USS directory name."
MISSING_REQUEST_TYPE = "Specify request type, file or directory."
MISSING_INPUT_FILE = "Specify the input file and, if needed, the path."
MISSING_INPUT_DIR = "Specify the input directory path."
MISSING_FILE_SYSTEM_NAME = "Specify the file system name."
MISSING_STATEMENTS = "Missing AMS statements to be submitted."
MISSING_PRIMARY = "Specify the primary allocation (primary) to create a data set."
MISSING_RECORD_LENGTH = "Specify the record length (lrecl) to create a data set."
MISSING_VSAM_OPTION = "To create a VSAM cluster, the following option must be supplied: "
MISSING_ZFS_OPTION = "To create a z/OS file system, the following option must be supplied: "

INVALID_CREATE_OPTION = "Invalid zos-files create command option: "
INVALID_DSNTYPE_OPTION = "Invalid zos-files create command 'dsntype' option: "
INVALID_ALCUNIT_OPTION = "Invalid zos-files create command 'alcunit' option: "
INVALID_DSORG_OPTION = "Invalid zos-files create command 'dsorg' option: "
INVALID_RECFM_OPTION = "Invalid zos-files create command 'recfm' option: "
INVALID_PERMS_OPTION = "Invalid zos-files create command 'perms' option: "
INVALID_PS_DSORG_DIRBLK = (
    "'PS' data set organization (dsorg) specified and the directory blocks (dirblk) is not zero."
)
INVALID_PO_DSORG_DIRBLK = (
    "'PO' data set organization (dsorg) specified and the directory blocks (dirblk) is zero."
)
MAX_ALLOCATION_EXCEEDED = (
    f"Maximum allocation quantity of {FILES_CONFIG.max_alloc_quantity} exceeded"
)
VALUE_OUT_OF_BOUNDS = "The {option} value = '{value}' must be between {min_value} and {max_value}."
LINE_TOO_LONG = "Line {line} is longer than {max} characters (maximum allowed length)\n{text}"
PATH_IS_NOT_DIRECTORY = "{path} is not a directory"
UPLOAD_DIRECTORY_TO_MEMBER = "Upload a directory to a data set member is not permitted"
UPLOAD_DIRECTORY_TO_PS = (
    "Upload a directory with multiple files to a physical sequential data set is not permitted"
)
ATTRIBUTES_SYNTAX_ERROR = (
    "Syntax error on line {line} - expected <pattern> <local encoding> <remote encoding>."
)
ATTRIBUTES_FILE_MISSING = "Attributes file {file} does not exist"
ATTRIBUTES_FILE_UNREADABLE = "Could not read attributes file {file}: {message}"
NO_MEMBERS_FOUND = "No members found!"
RECORD_RANGE_INVALID = "Invalid record range specified. Use the format x-y, for example 0-100."

DATASET_CREATED = "Data set created successfully."
DATASET_DELETED = "Data set deleted successfully."
DATASET_DOWNLOADED = "Data set downloaded successfully.\nDestination: {path}"
DATASET_UPLOADED = "Data set uploaded successfully."
MEMBERS_DOWNLOADED = "Member(s) downloaded successfully.\nDestination: {path}"
MEMBERS_DOWNLOAD_FAILED = "Failed to download the following members: \n"
USS_FILE_DOWNLOADED = "USS file downloaded successfully.\nDestination: {path}"
USS_FILE_UPLOADED = "USS file uploaded successfully."
USS_DIR_UPLOADED = "Directory uploaded successfully."
USS_DIR_UPLOAD_PARTIAL = "Directory upload finished with {failed} failed file(s) of {total}."
USS_CREATED = "USS file or directory created successfully."
USS_DELETED = "USS File or directory deleted successfully."
ZFS_CREATED = "z/OS file system created successfully."
ZFS_DELETED = "z/OS file system deleted successfully."
AMS_COMMAND_EXECUTED = "AMS command executed successfully."
ATTRIBUTE_TITLE = "The following attributes are used during creation:\n"
MISSING_TABLE_PARAMETERS = (
    "When specifying depth, filesys or symlinks, at least one of the following must be "
    "specified: group, user, name, size, mtime, perm, type."
)
MEMBER_NAME_INVALID = "Could not generate a valid member name from file {file}"

MISSING_PATTERNS = "Specify at least one data set name pattern."
MISSING_SEARCH_STRING = "Specify the string to search for."
NO_DATASETS_MATCHING_PATTERN = "There are no data sets that match the provided pattern(s)."
NO_DATASETS_IN_LIST = "No data sets left after excluded pattern(s) were filtered out."
DATASETS_MATCHED_PATTERN = "{count} data set(s) were found matching pattern."
DATASETS_DOWNLOAD_FAILED = "Failed to download the following data sets:\n"
SOME_DOWNLOADS_FAILED = "Some data sets failed to download."
SEARCH_LIST_FAILED = "Failed to get list of data sets to search"
SEARCH_FAILED_ITEMS = "The following data set(s) failed to be searched:\n"
