"""z/OSMF status, topology and authentication services."""

from zosctl.zosmf.auth import Login, Logout
from zosctl.zosmf.change_password import ChangePassword
from zosctl.zosmf.check_status import CheckStatus, ListDefinedSystems
from zosctl.zosmf.constants import ZOSMF_CONFIG, ZosmfConfig

__all__ = [
    "ZOSMF_CONFIG",
    "ChangePassword",
    "CheckStatus",
    "ListDefinedSystems",
    "Login",
    "Logout",
    "ZosmfConfig",
]
