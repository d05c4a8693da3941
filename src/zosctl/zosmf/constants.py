"""Constants for z/OSMF information, topology and authentication services."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ZosmfConfig:
    resource: str = "/zosmf"
    res_info: str = "/info"
    res_topology: str = "/resttopology/systems"
    res_authenticate: str = "/services/authenticate"
    password_mask: str = "****"

    @property
    def info_resource(self) -> str:
        return self.resource + self.res_info

    @property
    def topology_resource(self) -> str:
        return self.resource + self.res_topology

    @property
    def authenticate_resource(self) -> str:
        return self.resource + self.res_authenticate


ZOSMF_CONFIG = ZosmfConfig()
