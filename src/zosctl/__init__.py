"""zosctl - command line and Python SDK for z/OSMF

Works with data sets, USS files, jobs, console commands and TSO address
spaces on z/OS through the z/OSMF REST services.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
