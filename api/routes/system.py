"""
System endpoints.

Host information probe.
"""

from fastapi import APIRouter

from nrv.services import collect_sysinfo

from ..deps import ServicesDep

router = APIRouter()


@router.get("/sysinfo")
def get_sysinfo(services: ServicesDep):
    """
    Host summary.

    OS, architecture, kernel, CPU, memory and load average. Fields that
    can't be read are reported as "N/A".
    """
    return collect_sysinfo(services.config.server.proc_root).to_dict()
