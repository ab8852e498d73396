from .base import CompanyBoardSource, JobSource
from .remoteok import RemoteOKSource
from .remotive import RemotiveSource
from .arbeitnow import ArbeitnowSource
from .himalayas import HimalayasSource
from .jobicy import JobicySource
from .weworkremotely import WeWorkRemotelySource
from .greenhouse import GreenhouseSource
from .lever import LeverSource

from ghostjobs.config import PipelineConfig
from ghostjobs.http import HttpClient
from ghostjobs.log import get_logger

log = get_logger(__name__)

__all__ = [
    "JobSource", "CompanyBoardSource", "RemoteOKSource", "RemotiveSource",
    "ArbeitnowSource", "HimalayasSource", "JobicySource", "WeWorkRemotelySource",
    "GreenhouseSource", "LeverSource", "SOURCE_TYPES", "get_sources",
]

# Registration order is the batch-dedup priority: earlier sources win ties.
SOURCE_TYPES: tuple[type[JobSource], ...] = (
    RemoteOKSource,
    RemotiveSource,
    ArbeitnowSource,
    HimalayasSource,
    JobicySource,
    WeWorkRemotelySource,
    GreenhouseSource,
    LeverSource,
)


def get_sources(http: HttpClient, config: PipelineConfig) -> list[JobSource]:
    sources: list[JobSource] = [cls(http, config) for cls in SOURCE_TYPES]
    if not config.greenhouse_companies:
        sources = [s for s in sources if not isinstance(s, GreenhouseSource)]
        log.info("Greenhouse roster empty, source disabled")
    if not config.lever_companies:
        sources = [s for s in sources if not isinstance(s, LeverSource)]
        log.info("Lever roster empty, source disabled")
    log.info("Registered %d sources: %s", len(sources), ", ".join(s.name for s in sources))
    return sources
