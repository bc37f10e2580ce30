"""Domain pointer mirror.

Writes the same pointer payload to a host-scoped mutable key for every
bound hostname. Each host is written independently: a failure on one host
is retried, then reported, and never undoes the others.
"""

import logging
from typing import Iterable, List, Optional

from docpub.hosts import normalize_host
from docpub.storage import ContentBlobStore, host_pointer_key

from .models import MirrorReport, Pointer

logger = logging.getLogger(__name__)

MIRROR_ATTEMPTS = 2


def normalized_hosts(hosts: Iterable[Optional[str]]) -> List[str]:
    """Normalize hostnames, dropping empties and duplicates, keeping order."""
    seen: List[str] = []
    for host in hosts:
        normalized = normalize_host(host or '')
        if normalized and normalized not in seen:
            seen.append(normalized)
    return seen


class DomainPointerMirror:
    """Mirror a pointer to every hostname of a site."""

    def __init__(self, blob_store: ContentBlobStore, attempts: int = MIRROR_ATTEMPTS):
        self.blob_store = blob_store
        self.attempts = max(1, attempts)

    def mirror(self, hosts: Iterable[Optional[str]], pointer: Pointer) -> MirrorReport:
        """Write ``pointer`` for each host; never raises for per-host failures."""
        report = MirrorReport()
        payload = pointer.to_dict()
        for host in normalized_hosts(hosts):
            key = host_pointer_key(host)
            for attempt in range(1, self.attempts + 1):
                try:
                    self.blob_store.write_pointer(key, payload)
                    report.written.append(host)
                    break
                except Exception as e:
                    if attempt == self.attempts:
                        logger.warning(f"Failed to mirror build {pointer.build_id} to {host}: {e}")
                        report.failed[host] = str(e)
                    else:
                        logger.debug(f"Retrying pointer write for {host} after: {e}")
        if report.written:
            logger.info(f"Mirrored build {pointer.build_id} to {len(report.written)} host(s)")
        return report
