"""
Store Merger — append-only reconciliation of an imported Store.

Groups are matched on exact ``name``; hosts on ``(name, hostname, port)``.
Matching entries in the imported store are skipped, everything else is
appended. Existing entries are never updated, renamed or removed, so a host
edited since an older export comes back as a separate entry.
"""
import logging

from .models import Host, Store

logger = logging.getLogger("sshvault")


def host_key(host: Host) -> tuple[str, str, int]:
    """Composite identity used to detect duplicate hosts."""
    return (host.name, host.hostname, host.port)


def merge_stores(current: Store, imported: Store) -> None:
    """Merge ``imported`` into ``current`` in place.

    Duplicates inside ``imported`` are collapsed as well, since the known
    keys grow as entries are appended. Appended entries are copies.

    Args:
        current: Store to extend. Must not be mutated concurrently.
        imported: Store read from an archive. Left untouched.
    """
    group_names = {group.name for group in current.groups}
    added_groups = 0
    for group in imported.groups:
        if group.name in group_names:
            continue
        current.groups.append(group.model_copy(deep=True))
        group_names.add(group.name)
        added_groups += 1

    host_keys = {host_key(host) for host in current.hosts}
    added_hosts = 0
    for host in imported.hosts:
        key = host_key(host)
        if key in host_keys:
            continue
        current.hosts.append(host.model_copy(deep=True))
        host_keys.add(key)
        added_hosts += 1

    logger.debug(
        "Merged store: +%d group(s) (%d skipped), +%d host(s) (%d skipped)",
        added_groups, len(imported.groups) - added_groups,
        added_hosts, len(imported.hosts) - added_hosts,
    )
