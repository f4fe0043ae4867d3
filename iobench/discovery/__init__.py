"""Mount and block device discovery."""
from iobench.discovery.mounts import MountDiscovery

__all__ = ['MountDiscovery']
