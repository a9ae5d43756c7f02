"""Clients for the external collaborators of the catalog data layer."""
from catalog.clients.remote_store_client import RemoteStoreClient, RemoteStoreError
from catalog.clients.device_store import DeviceStore, DeviceStoreError
from catalog.clients.reachability import ReachabilityClient

__all__ = [
    "RemoteStoreClient",
    "RemoteStoreError",
    "DeviceStore",
    "DeviceStoreError",
    "ReachabilityClient",
]
