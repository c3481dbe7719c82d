"""Storage backends for encrypted data vaults."""

from edv.storage.rwlock import AsyncRWLock
from edv.storage.base import EDVProvider, EDVStore
from edv.storage.memory import MemEDVProvider, MemEDVStore
from edv.storage.filedb import FileEDVProvider, FileEDVStore
from edv.storage.couchdb import CouchDBEDVProvider, CouchDBEDVStore
