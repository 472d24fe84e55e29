class StorageError(Exception):
    """A call to an external storage service failed."""
