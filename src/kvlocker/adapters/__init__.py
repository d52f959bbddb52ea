"""Store adapters implementing :class:`~kvlocker.ports.ILockStore`."""
