"""Fleet Key Beacon: public key host and partner API relay."""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fleet-key-beacon")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
