"""podstate - Kubernetes pod and container state alerting."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("podstate")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
