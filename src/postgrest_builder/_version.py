from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("postgrest-builder")
except PackageNotFoundError:
    # Package not installed (running from source)
    __version__ = "0.0.0.dev0"
