"""OCI registry support for loading published Spin applications."""

from .client import RegistryClient
from .loader import OciLoader
from .reference import Reference, is_probably_oci_reference, parse_reference

__all__ = [
    "OciLoader",
    "Reference",
    "RegistryClient",
    "is_probably_oci_reference",
    "parse_reference",
]
