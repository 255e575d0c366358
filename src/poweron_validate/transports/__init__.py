# Copyright (c) Syntropy Systems
"""Remote Symitar transports used to validate PowerOn files."""

from .base import PowerOnValidator
from .https import SymitarHTTPS
from .ssh import SymitarSSH, ValidateWorker

__all__ = ["PowerOnValidator", "SymitarHTTPS", "SymitarSSH", "ValidateWorker"]
