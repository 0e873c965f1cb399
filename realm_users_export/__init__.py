"""
Realm Users Export - export App Services users and pending users for migration.
"""

import logging

__version__ = "0.1.0"
__author__ = "Realm Users Export"

logging.getLogger("realm_users_export").addHandler(logging.NullHandler())

from .exporter import UsersExporter

__all__ = ["UsersExporter"]
