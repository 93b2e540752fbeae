"""
MySQLPlayerDataBridge Migrator

A one-shot tool that moves player inventories, ender chests and experience
from a MySQLPlayerDataBridge database into a new user data store.
"""

__version__ = "1.0.0"
