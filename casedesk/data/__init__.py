"""
Data layer: durable key-value backends for client-scoped settings.
"""
from .store_interface import KeyValueStore
from .store_memory import InMemoryKeyValueStore
from .store_file import JsonFileKeyValueStore
from .store_supabase import SupabaseKeyValueStore

__all__ = [
    'KeyValueStore',
    'InMemoryKeyValueStore',
    'JsonFileKeyValueStore',
    'SupabaseKeyValueStore',
]
