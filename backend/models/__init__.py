from models.kv import KVEntry

__all__ = ["KVEntry"]
