from .uid_allocator import next_uid

__all__ = [
    'next_uid',
]
