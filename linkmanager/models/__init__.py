from .link import Link, utcnow

__all__ = ["Link", "utcnow"]
