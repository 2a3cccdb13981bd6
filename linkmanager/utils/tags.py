from typing import Iterable, List, Optional

# Tags containing a comma do not survive a round trip
TAG_SEPARATOR = ","


def join_tags(tags: Optional[Iterable[str]]) -> str:
    """Tag list to the stored comma-joined string, dropping blank entries"""
    if not tags:
        return ""
    return TAG_SEPARATOR.join(tag.strip() for tag in tags if tag and tag.strip())


def split_tags(value: Optional[str]) -> List[str]:
    """Stored string to a tag list; empty string gives an empty list"""
    if not value:
        return []
    return [tag for tag in value.split(TAG_SEPARATOR) if tag]
