from typing import List, Optional

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from ..core.errors import ValidationError
from ..core.store import LinkStore
from ..schemas.link import LinkCreate, LinkUpdate, LinkResponse, MessageResponse
from ..services.metadata import MetadataExtractor, favicon_url
from ..utils.tags import join_tags
from ..utils.validators import is_valid_url, parse_domain
from .deps import get_extractor, get_store

router = APIRouter()

# Fields that may be supplied but never cleared
REQUIRED_ON_UPDATE = ("title", "url", "is_starred")


def validate_url(url: Optional[str]) -> str:
    """Strip and validate a URL, raising ValidationError when unusable"""
    url = (url or "").strip()
    is_valid, error_msg = is_valid_url(url)
    if not is_valid:
        raise ValidationError(error_msg)
    return url


@router.get("/links", response_model=List[LinkResponse])
def get_links(
    search: Optional[str] = None,
    category: Optional[str] = None,
    starred: Optional[bool] = None,
    store: LinkStore = Depends(get_store)
):
    """
    List saved links, newest first.

    search, category and starred narrow the result; all supplied filters apply.
    """
    if search or category or starred:
        links = store.search(search, category, bool(starred))
    else:
        links = store.list_all()

    return [LinkResponse.model_validate(link) for link in links]


@router.post("/links", response_model=LinkResponse)
async def create_link(
    link_data: LinkCreate,
    store: LinkStore = Depends(get_store),
    extractor: MetadataExtractor = Depends(get_extractor)
):
    """
    Save a link.

    Without a title the page is fetched for its title and description.
    Store calls run in the threadpool.
    """
    url = validate_url(link_data.url)

    if link_data.title:
        domain = parse_domain(url)
        title = link_data.title
        description = link_data.description
        favicon = favicon_url(domain, extractor.favicon_template)
    else:
        metadata = await extractor.extract(url)
        domain = metadata.domain
        title = metadata.title
        description = link_data.description or metadata.description
        favicon = metadata.favicon

    link_id = await run_in_threadpool(
        store.add,
        title=title,
        url=url,
        description=description,
        category=link_data.category,
        tags=join_tags(link_data.tags),
        domain=domain,
        favicon=favicon
    )

    link = await run_in_threadpool(store.get, link_id)
    return LinkResponse.model_validate(link)


@router.put("/links/{link_id}", response_model=MessageResponse)
def update_link(
    link_id: int,
    link_data: LinkUpdate,
    store: LinkStore = Depends(get_store),
    extractor: MetadataExtractor = Depends(get_extractor)
):
    """Update the supplied fields of a link"""
    updates = link_data.model_dump(exclude_unset=True)

    for field in REQUIRED_ON_UPDATE:
        if field in updates and (updates[field] is None or str(updates[field]).strip() == ""):
            raise ValidationError(f"{field} cannot be empty")

    if "url" in updates:
        updates["url"] = validate_url(updates["url"])
        updates["domain"] = parse_domain(updates["url"])
        updates["favicon"] = favicon_url(updates["domain"], extractor.favicon_template)

    if "tags" in updates:
        updates["tags"] = join_tags(updates["tags"])

    store.update(link_id, updates)
    return {"message": "Link updated successfully"}


@router.delete("/links/{link_id}", response_model=MessageResponse)
def delete_link(link_id: int, store: LinkStore = Depends(get_store)):
    store.delete(link_id)
    return {"message": "Link deleted successfully"}


@router.post("/links/{link_id}/toggle-star", response_model=MessageResponse)
def toggle_star(link_id: int, store: LinkStore = Depends(get_store)):
    store.toggle_star(link_id)
    return {"message": "Star toggled successfully"}


@router.get("/categories", response_model=List[str])
def get_categories(store: LinkStore = Depends(get_store)):
    return store.list_categories()
