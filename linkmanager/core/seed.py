import logging

from ..services.metadata import DEFAULT_FAVICON_SERVICE_URL, favicon_url
from .store import LinkStore

logger = logging.getLogger(__name__)

SAMPLE_LINKS = [
    {
        "title": "React Documentation",
        "url": "https://react.dev",
        "description": "Official React documentation and guides",
        "category": "Development",
        "tags": "react,javascript,frontend",
        "domain": "react.dev",
        "is_starred": True,
    },
    {
        "title": "Tailwind CSS",
        "url": "https://tailwindcss.com",
        "description": "Utility-first CSS framework",
        "category": "Design",
        "tags": "css,tailwind,design",
        "domain": "tailwindcss.com",
        "is_starred": False,
    },
    {
        "title": "Node.js Documentation",
        "url": "https://nodejs.org/docs",
        "description": "Official Node.js documentation",
        "category": "Development",
        "tags": "nodejs,backend,javascript",
        "domain": "nodejs.org",
        "is_starred": True,
    },
]


def seed_if_empty(store: LinkStore, favicon_template: str = DEFAULT_FAVICON_SERVICE_URL) -> bool:
    """
    Insert the example links into an empty table.

    Returns:
        True if the examples were inserted
    """
    if store.count() > 0:
        return False

    for sample in SAMPLE_LINKS:
        store.add(favicon=favicon_url(sample["domain"], favicon_template), **sample)

    logger.info("Sample data inserted")
    return True
