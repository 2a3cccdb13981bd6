from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..core.store import LinkStore
from ..database import get_db
from ..services.metadata import MetadataExtractor


def get_store(db: Session = Depends(get_db)) -> LinkStore:
    return LinkStore(db)


def get_extractor(request: Request) -> MetadataExtractor:
    return request.app.state.extractor
