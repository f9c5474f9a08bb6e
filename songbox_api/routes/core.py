from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request

from ..errors import StorageError, ValidationError
from ..models import Song
from ..service import SongQueryService

router = APIRouter(prefix="/api", tags=["core"])

def get_service(request: Request) -> SongQueryService:
    return request.app.state.service

@router.get("/health")
def health():
    return {"ok": True}

# listSongs: {} -> Song[]
@router.get("/songs", response_model=List[Song])
def list_songs(service: SongQueryService = Depends(get_service)):
    try:
        return service.list_songs()
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))

# getSong: {id} -> Song | null  (absent is a 200 with null, not a 404)
@router.get("/songs/{song_id}", response_model=Optional[Song])
def get_song(song_id: int, service: SongQueryService = Depends(get_service)):
    try:
        return service.get_song(song_id)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
