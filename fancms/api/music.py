"""
Music streaming endpoints: tracks, albums, playlists, similar tracks and listening telemetry.
Cross-collection references are resolved at read time; dangling IDs are skipped.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from util.logging import logger
from ..core import config
from ..core.analytics import completion_rate, create_telemetry_event, popular_tracks
from ..core.auth import Caller, is_admin
from ..core.dao import Repositories
from ..core.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from ..core.schema import ALBUM_TYPES, dump_record, dump_records
from ..core.search_service import (
    SORT_FIELDS,
    SORT_ORDERS,
    filter_tracks,
    list_albums,
    paginate,
    search_records,
    similar_tracks,
    sort_records,
)
from .deps import enforce_telemetry_rate_limit, get_caller, get_repositories
from .schemas import TelemetryRequest

router = APIRouter()


@router.get("/tracks")
def list_tracks(
    query: str = "",
    album: str = "",
    mood: str = "",
    tag: str = "",
    year: Optional[int] = None,
    sort: str = "releaseDate",
    order: str = "desc",
    page: Optional[int] = Query(None, ge=1),
    page_size: int = Query(20, alias="pageSize", ge=1),
    repos: Repositories = Depends(get_repositories),
):
    if sort not in SORT_FIELDS:
        raise ValidationFailedError(f"sort must be one of: {SORT_FIELDS}")
    if order not in SORT_ORDERS:
        raise ValidationFailedError(f"order must be one of: {SORT_ORDERS}")

    tracks = search_records(repos.tracks.list(), query, "track")
    tracks = filter_tracks(tracks, album=album or None, mood=mood or None, tag=tag or None, year=year or None)
    tracks = sort_records(tracks, sort, order)

    response = {"success": True, "count": len(tracks)}
    if page is None:
        response["data"] = dump_records(tracks)
    else:
        result = paginate(tracks, page, page_size)
        response["data"] = dump_records(result.items)
        response["pagination"] = result.metadata()
    return response


@router.get("/tracks/{slug}")
def get_track(slug: str, repos: Repositories = Depends(get_repositories)):
    track = repos.tracks.get_by_slug(slug)
    lyrics = repos.lyrics.resolve(track.lyrics_ids)
    credits = repos.credits.find(track.credits_id) if track.credits_id else None

    data = dump_record(track)
    data["lyrics"] = dump_records(lyrics)
    data["credits"] = dump_record(credits) if credits else None
    return {"success": True, "data": data}


@router.get("/albums")
def list_albums_endpoint(query: str = "", type: Optional[str] = None,
                         repos: Repositories = Depends(get_repositories)):
    if type and type not in ALBUM_TYPES:
        raise ValidationFailedError(f"type must be one of: {ALBUM_TYPES}")

    albums = list_albums(repos.albums.list(), query=query, album_type=type or None)
    return {"success": True, "data": dump_records(albums), "count": len(albums)}


@router.get("/albums/{slug}")
def get_album(slug: str, repos: Repositories = Depends(get_repositories)):
    album = repos.albums.get_by_slug(slug)
    data = dump_record(album)
    data["tracks"] = dump_records(repos.tracks.resolve(album.tracks))
    return {"success": True, "data": data}


@router.get("/playlists/{playlist_id}")
def get_playlist(playlist_id: str, caller: Optional[Caller] = Depends(get_caller),
                 repos: Repositories = Depends(get_repositories)):
    playlist = repos.playlists.get(playlist_id)
    if not playlist.public:
        owner = caller is not None and caller.user_id == playlist.owner
        if not (owner or is_admin(caller)):
            raise PermissionDeniedError("Playlist is private")

    data = dump_record(playlist)
    data["tracks"] = dump_records(repos.tracks.resolve(playlist.tracks))
    return {"success": True, "data": data}


@router.get("/similar/{track_id}")
def get_similar_tracks(track_id: str, repos: Repositories = Depends(get_repositories)):
    tracks = repos.tracks.list()
    track = next((t for t in tracks if t.id == track_id), None)
    if track is None:
        raise NotFoundError("Track not found")

    return {"success": True, "data": dump_records(similar_tracks(track, tracks))}


@router.post("/telemetry")
def record_telemetry(body: TelemetryRequest, ip: str = Depends(enforce_telemetry_rate_limit),
                     repos: Repositories = Depends(get_repositories)):
    event = create_telemetry_event(ip, body.event, body.data)
    kept = repos.telemetry.append(event, config.TELEMETRY_MAX_EVENTS)
    logger.log_telemetry_event(event.event, event.ip_hash, kept)
    return {"success": True, "message": "Event recorded"}


@router.get("/telemetry")
def telemetry_stats(limit: int = Query(10, ge=1), repos: Repositories = Depends(get_repositories)):
    events = repos.telemetry.list()
    return {
        "success": True,
        "data": {
            "totalEvents": len(events),
            "popularTracks": popular_tracks(events, limit),
            "completionRate": completion_rate(events),
        },
    }
