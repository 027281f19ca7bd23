#!/usr/bin/env python3
"""
Seed a data root with sample users, posts, taxonomies and a small music catalogue.

Existing documents are left alone unless --force is given.
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from fancms.core import config
from fancms.core import dao
from fancms.core.ids import slugify
from fancms.core.schema import utc_now_iso
from fancms.core.store import JsonStore


def sample_documents():
    now = utc_now_iso()

    users = [
        {"id": "u_admin", "username": "admin", "name": "Site Admin", "email": "admin@example.com",
         "role": "ADMIN", "password": "changeme", "createdAt": now, "updatedAt": now},
        {"id": "u_editor", "username": "editor", "name": "Lead Editor", "email": "editor@example.com",
         "role": "EDITOR", "password": "changeme", "createdAt": now, "updatedAt": now},
        {"id": "u_author", "username": "author", "name": "Staff Writer", "email": "author@example.com",
         "role": "AUTHOR", "password": "changeme", "createdAt": now, "updatedAt": now},
    ]

    categories = [{"id": f"c_{slugify(n)}", "name": n, "slug": slugify(n)}
                  for n in ("Comeback", "Tour", "Fan Events")]
    tags = [{"id": f"t_{slugify(n)}", "name": n, "slug": slugify(n)}
            for n in ("Album", "Concert", "Behind The Scenes")]

    posts = [
        {"id": "p_welcome", "title": "Welcome to the new site", "slug": "welcome-to-the-new-site",
         "excerpt": "Everything in one place.", "content": "<p>News, music and more.</p>",
         "status": "PUBLISHED", "authorId": "u_admin", "tags": ["album"], "categoryId": "c_comeback",
         "publishAt": now, "createdAt": now, "updatedAt": now},
        {"id": "p_tour", "title": "World tour dates", "slug": "world-tour-dates",
         "excerpt": "See you soon.", "content": "<p>Dates to be announced.</p>",
         "status": "DRAFT", "authorId": "u_author", "tags": ["concert"], "categoryId": "c_tour",
         "createdAt": now, "updatedAt": now},
    ]

    albums = [
        {"id": "al_first", "slug": "first-light", "title": "First Light", "type": "EP",
         "releaseDate": "2024-03-01", "cover": "/images/first-light.jpg",
         "tracks": ["tr_dawn", "tr_glow"], "description": "Debut EP."},
    ]

    tracks = [
        {"id": "tr_dawn", "slug": "dawn", "title": "Dawn", "albumId": "al_first", "durationSec": 201,
         "audio": {"hls": "/audio/dawn.m3u8", "mp3_160": "/audio/dawn-160.mp3", "mp3_320": "/audio/dawn-320.mp3"},
         "artwork": "/images/first-light.jpg", "explicit": False, "bpm": 118,
         "mood": ["bright", "hopeful"], "tags": ["debut", "synth-pop"], "releaseDate": "2024-03-01",
         "territories": ["WW"], "creditsId": "cr_dawn", "lyricsIds": ["ly_dawn_en"],
         "membersParts": [{"member": "Haneul", "from": 0, "to": 30}, {"member": "Mina", "from": 30, "to": 60}]},
        {"id": "tr_glow", "slug": "glow", "title": "Glow", "albumId": "al_first", "durationSec": 187,
         "artwork": "/images/first-light.jpg", "explicit": False, "bpm": 124,
         "mood": ["bright"], "tags": ["synth-pop"], "releaseDate": "2024-03-01",
         "territories": ["WW"], "lyricsIds": []},
    ]

    lyrics = [
        {"id": "ly_dawn_en", "trackId": "tr_dawn", "lang": "en",
         "lines": [{"t": 0, "l": "Here comes the light"}, {"t": 4.5, "l": "Breaking through the night"}]},
    ]

    credits = [
        {"id": "cr_dawn", "trackId": "tr_dawn", "composer": ["J. Park"], "lyricist": ["S. Kim"],
         "arranger": ["J. Park"], "producer": ["D. Lee"], "label": "Starlight Entertainment"},
    ]

    playlists = [
        {"id": "pl_starter", "title": "Starter Pack", "owner": "u_admin", "tracks": ["tr_dawn", "tr_glow"],
         "public": True, "createdAt": now, "updatedAt": now},
    ]

    return {
        dao.USERS_DOCUMENT: users,
        dao.CATEGORIES_DOCUMENT: categories,
        dao.TAGS_DOCUMENT: tags,
        dao.POSTS_DOCUMENT: posts,
        dao.ALBUMS_DOCUMENT: albums,
        dao.TRACKS_DOCUMENT: tracks,
        dao.LYRICS_DOCUMENT: lyrics,
        dao.CREDITS_DOCUMENT: credits,
        dao.PLAYLISTS_DOCUMENT: playlists,
    }


def main():
    parser = argparse.ArgumentParser(description="Seed sample CMS documents")
    parser.add_argument("--data-root", default=None, help="Target data root (defaults to DATA_ROOT)")
    parser.add_argument("--force", action="store_true", help="Overwrite documents that already exist")
    args = parser.parse_args()

    root = Path(args.data_root) if args.data_root else config.get_data_root()
    store = JsonStore(root)

    written = 0
    for path, records in sample_documents().items():
        if store.resolve(path).exists() and not args.force:
            print(f"- {path} exists, skipping")
            continue
        store.write(path, records)
        written += 1
        print(f"✓ {path} ({len(records)} records)")

    print(f"Seeded {written} documents under {root}")


if __name__ == "__main__":
    main()
