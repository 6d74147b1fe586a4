"""Song frequency tally over aggregated setlist pages.

Pure and synchronous: no I/O and no suspension points.

Rules:
    - tape / intro songs are skipped
    - covers are credited to the cover's original artist, everything else
      to the main artist, keyed ``artist|song``
    - ``total_shows_with_data`` counts performances with at least one set
      section; empty setlists are excluded from it but never fail the run
    - output is sorted by play count, descending; equal counts keep
      first-seen order
"""

from __future__ import annotations

from collections.abc import Iterable

from setlist_scout.models.setlist import SetlistPage
from setlist_scout.models.songs import SongTally, TallyResult


def tally_songs(pages: Iterable[SetlistPage], main_artist: str | None = None) -> TallyResult:
    """Count song plays across every performance in *pages*.

    Parameters
    ----------
    pages:
        Aggregated archive pages.
    main_artist:
        Artist credited with non-cover songs.  Defaults to the artist of
        the first performance found.

    Returns
    -------
    TallyResult
        Ranked tallies plus the number of shows that had set data.
    """
    pages = list(pages)
    if main_artist is None:
        main_artist = next(
            (p.artist_name for page in pages for p in page.performances),
            None,
        )

    counts: dict[str, int] = {}
    credits: dict[str, tuple[str, str]] = {}
    shows_with_data = 0

    for page in pages:
        for performance in page.performances:
            if performance.has_set_data:
                shows_with_data += 1
            for song in performance.songs:
                if song.is_tape:
                    continue
                if song.is_cover and song.cover_artist:
                    artist = song.cover_artist
                else:
                    artist = main_artist or performance.artist_name
                key = f"{artist}|{song.name}"
                if key not in counts:
                    credits[key] = (artist, song.name)
                    counts[key] = 0
                counts[key] += 1

    ranked = sorted(counts, key=lambda k: counts[k], reverse=True)
    songs = [
        SongTally(artist_name=credits[key][0], song_name=credits[key][1], play_count=counts[key])
        for key in ranked
    ]
    return TallyResult(
        songs=songs,
        total_shows_with_data=shows_with_data,
        main_artist=main_artist,
    )
