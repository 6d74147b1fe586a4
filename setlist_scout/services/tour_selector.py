"""Tour selection over a page of recent performances.

# ─── HOW A TOUR IS PICKED (Junior Developer Guide) ────────────────────
#
#  1. Group performances by artist, then by tour name, counting shows and
#     collecting years ("No Tour Info" when a show has no tour).
#  2. A name search can mix same-named artists.  With more than one artist
#     in the page, take the first whose name passes the loose match test
#     against the searched name, else the first artist seen.
#  3. Within that artist:
#       - one tour            → that tour (even "No Tour Info")
#       - several tours       → drop "No Tour Info" when real tours exist
#       - still several       → drop tours matching EXCLUDED_TOUR_KEYWORDS,
#                               unless that would drop every tour
#       - pick the most recent (highest year); ties keep the first seen
#  4. No performances at all → None ("no setlist data").
#
# Which artist group counts as "first" follows the archive's response
# order, which is not guaranteed stable between calls.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from collections.abc import Iterable

from setlist_scout.models.setlist import (
    NO_TOUR_SENTINEL,
    Performance,
    SelectedTour,
    TourSummary,
)
from setlist_scout.utils.logging import get_logger
from setlist_scout.utils.text_normalizer import is_artist_name_match

# Lower-case substrings marking side events rather than real tours.
EXCLUDED_TOUR_KEYWORDS: tuple[str, ...] = ("vip", "v.i.p.", "sound check", "soundcheck")

_logger = get_logger(__name__)


def is_excluded_tour(tour_name: str) -> bool:
    lowered = tour_name.lower()
    return any(keyword in lowered for keyword in EXCLUDED_TOUR_KEYWORDS)


def summarize_tours(performances: Iterable[Performance]) -> dict[str, dict[str, TourSummary]]:
    """Group performances into ``{artist: {tour: TourSummary}}``.

    Insertion order follows the order performances were given in.
    """
    counts: dict[str, dict[str, int]] = {}
    years: dict[str, dict[str, set[str]]] = {}

    for performance in performances:
        artist = performance.artist_name
        tour = performance.tour_name or NO_TOUR_SENTINEL
        artist_counts = counts.setdefault(artist, {})
        artist_years = years.setdefault(artist, {})
        artist_counts[tour] = artist_counts.get(tour, 0) + 1
        tour_years = artist_years.setdefault(tour, set())
        if performance.year:
            tour_years.add(performance.year)

    return {
        artist: {
            tour: TourSummary(
                tour_name=tour,
                show_count=count,
                years_seen=sorted(years[artist][tour]),
            )
            for tour, count in tours.items()
        }
        for artist, tours in counts.items()
    }


def select_tour(
    summaries: dict[str, dict[str, TourSummary]],
    target_artist_name: str,
) -> SelectedTour | None:
    """Choose the tour to aggregate for *target_artist_name*.

    Returns
    -------
    SelectedTour or None
        ``None`` when there are no performances to choose from.
    """
    if not summaries:
        return None

    artist_names = list(summaries)
    if len(artist_names) == 1:
        chosen_artist = artist_names[0]
    else:
        chosen_artist = next(
            (name for name in artist_names if is_artist_name_match(target_artist_name, name)),
            artist_names[0],
        )

    tours = summaries[chosen_artist]
    candidates = list(tours)
    if not candidates:
        return None

    if len(candidates) > 1:
        real_tours = [name for name in candidates if not tours[name].is_sentinel]
        if real_tours:
            candidates = real_tours

    if len(candidates) > 1:
        kept = [name for name in candidates if not is_excluded_tour(name)]
        if kept:
            candidates = kept

    chosen = candidates[0]
    latest_year = 0
    for name in candidates:
        year = tours[name].latest_year
        if year > latest_year:
            latest_year = year
            chosen = name

    selected = SelectedTour(artist_name=chosen_artist, tour=tours[chosen])
    _logger.info(
        "tour_selected",
        target_artist=target_artist_name,
        archive_artist=chosen_artist,
        tour=selected.tour_name,
        shows=selected.tour.show_count,
        candidates=len(candidates),
    )
    return selected
