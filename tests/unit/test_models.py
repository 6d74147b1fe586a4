"""Unit tests for the Pydantic domain models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from setlist_scout.models.artist import ArtistRef
from setlist_scout.models.pipeline import EventType, PipelineRunState, PipelineStage, ProgressEvent
from setlist_scout.models.setlist import NO_TOUR_SENTINEL, Performance, SetlistPage, TourSummary
from setlist_scout.models.songs import EnrichedSong, SearchResult, SongTally, TourData
from tests.conftest import make_performance


class TestArtistRef:
    def test_accepts_catalog_keys(self) -> None:
        ref = ArtistRef.model_validate(
            {"name": "Aurora Test Band", "id": "sp-aurora", "url": "https://open.spotify.com/artist/sp-aurora"}
        )
        assert ref.catalog_id == "sp-aurora"
        assert ref.catalog_url == "https://open.spotify.com/artist/sp-aurora"

    def test_accepts_camel_case_keys(self) -> None:
        ref = ArtistRef.model_validate({"name": "Aurora Test Band", "catalogId": "sp-aurora"})
        assert ref.catalog_id == "sp-aurora"
        assert ref.catalog_url == ""

    def test_name_required(self) -> None:
        with pytest.raises(ValidationError):
            ArtistRef.model_validate({"name": ""})

    def test_frozen(self) -> None:
        ref = ArtistRef(name="Aurora Test Band")
        with pytest.raises(ValidationError):
            ref.name = "Other"  # type: ignore[misc]


class TestPerformance:
    @pytest.mark.parametrize("tour_name", [None, "", "   "])
    def test_missing_tour_becomes_sentinel(self, tour_name: str | None) -> None:
        performance = Performance(artist_name="Aurora Test Band", tour_name=tour_name)
        assert performance.tour_name == NO_TOUR_SENTINEL

    def test_year_from_event_date(self) -> None:
        assert make_performance(event_date="23-08-2019").year == "2019"

    @pytest.mark.parametrize("event_date", [None, "2019", "08-2019"])
    def test_year_malformed(self, event_date: str | None) -> None:
        performance = Performance(artist_name="Aurora Test Band", event_date=event_date)
        assert performance.year is None

    def test_songs_flatten_sections_in_order(self) -> None:
        performance = make_performance(songs=["Intro", "Anthem", "Finale"])
        assert [s.name for s in performance.songs] == ["Intro", "Anthem", "Finale"]
        assert performance.has_set_data is True

    def test_empty_setlist(self) -> None:
        performance = make_performance(songs=[])
        assert performance.songs == []
        assert performance.has_set_data is False


class TestSetlistPage:
    @pytest.mark.parametrize(
        ("total", "per_page", "expected"),
        [(0, 20, 1), (20, 20, 1), (21, 20, 2), (47, 20, 3), (5, 0, 1)],
    )
    def test_page_count(self, total: int, per_page: int, expected: int) -> None:
        page = SetlistPage(total=total, items_per_page=per_page)
        assert page.page_count == expected

    def test_is_empty(self) -> None:
        assert SetlistPage().is_empty is True
        assert SetlistPage(performances=[make_performance()]).is_empty is False


class TestTourSummary:
    def test_sentinel_is_case_insensitive(self) -> None:
        assert TourSummary(tour_name="no tour info").is_sentinel is True
        assert TourSummary(tour_name="Test Tour 2024").is_sentinel is False

    def test_latest_year(self) -> None:
        assert TourSummary(tour_name="T", years_seen=["2019", "2022"]).latest_year == 2022
        assert TourSummary(tour_name="T").latest_year == 0


class TestSongs:
    def test_tally_key(self) -> None:
        tally = SongTally(artist_name="Aurora Test Band", song_name="Anthem", play_count=3)
        assert tally.key == "Aurora Test Band|Anthem"

    def test_negative_play_count_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SongTally(artist_name="A", song_name="S", play_count=-1)

    def test_enriched_song_not_found(self) -> None:
        song = EnrichedSong(artist_name="Aurora Test Band", song_name="Rarity", play_count=1)
        assert song.found is False
        assert song.id

    def test_search_result_payload_is_camel_case(self) -> None:
        result = SearchResult(
            tour_data=TourData(band_name="Aurora Test Band", tour_name="Test Tour 2024", total_shows=26),
            ranked_songs=[
                EnrichedSong(
                    id="song-1",
                    artist_name="Aurora Test Band",
                    song_name="Anthem",
                    play_count=15,
                    catalog_song_name="Anthem",
                    image_url="https://img.test/64.jpg",
                    image_url_medium="https://img.test/300.jpg",
                )
            ],
        )

        payload = result.to_payload()

        assert payload["tourData"] == {
            "bandName": "Aurora Test Band",
            "tourName": "Test Tour 2024",
            "totalShows": 26,
        }
        song = payload["rankedSongs"][0]
        assert song["songName"] == "Anthem"
        assert song["playCount"] == 15
        assert song["imageUrl"] == "https://img.test/64.jpg"
        assert song["imageUrlMedium"] == "https://img.test/300.jpg"
        assert song["found"] is True
        assert song["id"] == "song-1"


class TestPipelineModels:
    def test_terminal_stages(self) -> None:
        assert PipelineStage.COMPLETE.is_terminal
        assert PipelineStage.FAILED.is_terminal
        assert not PipelineStage.TALLIED.is_terminal

    def test_run_state_defaults(self) -> None:
        state = PipelineRunState(artist=ArtistRef(name="Aurora Test Band"))
        assert state.stage == PipelineStage.STARTED
        assert state.progress_percent == 0.0
        assert state.completed_at is None

    def test_progress_out_of_range_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ProgressEvent(type=EventType.UPDATE, message="x", progress=101)

    def test_complete_event_wire(self) -> None:
        event = ProgressEvent(type=EventType.COMPLETE, message="Process completed", data={"a": 1})
        wire = event.to_wire()
        assert wire["type"] == "complete"
        assert wire["data"] == {"a": 1}
        assert event.is_terminal
