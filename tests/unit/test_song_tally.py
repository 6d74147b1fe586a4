"""Unit tests for the song frequency tally."""

from __future__ import annotations

import random

from setlist_scout.services.song_tally import tally_songs
from tests.conftest import make_page, make_performance, make_song


def _pages() -> list:
    return [
        make_page(
            [
                make_performance(songs=["Anthem", "Skyline", make_song("Intro", is_tape=True)]),
                make_performance(songs=["Anthem", make_song("Yesterday", cover_artist="The Beatles")]),
            ],
            page=1,
        ),
        make_page(
            [
                make_performance(songs=["Skyline", "Anthem", "Encore Song"]),
                make_performance(songs=[]),
            ],
            page=2,
        ),
    ]


class TestTallySongs:
    def test_counts_and_ranks(self) -> None:
        result = tally_songs(_pages(), main_artist="Aurora Test Band")

        counts = {song.key: song.play_count for song in result.songs}
        assert counts == {
            "Aurora Test Band|Anthem": 3,
            "Aurora Test Band|Skyline": 2,
            "The Beatles|Yesterday": 1,
            "Aurora Test Band|Encore Song": 1,
        }
        assert result.songs[0].song_name == "Anthem"
        assert result.songs[1].song_name == "Skyline"

    def test_equal_counts_keep_first_seen_order(self) -> None:
        result = tally_songs(_pages(), main_artist="Aurora Test Band")
        assert [s.song_name for s in result.songs[2:]] == ["Yesterday", "Encore Song"]

    def test_total_play_count_equals_non_tape_songs(self) -> None:
        pages = _pages()
        expected = sum(
            1
            for page in pages
            for performance in page.performances
            for song in performance.songs
            if not song.is_tape
        )

        result = tally_songs(pages, main_artist="Aurora Test Band")

        assert sum(song.play_count for song in result.songs) == expected

    def test_tape_songs_are_skipped(self) -> None:
        result = tally_songs(_pages(), main_artist="Aurora Test Band")
        assert all(song.song_name != "Intro" for song in result.songs)

    def test_cover_credited_to_original_artist(self) -> None:
        pages = [
            make_page(
                [
                    make_performance(
                        artist_name="Tribute Band",
                        songs=[make_song("Yesterday", cover_artist="The Beatles")],
                    )
                ]
            )
        ]

        result = tally_songs(pages)

        assert [song.key for song in result.songs] == ["The Beatles|Yesterday"]
        assert result.main_artist == "Tribute Band"

    def test_empty_setlists_excluded_from_show_count(self) -> None:
        result = tally_songs(_pages(), main_artist="Aurora Test Band")
        assert result.total_shows_with_data == 3

    def test_shuffled_pages_give_same_counts(self) -> None:
        pages = _pages()
        expected = {s.key: s.play_count for s in tally_songs(pages, "Aurora Test Band").songs}

        shuffled = list(pages)
        random.Random(7).shuffle(shuffled)
        result = tally_songs(shuffled, "Aurora Test Band")

        assert {s.key: s.play_count for s in result.songs} == expected
        assert sorted(s.play_count for s in result.songs) == sorted(expected.values())

    def test_no_pages(self) -> None:
        result = tally_songs([])
        assert result.songs == []
        assert result.total_shows_with_data == 0
        assert result.main_artist is None
