"""
Query layer: search, filtering, stable sorting, pagination and track similarity.
"""

import pytest

from fancms.core.schema import CarouselImage, NewsArticle, Track
from fancms.core.search_service import (
    active_carousel,
    field_value,
    filter_news,
    filter_records,
    filter_tracks,
    list_posts,
    paginate,
    related_news,
    search,
    search_records,
    similar_tracks,
    similarity_score,
    sort_records,
)


def make_track(track_id, **overrides):
    data = {
        "id": track_id,
        "slug": track_id,
        "title": track_id.title(),
        "albumId": "al1",
        "durationSec": 200,
        "releaseDate": "2024-01-01",
    }
    data.update(overrides)
    return Track.model_validate(data)


def make_news(article_id, **overrides):
    data = {
        "id": article_id,
        "slug": article_id,
        "title": article_id.title(),
        "category": "latest-news",
        "publishedAt": "2024-01-01T00:00:00Z",
    }
    data.update(overrides)
    return NewsArticle.model_validate(data)


@pytest.fixture
def posts():
    return [
        {"id": "p1", "title": "Comeback Stage", "excerpt": "", "content": "", "tags": ["live"],
         "status": "PUBLISHED", "categoryId": "c1", "updatedAt": "2024-01-02T00:00:00Z"},
        {"id": "p2", "title": "Studio diary", "excerpt": "Inside the COMEBACK", "content": "", "tags": [],
         "status": "DRAFT", "categoryId": "c2", "updatedAt": "2024-01-03T00:00:00Z"},
        {"id": "p3", "title": "Fan meeting", "excerpt": "", "content": "", "tags": ["comeback"],
         "status": "PUBLISHED", "categoryId": "c1", "updatedAt": "2024-01-01T00:00:00Z"},
    ]


class TestSearch:
    def test_empty_query_returns_everything_in_order(self, posts):
        assert search(posts, "", ["title"]) == posts

    def test_case_insensitive_over_text_and_list_fields(self, posts):
        result = search_records(posts, "comeback", "post")
        assert [p["id"] for p in result] == ["p1", "p2", "p3"]

    def test_result_is_subset_in_input_order(self, posts):
        result = search_records(posts, "fan", "post")
        assert [p["id"] for p in result] == ["p3"]

    def test_unknown_record_type(self, posts):
        with pytest.raises(ValueError):
            search_records(posts, "x", "video")

    def test_searches_model_attributes(self):
        tracks = [make_track("dawn", mood=["Dreamy"]), make_track("dusk")]
        assert [t.id for t in search_records(tracks, "dreamy", "track")] == ["dawn"]

    def test_field_value_reads_camel_case_keys(self):
        assert field_value({"releaseDate": "2024"}, "release_date") == "2024"
        assert field_value({"release_date": "2023"}, "release_date") == "2023"


class TestFilter:
    def test_filters_are_conjunctive(self, posts):
        result = filter_records(posts, {"status": "PUBLISHED", "tags": "live"})
        assert [p["id"] for p in result] == ["p1"]

    @pytest.mark.parametrize("first, second", [
        ({"status": "PUBLISHED"}, {"categoryId": "c1"}),
        ({"status": "PUBLISHED"}, {"tags": "comeback"}),
        ({"categoryId": "c1"}, {"tags": "live"}),
        ({"status": "DRAFT"}, {"tags": "live"}),
    ])
    def test_combined_filter_equals_chained_filters(self, posts, first, second):
        combined = filter_records(posts, {**first, **second})

        assert combined == filter_records(filter_records(posts, first), second)
        assert combined == filter_records(filter_records(posts, second), first)

    def test_none_filters_are_ignored(self, posts):
        assert filter_records(posts, {"status": None, "tags": None}) == posts

    def test_filter_tracks_by_mood_and_year(self):
        tracks = [
            make_track("a", mood=["hype"], releaseDate="2023-05-01"),
            make_track("b", mood=["hype"], releaseDate="2024-05-01"),
            make_track("c", mood=["calm"], releaseDate="2024-06-01"),
        ]
        result = filter_tracks(tracks, mood="hype", year=2024)
        assert [t.id for t in result] == ["b"]

    def test_filter_tracks_by_album(self):
        tracks = [make_track("a", albumId="al1"), make_track("b", albumId="al2")]
        assert [t.id for t in filter_tracks(tracks, album="al2")] == ["b"]

    def test_list_posts_newest_update_first(self, posts):
        result = list_posts(posts, status="PUBLISHED")
        assert [p["id"] for p in result] == ["p1", "p3"]


class TestSort:
    def test_title_ascending_ignores_case(self):
        tracks = [make_track("b", title="beta"), make_track("a", title="Alpha"), make_track("c", title="Charlie")]
        assert [t.title for t in sort_records(tracks, "title", "asc")] == ["Alpha", "beta", "Charlie"]

    def test_release_date_descending(self):
        tracks = [make_track("old", releaseDate="2020-01-01"), make_track("new", releaseDate="2024-01-01")]
        assert [t.id for t in sort_records(tracks, "releaseDate", "desc")] == ["new", "old"]

    def test_equal_keys_keep_input_order(self):
        tracks = [make_track(n, durationSec=180) for n in ("one", "two", "three")]
        assert [t.id for t in sort_records(tracks, "duration", "asc")] == ["one", "two", "three"]
        assert [t.id for t in sort_records(tracks, "duration", "desc")] == ["one", "two", "three"]

    def test_rejects_unknown_sort(self):
        with pytest.raises(ValueError):
            sort_records([], "popularity")
        with pytest.raises(ValueError):
            sort_records([], "title", "sideways")


class TestPaginate:
    def test_last_page_is_partial(self):
        records = list(range(23))

        page = paginate(records, 3, 10)

        assert page.items == [20, 21, 22]
        assert page.total == 23
        assert page.total_pages == 3
        assert page.has_more is False
        assert page.metadata() == {"page": 3, "pageSize": 10, "total": 23, "totalPages": 3}

    def test_first_page_has_more(self):
        page = paginate(list(range(23)), 1, 10)
        assert page.items == list(range(10))
        assert page.has_more is True

    def test_page_past_end_is_empty(self):
        page = paginate(list(range(5)), 4, 10)
        assert page.items == []
        assert page.total == 5

    def test_empty_input(self):
        page = paginate([], 1, 10)
        assert page.total_pages == 0

    def test_rejects_non_positive_arguments(self):
        with pytest.raises(ValueError):
            paginate([1], 0, 10)
        with pytest.raises(ValueError):
            paginate([1], 1, 0)


class TestNews:
    def test_filter_news_by_tag_case_insensitive(self):
        articles = [
            make_news("a", tags=["Tour"], publishedAt="2024-01-01T00:00:00Z"),
            make_news("b", tags=["tour"], publishedAt="2024-02-01T00:00:00Z"),
            make_news("c", tags=["album"]),
        ]
        assert [a.id for a in filter_news(articles, tag="TOUR")] == ["b", "a"]

    def test_filter_news_featured(self):
        articles = [make_news("a", featured=True), make_news("b")]
        assert [a.id for a in filter_news(articles, featured=True)] == ["a"]
        assert [a.id for a in filter_news(articles, featured=False)] == ["b"]

    def test_related_news_shares_category_or_tag(self):
        current = make_news("a", category="interviews", tags=["mina"])
        articles = [
            current,
            make_news("b", category="interviews"),
            make_news("c", category="performances", tags=["mina"]),
            make_news("d", category="performances"),
        ]
        assert [a.id for a in related_news(articles, current)] == ["b", "c"]


def test_active_carousel_ordered():
    images = [
        CarouselImage(id="c1", title="A", image_url="/a.jpg", order=2, created_at="x", updated_at="x"),
        CarouselImage(id="c2", title="B", image_url="/b.jpg", order=1, created_at="x", updated_at="x"),
        CarouselImage(id="c3", title="C", image_url="/c.jpg", order=0, is_active=False,
                      created_at="x", updated_at="x"),
    ]
    assert [i.id for i in active_carousel(images)] == ["c2", "c1"]


class TestSimilarity:
    def test_score_weights(self):
        reference = make_track("ref", mood=["hype", "bright"], tags=["edm"], bpm=120)
        candidate = make_track("cand", mood=["hype"], tags=["edm"], bpm=128)
        # mood 3 + tag 2 + bpm 1 + same album 2
        assert similarity_score(reference, candidate) == 8

    def test_bpm_outside_tolerance(self):
        reference = make_track("ref", bpm=100, albumId="x")
        candidate = make_track("cand", bpm=111, albumId="y")
        assert similarity_score(reference, candidate) == 0

    def test_similar_tracks_excludes_reference_and_zero_scores(self):
        reference = make_track("ref", mood=["calm"], albumId="al1")
        tracks = [
            reference,
            make_track("other-album", albumId="al2"),
            make_track("same-album", albumId="al1"),
            make_track("same-mood", mood=["calm"], albumId="al2"),
        ]
        result = similar_tracks(reference, tracks)
        assert [t.id for t in result] == ["same-mood", "same-album"]

    def test_similar_tracks_limit_and_ties(self):
        reference = make_track("ref")
        tracks = [reference] + [make_track(f"t{n}") for n in range(8)]
        result = similar_tracks(reference, tracks)
        assert [t.id for t in result] == ["t0", "t1", "t2", "t3", "t4"]
