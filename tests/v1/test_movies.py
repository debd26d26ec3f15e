# tests/v1/test_movies.py
"""Tests for movie endpoints."""

import pytest
from fastapi import status

MOVIE_PAYLOAD = {"title": "Moon", "year": 2009, "runtime": 97, "genres": ["Sci-Fi", "Drama"]}


@pytest.fixture()
def five_movies(seed) -> list[int]:
    return [
        seed.movie("The Thing", year=1982, runtime=109, genres=("Horror", "Sci-Fi")),
        seed.movie("Solaris", year=1972, runtime=167, genres=("Drama", "Sci-Fi")),
        seed.movie("Stalker", year=1979, runtime=162, genres=("Drama", "Sci-Fi")),
        seed.movie("Gattaca", year=1997, runtime=106, genres=("Drama", "Sci-Fi")),
        seed.movie("Contact", year=1997, runtime=150, genres=("Drama", "Sci-Fi")),
    ]


def test_create_movie(client, auth_token) -> None:
    """Test creating a movie returns it with its location."""
    response = client.post("/api/v1/movies", json=MOVIE_PAYLOAD, headers=auth_token)

    assert response.status_code == status.HTTP_201_CREATED
    movie = response.json()["movie"]
    assert response.headers["location"] == f"/api/v1/movies/{movie['id']}"
    assert movie["version"] == 1
    assert sorted(genre["name"] for genre in movie["genres"]) == ["Drama", "Sci-Fi"]


def test_create_movie_requires_auth(client) -> None:
    """Test creating a movie without credentials."""
    response = client.post("/api/v1/movies", json=MOVIE_PAYLOAD)
    assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)


@pytest.mark.parametrize(
    "override",
    [{"year": 1700}, {"runtime": 0}, {"genres": []}, {"genres": ["Drama", "Drama"]}, {"title": ""}],
)
def test_create_movie_validation(client, auth_token, override) -> None:
    """Test that malformed movies are rejected."""
    response = client.post("/api/v1/movies", json={**MOVIE_PAYLOAD, **override}, headers=auth_token)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_list_movies_by_genre(client, five_movies) -> None:
    """Test that every movie carrying the genre is listed with single-page metadata."""
    response = client.get("/api/v1/movies", params={"genres": "Sci-Fi"})

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [movie["id"] for movie in data["movies"]] == five_movies
    assert data["metadata"] == {
        "current_page": 1,
        "page_size": 20,
        "first_page": 1,
        "last_page": 1,
        "total_records": 5,
    }


def test_list_movies_filters_and_sort(client, five_movies) -> None:
    """Test combining genre, year and runtime filters with a descending sort."""
    response = client.get(
        "/api/v1/movies",
        params={"genres": "Drama", "min_year": "1975", "max_runtime": "160", "sort": "-year"},
    )
    titles = [movie["title"] for movie in response.json()["movies"]]
    # Equal years keep id order.
    assert titles == ["Gattaca", "Contact"]


def test_list_movies_paging(client, five_movies) -> None:
    """Test that a later page reports the full match count."""
    response = client.get("/api/v1/movies", params={"page": "3", "page_size": "2", "sort": "title"})
    data = response.json()

    assert [movie["title"] for movie in data["movies"]] == ["The Thing"]
    assert data["metadata"]["last_page"] == 3
    assert data["metadata"]["current_page"] == 3


def test_list_movies_empty(client, five_movies) -> None:
    """Test that no match yields zeroed metadata."""
    response = client.get("/api/v1/movies", params={"genres": "Western"})
    assert response.json() == {
        "movies": [],
        "metadata": {
            "current_page": 0,
            "page_size": 0,
            "first_page": 0,
            "last_page": 0,
            "total_records": 0,
        },
    }


@pytest.mark.parametrize(
    ("params", "errors"),
    [
        ({"sort": "rating"}, {"sort": "invalid sort value"}),
        ({"page": "0"}, {"page": "must be greater than zero"}),
        ({"page_size": "500"}, {"page_size": "must be a maximum of 100"}),
        ({"min_year": "abc"}, {"min_year": "must be an integer value"}),
    ],
)
def test_list_movies_invalid_query(client, params, errors) -> None:
    """Test that invalid query parameters are reported per field."""
    response = client.get("/api/v1/movies", params=params)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json() == {"error": errors}


def test_get_movie_with_top_reviews(client, seed, test_movie) -> None:
    """Test that a movie is returned with its upvoted reviews, best first."""
    critics = [seed.user(f"Critic {i}") for i in range(7)]
    for upvotes, critic in enumerate(critics):
        seed.review(user_id=critic, movie_id=test_movie, upvotes=upvotes, text="y" * 400)

    response = client.get(f"/api/v1/movies/{test_movie}")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["movie"]["title"] == "Alien"
    assert [review["upvotes"] for review in data["reviews"]] == [6, 5, 4, 3, 2]
    assert all(len(review["text"]) == 300 for review in data["reviews"])


def test_get_missing_movie(client) -> None:
    """Test fetching a movie that does not exist."""
    response = client.get("/api/v1/movies/99999")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"detail": "the requested resource could not be found"}


def test_update_movie(client, auth_token, test_movie) -> None:
    """Test a partial update bumps the version."""
    response = client.patch(
        f"/api/v1/movies/{test_movie}",
        json={"runtime": 116, "version": 1},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_200_OK
    movie = response.json()["movie"]
    assert movie["runtime"] == 116
    assert movie["title"] == "Alien"
    assert movie["version"] == 2


def test_update_movie_stale_version(client, auth_token, test_movie) -> None:
    """Test that an update pinned to an old version conflicts."""
    client.patch(f"/api/v1/movies/{test_movie}", json={"runtime": 116}, headers=auth_token)
    response = client.patch(
        f"/api/v1/movies/{test_movie}",
        json={"runtime": 118, "version": 1},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_409_CONFLICT


def test_delete_movie_cascades(client, auth_token, test_movie, test_review) -> None:
    """Test deleting a movie removes its reviews."""
    response = client.delete(f"/api/v1/movies/{test_movie}", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "movie successfully deleted"}

    assert client.get(f"/api/v1/movies/{test_movie}").status_code == status.HTTP_404_NOT_FOUND
    assert client.get(f"/api/v1/reviews/{test_review}").status_code == status.HTTP_404_NOT_FOUND


def test_list_movie_reviews(client, seed, test_movie, auth_token, test_review) -> None:
    """Test a movie's review list filters by rating and reports the viewer's vote."""
    seed.review(user_id=seed.user(), movie_id=test_movie, rating=3)
    client.post(f"/api/v1/reviews/{test_review}/vote", json={"direction": 1}, headers=auth_token)

    response = client.get(
        f"/api/v1/movies/{test_movie}/reviews",
        params={"min_rating": "8"},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [review["id"] for review in data["reviews"]] == [test_review]
    assert data["reviews"][0]["user_vote"] == 1
    assert data["reviews"][0]["user_name"] == "Other User"
    assert data["metadata"]["total_records"] == 1


def test_list_movie_reviews_invalid_sort(client, test_movie) -> None:
    """Test an unknown review sort key."""
    response = client.get(f"/api/v1/movies/{test_movie}/reviews", params={"sort": "title"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json() == {"error": {"sort": "invalid sort value"}}


def test_top_reviews_endpoint(client, seed, test_movie, test_review) -> None:
    """Test the top reviews endpoint skips reviews without upvotes."""
    liked = seed.review(user_id=seed.user(), movie_id=test_movie, upvotes=2)

    response = client.get(f"/api/v1/movies/{test_movie}/reviews/top")

    assert [review["id"] for review in response.json()["reviews"]] == [liked]


def test_list_genres(client, test_movie) -> None:
    """Test genres are listed alphabetically."""
    response = client.get("/api/v1/genres")
    assert [genre["name"] for genre in response.json()["genres"]] == ["Horror", "Sci-Fi"]
