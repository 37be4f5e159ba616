"""
Mock TMDB API responses for testing.

Contains realistic responses from the TMDB API for search, movie details,
TV details and season details endpoints. These fixtures are used with respx
to mock httpx calls in tests.
"""

# GET /search/movie?query=Alpha
TMDB_SEARCH_MOVIE_RESPONSE = {
    "page": 1,
    "results": [
        {
            "adult": False,
            "id": 487242,
            "original_title": "Alpha",
            "title": "Alpha",
            "release_date": "2018-08-17",
            "popularity": 31.4,
        },
        {
            "adult": False,
            "id": 550,
            "original_title": "Alphaville",
            "title": "Alphaville",
            "release_date": "1965-05-05",
            "popularity": 8.2,
        },
    ],
    "total_pages": 1,
    "total_results": 2,
}

# GET /search/tv?query=Dark
TMDB_SEARCH_TV_RESPONSE = {
    "page": 1,
    "results": [
        {
            "id": 70523,
            "name": "Dark",
            "original_name": "Dark",
            "first_air_date": "2017-12-01",
            "popularity": 64.9,
        }
    ],
    "total_pages": 1,
    "total_results": 1,
}

TMDB_SEARCH_EMPTY_RESPONSE = {
    "page": 1,
    "results": [],
    "total_pages": 0,
    "total_results": 0,
}

# GET /movie/487242?append_to_response=credits,videos
TMDB_MOVIE_DETAILS_RESPONSE = {
    "id": 487242,
    "title": "Alpha",
    "original_title": "Alpha",
    "overview": "A young hunter befriends a wolf.",
    "poster_path": "/alpha-poster.jpg",
    "backdrop_path": "/alpha-backdrop.jpg",
    "release_date": "2018-08-17",
    "runtime": 96,
    "imdb_id": "tt4244998",
    "vote_average": 6.6,
    "vote_count": 2400,
    "popularity": 31.4,
    "genres": [{"id": 12, "name": "Adventure"}, {"id": 18, "name": "Drama"}],
    "credits": {
        "cast": [
            {"id": i, "name": f"Actor {i}", "character": f"Role {i}", "profile_path": None}
            for i in range(1, 13)
        ],
        "crew": [
            {"id": 100, "name": "Albert Hughes", "department": "Directing", "job": "Director"},
            {"id": 101, "name": "Daniele Sebastian Wiedenhaupt", "department": "Writing", "job": "Screenplay"},
            {"id": 102, "name": "Joe Grip", "department": "Sound", "job": "Boom Operator"},
        ],
    },
    "videos": {
        "results": [
            {"id": "v1", "key": "abc", "name": "Official Trailer", "site": "YouTube", "type": "Trailer", "official": True},
            {"id": "v2", "key": "def", "name": "Featurette", "site": "YouTube", "type": "Featurette", "official": True},
            {"id": "v3", "key": "ghi", "name": "Teaser", "site": "Vimeo", "type": "Teaser", "official": False},
        ]
    },
}

# GET /tv/70523?append_to_response=credits,videos
TMDB_TV_DETAILS_RESPONSE = {
    "id": 70523,
    "name": "Dark",
    "original_name": "Dark",
    "overview": "A missing child sets four families on a frantic hunt.",
    "poster_path": "/dark-poster.jpg",
    "backdrop_path": "/dark-backdrop.jpg",
    "first_air_date": "2017-12-01",
    "last_air_date": "2020-06-27",
    "status": "Ended",
    "number_of_seasons": 3,
    "number_of_episodes": 26,
    "vote_average": 8.4,
    "vote_count": 6500,
    "popularity": 64.9,
    "genres": [{"id": 80, "name": "Crime"}, {"id": 9648, "name": "Mystery"}],
    "networks": [{"id": 213, "name": "Netflix", "logo_path": "/netflix.png", "origin_country": ""}],
    "seasons": [
        {"id": 900, "season_number": 0, "name": "Specials", "air_date": None, "poster_path": None},
        {"id": 901, "season_number": 1, "name": "Season 1", "air_date": "2017-12-01", "poster_path": "/s1.jpg"},
        {"id": 902, "season_number": 2, "name": "Season 2", "air_date": "2019-06-21", "poster_path": "/s2.jpg"},
    ],
    "credits": {
        "cast": [{"id": 1, "name": "Louis Hofmann", "character": "Jonas Kahnwald"}],
        "crew": [
            {"id": 200, "name": "Baran bo Odar", "department": "Production", "job": "Executive Producer"},
            {"id": 201, "name": "Someone", "department": "Camera", "job": "Director of Photography"},
        ],
    },
    "videos": {"results": []},
}

# GET /tv/70523/season/1
TMDB_SEASON_DETAILS_RESPONSE = {
    "id": 901,
    "season_number": 1,
    "name": "Season 1",
    "air_date": "2017-12-01",
    "episodes": [
        {
            "id": 1001,
            "episode_number": 1,
            "name": "Secrets",
            "air_date": "2017-12-01",
            "still_path": "/e1.jpg",
            "overview": "In 2019, a local boy's disappearance...",
            "vote_average": 7.9,
            "vote_count": 120,
        },
        {
            "id": 1002,
            "episode_number": 2,
            "name": "Lies",
            "air_date": "2017-12-01",
            "still_path": "/e2.jpg",
            "overview": "Jonas is haunted by his father's suicide.",
            "vote_average": 7.8,
            "vote_count": 110,
        },
        {
            "id": 1003,
            "episode_number": 3,
            "name": "Past and Present",
            "air_date": "2017-12-01",
            "still_path": "/e3.jpg",
            "overview": "",
            "vote_average": 8.0,
            "vote_count": 100,
        },
    ],
}
