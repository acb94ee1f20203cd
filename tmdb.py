import logging
import math
import time

import requests

logger = logging.getLogger(__name__)

RESULTS_PER_PAGE = 20
CHUNK_SIZE = 20


class TMDBError(Exception):
    pass


class TMDBClient:
    """Small wrapper around the TMDB endpoints used to provision the catalog."""

    def __init__(self, api_key, detail_url, trending_url, session=None, pause=2.0, timeout=30):
        if not api_key:
            raise TMDBError("TMDB_API_KEY is not set.")
        self.api_key = api_key
        self.detail_url = detail_url.rstrip("/")
        self.trending_url = trending_url
        self.session = session or requests.Session()
        self.pause = pause
        self.timeout = timeout

    def _get(self, url, **params):
        params["api_key"] = self.api_key
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise TMDBError(f"Request to {url} failed: {exc}") from exc
        return response.json()

    def trending_movies(self, total_pages):
        movies = []
        for page in range(1, total_pages + 1):
            data = self._get(self.trending_url, page=page)
            movies.extend(
                result for result in data.get("results", []) if result.get("media_type") == "movie"
            )
        return movies

    def movie_details(self, movie_id):
        url = f"{self.detail_url}/{movie_id}"
        movie = self._get(url)
        videos = self._get(f"{url}/videos")
        credits = self._get(f"{url}/credits")
        movie["videos"] = videos.get("results", [])
        movie["credits"] = {"cast": credits.get("cast", []), "crew": credits.get("crew", [])}
        return movie

    def trending_movies_with_details(self, count):
        total_pages = max(1, math.ceil(count / RESULTS_PER_PAGE))
        movies = self.trending_movies(total_pages)[:count]

        details = []
        for start in range(0, len(movies), CHUNK_SIZE):
            chunk = movies[start:start + CHUNK_SIZE]
            details.extend(self.movie_details(movie["id"]) for movie in chunk)
            logger.info("Fetched details for %d/%d movies", len(details), len(movies))
            # stay under the TMDB rate limit
            if start + CHUNK_SIZE < len(movies) and self.pause:
                time.sleep(self.pause)
        return details
