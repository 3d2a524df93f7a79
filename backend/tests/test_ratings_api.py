import unittest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import patch
from uuid import uuid4

from fastapi.testclient import TestClient

from app.db.session import get_db
from app.deps.auth import get_current_user
from app.main import app
from app.services.errors import NotFoundError, ValidationError


def _submit_result(outcome: str = "created", **overrides) -> dict:
    base = {
        "rating_id": uuid4(),
        "movie_id": uuid4(),
        "movie_title": "Past Lives",
        "score": 4,
        "outcome": outcome,
        "timestamp": datetime.now(timezone.utc),
    }
    base.update(overrides)
    return base


class TestRatingsApi(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(app)
        app.dependency_overrides[get_db] = lambda: iter([object()])

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def _login(self):
        user = SimpleNamespace(id=uuid4(), email="viewer@example.com")
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    # ── Mutations ─────────────────────────────────────────────────────────────

    def test_submit_requires_auth(self) -> None:
        response = self.client.post("/ratings", json={"movie_id": str(uuid4()), "score": 4})
        self.assertEqual(response.status_code, 401)

    def test_first_submit_returns_201(self) -> None:
        user = self._login()
        movie_id = uuid4()
        with patch(
            "app.api.ratings.submit_rating",
            return_value=_submit_result("created", movie_id=movie_id),
        ) as submit:
            response = self.client.post("/ratings", json={"movie_id": str(movie_id), "score": 4})

        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(payload["outcome"], "created")
        self.assertEqual(payload["movie_id"], str(movie_id))
        submit.assert_called_once()
        self.assertEqual(submit.call_args.args[1:], (user.id, movie_id, 4))

    def test_resubmit_returns_200(self) -> None:
        self._login()
        with patch("app.api.ratings.submit_rating", return_value=_submit_result("updated")):
            response = self.client.post("/ratings", json={"movie_id": str(uuid4()), "score": 2})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["outcome"], "updated")

    def test_non_integer_score_rejected_by_schema(self) -> None:
        self._login()
        for score in (2.5, "4", 4.0):
            with self.subTest(score=score), patch("app.api.ratings.submit_rating") as submit:
                response = self.client.post(
                    "/ratings",
                    json={"movie_id": str(uuid4()), "score": score},
                )
                self.assertEqual(response.status_code, 422)
                submit.assert_not_called()

    def test_out_of_range_score_maps_to_400(self) -> None:
        self._login()
        with patch(
            "app.api.ratings.submit_rating",
            side_effect=ValidationError("Rating must be an integer between 1 and 5"),
        ):
            response = self.client.post("/ratings", json={"movie_id": str(uuid4()), "score": 6})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["error"]["code"], "VALIDATION_ERROR")

    def test_inactive_movie_maps_to_404(self) -> None:
        self._login()
        with patch("app.api.ratings.submit_rating", side_effect=NotFoundError("Movie not found")):
            response = self.client.post("/ratings", json={"movie_id": str(uuid4()), "score": 3})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"]["error"]["code"], "NOT_FOUND")

    def test_update_missing_rating_404(self) -> None:
        self._login()
        with patch("app.api.ratings.change_rating", side_effect=NotFoundError("Rating not found")):
            response = self.client.put(f"/ratings/{uuid4()}", json={"score": 3})

        self.assertEqual(response.status_code, 404)

    def test_delete_success(self) -> None:
        self._login()
        movie_id = uuid4()
        with patch(
            "app.api.ratings.remove_rating",
            return_value={"movie_id": movie_id, "deleted_at": datetime.now(timezone.utc)},
        ):
            response = self.client.delete(f"/ratings/{movie_id}")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["movie_id"], str(movie_id))

    def test_delete_without_rating_404(self) -> None:
        self._login()
        with patch("app.api.ratings.remove_rating", side_effect=NotFoundError("Rating not found")):
            response = self.client.delete(f"/ratings/{uuid4()}")

        self.assertEqual(response.status_code, 404)

    def test_delete_requires_auth(self) -> None:
        response = self.client.delete(f"/ratings/{uuid4()}")
        self.assertEqual(response.status_code, 401)

    # ── Reads ─────────────────────────────────────────────────────────────────

    def test_stats_are_public(self) -> None:
        movie_id = uuid4()
        with patch(
            "app.api.ratings.get_movie_rating_stats",
            return_value={
                "movie_id": movie_id,
                "movie_title": "Past Lives",
                "average": 4.7,
                "total": 3,
                "distribution": [
                    {"stars": stars, "count": count, "percentage": pct}
                    for stars, count, pct in ((1, 0, 0), (2, 0, 0), (3, 0, 0), (4, 1, 33), (5, 2, 67))
                ],
            },
        ):
            response = self.client.get(f"/ratings/movie/{movie_id}/stats")

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["average"], 4.7)
        self.assertEqual(payload["total"], 3)
        self.assertEqual(len(payload["distribution"]), 5)

    def test_own_rating_requires_auth(self) -> None:
        response = self.client.get(f"/ratings/movie/{uuid4()}/user")
        self.assertEqual(response.status_code, 401)

    def test_own_rating_absent_shape(self) -> None:
        self._login()
        with patch(
            "app.api.ratings.get_actor_rating_for_movie",
            return_value={"has_rating": False},
        ):
            response = self.client.get(f"/ratings/movie/{uuid4()}/user")

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertFalse(payload["has_rating"])
        self.assertIsNone(payload["score"])

    def test_movie_ratings_limit_bounds(self) -> None:
        response = self.client.get(f"/ratings/movie/{uuid4()}", params={"limit": 101})
        self.assertEqual(response.status_code, 422)
        response = self.client.get(f"/ratings/movie/{uuid4()}", params={"page": 0})
        self.assertEqual(response.status_code, 422)

    def test_movie_ratings_shape(self) -> None:
        movie_id = uuid4()
        now = datetime.now(timezone.utc)
        with patch(
            "app.api.ratings.list_ratings_for_movie",
            return_value={
                "ratings": [
                    {
                        "rating_id": uuid4(),
                        "user_id": uuid4(),
                        "movie_id": movie_id,
                        "score": 5,
                        "created_at": now,
                        "updated_at": now,
                    }
                ],
                "pagination": {"page": 1, "limit": 12, "total": 13, "total_pages": 2},
            },
        ) as list_ratings:
            response = self.client.get(f"/ratings/movie/{movie_id}")

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["pagination"]["total_pages"], 2)
        self.assertEqual(payload["ratings"][0]["score"], 5)
        self.assertEqual(list_ratings.call_args.kwargs, {"page": 1, "limit": 12})

    def test_my_ratings_shape(self) -> None:
        self._login()
        now = datetime.now(timezone.utc)
        movie_id = uuid4()
        with patch(
            "app.api.ratings.list_ratings_for_actor",
            return_value={
                "ratings": [
                    {
                        "rating_id": uuid4(),
                        "user_id": uuid4(),
                        "movie_id": movie_id,
                        "score": 3,
                        "created_at": now,
                        "updated_at": now,
                        "movie": {
                            "id": movie_id,
                            "title": "Aftersun",
                            "release_year": 2022,
                            "genre": "Drama",
                            "average_rating": 4.2,
                            "total_ratings": 9,
                        },
                    }
                ],
                "pagination": {"page": 1, "limit": 12, "total": 1, "total_pages": 1},
            },
        ):
            response = self.client.get("/ratings/user")

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["ratings"][0]["movie"]["title"], "Aftersun")


class TestMoviesApi(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(app)
        app.dependency_overrides[get_db] = lambda: iter([object()])

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def test_get_movie_404(self) -> None:
        with patch("app.api.movies.get_movie_by_id", return_value=None):
            response = self.client.get(f"/movies/{uuid4()}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"]["error"]["code"], "MOVIE_NOT_FOUND")

    def test_list_movies_envelope(self) -> None:
        now = datetime.now(timezone.utc)
        row = SimpleNamespace(
            id=uuid4(),
            title="Aftersun",
            release_year=2022,
            genre="Drama",
            average_rating=4.2,
            total_ratings=9,
            created_at=now,
            updated_at=now,
        )
        with patch("app.api.movies.list_active_movies", return_value=([row], 1)):
            response = self.client.get("/movies", params={"limit": 5})

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["movies"][0]["average_rating"], 4.2)
        self.assertEqual(payload["pagination"]["total_pages"], 1)

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")


if __name__ == "__main__":
    unittest.main()
