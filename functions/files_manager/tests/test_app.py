import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import ProgrammingError

from files_manager.app import create_app
from files_manager.cache import InMemoryCacheClient
from files_manager.db import InMemoryDbClient, SqlDbClient


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.cache = InMemoryCacheClient()
        self.client = TestClient(create_app(db_client=self.db, cache_client=self.cache))

    def test_status_all_up(self):
        response = self.client.get("/status")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"redis": True, "db": True})

    def test_status_with_store_down(self):
        self.db.alive = False
        response = self.client.get("/status")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"redis": True, "db": False})

    def test_stats_counts(self):
        for i in range(42):
            self.db.add_user(f"user{i}@example.com", "pw")
        for i in range(7):
            self.db.add_file({"name": f"f{i}.txt"})

        response = self.client.get("/stats")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"users": 42, "files": 7})

    def test_stats_with_store_down_serves_last_known(self):
        self.db.add_user("a@example.com", "pw")
        self.assertEqual(self.client.get("/stats").json(), {"users": 1, "files": 0})

        self.db.alive = False
        with self.assertLogs("files_manager.status", level="WARNING"):
            response = self.client.get("/stats")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"users": 1, "files": 0})

    def test_stats_answers_when_store_raises_driver_error(self):
        db = SqlDbClient("sqlite+pysqlite:///:memory:")
        db.connect()
        client = TestClient(create_app(db_client=db, cache_client=self.cache))
        error = ProgrammingError("SELECT", {}, Exception("relation \"users\" does not exist"))
        with patch("sqlalchemy.orm.Session.execute", side_effect=error):
            with self.assertLogs("files_manager.status", level="WARNING"):
                response = client.get("/stats")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"users": 0, "files": 0})
        self.assertEqual(client.get("/status").json(), {"redis": True, "db": False})
        db.close()

    def test_lifespan_connects_and_closes(self):
        db = InMemoryDbClient(alive=False)
        cache = InMemoryCacheClient(alive=False)
        with TestClient(create_app(db_client=db, cache_client=cache)) as client:
            self.assertEqual(client.get("/status").json(), {"redis": True, "db": True})
        self.assertFalse(db.is_alive())
        self.assertFalse(cache.is_alive())

    @patch("files_manager.app.get_settings")
    def test_api_prefix(self, mock_settings):
        mock_settings.return_value = type(
            "Settings", (), {"api_prefix": "/api", "use_in_memory_backends": True}
        )()
        client = TestClient(create_app(db_client=self.db, cache_client=self.cache))
        self.assertEqual(client.get("/api/status").status_code, 200)
        self.assertEqual(client.get("/status").status_code, 404)


if __name__ == "__main__":
    unittest.main()
