from types import SimpleNamespace

from conftest import ALICE, auth
from modelmatrix.repositories.stats_repo import StatsRepository
from modelmatrix.models.model import AIModel
from modelmatrix.models.user import User


class PostgresLikeSession:
    """Reports the postgresql dialect and replays canned results."""

    def __init__(self, *results):
        self.results = list(results)
        self.statements = []

    def get_bind(self):
        return SimpleNamespace(dialect=SimpleNamespace(name="postgresql"))

    def exec(self, stmt, params=None):
        self.statements.append((str(stmt), params))
        return self.results.pop(0)


def test_stats_require_admin(client):
    client.post("/users", json={"email": ALICE})
    response = client.get("/admin/stats", headers=auth("alice-token"))
    assert response.status_code == 403


def test_stats_counts_and_revenue(client, make_model, admin_user):
    client.post("/users", json={"email": ALICE})
    first = make_model()
    make_model()
    for _ in range(3):
        client.post(f"/models/{first.id}/purchase", headers=auth("alice-token"))

    response = client.get("/admin/stats", headers=auth("admin-token"))
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "result": {
            "total_users": 2,
            "total_models": 2,
            "total_purchases": 3,
            "revenue": 30.0,
        },
    }


def test_stats_revenue_uses_configured_unit_price(client, settings, make_model, admin_user):
    settings.UNIT_PRICE = 2.5
    model = make_model()
    client.post(f"/models/{model.id}/purchase", headers=auth("admin-token"))

    result = client.get("/admin/stats", headers=auth("admin-token")).json()["result"]
    assert result["revenue"] == 2.5


def test_estimated_count_falls_back_to_exact_on_sqlite(session, make_model):
    make_model()
    repo = StatsRepository()
    assert repo.estimated_count(session, AIModel) == 1


def test_estimated_count_reads_the_table_on_the_search_path():
    session = PostgresLikeSession(SimpleNamespace(scalar=lambda: 42))
    assert StatsRepository().estimated_count(session, User) == 42

    sql, params = session.statements[0]
    assert "oid = to_regclass(:name)" in sql
    assert "relname" not in sql
    assert params == {"name": "users"}


def test_estimated_count_uses_exact_count_before_analyze():
    session = PostgresLikeSession(
        SimpleNamespace(scalar=lambda: -1),
        SimpleNamespace(one=lambda: 3),
    )
    assert StatsRepository().estimated_count(session, User) == 3
    assert len(session.statements) == 2


def test_admin_models_lists_everything_with_filters(client, make_model, admin_user):
    make_model(name="Vision TF", framework="TensorFlow")
    make_model(name="Vision PT", framework="PyTorch")

    response = client.get("/admin/models", headers=auth("admin-token"))
    assert len(response.json()["result"]) == 2

    filtered = client.get(
        "/admin/models", params={"framework": "PyTorch"}, headers=auth("admin-token")
    )
    assert [m["name"] for m in filtered.json()["result"]] == ["Vision PT"]


def test_admin_models_forbidden_for_users(client):
    response = client.get("/admin/models", headers=auth("alice-token"))
    assert response.status_code == 403
