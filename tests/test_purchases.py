import uuid

from sqlalchemy.exc import OperationalError
from sqlmodel import select

from conftest import ALICE, BOB, auth
from modelmatrix.models.model import AIModel
from modelmatrix.models.purchase import Purchase
from modelmatrix.routers.models import purchase_service


def _purchased(session, model_id):
    session.expire_all()
    return session.get(AIModel, model_id).purchased


def _purchases(session, model_id):
    session.expire_all()
    return list(session.exec(select(Purchase).where(Purchase.model_id == model_id)).all())


def test_purchase_records_and_increments(client, session, make_model):
    model = make_model(owner=ALICE, framework="TensorFlow")

    response = client.post(f"/models/{model.id}/purchase", headers=auth("bob-token"))
    assert response.status_code == 201
    result = response.json()["result"]
    assert result["model_id"] == str(model.id)
    assert result["purchased_by"] == BOB
    assert result["created_by"] == ALICE
    assert result["model_name"] == model.name
    assert result["framework"] == "TensorFlow"
    assert result["status"] == "completed"

    assert _purchased(session, model.id) == 1
    assert len(_purchases(session, model.id)) == 1


def test_purchasing_twice_is_not_deduplicated(client, session, make_model):
    model = make_model()

    for _ in range(2):
        assert client.post(f"/models/{model.id}/purchase", headers=auth("bob-token")).status_code == 201

    records = _purchases(session, model.id)
    assert len(records) == 2
    assert {p.purchased_by for p in records} == {BOB}
    assert _purchased(session, model.id) == 2


def test_purchase_copies_fields_at_write_time(client, session, make_model):
    model = make_model(name="Original Name")
    client.post(f"/models/{model.id}/purchase", headers=auth("bob-token"))
    client.put(f"/models/{model.id}", json={"name": "Renamed"}, headers=auth("alice-token"))

    response = client.get("/my-purchases", headers=auth("bob-token"))
    assert response.json()["result"][0]["model_name"] == "Original Name"


def test_purchase_missing_model_is_404(client, session):
    missing = uuid.uuid4()
    response = client.post(f"/models/{missing}/purchase", headers=auth("bob-token"))
    assert response.status_code == 404
    assert _purchases(session, missing) == []


def test_my_purchases_lists_only_callers(client, make_model):
    model = make_model()
    client.post(f"/models/{model.id}/purchase", headers=auth("bob-token"))
    client.post(f"/models/{model.id}/purchase", headers=auth("alice-token"))

    response = client.get("/my-purchases", headers=auth("bob-token"))
    result = response.json()["result"]
    assert len(result) == 1
    assert result[0]["purchased_by"] == BOB


def test_my_purchases_with_other_email_is_forbidden(client):
    response = client.get("/my-purchases", params={"email": ALICE}, headers=auth("bob-token"))
    assert response.status_code == 403


def test_counter_failure_parks_purchase(client, session, make_model, monkeypatch):
    model = make_model()

    def boom(session, model_id):
        raise OperationalError("UPDATE models", {}, Exception("database is locked"))

    monkeypatch.setattr(purchase_service.model_repo, "increment_purchased", boom)

    response = client.post(f"/models/{model.id}/purchase", headers=auth("bob-token"))
    assert response.status_code == 502
    assert response.json() == {
        "error": True,
        "message": "purchase recorded, pending reconciliation",
    }

    records = _purchases(session, model.id)
    assert len(records) == 1
    assert records[0].status == "pending_reconciliation"
    assert _purchased(session, model.id) == 0


def test_reconcile_finishes_parked_purchases(client, session, make_model, admin_user, monkeypatch):
    model = make_model()

    def boom(session, model_id):
        raise OperationalError("UPDATE models", {}, Exception("database is locked"))

    monkeypatch.setattr(purchase_service.model_repo, "increment_purchased", boom)
    client.post(f"/models/{model.id}/purchase", headers=auth("bob-token"))
    monkeypatch.undo()

    response = client.post("/admin/purchases/reconcile", headers=auth("admin-token"))
    assert response.status_code == 200
    assert response.json()["result"] == {"reconciled": 1}

    records = _purchases(session, model.id)
    assert [p.status for p in records] == ["completed"]
    assert _purchased(session, model.id) == 1

    # Nothing left to do; counter is not bumped twice
    again = client.post("/admin/purchases/reconcile", headers=auth("admin-token"))
    assert again.json()["result"] == {"reconciled": 0}
    assert _purchased(session, model.id) == 1


def test_reconcile_closes_purchases_of_deleted_models(client, session, make_model, admin_user):
    model = make_model()
    session.add(
        Purchase(
            model_id=model.id,
            model_name=model.name,
            framework=model.framework,
            use_case=model.use_case,
            created_by=model.created_by,
            purchased_by=BOB,
            status="pending_reconciliation",
        )
    )
    session.commit()
    client.delete(f"/models/{model.id}", headers=auth("alice-token"))

    response = client.post("/admin/purchases/reconcile", headers=auth("admin-token"))
    assert response.json()["result"] == {"reconciled": 1}
    assert [p.status for p in _purchases(session, model.id)] == ["completed"]


def test_reconcile_is_admin_only(client):
    response = client.post("/admin/purchases/reconcile", headers=auth("bob-token"))
    assert response.status_code == 403


def test_overlapping_reconcile_runs_count_once(client, session, make_model, admin_user, monkeypatch):
    model = make_model()
    session.add(
        Purchase(
            model_id=model.id,
            model_name=model.name,
            framework=model.framework,
            use_case=model.use_case,
            created_by=model.created_by,
            purchased_by=BOB,
            status="pending_reconciliation",
        )
    )
    session.commit()

    # This run reads the parked list before the other run finishes it
    stale = purchase_service.purchase_repo.list_by_status(session, "pending_reconciliation")
    assert len(stale) == 1

    response = client.post("/admin/purchases/reconcile", headers=auth("admin-token"))
    assert response.json()["result"] == {"reconciled": 1}

    monkeypatch.setattr(
        purchase_service.purchase_repo, "list_by_status", lambda s, status: stale
    )
    assert purchase_service.reconcile(session).reconciled == 0

    assert _purchased(session, model.id) == 1
    assert [p.status for p in _purchases(session, model.id)] == ["completed"]
