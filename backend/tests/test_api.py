import datetime as dt
import io

from openpyxl import load_workbook

from conftest import auth_headers
from shiptrack.crud.shipments import add_shipment
from shiptrack.services.etl.validators import TEMPLATE_COLUMNS

UTC = dt.timezone.utc


def _upload(client, user, name, body):
    return client.post("/shipments/bulk", files={"file": (name, body, "text/csv")}, headers=auth_headers(user))


def _shipment(db, world, shipped_at=None, department="tokyo"):
    sender = world["tokyo_user"] if department == "tokyo" else world["osaka_user"]
    item = world["desk"] if department == "tokyo" else world["chair"]
    s = add_shipment(
        db,
        item_id=item.id,
        quantity=3,
        sender_id=sender.id,
        shipment_department_id=world[department].id,
        destination_department_id=world["hq"].id,
        shipped_at=shipped_at,
        created_by=sender.id,
        updated_by=sender.id,
    )
    db.commit()
    return s.id


def test_requires_token(client, world):
    assert client.get("/shipments").status_code == 401
    assert client.get("/shipments", headers={"Authorization": "Bearer nonsense"}).status_code == 401


def test_upload_success_and_history(client, world):
    body = b"item_name,quantity,destination_department_name\nDesk,2,Osaka\nDesk,3.0,HQ\n"
    r = _upload(client, world["tokyo_user"], "ok.csv", body)
    assert r.status_code == 200, r.text
    run = r.json()
    assert run["status"] == "COMPLETED"
    assert (run["totalRecords"], run["successRecords"], run["errorRecords"]) == (2, 2, 0)
    assert run["fileName"] == "ok.csv"

    listed = client.get("/shipments", headers=auth_headers(world["tokyo_user"])).json()
    assert listed["pagination"] == {"page": 1, "limit": 20, "total": 2, "totalPages": 1}
    assert sorted(s["quantity"] for s in listed["data"]) == [2, 3]
    assert listed["data"][0]["item"]["name"] == "Desk"
    assert listed["data"][0]["locked"] is False

    history = client.get("/bulk-imports", headers=auth_headers(world["tokyo_user"])).json()
    assert [h["id"] for h in history] == [run["id"]]
    assert client.get("/bulk-imports", headers=auth_headers(world["osaka_user"])).json() == []
    assert len(client.get("/bulk-imports", headers=auth_headers(world["manager"])).json()) == 1


def test_upload_format_errors_are_400(client, world):
    r = _upload(client, world["tokyo_user"], "notes.txt", b"hello")
    assert r.status_code == 400
    r = _upload(client, world["tokyo_user"], "empty.csv", b"item_name,quantity,destination_department_name\n")
    assert r.status_code == 400
    assert client.get("/bulk-imports", headers=auth_headers(world["manager"])).json() == []


def test_error_report_access(client, world):
    body = b"item_name,quantity,destination_department_name\nDesk,2,Osaka\nDesk,0,Osaka\n"
    run = _upload(client, world["tokyo_user"], "bad.csv", body).json()
    assert run["status"] == "FAILED"
    assert run["errorRecords"] == 1

    url = f"/bulk-imports/{run['id']}/errors"
    errors = client.get(url, headers=auth_headers(world["tokyo_user"])).json()
    assert len(errors) == 1
    assert errors[0]["rowNumber"] == 3
    assert errors[0]["bulkImportId"] == run["id"]
    assert errors[0]["errorMessage"] == "Quantity must be a positive integer"
    assert errors[0]["rowData"]["quantity"] == "0"

    assert client.get(url, headers=auth_headers(world["manager"])).status_code == 200
    assert client.get(url, headers=auth_headers(world["osaka_user"])).status_code == 403
    assert client.get("/bulk-imports/9999/errors", headers=auth_headers(world["manager"])).status_code == 404


def test_template_download(client, world):
    r = client.get("/shipments/bulk/template", headers=auth_headers(world["tokyo_user"]))
    assert r.status_code == 200
    assert r.content.startswith(b"\xef\xbb\xbf")
    assert r.content.decode("utf-8-sig").strip() == ",".join(TEMPLATE_COLUMNS)

    r = client.get("/shipments/bulk/template?format=xlsx", headers=auth_headers(world["tokyo_user"]))
    assert r.status_code == 200
    ws = load_workbook(io.BytesIO(r.content)).active
    assert [c.value for c in ws[1]] == list(TEMPLATE_COLUMNS)

    assert client.get("/shipments/bulk/template?format=pdf", headers=auth_headers(world["tokyo_user"])).status_code == 422


def test_create_shipment_scoping(client, world):
    payload = {
        "itemId": world["desk"].id,
        "quantity": 4,
        "shipmentDepartmentId": world["tokyo"].id,
        "destinationDepartmentId": world["osaka"].id,
        "trackingNumber": "  ",
        "shippedAt": "2099-01-01T09:00:00",
    }
    r = client.post("/shipments", json=payload, headers=auth_headers(world["tokyo_user"]))
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["trackingNumber"] is None
    assert body["senderId"] == world["tokyo_user"].id
    assert body["locked"] is False

    other_item = dict(payload, itemId=world["chair"].id)
    assert client.post("/shipments", json=other_item, headers=auth_headers(world["tokyo_user"])).status_code == 403

    other_source = dict(payload, shipmentDepartmentId=world["osaka"].id)
    assert client.post("/shipments", json=other_source, headers=auth_headers(world["tokyo_user"])).status_code == 403

    bad_qty = dict(payload, quantity=0)
    assert client.post("/shipments", json=bad_qty, headers=auth_headers(world["tokyo_user"])).status_code == 422


def test_visibility_of_single_shipment(client, db, world):
    theirs = _shipment(db, world, department="osaka")
    assert client.get(f"/shipments/{theirs}", headers=auth_headers(world["tokyo_user"])).status_code == 404
    assert client.get(f"/shipments/{theirs}", headers=auth_headers(world["manager"])).status_code == 200


def test_locked_shipment_cannot_be_edited_or_deleted(client, db, world):
    past = _shipment(db, world, shipped_at=dt.datetime(2020, 1, 1, tzinfo=UTC))
    headers = auth_headers(world["tokyo_user"])

    got = client.get(f"/shipments/{past}", headers=headers).json()
    assert got["locked"] is True

    payload = {
        "itemId": world["desk"].id,
        "quantity": 9,
        "shipmentDepartmentId": world["tokyo"].id,
        "destinationDepartmentId": world["hq"].id,
    }
    r = client.put(f"/shipments/{past}", json=payload, headers=headers)
    assert r.status_code == 409
    assert r.json()["detail"] == "Shipped shipments can no longer be edited"

    r = client.delete(f"/shipments/{past}", headers=headers)
    assert r.status_code == 409
    assert r.json()["detail"] == "Shipped shipments can no longer be deleted"


def test_unshipped_shipment_can_be_edited_and_deleted(client, db, world):
    pending = _shipment(db, world)
    headers = auth_headers(world["tokyo_user"])
    payload = {
        "itemId": world["desk"].id,
        "quantity": 9,
        "shipmentDepartmentId": world["tokyo"].id,
        "destinationDepartmentId": world["hq"].id,
        "notes": "rush",
    }
    r = client.put(f"/shipments/{pending}", json=payload, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["quantity"] == 9
    assert r.json()["notes"] == "rush"

    assert client.delete(f"/shipments/{pending}", headers=headers).json() == {"status": "ok"}
    assert client.get(f"/shipments/{pending}", headers=headers).status_code == 404


def test_recent_shipments_department_filter_parsing(client, db, world):
    mine = _shipment(db, world)
    _shipment(db, world, department="osaka")
    headers = auth_headers(world["manager"])

    everything = client.get("/dashboard/recent-shipments?departmentId=all", headers=headers).json()
    assert len(everything) == 2

    only_tokyo = client.get(f"/dashboard/recent-shipments?departmentId={world['tokyo'].id}", headers=headers).json()
    assert [s["id"] for s in only_tokyo] == [mine]

    assert client.get("/dashboard/recent-shipments?departmentId=tokyo", headers=headers).status_code == 422

    scoped = client.get(
        f"/dashboard/recent-shipments?departmentId={world['osaka'].id}",
        headers=auth_headers(world["tokyo_user"]),
    ).json()
    assert [s["id"] for s in scoped] == [mine]


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_create_rejects_quantity_beyond_integer_column(client, world):
    payload = {
        "itemId": world["desk"].id,
        "quantity": 2**31,
        "shipmentDepartmentId": world["tokyo"].id,
        "destinationDepartmentId": world["osaka"].id,
    }
    r = client.post("/shipments", json=payload, headers=auth_headers(world["tokyo_user"]))
    assert r.status_code == 422
