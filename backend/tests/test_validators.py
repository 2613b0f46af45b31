import datetime as dt

from conftest import ctx_for
from shiptrack.services.etl.validators import (
    RowError,
    ShipmentDraft,
    parse_quantity,
    validate_row,
    validate_rows,
)


def _row(**kw):
    base = {"item_name": "Desk", "quantity": "2", "destination_department_name": "Osaka"}
    base.update(kw)
    return base


def test_valid_row_defaults_to_uploader_department(db, world):
    result = validate_row(db, ctx_for(world["tokyo_user"]), _row(tracking_number=" TRK-1 ", notes=""), 2)
    assert isinstance(result, ShipmentDraft)
    assert result.item_id == world["desk"].id
    assert result.quantity == 2
    assert result.destination_department_id == world["osaka"].id
    assert result.shipment_department_id == world["tokyo"].id
    assert result.shipment_user_id is None
    assert result.tracking_number == "TRK-1"
    assert result.notes is None


def test_required_fields(db, world):
    result = validate_row(db, ctx_for(world["tokyo_user"]), _row(quantity="  "), 2)
    assert isinstance(result, RowError)
    assert "Required fields missing" in result.message


def test_item_lookup_is_scoped_for_department_users(db, world):
    # Chair exists, but belongs to Osaka
    result = validate_row(db, ctx_for(world["tokyo_user"]), _row(item_name="Chair"), 2)
    assert isinstance(result, RowError)
    assert result.message == "Item 'Chair' not found"


def test_management_can_reference_any_department_item(db, world):
    result = validate_row(db, ctx_for(world["manager"]), _row(item_name="Chair"), 2)
    assert isinstance(result, ShipmentDraft)
    assert result.item_id == world["chair"].id
    assert result.shipment_department_id == world["hq"].id


def test_item_name_is_trimmed(db, world):
    result = validate_row(db, ctx_for(world["tokyo_user"]), _row(item_name="  Desk "), 2)
    assert isinstance(result, ShipmentDraft)


def test_quantity_rules():
    assert parse_quantity("3") == 3
    assert parse_quantity("3.0") == 3
    assert parse_quantity("1,200") == 1200
    assert parse_quantity("0") is None
    assert parse_quantity("-1") is None
    assert parse_quantity("2.5") is None
    assert parse_quantity("abc") is None
    assert parse_quantity("2147483647") == 2147483647
    assert parse_quantity("2147483648") is None
    assert parse_quantity("99999999999") is None
    assert parse_quantity("1e30") is None
    assert parse_quantity("1e3") is None
    assert parse_quantity("1_000") is None
    assert parse_quantity("12,34") is None


def test_unknown_destination(db, world):
    result = validate_row(db, ctx_for(world["tokyo_user"]), _row(destination_department_name="Nagoya"), 2)
    assert isinstance(result, RowError)
    assert "Nagoya" in result.message


def test_department_user_cannot_override_shipment_department(db, world):
    result = validate_row(db, ctx_for(world["tokyo_user"]), _row(shipment_department_name="Osaka"), 2)
    assert isinstance(result, RowError)
    assert result.message == "Regular users cannot specify a shipment department"


def test_management_override_resolves_by_name(db, world):
    ctx = ctx_for(world["manager"])
    ok = validate_row(db, ctx, _row(shipment_department_name="Tokyo"), 2)
    assert isinstance(ok, ShipmentDraft)
    assert ok.shipment_department_id == world["tokyo"].id

    missing = validate_row(db, ctx, _row(shipment_department_name="Kyoto"), 2)
    assert isinstance(missing, RowError)
    assert "Kyoto" in missing.message


def test_shipment_user_must_belong_to_destination(db, world):
    ctx = ctx_for(world["tokyo_user"])
    ok = validate_row(db, ctx, _row(shipment_user_name="Hanako"), 2)
    assert isinstance(ok, ShipmentDraft)
    assert ok.shipment_user_id == world["osaka_user"].id

    # Taro works in Tokyo, the shipping side, not the destination
    wrong = validate_row(db, ctx, _row(shipment_user_name="Taro"), 2)
    assert isinstance(wrong, RowError)
    assert "Taro" in wrong.message and "Osaka" in wrong.message


def test_shipped_at_parsing(db, world):
    ctx = ctx_for(world["tokyo_user"])
    ok = validate_row(db, ctx, _row(shipped_at="2026-10-01 09:00"), 2)
    assert isinstance(ok, ShipmentDraft)
    # naive input is Asia/Tokyo wall-clock time
    assert ok.shipped_at == dt.datetime(2026, 10, 1, 0, 0, tzinfo=dt.timezone.utc)

    bad = validate_row(db, ctx, _row(shipped_at="next tuesday-ish"), 2)
    assert isinstance(bad, RowError)
    assert "shipped_at" in bad.message


def test_row_numbers_and_raw_data_are_preserved(db, world):
    rows = [_row(), _row(quantity="zero"), _row()]
    outcome = validate_rows(db, ctx_for(world["tokyo_user"]), rows)
    assert len(outcome.drafts) == 2
    assert len(outcome.errors) == 1
    err = outcome.errors[0]
    assert err.row_number == 3
    assert err.row_data == rows[1]


def test_all_rows_are_scanned(db, world):
    rows = [_row(item_name="Nope"), _row(quantity="-3"), _row(destination_department_name="")]
    outcome = validate_rows(db, ctx_for(world["tokyo_user"]), rows)
    assert outcome.drafts == []
    assert [e.row_number for e in outcome.errors] == [2, 3, 4]
