from __future__ import annotations

from flask import Blueprint, abort, jsonify, request

from stockroom.errors import ValidationError
from stockroom.records import TransactionType, item_to_dict, transaction_to_dict
from stockroom.services import metrics
from stockroom.services.inventory_store import MutationResult, get_store
from stockroom.utils.csv_export import (
    INVENTORY_EXPORT_COLUMNS,
    INVENTORY_EXPORT_FILENAME,
    export_rows_to_csv,
)

bp = Blueprint("inventory", __name__, url_prefix="/inventory")


def _item_payload(item) -> dict:
    payload = item_to_dict(item)
    payload["is_low_stock"] = item.is_low_stock
    return payload


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def _respond(payload: dict, status: int = 200):
    store = get_store()
    if not store.storage_available:
        payload["persistence_warning"] = (
            "Changes are kept in memory only until storage is available again."
        )
    return jsonify(payload), status


def _require_found(result: MutationResult, item_id: str) -> MutationResult:
    if not result.ok:
        abort(404, description=f"Item {item_id} not found")
    return result


@bp.errorhandler(404)
def handle_not_found(error):
    return jsonify({"error": error.description}), 404


@bp.get("/items")
def list_items():
    store = get_store()
    items = metrics.filter_items(
        store.items,
        search=request.args.get("search"),
        category=request.args.get("category") or None,
    )
    categories = sorted({item.category for item in store.items if item.category})
    return jsonify(
        {
            "items": [_item_payload(item) for item in items],
            "categories": categories,
        }
    )


@bp.post("/items")
def add_item():
    result = get_store().add_item(_json_body())
    return _respond({"item": _item_payload(result.record)}, 201)


@bp.get("/items/<item_id>")
def get_item(item_id: str):
    item = get_store().get_item(item_id)
    if item is None:
        abort(404, description=f"Item {item_id} not found")
    return jsonify({"item": _item_payload(item)})


@bp.patch("/items/<item_id>")
def update_item(item_id: str):
    result = _require_found(get_store().update_item(item_id, _json_body()), item_id)
    return _respond({"item": _item_payload(result.record)})


@bp.delete("/items/<item_id>")
def remove_item(item_id: str):
    result = _require_found(get_store().remove_item(item_id), item_id)
    return _respond({"removed": result.record.id})


@bp.post("/items/<item_id>/stock")
def update_stock(item_id: str):
    data = _json_body()
    result = get_store().update_stock(
        item_id,
        data.get("quantity"),
        data.get("type", TransactionType.ADD.value),
        data.get("unit_price"),
        data.get("customer"),
    )
    _require_found(result, item_id)
    return _respond(
        {
            "item": _item_payload(result.record),
            "transaction": transaction_to_dict(result.transaction),
            "clamped": result.clamped,
        },
        201,
    )


@bp.get("/items/export")
def export_items():
    return export_rows_to_csv(
        get_store().items,
        INVENTORY_EXPORT_COLUMNS,
        INVENTORY_EXPORT_FILENAME,
    )


@bp.post("/sales")
def record_sale():
    data = _json_body()
    item_id = str(data.get("item_id") or "")
    result = get_store().record_sale(
        item_id,
        data.get("quantity"),
        data.get("unit_price"),
        data.get("customer"),
    )
    _require_found(result, item_id)
    return _respond(
        {
            "item": _item_payload(result.record),
            "transaction": transaction_to_dict(result.transaction),
            "clamped": result.clamped,
        },
        201,
    )


@bp.get("/transactions")
def list_transactions():
    transactions = get_store().transactions
    type_filter = request.args.get("type")
    if type_filter:
        try:
            wanted = TransactionType.parse(type_filter)
        except ValueError as exc:
            raise ValidationError(str(exc), "type")
        transactions = [entry for entry in transactions if entry.type is wanted]
    return jsonify({"transactions": [transaction_to_dict(entry) for entry in transactions]})


@bp.post("/transactions")
def add_transaction():
    result = get_store().add_transaction(_json_body())
    return _respond({"transaction": transaction_to_dict(result.record)}, 201)


@bp.get("/suppliers")
def list_suppliers():
    return jsonify({"suppliers": list(get_store().suppliers)})


@bp.post("/suppliers")
def add_supplier():
    result = get_store().add_supplier(_json_body().get("name"))
    return _respond(
        {"supplier": result.record, "created": result.changed},
        201 if result.changed else 200,
    )
