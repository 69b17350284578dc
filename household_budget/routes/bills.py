from flask import Blueprint, g, jsonify, request

from ..errors import ValidationError
from ..messages import localize
from ..security.auth import login_required
from ..security.input_validation import validate_input_data
from ..security.rate_limit import CREATE, rate_limit
from ..services import get_bill_service

bp = Blueprint("bills", __name__, url_prefix="/api/bills")


@bp.get("")
@login_required
def list_bills():
    """Bills where the current user is requester or payer, newest period first."""
    bills = get_bill_service().list_bills(g.user_id)
    return jsonify({"bills": [bill.serialize() for bill in bills]}), 200


@bp.get("/<int:year>/<int:month>")
@login_required
def get_bill(year, month):
    bill = get_bill_service().get_bill(g.user_id, year, month)
    if bill is None:
        return jsonify({"bill": None}), 200
    return jsonify(bill.serialize()), 200


@bp.post("")
@login_required
@rate_limit(CREATE)
@validate_input_data(required_fields=["year", "month", "payer_id"])
def create_bill():
    data = request.get_json()
    bill = get_bill_service().create_bill(g.user_id, data["year"], data["month"], data["payer_id"])
    return jsonify(bill.serialize()), 201


@bp.put("/<int:bill_id>/items")
@login_required
@rate_limit(CREATE)
@validate_input_data(required_fields=[], optional_fields=["items"])
def update_items(bill_id):
    data = request.get_json()
    items = data.get("items", [])
    if not isinstance(items, list):
        raise ValidationError("invalid_item", code="INVALID_ITEMS")
    bill = get_bill_service().update_items(g.user_id, bill_id, items)
    return jsonify(bill.serialize()), 200


@bp.put("/<int:bill_id>/request")
@login_required
@rate_limit(CREATE)
def request_bill(bill_id):
    bill = get_bill_service().request_bill(g.user_id, bill_id)
    return jsonify({"message": localize("bill_requested"), "bill": bill.serialize()}), 200


@bp.put("/<int:bill_id>/payment")
@login_required
@rate_limit(CREATE)
def pay_bill(bill_id):
    bill = get_bill_service().pay_bill(g.user_id, bill_id)
    return jsonify({"message": localize("bill_paid"), "bill": bill.serialize()}), 200


@bp.delete("/<int:bill_id>")
@login_required
@rate_limit(CREATE)
def delete_bill(bill_id):
    get_bill_service().delete_bill(g.user_id, bill_id)
    return jsonify({"message": localize("bill_deleted")}), 200
