import logging
from decimal import Decimal, InvalidOperation

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import (
    AuthorizationError,
    ConflictError,
    InfrastructureError,
    NotFoundError,
    ValidationError,
)
from ..extensions import db
from ..models import STATUS_PENDING, STATUS_REQUESTED, BillItem, MonthlyBill, User

logger = logging.getLogger(__name__)

MIN_YEAR = 2000
MAX_YEAR = 2100
MAX_ITEM_NAME_LENGTH = 255
MAX_AMOUNT = Decimal("99999999.99")
CENTS = Decimal("0.01")


def _as_int(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def parse_amount(value):
    """Parse a JSON amount into a 2-place Decimal; None when it is not a representable number."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        amount = Decimal(str(value).strip())
        if not amount.is_finite():
            return None
        # too many digits for the decimal context also lands here
        return amount.quantize(CENTS)
    except (InvalidOperation, ValueError):
        return None


class BillService:
    """Monthly bill workflow: pending -> requested -> paid.

    Every method takes the id of the acting user. Bills the user is not a
    party to are reported as missing.
    """

    # -------- queries --------
    def list_bills(self, user_id):
        return (
            MonthlyBill.query
            .filter(or_(MonthlyBill.requester_id == user_id, MonthlyBill.payer_id == user_id))
            .order_by(MonthlyBill.year.desc(), MonthlyBill.month.desc())
            .all()
        )

    def get_bill(self, user_id, year, month):
        return (
            MonthlyBill.query
            .filter(MonthlyBill.year == year, MonthlyBill.month == month)
            .filter(or_(MonthlyBill.requester_id == user_id, MonthlyBill.payer_id == user_id))
            .first()
        )

    # -------- commands --------
    def create_bill(self, user_id, year, month, payer_id):
        year, month, payer_id = _as_int(year), _as_int(month), _as_int(payer_id)
        if year is None or month is None or not MIN_YEAR <= year <= MAX_YEAR or not 1 <= month <= 12:
            raise ValidationError("invalid_period", code="INVALID_PERIOD")
        if payer_id is None or db.session.get(User, payer_id) is None:
            raise ValidationError("payer_not_found", code="PAYER_NOT_FOUND")
        if payer_id == user_id:
            raise ValidationError("payer_is_requester", code="PAYER_IS_REQUESTER")

        if MonthlyBill.query.filter_by(year=year, month=month).first() is not None:
            raise ConflictError("bill_exists", code="BILL_EXISTS")

        bill = MonthlyBill(
            year=year,
            month=month,
            requester_id=user_id,
            payer_id=payer_id,
            status=STATUS_PENDING,
        )
        db.session.add(bill)
        try:
            db.session.commit()
        except IntegrityError as e:
            # unique (year, month) constraint: a concurrent creator got there first
            db.session.rollback()
            raise ConflictError("bill_exists", code="BILL_EXISTS") from e
        except SQLAlchemyError as e:
            db.session.rollback()
            raise InfrastructureError("database_error", code="BILL_CREATE_FAILED") from e

        logger.info("Bill %s created for %04d-%02d by user %s (payer %s)", bill.id, year, month, user_id, payer_id)
        return bill

    def update_items(self, user_id, bill_id, items):
        bill = self._get_for_party(user_id, bill_id)
        self._require_requester(bill, user_id)
        self._require_status(bill, STATUS_PENDING, "bill_not_pending")

        new_items = self._build_items(items)
        # delete-orphan cascade removes the previous set in the same flush
        bill.items = new_items
        self._commit("BILL_ITEMS_UPDATE_FAILED")
        logger.info("Bill %s items replaced by user %s (%d items)", bill.id, user_id, len(new_items))
        return bill

    def request_bill(self, user_id, bill_id):
        bill = self._get_for_party(user_id, bill_id)
        self._require_requester(bill, user_id)
        self._require_status(bill, STATUS_PENDING, "bill_not_pending")

        bill.mark_requested()
        self._commit("BILL_UPDATE_FAILED")
        logger.info("Bill %s requested by user %s", bill.id, user_id)
        return bill

    def pay_bill(self, user_id, bill_id):
        bill = self._get_for_party(user_id, bill_id)
        if bill.payer_id != user_id:
            raise AuthorizationError("not_bill_payer", code="NOT_BILL_PAYER")
        self._require_status(bill, STATUS_REQUESTED, "bill_not_requested")

        bill.mark_paid()
        self._commit("BILL_UPDATE_FAILED")
        logger.info("Bill %s paid by user %s", bill.id, user_id)
        return bill

    def delete_bill(self, user_id, bill_id):
        bill = self._get_for_party(user_id, bill_id)
        self._require_requester(bill, user_id)
        self._require_status(bill, STATUS_PENDING, "bill_not_pending")

        db.session.delete(bill)
        self._commit("BILL_DELETE_FAILED")
        logger.info("Bill %s deleted by user %s", bill_id, user_id)

    # -------- helpers --------
    def _get_for_party(self, user_id, bill_id):
        bill = db.session.get(MonthlyBill, bill_id)
        if bill is None or user_id not in (bill.requester_id, bill.payer_id):
            raise NotFoundError("bill_not_found", code="BILL_NOT_FOUND")
        return bill

    @staticmethod
    def _require_requester(bill, user_id):
        if bill.requester_id != user_id:
            raise AuthorizationError("not_bill_requester", code="NOT_BILL_REQUESTER")

    @staticmethod
    def _require_status(bill, status, message_key):
        if bill.status != status:
            raise AuthorizationError(
                message_key,
                code="INVALID_BILL_STATUS",
                details={"status": bill.status, "required_status": status},
            )

    @staticmethod
    def _build_items(items):
        if not isinstance(items, list):
            raise ValidationError("invalid_item", code="INVALID_ITEMS")

        built = []
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                raise ValidationError("invalid_item", code="INVALID_ITEMS", details={"index": index})

            name = item.get("item_name") or ""
            if not isinstance(name, str) or len(name.strip()) > MAX_ITEM_NAME_LENGTH:
                raise ValidationError("invalid_item", code="INVALID_ITEMS", details={"index": index})
            # blank form rows are dropped, not rejected
            if not name.strip():
                continue

            amount = parse_amount(item.get("amount", 0))
            if amount is None or amount > MAX_AMOUNT:
                raise ValidationError("invalid_item", code="INVALID_ITEMS", details={"index": index})
            if amount <= 0:
                continue
            built.append(BillItem(item_name=name.strip(), amount=amount))
        return built

    @staticmethod
    def _commit(error_code):
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise InfrastructureError("database_error", code=error_code) from e
