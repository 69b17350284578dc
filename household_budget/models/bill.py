from decimal import Decimal

from ..extensions import db
from .user import utcnow

STATUS_PENDING = "pending"
STATUS_REQUESTED = "requested"
STATUS_PAID = "paid"
BILL_STATUSES = (STATUS_PENDING, STATUS_REQUESTED, STATUS_PAID)


class MonthlyBill(db.Model):
    __tablename__ = "monthly_bills"
    __table_args__ = (
        db.UniqueConstraint("year", "month", name="uq_monthly_bills_period"),
    )

    id = db.Column(db.Integer, primary_key=True)
    year = db.Column(db.Integer, nullable=False)
    month = db.Column(db.Integer, nullable=False)

    requester_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    payer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # 'pending' -> 'requested' -> 'paid'
    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING, index=True)
    request_date = db.Column(db.DateTime, nullable=True)
    payment_date = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    requester = db.relationship("User", foreign_keys=[requester_id], lazy="joined")
    payer = db.relationship("User", foreign_keys=[payer_id], lazy="joined")
    items = db.relationship(
        "BillItem",
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="BillItem.id",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<MonthlyBill {self.id}: {self.year}-{self.month:02d} {self.status}>"

    @property
    def total_amount(self):
        return sum((item.amount for item in self.items), Decimal("0"))

    def mark_requested(self):
        self.status = STATUS_REQUESTED
        self.request_date = utcnow()

    def mark_paid(self):
        self.status = STATUS_PAID
        self.payment_date = utcnow()

    def serialize(self):
        return {
            "id": self.id,
            "year": self.year,
            "month": self.month,
            "requester_id": self.requester_id,
            "payer_id": self.payer_id,
            "status": self.status,
            "request_date": self.request_date.isoformat() if self.request_date else None,
            "payment_date": self.payment_date.isoformat() if self.payment_date else None,
            "requester": self.requester.serialize() if self.requester else None,
            "payer": self.payer.serialize() if self.payer else None,
            "items": [item.serialize() for item in self.items],
            "total_amount": float(self.total_amount),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class BillItem(db.Model):
    __tablename__ = "bill_items"

    id = db.Column(db.Integer, primary_key=True)
    bill_id = db.Column(
        db.Integer, db.ForeignKey("monthly_bills.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_name = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    bill = db.relationship("MonthlyBill", back_populates="items")

    def __repr__(self):
        return f"<BillItem {self.id}: {self.item_name} {self.amount}>"

    def serialize(self):
        return {
            "id": self.id,
            "bill_id": self.bill_id,
            "item_name": self.item_name,
            "amount": float(self.amount),
        }
