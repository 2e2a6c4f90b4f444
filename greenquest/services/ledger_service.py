"""Point ledger service."""

from greenquest import db
from greenquest.errors import InvalidTransactionType
from greenquest.models import Transaction, TransactionType, User


class LedgerService:
    """Append-only point ledger. The balance is always derived, never stored."""

    def record_transaction(
        self,
        user_id: int,
        transaction_type: TransactionType | str,
        amount: int,
        description: str,
    ) -> Transaction:
        """Append a ledger entry. Flushes; the caller owns the commit."""
        try:
            transaction_type = TransactionType(transaction_type)
        except ValueError:
            raise InvalidTransactionType(
                f"Unknown transaction type: {transaction_type}"
            )

        transaction = Transaction(
            user_id=user_id,
            type=transaction_type.value,
            amount=amount,
            description=description,
        )
        db.session.add(transaction)
        db.session.flush()
        return transaction

    def get_balance(self, user_id: int) -> int:
        """Fold every ledger entry of the user, clamped at zero."""
        transactions = Transaction.query.filter_by(user_id=user_id).all()
        balance = sum(t.signed_amount for t in transactions)
        return max(balance, 0)

    def get_points_earned(self, user_id: int) -> int:
        """Total of all earning entries, ignoring redemptions."""
        total = (
            db.session.query(db.func.coalesce(db.func.sum(Transaction.amount), 0))
            .filter(
                Transaction.user_id == user_id,
                Transaction.type.in_(
                    [
                        TransactionType.EARNED_REPORT.value,
                        TransactionType.EARNED_COLLECT.value,
                    ]
                ),
            )
            .scalar()
        )
        return int(total or 0)

    def count_redemptions(self, user_id: int) -> int:
        return Transaction.query.filter_by(
            user_id=user_id, type=TransactionType.REDEEMED.value
        ).count()

    def get_reward_transactions(self, user_id: int, limit: int = 10) -> list[dict]:
        """Most recent ledger entries of a user."""
        transactions = (
            Transaction.query.filter_by(user_id=user_id)
            .order_by(Transaction.date.desc(), Transaction.id.desc())
            .limit(limit)
            .all()
        )
        return [t.to_dict() for t in transactions]

    def get_all_transactions(self) -> list[dict]:
        """All ledger entries with the owner's name, newest first."""
        rows = (
            db.session.query(Transaction, User.name)
            .outerjoin(User, Transaction.user_id == User.id)
            .order_by(Transaction.date.desc(), Transaction.id.desc())
            .all()
        )
        result = []
        for transaction, user_name in rows:
            data = transaction.to_dict()
            data["user_name"] = user_name
            result.append(data)
        return result
