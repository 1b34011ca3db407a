"""Build conjunctive transaction filters from search requests."""

from sqlalchemy.sql import ColumnElement

from txnagg.core.exceptions import ValidationFailure
from txnagg.models.transaction import Transaction
from txnagg.schemas.search import TransactionSearch


def build_transaction_filter(search: TransactionSearch) -> list[ColumnElement[bool]]:
    """Translate a search request into a list of conditions to AND together.

    Soft-delete scoping is left to the repository call.

    Raises:
        ValidationFailure: If the request sets no search field
    """
    if not search.has_criteria():
        raise ValidationFailure(
            "QUERY_001", message="At least one search criterion is required"
        )

    conditions: list[ColumnElement[bool]] = []

    if search.id is not None:
        conditions.append(Transaction.id == search.id)

    if search.customer_id is not None:
        conditions.append(Transaction.customer_id == search.customer_id)

    if search.customer_name is not None:
        conditions.append(Transaction.customer_name.icontains(search.customer_name, autoescape=True))

    if search.min_amount is not None:
        conditions.append(Transaction.amount >= search.min_amount)

    if search.max_amount is not None:
        conditions.append(Transaction.amount <= search.max_amount)

    if search.start_date is not None:
        conditions.append(Transaction.transaction_date >= search.start_date)

    if search.end_date is not None:
        conditions.append(Transaction.transaction_date <= search.end_date)

    if search.description is not None:
        conditions.append(Transaction.description.icontains(search.description, autoescape=True))

    if search.category is not None:
        conditions.append(Transaction.category == search.category)

    if search.source is not None:
        conditions.append(Transaction.source == search.source)

    if search.currency is not None:
        conditions.append(Transaction.currency == search.currency)

    if search.type is not None:
        conditions.append(Transaction.type == search.type)

    return conditions
