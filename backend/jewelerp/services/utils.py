"""
Shared helpers for document numbering and money arithmetic
"""
from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy.orm import Session

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def money(value) -> Decimal:
    """Round to paise, half up"""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value) -> Decimal:
    """Normalise driver results (None, float, int) to Decimal"""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def next_document_number(db: Session, model, number_field: str, organization_id: int, prefix: str) -> str:
    """Generate the next PREFIX-00001 style number for an organization"""
    column = getattr(model, number_field)
    last = db.query(model).filter(
        model.organization_id == organization_id,
        column.like(f"{prefix}-%")
    ).order_by(model.id.desc()).first()

    if last:
        try:
            num = int(getattr(last, number_field).replace(f"{prefix}-", ""))
            return f"{prefix}-{num + 1:05d}"
        except ValueError:
            pass

    return f"{prefix}-00001"
