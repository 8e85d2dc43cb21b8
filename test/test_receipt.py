from bistro.models import Order, PaymentMethod, PaymentStatus
from bistro.receipt_pdf import payment_summary


def _order(payment_status: PaymentStatus, payment_method: PaymentMethod | None = None) -> Order:
    return Order(
        order_number=1000,
        staff_id="staff",
        subtotal_cents=1650,
        tax_cents=136,
        service_charge_cents=83,
        total_cents=1869,
        payment_status=payment_status,
        payment_method=payment_method,
    )


def test_pending_order_with_method_is_not_shown_as_paid():
    summary = payment_summary(_order(PaymentStatus.pending, PaymentMethod.cash))

    assert summary == "Payment pending (cash)"
    assert "Paid" not in summary


def test_pending_order_without_method():
    assert payment_summary(_order(PaymentStatus.pending)) == "Payment pending"


def test_paid_order_shows_method():
    assert payment_summary(_order(PaymentStatus.paid, PaymentMethod.gift_card)) == "Paid by gift card"


def test_refunded_order():
    assert payment_summary(_order(PaymentStatus.refunded, PaymentMethod.card)) == "Payment refunded (card)"
