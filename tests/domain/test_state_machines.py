"""Tests for domain state machines."""

import pytest

from app.domain import OrderStatus, PaymentStatus


class TestOrderStatus:
    """Tests for OrderStatus state machine."""

    def test_pending_can_be_confirmed_or_cancelled(self) -> None:
        """PENDING moves to CONFIRMED or CANCELLED."""
        assert OrderStatus.PENDING.can_transition_to(OrderStatus.CONFIRMED)
        assert OrderStatus.PENDING.can_transition_to(OrderStatus.CANCELLED)

    def test_pending_cannot_skip_to_shipped(self) -> None:
        """PENDING cannot jump straight to SHIPPED."""
        assert not OrderStatus.PENDING.can_transition_to(OrderStatus.SHIPPED)

    def test_regular_lifecycle(self) -> None:
        """Each step of the fulfilment path is allowed."""
        path = [
            OrderStatus.PENDING,
            OrderStatus.CONFIRMED,
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
            OrderStatus.RETURNED,
        ]
        for current, target in zip(path, path[1:]):
            assert current.can_transition_to(target), f"{current} -> {target}"

    def test_processing_cannot_be_cancelled(self) -> None:
        """Once processing started the order is no longer cancellable."""
        assert not OrderStatus.PROCESSING.can_transition_to(OrderStatus.CANCELLED)
        assert not OrderStatus.PROCESSING.can_be_cancelled()

    @pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.CONFIRMED])
    def test_cancellable_statuses(self, status: OrderStatus) -> None:
        """PENDING and CONFIRMED orders can be cancelled."""
        assert status.can_be_cancelled()

    @pytest.mark.parametrize(
        "status",
        [
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
            OrderStatus.RETURNED,
        ],
    )
    def test_non_cancellable_statuses(self, status: OrderStatus) -> None:
        """Every other status refuses cancellation."""
        assert not status.can_be_cancelled()

    def test_cancelled_and_returned_are_terminal(self) -> None:
        """CANCELLED and RETURNED have no successors."""
        assert OrderStatus.CANCELLED.is_terminal()
        assert OrderStatus.RETURNED.is_terminal()
        assert OrderStatus.CANCELLED.allowed_transitions() == []

    def test_allowed_transitions_sorted(self) -> None:
        """Successors are listed in a stable order."""
        assert OrderStatus.PENDING.allowed_transitions() == [
            OrderStatus.CANCELLED,
            OrderStatus.CONFIRMED,
        ]

    def test_values_are_lowercase(self) -> None:
        """Status values are the lowercase wire names."""
        assert OrderStatus("shipped") is OrderStatus.SHIPPED


class TestPaymentStatus:
    """Tests for PaymentStatus state machine."""

    def test_pending_can_be_paid_or_fail(self) -> None:
        """PENDING moves to PAID or FAILED."""
        assert PaymentStatus.PENDING.can_transition_to(PaymentStatus.PAID)
        assert PaymentStatus.PENDING.can_transition_to(PaymentStatus.FAILED)

    def test_paid_can_be_refunded(self) -> None:
        """PAID can be fully or partially refunded."""
        assert PaymentStatus.PAID.can_transition_to(PaymentStatus.REFUNDED)
        assert PaymentStatus.PAID.can_transition_to(PaymentStatus.PARTIALLY_REFUNDED)

    def test_partial_refund_can_complete(self) -> None:
        """A partial refund can become a full refund."""
        assert PaymentStatus.PARTIALLY_REFUNDED.can_transition_to(PaymentStatus.REFUNDED)

    def test_failed_is_terminal(self) -> None:
        """FAILED has no successors."""
        assert PaymentStatus.FAILED.is_terminal()
        assert not PaymentStatus.FAILED.can_transition_to(PaymentStatus.PAID)
