from prometheus_client import Counter, Histogram


class BookingMetrics:
    """
    Seat hold / booking lifecycle metrics.

    Label cardinality is kept to show_id at most; seat codes never become labels.
    """

    def __init__(self) -> None:
        # ========== Hold Metrics ==========
        self.hold_requests = Counter(
            'seat_hold_requests_total',
            'Seat hold attempts by outcome',
            ['result'],  # granted / conflict
        )

        self.hold_seats = Histogram(
            'seat_hold_size_seats',
            'Number of seats per granted hold',
            buckets=[1, 2, 3, 4, 5, 6, 8, 10],
        )

        self.claim_duration = Histogram(
            'seat_claim_duration_seconds',
            'Ledger claim duration',
            ['backend'],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
        )

        # ========== Booking Lifecycle Metrics ==========
        self.confirmations = Counter(
            'booking_confirmations_total',
            'Payment confirmations by outcome',
            ['result'],  # confirmed / duplicate / HoldExpired / HoldNotOwned
        )

        self.cancellations = Counter(
            'booking_cancellations_total', 'Bookings cancelled', ['reason']
        )

        self.expirations = Counter(
            'booking_expirations_total',
            'Bookings expired',
            ['source'],  # sweeper / confirm
        )

        # ========== Sweeper Metrics ==========
        self.sweep_duration = Histogram(
            'expiry_sweep_duration_seconds',
            'Duration of one sweeper tick',
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
        )

        self.sweep_released_seats = Counter(
            'expiry_sweep_released_seats_total', 'Seats returned to FREE by the sweeper'
        )

        self.sweep_failures = Counter(
            'expiry_sweep_failures_total', 'Sweeper ticks that raised', ['error_type']
        )

    # ========== Helper Methods ==========

    def record_hold(self, *, result: str, seat_count: int = 0) -> None:
        self.hold_requests.labels(result=result).inc()
        if result == 'granted':
            self.hold_seats.observe(seat_count)

    def record_claim_duration(self, *, backend: str, duration: float) -> None:
        self.claim_duration.labels(backend=backend).observe(duration)

    def record_confirmation(self, *, result: str) -> None:
        self.confirmations.labels(result=result).inc()

    def record_cancellation(self, *, reason: str) -> None:
        self.cancellations.labels(reason=reason).inc()

    def record_expiration(self, *, source: str, count: int = 1) -> None:
        if count:
            self.expirations.labels(source=source).inc(count)

    def record_sweep(self, *, duration: float, released_seats: int) -> None:
        self.sweep_duration.observe(duration)
        if released_seats:
            self.sweep_released_seats.inc(released_seats)

    def record_sweep_failure(self, *, error_type: str) -> None:
        self.sweep_failures.labels(error_type=error_type).inc()


# Global metrics instance
metrics = BookingMetrics()
