from prometheus_client import Counter, Histogram


class BookingMetrics:
    """
    Booking ledger metrics

    Outcome counters are labelled by the ledger error code (or `ok`), so an
    oversell storm or a code-space exhaustion shows up as a rate change.
    `invariant_violations` should be alerted on: any increment means stored
    seat counts disagree with confirmed bookings.
    """

    def __init__(self) -> None:
        self.ledger_operations = Counter(
            'eventbook_ledger_operations_total',
            'Ledger operations by outcome',
            ['operation', 'result'],
        )

        self.ledger_operation_duration = Histogram(
            'eventbook_ledger_operation_duration_seconds',
            'Ledger operation duration',
            ['operation'],
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
        )

        self.booking_code_collisions = Counter(
            'eventbook_booking_code_collisions_total',
            'Booking code unique-constraint collisions that triggered a retry',
        )

        self.tickets_booked = Counter(
            'eventbook_tickets_booked_total',
            'Tickets moved into confirmed bookings',
        )

        self.tickets_released = Counter(
            'eventbook_tickets_released_total',
            'Tickets returned to inventory by cancellations',
        )

        self.invariant_violations = Counter(
            'eventbook_invariant_violations_total',
            'Seat inventory consistency violations detected',
            ['operation'],
        )


metrics = BookingMetrics()
