from prometheus_client import Counter, Histogram


class TicketingMetrics:
    """
    Order lifecycle and settlement metrics

    Exposed on /metrics. Labels stay low-cardinality (no order or user ids).
    """

    def __init__(self) -> None:
        # ========== Orders ==========
        self.orders_created = Counter(
            'ticketing_orders_created_total',
            'Orders created',
            ['concert_id'],
        )

        self.order_transitions = Counter(
            'ticketing_order_transitions_total',
            'Order status transitions applied',
            ['from_status', 'to_status', 'source'],  # source: http/webhook/sweep
        )

        # ========== Payment gateway ==========
        self.gateway_requests = Counter(
            'ticketing_gateway_requests_total',
            'Outbound payment gateway calls',
            ['operation', 'result'],  # result: ok/rejected/unavailable
        )

        self.gateway_request_duration = Histogram(
            'ticketing_gateway_request_duration_seconds',
            'Outbound payment gateway call duration',
            ['operation'],
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
        )

        # ========== Settlement ==========
        self.settlement_notifications = Counter(
            'ticketing_settlement_notifications_total',
            'Settlement reports processed (webhook and status sync)',
            ['transaction_status', 'outcome'],
        )

        self.invalid_signatures = Counter(
            'ticketing_settlement_invalid_signatures_total',
            'Webhook notifications rejected for a bad signature',
        )

        # ========== Tickets ==========
        self.tickets_issued = Counter(
            'ticketing_tickets_issued_total',
            'Tickets issued',
        )

        self.issuance_failures = Counter(
            'ticketing_issuance_failures_total',
            'Paid orders that could not be issued tickets',
            ['reason'],
        )

        self.ticket_scans = Counter(
            'ticketing_ticket_scans_total',
            'Ticket validator operations',
            ['operation', 'result'],
        )


metrics = TicketingMetrics()
