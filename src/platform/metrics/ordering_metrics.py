from prometheus_client import Counter, Gauge, Histogram


class OrderingMetrics:
    """
    Cart & ordering engine metrics

    Scraped from GET /metrics. Labels stay low-cardinality (operation names and error
    kinds, never client or event ids).
    """

    def __init__(self):
        # ========== Engine Operations ==========
        self.cart_operations = Counter(
            'cart_operations_total',
            'Cart engine operations by outcome',
            ['operation', 'result'],  # result: ok or an error kind
        )

        self.cart_operation_duration = Histogram(
            'cart_operation_duration_seconds',
            'Cart engine operation duration',
            ['operation'],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
        )

        self.tickets_reserved = Counter(
            'tickets_reserved_total', 'Tickets taken from inventory into carts'
        )
        self.tickets_released = Counter(
            'tickets_released_total',
            'Tickets given back to inventory',
            ['reason'],  # reason: cancel, expired
        )

        # ========== Payment ==========
        self.settlements = Counter(
            'payment_settlements_total',
            'Payment settlements by outcome',
            ['outcome', 'duplicate'],
        )

        self.pending_carts_expired = Counter(
            'pending_carts_expired_total', 'PENDING_PAYMENT carts expired by the reaper'
        )

        self.reaper_last_run = Gauge(
            'payment_reaper_last_run_timestamp_seconds', 'Unix time of the last reaper pass'
        )

    # ========== Helper Methods ==========

    def record_operation(self, *, operation: str, result: str, duration: float):
        self.cart_operations.labels(operation=operation, result=result).inc()
        self.cart_operation_duration.labels(operation=operation).observe(duration)

    def record_settlement(self, *, outcome: str, duplicate: bool):
        self.settlements.labels(outcome=outcome, duplicate=str(duplicate).lower()).inc()

    def record_reaper_pass(self, *, expired: int):
        self.pending_carts_expired.inc(expired)
        self.reaper_last_run.set_to_current_time()


# Global metrics instance
metrics = OrderingMetrics()
