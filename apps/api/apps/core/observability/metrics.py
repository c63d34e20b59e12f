"""
Metrics instrumentation (Prometheus).
"""

from prometheus_client import Counter, Histogram


class MetricsRegistry:
    """
    Central metrics registry for the donor registry.

    Provides typed access to all application metrics.
    """

    def __init__(self):
        """Initialize metrics registry."""
        self._setup_metrics()

    def _setup_metrics(self):
        """Setup all application metrics."""

        # ===================================================================
        # Application
        # ===================================================================
        self.exceptions_total = Counter(
            'exceptions_total',
            'Total exceptions',
            ['exception_type', 'location']
        )

        # ===================================================================
        # Donation ledger
        # ===================================================================
        self.donations_recorded_total = Counter(
            'donations_recorded_total',
            'Donation records inserted into the ledger',
            ['result']  # success, donor_not_found, inactive_donor, failure
        )

        self.donations_deleted_total = Counter(
            'donations_deleted_total',
            'Donation records removed from the ledger',
            ['result']  # success, not_found, failure
        )

        self.donor_summary_recalculations_total = Counter(
            'donor_summary_recalculations_total',
            'Donor summary recomputations from the ledger',
            ['trigger']  # record, delete, register, maintenance
        )

        self.ledger_transaction_duration_seconds = Histogram(
            'ledger_transaction_duration_seconds',
            'Duration of ledger mutation transactions',
            ['operation'],
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
        )

        self.ledger_transaction_rollback_total = Counter(
            'ledger_transaction_rollback_total',
            'Ledger transactions rolled back after a failure',
            ['operation']
        )

        # ===================================================================
        # Donors
        # ===================================================================
        self.donors_registered_total = Counter(
            'donors_registered_total',
            'Donor registrations',
            ['result']  # success, duplicate
        )

        self.donors_deactivated_total = Counter(
            'donors_deactivated_total',
            'Donor soft deletions'
        )


# Global metrics instance
metrics = MetricsRegistry()
