"""
Prometheus metrics: orders placed (by fuel type) and lifecycle transitions (by operation and outcome).
"""
from prometheus_client import Counter, generate_latest

orders_placed_total = Counter(
    "orders_placed_total",
    "Total orders placed by customers",
    ["fuel_type"],
)

# outcome: ok | not_found | forbidden | invalid_state
order_transitions_total = Counter(
    "order_transitions_total",
    "Total order lifecycle transition attempts",
    ["operation", "outcome"],
)


def get_metrics_content_type():
    return "text/plain; charset=utf-8; version=0.0.4"


def get_metrics_bytes():
    return generate_latest()
