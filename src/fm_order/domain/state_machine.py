"""Order status transitions.

    created ──► in_progress ◄──► revision
       │            │               │
       ├────────────┴───────────────┴──► completed   (terminal)
       ├──► cancelled (from created / in_progress)   (terminal)
       └──► dispute   (from any non-terminal state)

An order in dispute has no outgoing party transition; only dispute
resolution could move it, and resolution is not implemented.
"""

from src.fm_common.enums import OrderStatus

TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.COMPLETED, OrderStatus.CANCELLED}
)

_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.CREATED: frozenset(
        {
            OrderStatus.IN_PROGRESS,
            OrderStatus.COMPLETED,
            OrderStatus.CANCELLED,
            OrderStatus.DISPUTE,
        }
    ),
    OrderStatus.IN_PROGRESS: frozenset(
        {
            OrderStatus.REVISION,
            OrderStatus.COMPLETED,
            OrderStatus.CANCELLED,
            OrderStatus.DISPUTE,
        }
    ),
    OrderStatus.REVISION: frozenset(
        {OrderStatus.IN_PROGRESS, OrderStatus.COMPLETED, OrderStatus.DISPUTE}
    ),
    OrderStatus.DISPUTE: frozenset(),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    """Same-state moves are never allowed, so completion cannot release twice."""
    try:
        src, dst = OrderStatus(current), OrderStatus(target)
    except ValueError:
        return False
    return dst in _TRANSITIONS[src]


def is_terminal(status: str) -> bool:
    return OrderStatus(status) in TERMINAL_STATUSES


def allowed_targets(current: str) -> frozenset[OrderStatus]:
    return _TRANSITIONS[OrderStatus(current)]
