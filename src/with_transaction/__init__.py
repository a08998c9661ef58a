"""Transaction wrapping helpers for SQLAlchemy write operations.

Entity operations consult a per-model wrap policy and run either directly or
through a transaction manager's ``run_in_transaction`` primitive; the
``transaction()`` helper, the ``@transactional`` decorator and the fluent
``Transaction`` builder expose retries and outcome callbacks on top.
"""

from .builder import Transaction, TransactionBuilder
from .config import TransactionConfig, bootstrap, create_transaction_manager, load_config
from .db import SessionTransactionManager, is_transient_failure
from .exceptions import (
    PersistenceFailure,
    PolicyViolation,
    TransactionError,
    TransientFailure,
)
from .models import SoftDeleteMixin, TransactionalMixin
from .policy import (
    default_wrap_policy,
    should_wrap,
    with_forced_transaction,
    without_transaction,
    wrap_override,
)
from .registry import (
    TransactionManager,
    bind_transaction_manager,
    get_transaction_manager,
    unbind_transaction_manager,
)
from .runner import run, transaction, transactional

__all__ = [
    "PersistenceFailure",
    "PolicyViolation",
    "SessionTransactionManager",
    "SoftDeleteMixin",
    "Transaction",
    "TransactionBuilder",
    "TransactionConfig",
    "TransactionError",
    "TransactionManager",
    "TransactionalMixin",
    "TransientFailure",
    "bind_transaction_manager",
    "bootstrap",
    "create_transaction_manager",
    "default_wrap_policy",
    "get_transaction_manager",
    "is_transient_failure",
    "load_config",
    "run",
    "should_wrap",
    "transaction",
    "transactional",
    "unbind_transaction_manager",
    "with_forced_transaction",
    "without_transaction",
    "wrap_override",
]
