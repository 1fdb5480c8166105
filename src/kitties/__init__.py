# Kitty registry package
from .models import Kitty, KittyId, AccountId, Balance, kitty_id_to_hex, kitty_id_from_hex
from .errors import (
    ErrorCategory, ErrorCode, ErrorResponse, KittyError,
    NotFoundError, DuplicateIdError, NotOwnerError, SelfTransferError,
    RegistryFullError, OwnerCapacityExceededError, NotForSaleError,
    PriceTooLowError, PaymentFailureError, InconsistentStateError,
    BadOriginError, InvalidArgumentError,
)
from .dna import DnaGenerator, EntropySource, generate_dna
from .registry import KittyRegistry
from .owner_index import OwnerIndex, BoundedIdList
from .state import KittyState, StateSnapshot
from .ledger import Ledger, LedgerError, InsufficientFundsError, ExistentialDepositError
from .events import Created, Transferred, PriceSet, Sold, KittyEvent, EventSink, PendingEvents
from .logger import EventLogger
from .operations import KittyOperations
from .transaction import transactional
from .runtime import Runtime, ExecutionContext, CallResult

__all__ = [
    "Kitty", "KittyId", "AccountId", "Balance", "kitty_id_to_hex", "kitty_id_from_hex",
    # Errors
    "ErrorCategory", "ErrorCode", "ErrorResponse", "KittyError",
    "NotFoundError", "DuplicateIdError", "NotOwnerError", "SelfTransferError",
    "RegistryFullError", "OwnerCapacityExceededError", "NotForSaleError",
    "PriceTooLowError", "PaymentFailureError", "InconsistentStateError",
    "BadOriginError", "InvalidArgumentError",
    # Id generation
    "DnaGenerator", "EntropySource", "generate_dna",
    # State
    "KittyRegistry", "OwnerIndex", "BoundedIdList", "KittyState", "StateSnapshot",
    # Currency
    "Ledger", "LedgerError", "InsufficientFundsError", "ExistentialDepositError",
    # Events
    "Created", "Transferred", "PriceSet", "Sold", "KittyEvent", "EventSink", "PendingEvents",
    "EventLogger",
    # Operations and host
    "KittyOperations", "transactional",
    "Runtime", "ExecutionContext", "CallResult",
]
