from dataclasses import dataclass, field
from datetime import UTC, datetime


USD = "USD"
EUR = "EUR"
CAD = "CAD"

SUPPORTED_CURRENCIES = frozenset({USD, EUR, CAD})


def is_supported_currency(currency: str) -> bool:
    return currency in SUPPORTED_CURRENCIES


@dataclass
class User:
    username: str
    hashed_password: str
    full_name: str
    email: str
    password_changed_at: datetime = field(default_factory=lambda: datetime(1, 1, 1, tzinfo=UTC))
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class Account:
    id: int
    owner: str
    balance: int
    currency: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class Entry:
    """One signed balance change on one account. Never updated once written."""

    id: int
    account_id: int
    amount: int
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class Transfer:
    """A request that moved ``amount`` between two accounts. Never updated once written."""

    id: int
    from_account_id: int
    to_account_id: int
    amount: int
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class CreateUserParams:
    username: str
    hashed_password: str
    full_name: str
    email: str


@dataclass(frozen=True)
class CreateAccountParams:
    owner: str
    currency: str
    balance: int = 0

    def __post_init__(self) -> None:
        if not is_supported_currency(self.currency):
            raise ValueError(f"Unsupported currency: {self.currency}")


@dataclass(frozen=True)
class TransferTxParams:
    from_account_id: int
    to_account_id: int
    amount: int


@dataclass
class TransferTxResult:
    transfer: Transfer
    from_account: Account
    to_account: Account
    from_entry: Entry
    to_entry: Entry


@dataclass
class CreateUserTxResult:
    user: User
