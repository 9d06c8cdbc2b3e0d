"""Lock ordering for balance updates.

Two transfers touching the same pair of accounts in opposite directions
(A->B and B->A) must lock the account rows in the same physical order, or
each can end up holding one row lock while waiting on the other. Every
transfer updates the account with the smaller id first, regardless of which
side is the source.
"""


def lock_order(account_id_a: int, account_id_b: int) -> tuple[int, int]:
    if account_id_a == account_id_b:
        raise ValueError(f"Cannot order an account against itself: {account_id_a}")
    if account_id_a < account_id_b:
        return account_id_a, account_id_b
    return account_id_b, account_id_a
