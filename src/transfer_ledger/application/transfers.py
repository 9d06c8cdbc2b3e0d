from dataclasses import dataclass

import structlog

from transfer_ledger.application.ports import Querier
from transfer_ledger.domain.models import Account, TransferTxParams, TransferTxResult
from transfer_ledger.domain.ordering import lock_order


logger = structlog.get_logger()


@dataclass(frozen=True)
class TransferOperation:
    """
    Unit of work moving ``params.amount`` from one account to another.

    Writes, in order: the transfer row, the debit entry, the credit entry,
    then both balance deltas. The deltas are applied in ``lock_order`` so
    that every concurrent transfer locks account rows in the same sequence.
    A transfer from an account to itself is rejected with ``ValueError``
    before anything is written. Amount and ownership validation belong to
    the caller; storage constraints are the only other checks applied here.
    """

    params: TransferTxParams

    async def __call__(self, q: Querier) -> TransferTxResult:
        params = self.params
        log = logger.bind(
            from_account_id=params.from_account_id,
            to_account_id=params.to_account_id,
            amount=params.amount,
        )

        order = lock_order(params.from_account_id, params.to_account_id)

        transfer = await q.transfers.create(
            from_account_id=params.from_account_id,
            to_account_id=params.to_account_id,
            amount=params.amount,
        )
        from_entry = await q.entries.create(account_id=params.from_account_id, amount=-params.amount)
        to_entry = await q.entries.create(account_id=params.to_account_id, amount=params.amount)
        log.debug("transfer_recorded", step="1/2", transfer_id=transfer.id)

        from_account, to_account = await self._move_money(q, order)
        log.debug(
            "transfer_balances_updated",
            step="2/2",
            transfer_id=transfer.id,
            from_balance=from_account.balance,
            to_balance=to_account.balance,
        )

        return TransferTxResult(
            transfer=transfer,
            from_account=from_account,
            to_account=to_account,
            from_entry=from_entry,
            to_entry=to_entry,
        )

    async def _move_money(self, q: Querier, order: tuple[int, int]) -> tuple[Account, Account]:
        params = self.params
        deltas = {
            params.from_account_id: -params.amount,
            params.to_account_id: params.amount,
        }
        updated: dict[int, Account] = {}
        for account_id in order:
            updated[account_id] = await q.accounts.add_balance(account_id, deltas[account_id])
        return updated[params.from_account_id], updated[params.to_account_id]
