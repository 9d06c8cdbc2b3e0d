#!/usr/bin/env python3
"""Concurrent transfer load script.

Creates two accounts, fires transfers in both directions between them at
the same time and checks that every transfer terminated and the final
balances match the sum of the applied deltas. Useful as a smoke test of
deadlock freedom against a real PostgreSQL database.
"""
import argparse
import asyncio
import sys
from pathlib import Path
from uuid import uuid4

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import structlog

from transfer_ledger.bootstrap import build_store
from transfer_ledger.config import settings
from transfer_ledger.domain.models import CreateAccountParams, CreateUserParams, TransferTxParams
from transfer_ledger.logging import configure_logging_from_settings


logger = structlog.get_logger()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--transfers", type=int, default=50, help="transfers per direction")
    parser.add_argument("--amount", type=int, default=10, help="amount of every transfer")
    parser.add_argument("--opening-balance", type=int, default=1_000)
    return parser.parse_args()


async def main(args: argparse.Namespace) -> int:
    configure_logging_from_settings(settings)
    store = build_store(settings)

    try:
        suffix = uuid4().hex[:8]
        owners = []
        for name in ("alice", "bob"):
            user = await store.create_user_tx(
                CreateUserParams(
                    username=f"{name}_{suffix}",
                    hashed_password="not-a-real-hash",
                    full_name=name.title(),
                    email=f"{name}_{suffix}@example.com",
                )
            )
            owners.append(user.user.username)

        account1 = await store.create_account(
            CreateAccountParams(owner=owners[0], currency="USD", balance=args.opening_balance)
        )
        account2 = await store.create_account(
            CreateAccountParams(owner=owners[1], currency="USD", balance=args.opening_balance)
        )

        forward = TransferTxParams(account1.id, account2.id, args.amount)
        backward = TransferTxParams(account2.id, account1.id, args.amount)
        jobs = [store.transfer_tx(forward) for _ in range(args.transfers)]
        jobs += [store.transfer_tx(backward) for _ in range(args.transfers)]

        results = await asyncio.gather(*jobs, return_exceptions=True)
        failures = [r for r in results if isinstance(r, BaseException)]

        final1 = await store.get_account(account1.id)
        final2 = await store.get_account(account2.id)
        logger.info(
            "transfer_load_finished",
            transfers=len(results),
            failures=len(failures),
            account1_balance=final1.balance,
            account2_balance=final2.balance,
        )
        for failure in failures:
            logger.error("transfer_load_failure", error=str(failure), error_type=type(failure).__name__)

        balanced = final1.balance == final2.balance == args.opening_balance
        return 0 if balanced and not failures else 1
    finally:
        await store.close()


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main(parse_args())))
