"""
외부 금고 원장

금 입출고 거래의 source of truth.

사용 예시:
```python
from core.ledger import LedgerStore, NewVaultTransaction

ledger = LedgerStore(db)

async with db.transaction():
    txn = await ledger.insert(
        NewVaultTransaction.create("deposit", "10.5", 22, recorded_by_name="admin")
    )
```
"""

from core.ledger.store import LedgerStore
from core.ledger.types import (
    NewVaultTransaction,
    VaultTransaction,
    parse_amount,
    parse_karat,
    signed_delta,
)

__all__ = [
    "LedgerStore",
    "NewVaultTransaction",
    "VaultTransaction",
    "parse_amount",
    "parse_karat",
    "signed_delta",
]
