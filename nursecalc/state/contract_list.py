# nursecalc/state/contract_list.py
from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from nursecalc.valuation.contracts import ContractInput, new_contract, parse_flag


class ContractList:
    """
    The contracts a user is evaluating in one session, in display order.
    Field values are kept as the user typed them; parsing happens in the engine.
    There is always at least one contract.
    """
    def __init__(self, contracts: Optional[List[ContractInput]] = None):
        self._items: Dict[str, ContractInput] = {}
        self._comparison: Dict[str, None] = {}   # ordered set
        for c in contracts or []:
            self._items[c.id] = c
        if not self._items:
            self.add()

    def __iter__(self) -> Iterator[ContractInput]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, contract_id: str) -> bool:
        return contract_id in self._items

    def ids(self) -> List[str]:
        return list(self._items.keys())

    def add(self, contract: Optional[ContractInput] = None) -> ContractInput:
        c = contract or new_contract()
        if c.id in self._items:
            raise ValueError(f"Duplicate contract id: {c.id}")
        self._items[c.id] = c
        return c

    def get(self, contract_id: str) -> ContractInput:
        try:
            return self._items[contract_id]
        except KeyError:
            raise KeyError(f"Unknown contract id: {contract_id}") from None

    def update_field(self, contract_id: str, name: str, value: Any) -> ContractInput:
        c = self.get(contract_id)
        field_name = ContractInput.resolve_field(name)
        if not field_name or field_name == "id":
            raise ValueError(f"Unknown contract field: {name}")
        if field_name == "use_current_gas_price":
            value = parse_flag(value)
        elif field_name == "planned_time_off":
            value = list(value or [])
        else:
            value = "" if value is None else str(value)
        setattr(c, field_name, value)
        return c

    def remove(self, contract_id: str) -> bool:
        """Drop a contract. The last remaining contract cannot be removed."""
        if contract_id not in self._items or len(self._items) <= 1:
            return False
        del self._items[contract_id]
        self._comparison.pop(contract_id, None)
        return True

    # ---- comparison selection ----
    def toggle_comparison(self, contract_id: str) -> bool:
        """Flip membership; returns True when the contract is now selected."""
        self.get(contract_id)
        if contract_id in self._comparison:
            del self._comparison[contract_id]
            return False
        self._comparison[contract_id] = None
        return True

    def comparison_ids(self) -> List[str]:
        return list(self._comparison.keys())

    def comparison_contracts(self) -> List[ContractInput]:
        """Selected contracts in display order."""
        return [c for c in self._items.values() if c.id in self._comparison]
