"""
Per-record and per-batch write results.

A batch is partitioned once into RecordBundles, each identified by a
RecordKey. Applying a bundle yields a RecordOutcome; the orchestrator folds
outcomes into a BatchWriteResult which is returned to the caller and never
kept on the adapter between batches.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from catalog.writers.product_writer import ProductWriterResult
from core.exceptions import AdapterError

ERROR_MODE_TRIGGERED = "error-mode-triggered"
UNPROCESSED_PROFILE = "articles"


@dataclass(frozen=True)
class RecordKey:
    """Correlation id of a root record: its position in the batch and its order number"""
    index: int
    order_number: str

    def __str__(self) -> str:
        return f"#{self.index} ({self.order_number})"


@dataclass
class RecordBundle:
    """One root row and the rows of every other group that belong to it"""
    key: RecordKey
    article: Dict[str, Any]
    groups: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)

    def rows(self, group: str) -> List[Dict[str, Any]]:
        return self.groups.get(group, [])


@dataclass
class RecordOutcome:
    """Result of applying one bundle: written ids or the adapter error that rolled it back"""
    key: RecordKey
    result: Optional[ProductWriterResult] = None
    error: Optional[AdapterError] = None
    # group -> relation rows whose target did not resolve
    unresolved: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    main_number: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> Optional[str]:
        if self.error is None:
            return None
        return f"Record {self.key}: {self.error.message}"


@dataclass
class BatchWriteResult:
    outcomes: List[RecordOutcome] = field(default_factory=list)
    unprocessed: Dict[str, Dict[str, List[Dict[str, Any]]]] = field(default_factory=dict)

    @property
    def log_messages(self) -> List[str]:
        return [outcome.message for outcome in self.outcomes if not outcome.ok]

    @property
    def log_state(self) -> Optional[str]:
        return ERROR_MODE_TRIGGERED if self.records_failed else None

    @property
    def records_written(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.ok)

    @property
    def records_failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.ok)

    def add(self, outcome: RecordOutcome):
        self.outcomes.append(outcome)
        if outcome.ok and outcome.unresolved:
            self._add_unprocessed(outcome)

    def _add_unprocessed(self, outcome: RecordOutcome):
        """
        Queue unresolved relation rows for a follow-up batch.

        Each record gets a stand-in article row marked processed, so the
        replay only resolves the existing variant and writes the links.
        """
        groups = self.unprocessed.setdefault(UNPROCESSED_PROFILE, {})
        articles = groups.setdefault("article", [])
        parent_index = len(articles)
        articles.append({
            "orderNumber": outcome.main_number,
            "mainNumber": outcome.main_number,
            "processed": 1,
        })
        for group, rows in outcome.unresolved.items():
            target = groups.setdefault(group, [])
            for row in rows:
                target.append({**row, "parentIndexElement": parent_index})
