"""Read Receipts - append-only record that a user read a message.

Invariants:
    - Recording a read never touches the Message or the User: receipts hold
      their Identifiers only
    - Receipts are never updated or removed; a second read by the same user is a
      second receipt
    - receipts() reads back in append order
"""

from dataclasses import dataclass

from domainguard.core.append_only import AppendOnlyLog, AppendOnlyRecord, RecordSequence
from domainguard.core.clock import Clock
from domainguard.core.domain_types import IdGenerator, Identifier, random_identifier


@dataclass(frozen=True)
class MessageRead:
    message_id: Identifier
    reader_id: Identifier


ReadReceipt = AppendOnlyRecord[MessageRead]


class ReadReceiptLog:
    """Behavior-named facade over an AppendOnlyLog of MessageRead events."""

    def __init__(self, clock: Clock, new_id: IdGenerator = random_identifier):
        self._log: AppendOnlyLog[MessageRead] = AppendOnlyLog(clock, new_id)

    def record_message_read(
        self, message_id: Identifier, reader_id: Identifier,
    ) -> ReadReceipt:
        if not isinstance(message_id, Identifier) or not isinstance(reader_id, Identifier):
            raise TypeError("read receipts reference messages and readers by Identifier")
        return self._log.append(MessageRead(message_id, reader_id))

    def has_read(self, message_id: Identifier, reader_id: Identifier) -> bool:
        return any(
            r.event.message_id == message_id and r.event.reader_id == reader_id
            for r in self._log.records()
        )

    def read_count(self, message_id: Identifier) -> int:
        """Distinct readers of a message."""
        return len({
            r.event.reader_id
            for r in self._log.records() if r.event.message_id == message_id
        })

    def receipts(self) -> RecordSequence[MessageRead]:
        return self._log.records()

    def __len__(self) -> int:
        return len(self._log)
