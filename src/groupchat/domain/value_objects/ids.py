from __future__ import annotations

import re
from typing import NewType
from uuid import UUID

ConversationId = NewType("ConversationId", UUID)
MessageId = NewType("MessageId", UUID)
MemberId = NewType("MemberId", UUID)

# Canonical textual UUID, the identifier syntax of every stored entity.
UUID_PATTERN = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"

MENTION_RE = re.compile(rf"@({UUID_PATTERN})")
