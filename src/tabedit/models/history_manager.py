# Apache License
# Version 2.0, January 2004
# http://www.apache.org/licenses/
#
# TERMS AND CONDITIONS FOR USE, REPRODUCTION, AND DISTRIBUTION
#
# 1. Definitions.
#
# "License" shall mean the terms and conditions for use, reproduction,
# and distribution as defined by Sections 1 through 9 of this document.
#
# "Licensor" shall mean the copyright owner or entity granting the License.
#
# "Legal Entity" shall mean the union of the acting entity and all
# other entities that control, are controlled by, or are under common
# control with that entity. For the purposes of this definition,
# "control" means (i) the power, direct or indirect, to cause the
# direction or management of such entity, whether by contract or
# otherwise, or (ii) ownership of fifty percent (50%) or more of the
# outstanding shares, or (iii) beneficial ownership of such entity.
#
# "You" (or "Your") shall mean an individual or Legal Entity
# exercising permissions granted by this License.
#
# "Source" form shall mean the preferred form for making modifications,
# including but not limited to software source code, documentation
# source, and configuration files.
#
# "Object" form shall mean any form resulting from mechanical
# transformation or translation of a Source form, including but
# not limited to compiled object code, generated documentation,
# and conversions to other media types.
#
# "Work" shall mean the work of authorship, whether in Source or
# Object form, made available under the License, as indicated by a
# copyright notice that is included in or attached to the work
# (which shall not include communications that are individually
# marked or otherwise designated in writing by the copyright owner
# as "Not a Contribution").
#
# "Derivative Works" shall mean any work, whether in Source or Object
# form, that is based upon (or derived from) the Work and for which the
# editorial revisions, annotations, elaborations, or other modifications
# represent, as a whole, an original work of authorship. For the purposes
# of this License, Derivative Works shall not include works that remain
# separable from, or merely link (or bind by name) to the interfaces of,
# the Work and derivative works thereof.
#
# "Contribution" shall mean any work of authorship, including
# the original version of the Work and any modifications or additions
# to that Work or Derivative Works thereof, that is intentionally
# submitted to Licensor for inclusion in the Work by the copyright owner
# or by an individual or Legal Entity authorized to submit on behalf of
# the copyright owner. For the purposes of this definition, "submitted"
# means any form of electronic, verbal, or written communication sent
# to the Licensor or its representatives, including but not limited to
# communication on electronic mailing lists, source code control
# systems, and issue tracking systems that are managed by, or on behalf
# of, the Licensor for the purpose of discussing and improving the Work,
# but excluding communication that is conspicuously marked or otherwise
# designated in writing by the copyright owner as "Not a Contribution."
#
# 2. Grant of Copyright License. Subject to the terms and conditions of
# this License, each Contributor hereby grants to You a perpetual,
# worldwide, non-exclusive, no-charge, royalty-free, irrevocable
# copyright license to use, reproduce, modify, display, perform,
# sublicense, and distribute the Work and such Derivative Works in
# Source or Object form.
#
# 3. Grant of Patent License. Subject to the terms and conditions of
# this License, each Contributor hereby grants to You a perpetual,
# worldwide, non-exclusive, no-charge, royalty-free, irrevocable
# (except as stated in this section) patent license to make, have made,
# use, offer to sell, sell, import, and otherwise transfer the Work,
# where such license applies only to those patent claims licensable
# by such Contributor that are necessarily infringed by their
# Contribution(s) alone or by combination of their Contribution(s)
# with the Work to which such Contribution(s) was submitted. If You
# institute patent litigation against any entity (including a
# cross-claim or counterclaim in a lawsuit) alleging that the Work
# or a Contribution incorporated within the Work constitutes direct
# or contributory patent infringement, then any patent licenses
# granted to You under this License for that Work shall terminate
# as of the date such litigation is filed.
#
# 4. Redistribution. You may reproduce and distribute copies of the
# Work or Derivative Works thereof in any medium, with or without
# modifications, and in Source or Object form, provided that You
# meet the following conditions:
#
# (a) You must give any other recipients of the Work or
# Derivative Works a copy of this License; and
#
# (b) You must cause any modified files to carry prominent notices
# stating that You changed the files; and
#
# (c) You must retain, in the Source form of any Derivative Works
# that You distribute, all copyright, patent, trademark, and
# attribution notices from the Source form of the Work,
# excluding those notices that do not pertain to any part of
# the Derivative Works; and
#
# (d) If the Work includes a "NOTICE" text file as part of its
# distribution, then any Derivative Works that You distribute must
# include a readable copy of the attribution notices contained
# within such NOTICE file, excluding those notices that do not
# pertain to any part of the Derivative Works, in at least one
# of the following places: within a NOTICE text file distributed
# as part of the Derivative Works; within the Source form or
# documentation, if provided along with the Derivative Works; or,
# within a display generated by the Derivative Works, if and
# wherever such third-party notices normally appear. The contents
# of the NOTICE file are for informational purposes only and
# do not modify the License. You may add Your own attribution
# notices within Derivative Works that You distribute, alongside
# or as an addendum to the NOTICE text from the Work, provided
# that such additional attribution notices cannot be construed
# as modifying the License.
#
# You may add Your own copyright notice to Your modifications and
# may provide additional or different license terms and conditions
# for use, reproduction, or distribution of Your modifications, or
# for any such Derivative Works as a whole, provided Your use,
# reproduction, and distribution of the Work otherwise complies with
# the conditions stated in this License.
#
# 5. Submission of Contributions. Unless You explicitly state otherwise,
# any Contribution intentionally submitted for inclusion in the Work
# by You to the Licensor shall be under the terms and conditions of
# this License, without any additional terms or conditions.
# Notwithstanding the above, nothing herein shall supersede or modify
# the terms of any separate license agreement you may have executed
# with Licensor regarding such Contributions.
#
# 6. Trademarks. This License does not grant permission to use the trade
# names, trademarks, service marks, or product names of the Licensor,
# except as required for reasonable and customary use in describing the
# origin of the Work and reproducing the content of the NOTICE file.
#
# 7. Disclaimer of Warranty. Unless required by applicable law or
# agreed to in writing, Licensor provides the Work (and each
# Contributor provides its Contributions) on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or
# implied, including, without limitation, any warranties or conditions
# of TITLE, NON-INFRINGEMENT, MERCHANTABILITY, or FITNESS FOR A
# PARTICULAR PURPOSE. You are solely responsible for determining the
# appropriateness of using or redistributing the Work and assume any
# risks associated with Your exercise of permissions under this License.
#
# 8. Limitation of Liability. In no event and under no legal theory,
# whether in tort (including negligence), contract, or otherwise,
# unless required by applicable law (such as deliberate and grossly
# negligent acts) or agreed to in writing, shall any Contributor be
# liable to You for damages, including any direct, indirect, special,
# incidental, or consequential damages of any character arising as a
# result of this License or out of the use or inability to use the
# Work (including but not limited to damages for loss of goodwill,
# work stoppage, computer failure or malfunction, or any and all
# other commercial damages or losses), even if such Contributor
# has been advised of the possibility of such damages.
#
# 9. Accepting Warranty or Support. While redistributing the Work or
# Derivative Works thereof, You may choose to offer, and charge a fee
# for, acceptance of support, warranty, indemnity, or other liability
# obligations and/or rights consistent with this License. However, in
# accepting such obligations, You may act only on Your own behalf and on
# Your sole responsibility, not on behalf of any other Contributor, and
# only if You agree to indemnify, defend, and hold each Contributor
# harmless for any liability incurred by, or claims asserted against,
# such Contributor by reason of your accepting any such warranty or support.
#
# END OF TERMS AND CONDITIONS
#
# APPENDIX: How to apply the Apache License to your work.
#
# To apply the Apache License to your work, attach the following
# boilerplate notice, with the fields enclosed by brackets "[]"
# replaced with your own identifying information. (Don't include
# the brackets!)  The text should be enclosed in the appropriate
# comment syntax for the file format. We also recommend that a
# file or class name and description of purpose be included on the
# same "printed page" as the copyright notice for easier
# identification within third-party archives.
#
# Copyright [yyyy] [name of copyright owner]
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Snapshot history with bounded capacity and undo/redo."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..exceptions import TabeditIOError

if TYPE_CHECKING:
    from .table import Table

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_CAPACITY = 16


class HistoryRecord:
    """A table snapshot taken before an operation ran."""

    def __init__(
        self,
        operation_id: str,
        operation_type: str,
        timestamp: datetime,
        snapshot: Table,
        details: dict[str, Any] | None = None,
    ):
        """Initialize history record."""
        self.operation_id = operation_id
        self.operation_type = operation_type
        self.timestamp = timestamp
        self.snapshot = snapshot
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization. The snapshot is left out."""
        return {
            "operation_id": self.operation_id,
            "operation_type": self.operation_type,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
            "rows": self.snapshot.row_count,
            "columns": self.snapshot.column_count,
        }


class HistoryManager:
    """Stack of table snapshots with a cursor.

    ``current_index`` counts the snapshots behind the live table: 0 means nothing
    can be undone, ``len(history)`` means nothing has been undone. Undoing from the
    tip stashes the live table so the last operation can be redone.
    """

    def __init__(self, session_id: str, capacity: int = DEFAULT_HISTORY_CAPACITY):
        """Initialize history manager."""
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.session_id = session_id
        self.capacity = capacity

        self.history: list[HistoryRecord] = []
        self.current_index = 0
        self._newest_snapshot: Table | None = None
        self._sequence = 0

    def is_empty(self) -> bool:
        return not self.history

    def is_newest(self) -> bool:
        """Check if no undo is outstanding."""
        return self.current_index >= len(self.history)

    def can_undo(self) -> bool:
        """Check if undo is possible."""
        return self.current_index > 0

    def can_redo(self) -> bool:
        """Check if redo is possible."""
        return not self.is_newest()

    def take_snapshot(
        self, table: Table, operation_type: str, details: dict[str, Any] | None = None
    ) -> str:
        """Record the state of a table before an operation.

        Snapshots beyond the cursor are discarded first. When the stack outgrows its
        capacity the oldest snapshot is evicted and the cursor stays where it is.
        """
        if self.current_index < len(self.history):
            dropped = len(self.history) - self.current_index
            del self.history[self.current_index :]
            self._newest_snapshot = None
            logger.debug("Discarded %s redo snapshots for session %s", dropped, self.session_id)

        self._sequence += 1
        timestamp = datetime.now(timezone.utc)
        stamp = timestamp.strftime("%Y%m%d_%H%M%S_%f")
        operation_id = f"{self.session_id}_{self._sequence}_{stamp}"

        self.history.append(
            HistoryRecord(
                operation_id=operation_id,
                operation_type=operation_type,
                timestamp=timestamp,
                snapshot=table.clone(),
                details=details,
            )
        )

        if len(self.history) > self.capacity:
            evicted = self.history.pop(0)
            logger.debug("Evicted oldest snapshot %s", evicted.operation_id)
        else:
            self.current_index += 1

        logger.info("Recorded %s: %s", operation_id, operation_type)
        return operation_id

    def undo(self, current: Table) -> Table | None:
        """Step back one snapshot and return a copy of it, or None at the start."""
        if not self.can_undo():
            return None

        if self.is_newest():
            self._newest_snapshot = current.clone()

        self.current_index -= 1
        record = self.history[self.current_index]
        logger.info("Undid operation: %s", record.operation_type)
        return record.snapshot.clone()

    def redo(self) -> Table | None:
        """Step forward one snapshot and return a copy of it, or None at the tip."""
        if not self.can_redo():
            return None

        operation_type = self.history[self.current_index].operation_type
        self.current_index += 1
        if self.current_index == len(self.history):
            snapshot = self._newest_snapshot
        else:
            snapshot = self.history[self.current_index].snapshot

        logger.info("Redid operation: %s", operation_type)
        return snapshot.clone() if snapshot is not None else None

    def operation_type_at(self, index: int) -> str | None:
        """Operation type recorded at a history position, if any."""
        if 0 <= index < len(self.history):
            return self.history[index].operation_type
        return None

    def get_history(self, limit: int | None = None) -> list[dict[str, Any]]:
        """Get operation history, oldest first."""
        history_list = []

        start = 0 if limit is None else max(0, len(self.history) - limit)

        for i, entry in enumerate(self.history[start:], start=start):
            history_dict = entry.to_dict()
            history_dict["index"] = i
            history_dict["is_current"] = i == self.current_index - 1
            history_dict["is_undone"] = i >= self.current_index
            history_list.append(history_dict)

        return history_list

    def clear_history(self) -> int:
        """Clear all history and return how many records were dropped."""
        cleared = len(self.history)
        self.history.clear()
        self.current_index = 0
        self._newest_snapshot = None
        logger.info("Cleared history for session %s", self.session_id)
        return cleared

    def export_history(self, file_path: str) -> int:
        """Export the history listing as JSON and return the number of records."""
        data = {
            "session_id": self.session_id,
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "total_operations": len(self.history),
            "current_position": self.current_index,
            "operations": self.get_history(),
        }

        try:
            with Path(file_path).open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise TabeditIOError("Failed to export history", path=file_path, cause=e) from e

        logger.info("Exported history to %s", file_path)
        return len(self.history)

    def get_statistics(self) -> dict[str, Any]:
        """Get history statistics."""
        operation_types: dict[str, int] = {}
        for entry in self.history:
            operation_types[entry.operation_type] = operation_types.get(entry.operation_type, 0) + 1

        return {
            "total_operations": len(self.history),
            "current_position": self.current_index,
            "can_undo": self.can_undo(),
            "can_redo": self.can_redo(),
            "operation_types": operation_types,
            "first_operation": (self.history[0].timestamp.isoformat() if self.history else None),
            "last_operation": (self.history[-1].timestamp.isoformat() if self.history else None),
            "capacity": self.capacity,
        }
