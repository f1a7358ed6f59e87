"""Records, associations and repositories."""

from edict.models.record import Association, Record, RecordList
from edict.models.repository import Repository

__all__ = ["Association", "Record", "RecordList", "Repository"]
