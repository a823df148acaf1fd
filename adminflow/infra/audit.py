"""审计读取器注册表与内存实现.

`SnapshotRecorder` 监听 SQLAlchemy 会话的 flush 与事务事件,把已提交的新增或
修改对象的列值记录为历史版本,供开发环境与测试使用.
"""

from __future__ import annotations

import itertools
from collections import defaultdict
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any

from sqlalchemy import event
from sqlalchemy import inspect as sa_inspect

from adminflow.admin.values import Revision
from adminflow.errors import NotFoundError
from adminflow.utils.structlog_config import get_system_logger

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from adminflow.admin.collaborators import AuditReader


class AuditManager:
    """按模型类型登记审计读取器,查找时沿 MRO 向上匹配."""

    def __init__(self) -> None:
        self._readers: dict[type, AuditReader] = {}

    def register(self, model_class: type, reader: AuditReader) -> None:
        self._readers[model_class] = reader

    def _find(self, model_class: type) -> AuditReader | None:
        for klass in model_class.__mro__:
            reader = self._readers.get(klass)
            if reader is not None:
                return reader
        return None

    def has_reader(self, model_class: type) -> bool:
        return self._find(model_class) is not None

    def get_reader(self, model_class: type) -> AuditReader:
        """返回审计读取器.

        Raises:
            NotFoundError: 没有为该类型登记读取器.

        """
        reader = self._find(model_class)
        if reader is None:
            raise NotFoundError(f"类 {model_class.__name__} 没有注册审计读取器")
        return reader


class InMemoryAuditReader:
    """进程内历史版本存储,版本号为递增整数的字符串形式."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._revisions: dict[tuple[str, str], list[Revision]] = defaultdict(list)

    def record(self, model_class: type, object_id: str, snapshot: object, author: str | None = None) -> Revision:
        revision = Revision(
            object_id=str(object_id),
            revision_id=str(next(self._counter)),
            snapshot=snapshot,
            author=author,
        )
        self._revisions[(model_class.__name__, str(object_id))].append(revision)
        return revision

    def find_revisions(self, model_class: type, object_id: str) -> list[Revision]:
        """历史版本列表,最新在前."""
        return list(reversed(self._revisions.get((model_class.__name__, str(object_id)), [])))

    def find(self, model_class: type, object_id: str, revision_id: str) -> Revision | None:
        for revision in self._revisions.get((model_class.__name__, str(object_id)), []):
            if revision.revision_id == str(revision_id):
                return revision
        return None


def snapshot_of(subject: Any) -> SimpleNamespace:
    """复制对象的列值,后续修改不会影响快照."""
    mapper = sa_inspect(type(subject))
    return SimpleNamespace(**{attr.key: getattr(subject, attr.key) for attr in mapper.column_attrs})


class SnapshotRecorder:
    """为登记过的模型类型记录已提交的快照.

    flush 后的快照先暂存在 `session.info` 中,提交时写入读取器,回滚时丢弃.
    同一事务内多次 flush 的对象只保留最后一次快照,没有实际改动的对象不记录.

    Args:
        reader: 写入目标.
        model_classes: 需要审计的模型类型.

    """

    PENDING_KEY = "adminflow_pending_snapshots"

    def __init__(self, reader: InMemoryAuditReader, model_classes: tuple[type, ...]) -> None:
        self.reader = reader
        self.model_classes = model_classes
        self.logger = get_system_logger()

    def attach(self, session: Session | type[Session]) -> None:
        event.listen(session, "after_flush", self._after_flush)
        event.listen(session, "after_commit", self._after_commit)
        event.listen(session, "after_rollback", self._after_rollback)

    def _pending(self, session: Session) -> dict[tuple[type, str], SimpleNamespace]:
        return session.info.setdefault(self.PENDING_KEY, {})

    def _after_flush(self, session: Session, _flush_context: object) -> None:
        pending = self._pending(session)
        for subject in itertools.chain(session.new, session.dirty):
            if not isinstance(subject, self.model_classes):
                continue
            # dirty 中包含被赋了相同值的对象
            if subject not in session.new and not session.is_modified(subject):
                continue
            identity = sa_inspect(type(subject)).primary_key_from_instance(subject)
            if any(part is None for part in identity):
                continue
            object_id = "~".join(str(part) for part in identity)
            pending[(type(subject), object_id)] = snapshot_of(subject)

    def _after_commit(self, session: Session) -> None:
        pending = session.info.pop(self.PENDING_KEY, {})
        for (model_class, object_id), snapshot in pending.items():
            revision = self.reader.record(model_class, object_id, snapshot)
            self.logger.debug(
                "记录历史版本",
                model=model_class.__name__,
                object_id=object_id,
                revision_id=revision.revision_id,
            )

    def _after_rollback(self, session: Session) -> None:
        discarded = session.info.pop(self.PENDING_KEY, {})
        if discarded:
            self.logger.debug("回滚丢弃未提交的历史版本", count=len(discarded))
