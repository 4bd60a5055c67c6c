"""排序生命周期钩子

激活后在 Session 的 before_flush 事件中自动维护序号：

- 新增的记录：未分配序号时追加到分区末尾，同一次 flush 中的多条记录按 add 顺序依次编号
- 删除的记录：压缩所在分区
- 分组字段被修改的记录：压缩旧分区，追加到新分区末尾（同时显式修改了序号时保留该值）

使用示例:
    from yseq.orm.sequence import activate_sequence_hooks

    activate_sequence_hooks()

    session.add(Banner(title="a"))
    session.add(Banner(title="b"))
    session.commit()          # seq 依次为 1, 2

    session.delete(first)
    session.commit()          # 剩余记录的 seq 为 1
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import event, select, inspect as sa_inspect
from sqlalchemy.orm import Session

from yseq.log import get_logger

from .accessor import is_assigned_value
from .engine import SequenceEngine
from .registry import SequenceRegistry, sequence_registry
from .store import SQLAlchemyRecordStore

logger = get_logger("yseq.orm.sequence")

_hooks_active = False
_hook_registry: Optional[SequenceRegistry] = None


# ==================== 属性历史 ====================

def _committed_values(session: Session, obj: Any, names: List[str]) -> Dict[str, Any]:
    """属性在本次 flush 之前的值

    属性历史中没有旧值时（例如 commit 后对象已过期，未读取就直接赋值），
    按主键从数据库读取。before_flush 阶段数据库中的行尚未更新。
    """
    state = sa_inspect(obj)
    values: Dict[str, Any] = {}
    missing = []
    for name in names:
        history = state.attrs[name].history
        if history.deleted:
            values[name] = history.deleted[0]
        elif history.unchanged:
            values[name] = history.unchanged[0]
        else:
            missing.append(name)

    if missing and state.has_identity:
        model = type(obj)
        criteria = [col == value for col, value in zip(state.mapper.primary_key, state.identity)]
        with session.no_autoflush:
            row = session.execute(
                select(*[getattr(model, name) for name in missing]).where(*criteria)
            ).first()
        if row is not None:
            values.update(zip(missing, row))
            missing = []

    for name in missing:
        values[name] = getattr(obj, name)
    return values


def _has_changed(obj: Any, name: str) -> bool:
    return sa_inspect(obj).attrs[name].history.has_changes()


# ==================== 单次 flush 的分配状态 ====================

class _FlushBatch:
    """记录一次 flush 中每个分区已经分配到的最大序号"""

    def __init__(self, engine: SequenceEngine, exclude: List[Any]):
        self.engine = engine
        self.exclude = exclude
        self._last: Dict[Tuple, int] = {}

    def reserve(self, obj: Any, value: int) -> None:
        """显式指定序号的记录抬高分区的起点"""
        key = self.engine.partition_key(obj)
        if key in self._last:
            self._last[key] = max(self._last[key], value)
        else:
            self._last[key] = max(self._stored_max(obj), value)

    def allocate(self, obj: Any) -> int:
        key = self.engine.partition_key(obj)
        if key not in self._last:
            self._last[key] = self._stored_max(obj)
        self._last[key] += 1
        return self._last[key]

    def _stored_max(self, obj: Any) -> int:
        return self.engine.max_sequence(obj, exclude=self.exclude)


# ==================== before_flush ====================

def _before_flush(session: Session, flush_context, instances) -> None:
    registry = _hook_registry or sequence_registry
    engine = SequenceEngine(store=SQLAlchemyRecordStore(session), registry=registry, atomic=False)

    deleted = [obj for obj in session.deleted if registry.is_registered(obj)]
    new = [obj for obj in session.new if registry.is_registered(obj)]
    relocated = []
    for obj in session.dirty:
        binding = registry.find(obj)
        if binding is None or not session.is_modified(obj):
            continue
        if any(_has_changed(obj, name) for name in binding.config.group):
            relocated.append(obj)

    if not (deleted or new or relocated):
        return

    # 先读出旧分区与旧序号，压缩时的批量更新会同步内存中的对象
    removals = []
    for obj in deleted + relocated:
        config = engine.binding_for(obj).config
        committed = _committed_values(session, obj, [config.field_name, *config.group])
        old_sequence = committed[config.field_name]
        old_group = {name: committed[name] for name in config.group}
        removals.append((obj, old_sequence, old_group))

    # 同一分区删除多条时从大到小压缩，保证每次使用的旧序号仍然有效
    removals.sort(key=lambda item: item[1] or 0, reverse=True)
    for obj, old_sequence, old_group in removals:
        if is_assigned_value(old_sequence):
            engine.update_sequences_on_delete(obj, sequence=old_sequence, group_values=old_group)

    batch = _FlushBatch(engine, exclude=deleted + relocated)

    keep_explicit = []
    move_to_end = []
    for obj in relocated:
        accessor = engine.binding_for(obj).accessor
        if _has_changed(obj, accessor.field_name) and accessor.is_assigned(obj):
            keep_explicit.append(obj)
        else:
            move_to_end.append(obj)

    new.sort(key=lambda o: sa_inspect(o).insert_order or 0)
    pending = []
    for obj in new:
        accessor = engine.binding_for(obj).accessor
        if accessor.is_assigned(obj):
            keep_explicit.append(obj)
        else:
            pending.append(obj)

    for obj in keep_explicit:
        batch.reserve(obj, engine.current_sequence(obj))

    for obj in move_to_end + pending:
        accessor = engine.binding_for(obj).accessor
        accessor.set(obj, batch.allocate(obj))

    logger.debug(
        f"flush 序号维护: 新增 {len(pending)}，删除 {len(deleted)}，换组 {len(relocated)}"
    )


# ==================== 激活/停用 ====================

def activate_sequence_hooks(registry: Optional[SequenceRegistry] = None) -> None:
    """在所有 Session 上激活序号自动维护（重复调用无副作用）

    Args:
        registry: 使用的注册表，默认全局注册表
    """
    global _hooks_active, _hook_registry
    _hook_registry = registry
    if _hooks_active:
        return
    event.listen(Session, "before_flush", _before_flush)
    _hooks_active = True
    logger.debug("序号生命周期钩子已激活")


def deactivate_sequence_hooks() -> None:
    """停用序号自动维护"""
    global _hooks_active, _hook_registry
    if not _hooks_active:
        return
    event.remove(Session, "before_flush", _before_flush)
    _hooks_active = False
    _hook_registry = None
    logger.debug("序号生命周期钩子已停用")


def is_sequence_hooks_active() -> bool:
    return _hooks_active


__all__ = [
    "activate_sequence_hooks",
    "deactivate_sequence_hooks",
    "is_sequence_hooks_active",
]
