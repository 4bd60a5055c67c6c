"""排序引擎

在每个分区内维护稠密、连续的整数序号：

- 新记录追加到分区末尾（max + 1）
- 删除记录后，后续记录序号依次减一
- 上移/下移与相邻记录交换序号
- 移动到任意位置时，只平移新旧位置之间的记录

存储的序号在每个分区内始终从 1 开始，order_from_1 只影响对外的位置编号：
order_from_1=False 时位置 = 序号 - 1，order_from_1=True 时位置 = 序号。
因此 0 永远不是合法的存储值，可以和 None 一起表示"尚未分配"。

并发说明:
    引擎不加锁。两个调用方同时对同一分区执行 assign / move_to 时可能产生
    重复或跳号，需要严格保证时请在可串行化隔离级别或行锁下调用。
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type

from yseq.log import get_logger

from .accessor import is_assigned_value
from .exceptions import ConfigurationKeyError, InvalidPositionError, NotFoundError
from .options import SequenceConfig
from .registry import SequenceBinding, SequenceRegistry, sequence_registry
from .store import Condition, RecordStore, SQLAlchemyRecordStore

logger = get_logger("yseq.orm.sequence")


class SequenceEngine:
    """排序引擎

    引擎本身不保存分区状态，每次调用都从存储中读取。

    Args:
        store: 记录存储，不传时按实体所在的 session 自动创建 SQLAlchemyRecordStore
        registry: 模型注册表，默认全局注册表
        atomic: 是否把每个公开的写操作包在事务作用域中。
                flush 钩子内部已处于 session 事务中，使用 atomic=False

    使用示例:
        engine = SequenceEngine()

        item = MenuItem(menu_id=1, title="首页")
        engine.assign_sequence(item)
        session.add(item)

        engine.move_up(item)
        engine.move_to(item, 0)
    """

    def __init__(
        self,
        store: Optional[RecordStore] = None,
        registry: Optional[SequenceRegistry] = None,
        atomic: bool = True,
    ):
        self._store = store
        self._registry = registry or sequence_registry
        self._atomic_enabled = atomic

    # ==================== 基础 ====================

    @property
    def registry(self) -> SequenceRegistry:
        return self._registry

    def store_for(self, entity_or_model: Any) -> RecordStore:
        if self._store is not None:
            return self._store
        if isinstance(entity_or_model, type):
            return SQLAlchemyRecordStore.from_model(entity_or_model)
        return SQLAlchemyRecordStore.from_entity(entity_or_model)

    def binding_for(self, entity_or_model: Any) -> SequenceBinding:
        binding = self._registry.lookup(entity_or_model)
        binding.accessor.validate()
        return binding

    def config_for(self, entity_or_model: Any) -> SequenceConfig:
        return self.binding_for(entity_or_model).config

    @contextmanager
    def _atomic(self, store: RecordStore):
        if self._atomic_enabled:
            with store.transaction():
                yield
        else:
            yield

    # ==================== 分区条件 ====================

    def group_values(self, entity: Any) -> Dict[str, Any]:
        """实体当前所在分区的分组字段值"""
        return self.binding_for(entity).accessor.group_values(entity)

    def scope(self, entity_or_model: Any, group_values: Optional[Mapping[str, Any]] = None) -> List[Condition]:
        """构建分区过滤条件

        没有分组字段时返回空列表（全表一个分区）；
        传入 group_values 时使用给定的值代替实体当前的值。
        """
        binding = self.binding_for(entity_or_model)
        group_fields = binding.config.group
        if not group_fields and not group_values:
            return []

        if group_values is None:
            if isinstance(entity_or_model, type):
                raise ConfigurationKeyError(
                    group_fields[0],
                    available=group_fields,
                    message=f"{entity_or_model.__name__} 按 {', '.join(group_fields)} 分组，需要提供分组字段值",
                )
            group_values = binding.accessor.group_values(entity_or_model)

        for key in group_values:
            if key not in group_fields:
                raise ConfigurationKeyError(key, available=group_fields,
                                            message=f"'{key}' 不是分组字段")
        missing = [name for name in group_fields if name not in group_values]
        if missing:
            raise ConfigurationKeyError(missing[0], available=group_fields,
                                        message=f"缺少分组字段值: {', '.join(missing)}")

        return [Condition(name, "==", group_values[name]) for name in group_fields]

    def partition_key(self, entity: Any, group_values: Optional[Mapping[str, Any]] = None) -> Tuple:
        """分区标识：(注册模型, 分组字段值...)"""
        binding = self.binding_for(entity)
        values = group_values if group_values is not None else binding.accessor.group_values(entity)
        return (binding.model,) + tuple(values[name] for name in binding.config.group)

    # ==================== 序号与位置 ====================

    def current_sequence(self, entity: Any) -> Optional[int]:
        return self.binding_for(entity).accessor.get(entity)

    def position(self, entity: Any) -> Optional[int]:
        """对外位置，未分配时返回 None"""
        binding = self.binding_for(entity)
        value = binding.accessor.get(entity)
        if not is_assigned_value(value):
            return None
        return self._to_position(binding.config, value)

    @staticmethod
    def _to_sequence(config: SequenceConfig, position: int) -> int:
        return position if config.order_from_1 else position + 1

    @staticmethod
    def _to_position(config: SequenceConfig, sequence: int) -> int:
        return sequence if config.order_from_1 else sequence - 1

    def max_sequence(
        self,
        entity_or_model: Any,
        group_values: Optional[Mapping[str, Any]] = None,
        exclude: Sequence[Any] = (),
    ) -> int:
        """分区内已持久化的最大序号，空分区返回 0"""
        binding = self.binding_for(entity_or_model)
        store = self.store_for(entity_or_model)
        value = store.max_of(
            binding.model,
            binding.config.field_name,
            self.scope(entity_or_model, group_values),
            exclude=exclude,
        )
        return value or 0

    def next_sequence(self, entity: Any, exclude: Sequence[Any] = ()) -> int:
        return self.max_sequence(entity, exclude=exclude) + 1

    # ==================== 分配与压缩 ====================

    def assign_sequence(self, entity: Any) -> Any:
        """为新记录分配序号（追加到分区末尾）

        已分配（非 0、非 None）时不做任何事。只修改内存中的实体，由调用方持久化。
        """
        binding = self.binding_for(entity)
        accessor = binding.accessor
        if accessor.is_assigned(entity):
            return entity

        value = self.next_sequence(entity)
        accessor.set(entity, value)
        logger.debug(f"{binding.model.__name__} 分配序号 {value}")
        return entity

    def update_sequences_on_delete(
        self,
        entity: Any,
        sequence: Optional[int] = None,
        group_values: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """删除记录前压缩分区：序号大于被删记录的已持久化记录依次减一

        Args:
            entity: 即将删除的实体
            sequence: 被移出分区时的序号，默认使用实体当前序号
            group_values: 被移出的分区，默认使用实体当前分组

        Returns:
            更新的记录数
        """
        binding = self.binding_for(entity)
        field = binding.config.field_name
        current = sequence if sequence is not None else binding.accessor.get(entity)
        if not is_assigned_value(current):
            logger.debug(f"{binding.model.__name__} 未分配序号，跳过压缩")
            return 0

        store = self.store_for(entity)
        conditions = self.scope(entity, group_values) + [Condition(field, ">", current)]
        with self._atomic(store):
            count = store.bulk_decrement(binding.model, field, conditions)
        logger.debug(f"{binding.model.__name__} 删除序号 {current}，压缩 {count} 条记录")
        return count

    def relocate(
        self,
        entity: Any,
        previous_group_values: Mapping[str, Any],
        previous_sequence: Optional[int] = None,
    ) -> Any:
        """分组字段变化后，把实体从旧分区移到新分区末尾"""
        binding = self.binding_for(entity)
        store = self.store_for(entity)
        with self._atomic(store):
            self.update_sequences_on_delete(
                entity,
                sequence=previous_sequence,
                group_values=previous_group_values,
            )
            binding.accessor.set(entity, self.next_sequence(entity, exclude=[entity]))
            store.persist(entity)
        return entity

    # ==================== 相邻记录 ====================

    def _neighbor(self, entity: Any, previous: bool) -> Optional[Any]:
        binding = self.binding_for(entity)
        field = binding.config.field_name
        current = binding.accessor.get(entity)
        if not is_assigned_value(current):
            return None
        op = "<" if previous else ">"
        conditions = self.scope(entity) + [Condition(field, op, current)]
        return self.store_for(entity).first(binding.model, field, conditions, descending=previous)

    def get_previous(self, entity: Any) -> Optional[Any]:
        """分区内序号小于当前记录的最大一条"""
        return self._neighbor(entity, previous=True)

    def get_next(self, entity: Any) -> Optional[Any]:
        """分区内序号大于当前记录的最小一条"""
        return self._neighbor(entity, previous=False)

    # ==================== 交换 ====================

    def move_up(self, entity: Any) -> Any:
        """与上一条记录交换序号"""
        return self._swap_with_neighbor(entity, previous=True)

    def move_down(self, entity: Any) -> Any:
        """与下一条记录交换序号"""
        return self._swap_with_neighbor(entity, previous=False)

    def _swap_with_neighbor(self, entity: Any, previous: bool) -> Any:
        binding = self.binding_for(entity)
        neighbor = self._neighbor(entity, previous)
        if neighbor is None:
            direction = "previous" if previous else "next"
            if binding.config.exceptions:
                raise NotFoundError(direction, binding.accessor.get(entity), binding.model.__name__)
            logger.debug(f"{binding.model.__name__} 没有 {direction} 记录，忽略移动")
            return entity
        return self.swap(entity, neighbor)

    def swap(self, entity: Any, other: Any) -> Any:
        """交换两条记录的序号，分别持久化"""
        binding = self.binding_for(entity)
        accessor = binding.accessor
        store = self.store_for(entity)
        mine = accessor.get(entity)
        theirs = accessor.get(other)
        with self._atomic(store):
            accessor.set(entity, theirs)
            store.persist(entity)
            accessor.set(other, mine)
            store.persist(other)
        logger.debug(f"{binding.model.__name__} 交换序号 {mine} <-> {theirs}")
        return entity

    # ==================== 任意移动 ====================

    def move_to(self, entity: Any, position: int) -> Any:
        """移动到指定位置（调用方的编号方式）

        向后移动时 (current, target] 区间内记录减一，
        向前移动时 [target, current) 区间内记录加一，其余记录不受影响。

        Raises:
            InvalidPositionError: 位置不是整数、实体未分配序号，
                                  或 exceptions=True 时位置越界
        """
        binding = self.binding_for(entity)
        config = binding.config
        accessor = binding.accessor
        field = config.field_name
        name = binding.model.__name__

        if isinstance(position, bool) or not isinstance(position, int):
            raise InvalidPositionError(f"位置必须是整数: {position!r}", position=position)

        current = accessor.get(entity)
        if not is_assigned_value(current):
            raise InvalidPositionError(f"{name} 尚未分配序号，无法移动", position=position)

        target = self._to_sequence(config, position)
        if target == current:
            return entity

        last = max(self.max_sequence(entity), current)
        if target < 1 or target > last:
            if config.exceptions:
                first_position = self._to_position(config, 1)
                last_position = self._to_position(config, last)
                raise InvalidPositionError(
                    f"位置 {position} 超出范围 [{first_position}, {last_position}]",
                    position=position,
                )
            clamped = min(max(target, 1), last)
            logger.warning(f"{name} 目标位置 {position} 越界，调整为序号 {clamped}")
            target = clamped
            if target == current:
                return entity

        store = self.store_for(entity)
        scope = self.scope(entity)
        with self._atomic(store):
            if target > current:
                store.bulk_decrement(
                    binding.model, field,
                    scope + [Condition(field, ">", current), Condition(field, "<=", target)],
                )
            else:
                store.bulk_increment(
                    binding.model, field,
                    scope + [Condition(field, ">=", target), Condition(field, "<", current)],
                )
            accessor.set(entity, target)
            store.persist(entity)

        logger.debug(f"{name} 序号 {current} -> {target}")
        return entity

    def move_to_top(self, entity: Any) -> Any:
        """移动到分区第一位"""
        config = self.config_for(entity)
        return self.move_to(entity, self._to_position(config, 1))

    def move_to_bottom(self, entity: Any) -> Any:
        """移动到分区最后一位"""
        config = self.config_for(entity)
        current = self.current_sequence(entity)
        last = max(self.max_sequence(entity), current or 0)
        return self.move_to(entity, self._to_position(config, last))

    # ==================== 分区级操作 ====================

    def sequenced(self, model: Type, **group_values: Any) -> List[Any]:
        """按序号升序返回分区内的记录"""
        binding = self.binding_for(model)
        store = self.store_for(model)
        return store.range_query(
            binding.model,
            binding.config.field_name,
            self.scope(model, group_values or None),
        )

    def _renumber(self, model: Type, rows: List[Any]) -> int:
        binding = self.binding_for(model)
        accessor = binding.accessor
        changed = []
        for value, row in enumerate(rows, 1):
            if accessor.get(row) != value:
                accessor.set(row, value)
                changed.append(row)
        if changed:
            store = self.store_for(model)
            with self._atomic(store):
                store.persist_all(changed)
        return len(changed)

    def normalize(self, model: Type, **group_values: Any) -> int:
        """从 1 开始连续重排分区内的序号，消除间隙与重复

        未分配序号的记录排在最后，同序号按主键排序。

        Returns:
            更新的记录数
        """
        binding = self.binding_for(model)
        accessor = binding.accessor
        rows = self.sequenced(model, **group_values)
        rows.sort(key=lambda row: not accessor.is_assigned(row))
        count = self._renumber(model, rows)
        logger.debug(f"{binding.model.__name__} 规范化序号，更新 {count} 条记录")
        return count

    def reorder(self, model: Type, ids: Sequence[Any], **group_values: Any) -> int:
        """按给定的主键顺序重排分区

        ids 中的记录依次排在最前面，未列出的记录保持原有相对顺序排在后面，
        不属于该分区的 id 被忽略。适用于前端拖拽后整体提交新顺序。

        Returns:
            更新的记录数
        """
        binding = self.binding_for(model)
        rows = self.sequenced(model, **group_values)
        by_id = {row.id: row for row in rows}
        listed = []
        for row_id in ids:
            row = by_id.pop(row_id, None)
            if row is not None:
                listed.append(row)
        remaining = [row for row in rows if row.id in by_id]
        count = self._renumber(model, listed + remaining)
        logger.debug(f"{binding.model.__name__} 重排序，更新 {count} 条记录")
        return count

    # ==================== 别名 ====================

    assignSequence = assign_sequence
    updateSequencesOnDelete = update_sequences_on_delete
    moveUp = move_up
    moveDown = move_down
    moveTo = move_to


# 默认引擎：按实体所在的 session 访问存储，每个写操作自带事务作用域
sequence_engine = SequenceEngine()


__all__ = [
    "SequenceEngine",
    "sequence_engine",
]
