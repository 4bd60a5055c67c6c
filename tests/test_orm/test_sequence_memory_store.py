"""排序引擎算法测试（内存存储）

不依赖数据库，使用 MemoryRecordStore 验证：
1. 稠密性与追加分配
2. 删除压缩
3. 交换对称性
4. 移动只影响区间内记录
5. 两种位置编号的边界
"""

import itertools

import pytest

from yseq.orm.sequence import (
    SequenceEngine,
    SequenceRegistry,
    NotFoundError,
    InvalidPositionError,
)

from helpers import MemoryRecordStore


_ids = itertools.count(1)


class Card:
    """卡片 - 按牌组分组"""
    id = None
    deck = None
    title = ""
    seq = 0

    def __init__(self, deck, title, seq=0):
        self.id = next(_ids)
        self.deck = deck
        self.title = title
        self.seq = seq

    def __repr__(self):
        return f"<Card {self.title} deck={self.deck} seq={self.seq}>"


class PinnedCard(Card):
    """子类沿用父类的配置"""


class Tile:
    """方块 - 全表一个分区，位置从 1 开始，边界抛出异常"""
    id = None
    title = ""
    seq = 0

    def __init__(self, title):
        self.id = next(_ids)
        self.title = title
        self.seq = 0


class TestEngineWithMemoryStore:
    """内存存储上的引擎行为"""

    @pytest.fixture(autouse=True)
    def setup_engine(self):
        self.registry = SequenceRegistry()
        self.registry.register(Card, group="deck")
        self.registry.register(Tile, orderFrom1=True, exceptions=True)
        self.store = MemoryRecordStore()
        self.engine = SequenceEngine(store=self.store, registry=self.registry)
        yield

    def _add(self, model, *titles, **fields):
        rows = []
        for title in titles:
            row = model(title=title, **fields)
            self.engine.assign_sequence(row)
            self.store.persist(row)
            rows.append(row)
        self.store.persisted = 0
        return rows

    def _titles(self, model, **group_values):
        return [row.title for row in self.engine.sequenced(model, **group_values)]

    def _seqs(self, model, **group_values):
        return [row.seq for row in self.engine.sequenced(model, **group_values)]

    # ==================== 分配与压缩 ====================

    def test_density(self):
        """测试分配后序号为 1..n"""
        self._add(Card, "a", "b", "c", deck=1)

        assert self._seqs(Card, deck=1) == [1, 2, 3]

    def test_append_only(self):
        """测试已有记录的序号不因新增而变化"""
        a, b = self._add(Card, "a", "b", deck=1)
        self._add(Card, "c", deck=1)

        assert (a.seq, b.seq) == (1, 2)

    def test_compaction(self):
        """测试 [1,2,3,4] 删除 2 后为 [1,2,3]"""
        a, b, c, d = self._add(Card, "a", "b", "c", "d", deck=1)

        self.engine.update_sequences_on_delete(b)
        self.store.rows.remove(b)

        assert self._seqs(Card, deck=1) == [1, 2, 3]
        assert self.store.bulk_updated == 2

    def test_compaction_with_previous_group(self):
        """测试按给定的旧分组与旧序号压缩"""
        a, b, c = self._add(Card, "a", "b", "c", deck=1)
        b.deck = 2

        count = self.engine.update_sequences_on_delete(b, sequence=2, group_values={"deck": 1})

        assert count == 1
        assert c.seq == 2

    def test_relocate(self):
        """测试换组后移到新分区末尾"""
        a, b, c = self._add(Card, "a", "b", "c", deck=1)
        self._add(Card, "x", deck=2)

        b.deck = 2
        self.engine.relocate(b, {"deck": 1}, previous_sequence=2)

        assert self._titles(Card, deck=1) == ["a", "c"]
        assert self._titles(Card, deck=2) == ["x", "b"]
        assert self._seqs(Card, deck=2) == [1, 2]

    # ==================== 交换 ====================

    def test_swap_symmetry(self):
        """测试上移再下移恢复原状"""
        self._add(Card, "a", "b", "c", deck=1)
        b = self.engine.sequenced(Card, deck=1)[1]

        self.engine.move_up(b)
        self.engine.move_down(b)

        assert self._titles(Card, deck=1) == ["a", "b", "c"]

    def test_swap_persists_both_sides(self):
        """测试交换分别持久化两条记录"""
        a, b = self._add(Card, "a", "b", deck=1)

        self.engine.swap(a, b)

        assert (a.seq, b.seq) == (2, 1)
        assert self.store.persisted == 2

    def test_empty_neighbor_raises_when_enabled(self):
        """测试 exceptions=True 时没有相邻记录抛出异常"""
        first, second = self._add(Tile, "t1", "t2")

        with pytest.raises(NotFoundError):
            self.engine.move_up(first)
        with pytest.raises(NotFoundError):
            self.engine.move_down(second)
        assert self.store.persisted == 0

    def test_empty_neighbor_is_noop(self):
        """测试 exceptions=False 时没有相邻记录不做修改"""
        a, b = self._add(Card, "a", "b", deck=1)

        assert self.engine.move_up(a) is a
        assert self.engine.move_down(b) is b
        assert self.store.persisted == 0

    # ==================== 任意移动 ====================

    def test_range_locality(self):
        """测试 6 条记录中 2 移到 5 只写 4 条"""
        rows = self._add(Card, "a", "b", "c", "d", "e", "f", deck=1)

        self.engine.move_to(rows[1], 4)

        assert self.store.bulk_updated + self.store.persisted == 4
        assert self._titles(Card, deck=1) == ["a", "c", "d", "e", "b", "f"]

    def test_move_to_current_position_no_writes(self):
        """测试移动到当前位置不写入"""
        rows = self._add(Card, "a", "b", "c", deck=1)

        self.engine.move_to(rows[2], 2)

        assert self.store.bulk_updated == 0
        assert self.store.persisted == 0

    def test_boundaries_order_from_0(self):
        """测试从 0 开始编号时 0 与 N-1 为首末位"""
        rows = self._add(Card, "a", "b", "c", "d", deck=1)

        self.engine.move_to(rows[2], 0)
        assert self._titles(Card, deck=1) == ["c", "a", "b", "d"]

        self.engine.move_to(rows[2], 3)
        assert self._titles(Card, deck=1) == ["a", "b", "d", "c"]

    def test_boundaries_order_from_1(self):
        """测试从 1 开始编号时 1 与 N 为首末位，0 越界"""
        rows = self._add(Tile, "t1", "t2", "t3", "t4")

        self.engine.move_to(rows[3], 1)
        assert self._titles(Tile) == ["t4", "t1", "t2", "t3"]

        self.engine.move_to(rows[3], 4)
        assert self._titles(Tile) == ["t1", "t2", "t3", "t4"]

        self.engine.move_to(rows[0], 3)
        assert self._titles(Tile) == ["t2", "t3", "t1", "t4"]

        with pytest.raises(InvalidPositionError):
            self.engine.move_to(rows[0], 0)
        with pytest.raises(InvalidPositionError):
            self.engine.move_to(rows[0], 5)

    def test_group_isolation(self):
        """测试不同分组互不影响"""
        deck1 = self._add(Card, "a", "b", "c", deck=1)
        self._add(Card, "x", "y", deck=2)

        self.engine.move_to(deck1[2], 0)
        self.engine.update_sequences_on_delete(deck1[0])

        assert self._titles(Card, deck=2) == ["x", "y"]
        assert self._seqs(Card, deck=2) == [1, 2]

    def test_subclass_uses_parent_binding(self):
        """测试子类沿用父类的配置与分区"""
        self._add(Card, "a", deck=1)
        pinned = PinnedCard(deck=1, title="p")
        self.engine.assign_sequence(pinned)

        assert pinned.seq == 2
        assert self.engine.config_for(pinned).group == ("deck",)

    def test_partition_key(self):
        """测试分区标识"""
        card = Card(deck=3, title="a")

        assert self.engine.partition_key(card) == (Card, 3)
        assert self.engine.partition_key(card, {"deck": 4}) == (Card, 4)
