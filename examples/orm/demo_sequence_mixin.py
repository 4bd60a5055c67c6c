"""排序管理使用示例

演示 SequenceMixin 的各种使用场景：
1. 全表一个分区（无分组）
2. 单字段分组
3. 多字段分组 + 位置从 1 开始
4. flush 钩子自动维护序号
5. 事务中批量移动
"""

import sys
from pathlib import Path

# 添加 yseq 到 path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, Session

from yseq.log import setup_logger
from yseq.orm import (
    BaseModel,
    Base,
    init_database,
    transaction_manager as tm,
    SequenceFieldMixin,
    SequenceMixin,
    InvalidPositionError,
    activate_sequence_hooks,
    deactivate_sequence_hooks,
)


# ==================== 示例 1: 全表一个分区 ====================

class Banner(BaseModel, SequenceFieldMixin, SequenceMixin):
    """轮播图模型

    无分组，所有记录共用一个序号序列，对外位置从 0 开始。
    """
    __tablename__ = "demo_banner"

    title: Mapped[str] = mapped_column(String(100), comment="标题")


# ==================== 示例 2: 单字段分组 ====================

class Product(BaseModel, SequenceFieldMixin, SequenceMixin):
    """产品模型 - 同一分类内排序，越界时抛出异常"""
    __tablename__ = "demo_product"
    __sequence__ = {"group": "category_id", "exceptions": True}

    category_id: Mapped[int] = mapped_column(Integer, comment="分类ID")
    name: Mapped[str] = mapped_column(String(100), comment="产品名称")


# ==================== 示例 3: 多字段分组 ====================

class MenuItem(BaseModel, SequenceFieldMixin, SequenceMixin):
    """菜单项 - 按 (menu_id, parent_id) 分组，位置从 1 开始"""
    __tablename__ = "demo_menu_item"
    __sequence__ = {"group": ["menu_id", "parent_id"], "orderFrom1": True}

    menu_id: Mapped[int] = mapped_column(Integer, comment="所属菜单ID")
    parent_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=None, comment="父级ID")
    title: Mapped[str] = mapped_column(String(100), comment="标题")


# ==================== 演示函数 ====================

def print_rows(rows, label_attr="title"):
    for row in rows:
        print(f"  seq={row.seq} position={row.sequence_position} {getattr(row, label_attr)}")


def demo_simple(session: Session):
    """演示全表排序"""
    print("\n" + "=" * 60)
    print("Demo 1: Banner")
    print("=" * 60)

    for title in ["Banner 1", "Banner 2", "Banner 3", "Banner 4"]:
        Banner(title=title).assign_sequence().save(commit=True)

    print("\n[Initial order]")
    print_rows(Banner.sequenced())

    banner3 = session.query(Banner).filter_by(title="Banner 3").first()
    print(f"\n[Move up: {banner3.title}]")
    banner3.move_up()
    print_rows(Banner.sequenced())

    banner4 = session.query(Banner).filter_by(title="Banner 4").first()
    print(f"\n[Move to position 0: {banner4.title}]")
    banner4.move_to(0)
    print_rows(Banner.sequenced())

    print("\n[Reorder by id: Banner 1, Banner 2]")
    ids = [session.query(Banner).filter_by(title=t).first().id for t in ["Banner 1", "Banner 2"]]
    Banner.reorder_sequence(ids)
    print_rows(Banner.sequenced())


def demo_grouped(session: Session):
    """演示分组排序"""
    print("\n" + "=" * 60)
    print("Demo 2: Product by category")
    print("=" * 60)

    for category_id, names in [(1, ["A1", "A2", "A3"]), (2, ["B1", "B2"])]:
        for name in names:
            Product(category_id=category_id, name=name).assign_sequence().save(commit=True)

    a3 = session.query(Product).filter_by(name="A3").first()
    print(f"\n[Move to top in category 1: {a3.name}]")
    a3.move_to_top()
    print("  Category 1:")
    print_rows(Product.sequenced(category_id=1), "name")
    print("  Category 2 (unchanged):")
    print_rows(Product.sequenced(category_id=2), "name")

    print("\n[Move out of range]")
    try:
        a3.move_to(10)
    except InvalidPositionError as e:
        print(f"  {e.code}: {e.message}")


def demo_hooks(session: Session):
    """演示 flush 钩子"""
    print("\n" + "=" * 60)
    print("Demo 3: MenuItem with lifecycle hooks")
    print("=" * 60)

    activate_sequence_hooks()
    try:
        session.add_all([
            MenuItem(menu_id=1, title="Home"),
            MenuItem(menu_id=1, title="Docs"),
            MenuItem(menu_id=1, title="Blog"),
            MenuItem(menu_id=1, title="About"),
        ])
        session.commit()
        print("\n[Inserted in one flush]")
        print_rows(MenuItem.sequenced(menu_id=1, parent_id=None))

        docs = session.query(MenuItem).filter_by(title="Docs").first()
        docs.delete(commit=True)
        print("\n[Deleted Docs]")
        print_rows(MenuItem.sequenced(menu_id=1, parent_id=None))

        blog = session.query(MenuItem).filter_by(title="Blog").first()
        blog.menu_id = 2
        blog.save(commit=True)
        print("\n[Moved Blog to menu 2]")
        print("  Menu 1:")
        print_rows(MenuItem.sequenced(menu_id=1, parent_id=None))
        print("  Menu 2:")
        print_rows(MenuItem.sequenced(menu_id=2, parent_id=None))
    finally:
        deactivate_sequence_hooks()


def demo_transaction(session: Session):
    """演示事务中的批量移动"""
    print("\n" + "=" * 60)
    print("Demo 4: Moves in one transaction")
    print("=" * 60)

    try:
        with tm.transaction(session=session):
            session.query(Banner).filter_by(title="Banner 1").first().move_to_bottom()
            session.query(Banner).filter_by(title="Banner 2").first().move_to_bottom()
            raise RuntimeError("cancel")
    except RuntimeError:
        print("\n[Rolled back, order unchanged]")
    print_rows(Banner.sequenced())


def main():
    """主函数"""
    print("=" * 60)
    print("SequenceMixin Demo")
    print("=" * 60)

    setup_logger("yseq", level="INFO")

    # 初始化数据库（内存数据库）
    engine, session_scope = init_database("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)

    session = Banner.query.session

    try:
        demo_simple(session)
        demo_grouped(session)
        demo_hooks(session)
        demo_transaction(session)

        print("\n" + "=" * 60)
        print("All demos completed successfully!")
        print("=" * 60)

    except Exception as e:
        print(f"\n[Error] {e}")
        import traceback
        traceback.print_exc()
        session_scope.rollback()
    finally:
        session_scope.remove()


if __name__ == "__main__":
    main()
