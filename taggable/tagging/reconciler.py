"""标签集合同步

TagSetReconciler 把拥有者当前的标签名列表与关联表中已有的行对齐：

1. 读取拥有者现有关联（按显示顺序）
2. 解析目标标签文本，计算需要移除/新增的标签名
3. 为不存在的标签名创建标签行（并发创建同名标签时回退为查询已有标签）
4. 删除过期关联行，计数 -1
5. 批量插入新关联行，计数 +1
6. 只更新顺序发生变化的保留行

同一目标重复同步不会产生任何写操作。
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import delete, insert, select, update
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taggable.log import get_logger
from .config import TaggingConfig
from .parser import parse_tag_text

logger = get_logger()


@dataclass
class ReconcileResult:
    """一次同步的结果"""
    owner_key: Any
    names: List[str] = field(default_factory=list)
    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    reordered: List[str] = field(default_factory=list)
    created: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.reordered)


class TagSetReconciler:
    """标签集合同步器

    使用示例:
        reconciler = TagSetReconciler(config)

        result = reconciler.reconcile(post.id, "python, sqlalchemy")
        result.added    # ['python', 'sqlalchemy']

        # 由同步器负责提交（失败时回滚并重新抛出异常）
        reconciler.reconcile(post.id, ["python"], commit=True)
    """

    def __init__(self, config: TaggingConfig):
        self.config = config

    def reconcile(
        self,
        owner_key: Any,
        desired: Any,
        session: Optional[Session] = None,
        commit: bool = False,
    ) -> ReconcileResult:
        """同步拥有者的标签集合

        必须在拥有者记录已写入（至少已 flush）之后调用。

        Args:
            owner_key: 拥有者主键
            desired: 目标标签文本（分隔符文本）或标签名序列
            session: 使用的 session，默认取 config.get_session()
            commit: 是否在同步后提交；为 True 时失败会回滚

        Returns:
            ReconcileResult

        Raises:
            SQLAlchemyError: 存储层错误原样抛出；commit=True 时任何异常都会先回滚
        """
        if owner_key is None:
            raise ValueError("owner_key 不能为空，请先保存拥有者记录")

        session = self.config.get_session(session)
        try:
            result = self._apply(session, owner_key, parse_tag_text(desired, self.config.delimiter))
            if commit:
                session.commit()
        except Exception:
            if commit:
                session.rollback()
            raise
        return result

    # ==================== 同步步骤 ====================

    def _apply(self, session: Session, owner_key: Any, names: List[str]) -> ReconcileResult:
        cfg = self.config
        result = ReconcileResult(owner_key=owner_key, names=list(names))

        current = self._current_links(session, owner_key)
        wanted = set(names)
        to_remove = [name for name in current if name not in wanted]
        to_add = [name for name in names if name not in current]

        tag_keys = self._resolve_tags(session, to_add, result)

        if to_remove:
            removed_keys = [current[name][0] for name in to_remove]
            session.execute(
                delete(cfg.junction_table).where(
                    cfg.owner_key_col == owner_key,
                    cfg.tag_key_col.in_(removed_keys),
                )
            )
            self._change_counts(session, removed_keys, -1)
            result.removed = to_remove

        if to_add:
            rows = []
            for position, name in enumerate(names):
                if name not in tag_keys:
                    continue
                row = {cfg.owner_key_column: owner_key, cfg.tag_key_column: tag_keys[name]}
                if cfg.ordering_enabled:
                    row[cfg.order_column] = position
                rows.append(row)
            session.execute(insert(cfg.junction_table), rows)
            self._change_counts(session, [tag_keys[name] for name in to_add], 1)
            result.added = to_add

        if cfg.ordering_enabled:
            for position, name in enumerate(names):
                if name not in current:
                    continue
                tag_key, order = current[name]
                if order == position:
                    continue
                session.execute(
                    update(cfg.junction_table)
                    .where(cfg.owner_key_col == owner_key, cfg.tag_key_col == tag_key)
                    .values({cfg.order_column: position})
                )
                result.reordered.append(name)

        if result.has_changes:
            logger.debug(
                f"标签同步完成 owner={owner_key} "
                f"新增={result.added} 移除={result.removed} 调整顺序={result.reordered}"
            )
        return result

    def _current_links(self, session: Session, owner_key: Any) -> "OrderedDict[str, Tuple[Any, Any]]":
        """读取拥有者现有关联：标签名 -> (标签主键, 当前顺序)"""
        cfg = self.config
        columns = [cfg.tag_name_attr, cfg.tag_key_col]
        if cfg.ordering_enabled:
            columns.append(cfg.order_col)
        stmt = (
            select(*columns)
            .join_from(cfg.junction_table, cfg.tag_model, cfg.tag_key_col == cfg.tag_pk_attr)
            .where(cfg.owner_key_col == owner_key)
            .order_by(*cfg.link_order_by())
        )
        current: "OrderedDict[str, Tuple[Any, Any]]" = OrderedDict()
        for row in session.execute(stmt):
            order = row[2] if cfg.ordering_enabled else None
            current.setdefault(row[0], (row[1], order))
        return current

    def _resolve_tags(self, session: Session, names: List[str], result: ReconcileResult) -> Dict[str, Any]:
        """查找或创建标签，返回 标签名 -> 标签主键"""
        if not names:
            return {}
        tag_keys = self._find_tag_keys(session, names)
        for name in names:
            if name in tag_keys:
                continue
            tag_key = self._create_tag(session, name)
            if tag_key is None:
                # 并发创建冲突，使用已存在的标签
                tag_key = self._find_tag_key(session, name)
                if tag_key is None:
                    raise LookupError(f"标签 {name!r} 创建冲突后仍无法找到")
            else:
                result.created.append(name)
            tag_keys[name] = tag_key
        return tag_keys

    def _find_tag_keys(self, session: Session, names: Iterable[str]) -> Dict[str, Any]:
        cfg = self.config
        stmt = select(cfg.tag_name_attr, cfg.tag_pk_attr).where(cfg.tag_name_attr.in_(list(names)))
        return {name: key for name, key in session.execute(stmt)}

    def _find_tag_key(self, session: Session, name: str) -> Any:
        cfg = self.config
        return session.execute(
            select(cfg.tag_pk_attr).where(cfg.tag_name_attr == name)
        ).scalar_one_or_none()

    def _create_tag(self, session: Session, name: str) -> Any:
        """在保存点内创建标签，唯一约束冲突时返回 None"""
        cfg = self.config
        tag = cfg.tag_model(**{cfg.name_attribute: name})
        try:
            with session.begin_nested():
                session.add(tag)
        except IntegrityError:
            logger.warning(f"标签 {name!r} 已被并发创建，改为使用已有标签")
            return None
        return sa_inspect(tag).identity[0]

    def _change_counts(self, session: Session, tag_keys: List[Any], delta: int):
        cfg = self.config
        if not cfg.counters_enabled or not tag_keys:
            return
        count_attr = cfg.tag_count_attr
        session.execute(
            update(cfg.tag_model)
            .where(cfg.tag_pk_attr.in_(tag_keys))
            .values({count_attr: count_attr + delta})
        )
