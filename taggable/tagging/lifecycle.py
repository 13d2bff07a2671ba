"""标签生命周期

把拥有者/标签记录的保存、删除与标签关联维护串联起来：

- after_save: 拥有者保存后同步标签集合
- cleanup_owner: 拥有者删除前移除其所有关联，并扣减相关标签计数
- cleanup_tag: 标签删除前移除所有引用它的关联
"""

from typing import Any, Iterable, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from taggable.log import get_logger
from .config import TaggingConfig
from .reconciler import ReconcileResult, TagSetReconciler

logger = get_logger()


class TagLifecycle:
    """标签生命周期钩子

    使用示例:
        lifecycle = TagLifecycle(config)

        post.save()
        session.flush()
        lifecycle.after_save(post.id, "red, green")

        lifecycle.cleanup_owner(post.id)
        session.delete(post)
    """

    def __init__(self, config: TaggingConfig):
        self.config = config
        self.reconciler = TagSetReconciler(config)

    def after_save(
        self,
        owner_key: Any,
        tag_text: Any,
        session: Optional[Session] = None,
    ) -> Optional[ReconcileResult]:
        """拥有者保存后同步标签

        tag_text 为 None 表示本次保存没有修改标签，不做任何处理。
        """
        if tag_text is None:
            return None
        return self.reconciler.reconcile(owner_key, tag_text, session=session)

    def cleanup_owner(self, owner_key: Any, session: Optional[Session] = None) -> int:
        """拥有者删除前清理关联

        启用计数时，先把该拥有者引用的每个标签计数 -1，再删除关联行。

        Returns:
            删除的关联行数
        """
        cfg = self.config
        session = cfg.get_session(session)

        if cfg.counters_enabled:
            tag_keys = list(session.scalars(
                select(cfg.tag_key_col).where(cfg.owner_key_col == owner_key)
            ))
            if tag_keys:
                count_attr = cfg.tag_count_attr
                session.execute(
                    update(cfg.tag_model)
                    .where(cfg.tag_pk_attr.in_(tag_keys))
                    .values({count_attr: count_attr - 1})
                )

        result = session.execute(
            delete(cfg.junction_table).where(cfg.owner_key_col == owner_key)
        )
        logger.debug(f"已清理拥有者 {owner_key} 的 {result.rowcount} 条标签关联")
        return result.rowcount

    def cleanup_tag(self, tag_key: Any, session: Optional[Session] = None) -> int:
        """标签删除前清理关联（不影响其他标签的计数）

        Returns:
            删除的关联行数
        """
        cfg = self.config
        session = cfg.get_session(session)
        result = session.execute(
            delete(cfg.junction_table).where(cfg.tag_key_col == tag_key)
        )
        logger.debug(f"已清理标签 {tag_key} 在 {cfg.junction_table.name} 中的 {result.rowcount} 条关联")
        return result.rowcount


def cleanup_tag_links(
    tag_key: Any,
    configs: Iterable[TaggingConfig],
    session: Optional[Session] = None,
) -> int:
    """在多个关联表中清理同一个标签的关联

    同一张关联表只处理一次。

    Returns:
        删除的关联行总数
    """
    removed = 0
    seen = set()
    for config in configs:
        if config.junction_table.key in seen:
            continue
        seen.add(config.junction_table.key)
        removed += TagLifecycle(config).cleanup_tag(tag_key, session=session)
    return removed
