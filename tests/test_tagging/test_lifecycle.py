"""标签生命周期测试

- 拥有者保存后同步
- 拥有者删除前清理关联并扣减计数
- 标签删除前清理所有关联表中的引用
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker, scoped_session

from taggable.orm import Base, CoreModel
from taggable.tagging import TagLifecycle, cleanup_tag_links
from tests.helpers.tagging_models import (
    Post,
    PostTag,
    Product,
    ProductTag,
    Tag,
    link_rows,
    tag_counts,
)


class TestTagLifecycle:
    """TagLifecycle 测试"""

    @pytest.fixture(autouse=True)
    def setup_db(self, memory_engine):
        """初始化数据库"""
        Base.metadata.create_all(bind=memory_engine)
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=memory_engine)
        self.session_scope = scoped_session(SessionLocal)
        CoreModel.query = self.session_scope.query_property()
        self.session = self.session_scope()
        self.post_lifecycle = TagLifecycle(Post.get_tagging_config())
        self.product_lifecycle = TagLifecycle(Product.get_tagging_config())
        yield
        self.session_scope.remove()

    def new_post(self, title="post"):
        post = Post(title=title)
        post.save(commit=True)
        return post

    def test_after_save_reconciles(self):
        post = self.new_post()

        result = self.post_lifecycle.after_save(post.id, "a, b")
        self.session.commit()

        assert result.added == ["a", "b"]
        assert link_rows(self.session, post.id) == [("a", 0), ("b", 1)]

    def test_after_save_without_tag_text(self):
        """测试本次保存未修改标签时不做处理"""
        post = self.new_post()
        self.post_lifecycle.after_save(post.id, "a")
        self.session.commit()

        assert self.post_lifecycle.after_save(post.id, None) is None
        assert link_rows(self.session, post.id) == [("a", 0)]

    def test_cleanup_owner(self):
        """测试删除拥有者前清理关联并扣减计数"""
        first = self.new_post("first")
        second = self.new_post("second")
        self.post_lifecycle.after_save(first.id, "a, b")
        self.post_lifecycle.after_save(second.id, "b")
        self.session.commit()

        removed = self.post_lifecycle.cleanup_owner(first.id)
        self.session.commit()

        assert removed == 2
        assert link_rows(self.session, first.id) == []
        assert link_rows(self.session, second.id) == [("b", 0)]
        assert tag_counts(self.session) == {"a": 0, "b": 1}

    def test_cleanup_owner_without_links(self):
        post = self.new_post()
        assert self.post_lifecycle.cleanup_owner(post.id) == 0

    def test_cleanup_tag(self):
        """测试删除标签前清理关联，不影响其他标签计数"""
        post = self.new_post()
        self.post_lifecycle.after_save(post.id, "a, b")
        self.session.commit()
        tag_a = Tag.get_by_name("a")

        removed = self.post_lifecycle.cleanup_tag(tag_a.id)
        self.session.commit()

        assert removed == 1
        assert link_rows(self.session, post.id) == [("b", 1)]
        assert tag_counts(self.session)["b"] == 1

    def test_cleanup_tag_links_across_junctions(self):
        """测试同一标签在多张关联表中的引用都被清理"""
        post = self.new_post()
        product = Product(name="book")
        product.save(commit=True)
        self.post_lifecycle.after_save(post.id, "shared")
        self.product_lifecycle.after_save(product.id, "shared, other")
        self.session.commit()
        shared = Tag.get_by_name("shared")

        configs = [
            Post.get_tagging_config(),
            Product.get_tagging_config(),
            Post.get_tagging_config(),
        ]
        removed = cleanup_tag_links(shared.id, configs)
        self.session.commit()

        assert removed == 2
        for junction in (PostTag, ProductTag):
            count = self.session.scalar(
                select(func.count()).select_from(junction).where(junction.tag_id == shared.id)
            )
            assert count == 0
