"""版本信息"""

__version__ = "0.1.0"
__author__ = "yweb"
__description__ = "SQLAlchemy 标签扩展"
