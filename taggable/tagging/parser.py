"""标签文本解析

将分隔符文本（或名称序列）规范化为有序、去重、去空白的标签名列表。
"""

from typing import Any, Iterable, List

DEFAULT_DELIMITER = ","


def _split(value: Any, delimiter: str) -> Iterable[str]:
    if value is None:
        return ()
    if isinstance(value, str):
        return value.split(delimiter)
    if hasattr(value, "__iter__"):
        # 元素内的分隔符同样拆分，与 tag_text 读回的文本一致
        return [part for item in value if item is not None for part in str(item).split(delimiter)]
    return str(value).split(delimiter)


def parse_tag_text(value: Any, delimiter: str = DEFAULT_DELIMITER) -> List[str]:
    """解析标签文本

    - 字符串按分隔符拆分；序列中的每个元素也按分隔符拆分
    - 去掉名称两端空白，丢弃空名称
    - 重复名称只保留第一次出现的位置
    - 名称按原样比较（区分大小写）

    Args:
        value: 分隔符文本、名称序列或 None
        delimiter: 分隔符，默认 ","

    Returns:
        标签名列表

    Example:
        >>> parse_tag_text(" red, green ,,red ")
        ['red', 'green']
        >>> parse_tag_text(["Red", "red"])
        ['Red', 'red']
        >>> parse_tag_text(["a,b", "c"])
        ['a', 'b', 'c']
    """
    if not delimiter:
        raise ValueError("delimiter 不能为空")

    names: List[str] = []
    seen = set()
    for item in _split(value, delimiter):
        name = item.strip()
        if not name or name in seen:
            continue
        seen.add(name)
        names.append(name)
    return names


def canonical_tag_text(value: Any, delimiter: str = DEFAULT_DELIMITER) -> str:
    """返回规范化后的标签文本（用分隔符连接解析结果）

    >>> canonical_tag_text("a, b,  a")
    'a,b'
    """
    return delimiter.join(parse_tag_text(value, delimiter))
