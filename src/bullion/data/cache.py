"""
内存缓存
进程内的 TTL 键值缓存，条目整体替换、不做原地修改
"""

import fnmatch
import time
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional

from bullion.data.models import CacheEntry


class MemoryCache:
    """
    内存 TTL 缓存

    所有条目使用统一的 TTL。过期条目在被替换或清理前仍占用空间，
    读取时视为未命中。

    单事件循环内使用无需加锁：两个并发未命中会各自写入同一键，
    后写者覆盖，两者数据等价。
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(minutes=5),
        clock: Callable[[], float] = time.time,
    ):
        """
        初始化缓存

        Args:
            ttl: 条目有效期
            clock: 返回 unix 时间戳（秒）的时钟，测试时可替换
        """
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry[Any]] = {}

    @property
    def ttl_seconds(self) -> float:
        return self.ttl.total_seconds()

    def get(self, key: str) -> Optional[Any]:
        """
        获取缓存值

        Returns:
            未过期的缓存值；不存在或已过期返回 None
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock(), self.ttl_seconds):
            return None
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """写入（或替换）缓存值"""
        self._entries[key] = CacheEntry(value=value, timestamp=self._clock())

    def delete(self, key: str) -> bool:
        """删除缓存，返回是否存在"""
        return self._entries.pop(key, None) is not None

    def exists(self, key: str) -> bool:
        """检查缓存是否存在且未过期"""
        return self.get(key) is not None

    def clear(self) -> int:
        """
        清空所有缓存

        Returns:
            删除的条目数
        """
        count = len(self._entries)
        self._entries.clear()
        return count

    def keys(self, pattern: str = "*") -> List[str]:
        """获取匹配模式的缓存键（fnmatch 语法）"""
        return [key for key in self._entries if fnmatch.fnmatchcase(key, pattern)]

    def cleanup_expired(self) -> int:
        """
        清理过期缓存

        Returns:
            清理的条目数
        """
        now = self._clock()
        expired = [
            key for key, entry in self._entries.items()
            if entry.is_expired(now, self.ttl_seconds)
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self):
        return f"MemoryCache(entries={len(self._entries)}, ttl={self.ttl_seconds:.0f}s)"
