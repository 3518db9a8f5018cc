"""
存储锁模块。

在存储根目录下的 .lock 文件上持有独占的建议锁，防止两个进程同时修改同一个存储。
"""

import sys
from pathlib import Path
from typing import IO, Optional

from vermgr.utils.logger import get_logger

logger = get_logger()


def _lock_exclusive(fd: IO[str]) -> None:
    """
    获取独占文件锁，其他进程持有时阻塞等待。

    参数:
        fd: 已打开的文件对象
    """
    if sys.platform == "win32":
        import msvcrt

        fd.seek(0)
        msvcrt.locking(fd.fileno(), msvcrt.LK_LOCK, 1)
    else:
        import fcntl

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            logger.info("存储正被其他进程使用，等待释放...")
            fcntl.flock(fd, fcntl.LOCK_EX)


def _unlock(fd: IO[str]) -> None:
    if sys.platform == "win32":
        import msvcrt

        fd.seek(0)
        msvcrt.locking(fd.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        import fcntl

        fcntl.flock(fd, fcntl.LOCK_UN)


class StoreLock:
    """
    存储级独占锁。

    可重入：同一个实例嵌套进入时只在最外层加锁和解锁。
    """

    def __init__(self, base_dir: Path):
        self.lock_path = Path(base_dir) / ".lock"
        self._fd: Optional[IO[str]] = None
        self._depth = 0

    def acquire(self) -> None:
        if self._depth == 0:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            fd = open(self.lock_path, "a+")
            try:
                _lock_exclusive(fd)
            except BaseException:
                fd.close()
                raise
            self._fd = fd
            logger.debug(f"已获取存储锁: {self.lock_path}")
        self._depth += 1

    def release(self) -> None:
        if self._depth == 0:
            return
        self._depth -= 1
        if self._depth == 0 and self._fd is not None:
            try:
                _unlock(self._fd)
            finally:
                self._fd.close()
                self._fd = None
            logger.debug(f"已释放存储锁: {self.lock_path}")

    @property
    def is_held(self) -> bool:
        return self._depth > 0

    def __enter__(self) -> "StoreLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
