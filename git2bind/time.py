"""Binding layer for libgit2 - Time"""

import datetime as dt
from functools import total_ordering
from typing import Optional

from .native_adaptation import git_time


@total_ordering
class Time:
    """A point in time with the time zone offset it was recorded in.

    Times order by instant first and by offset second. The sign is kept
    separately from the offset so that “-0000” survives a round trip.
    """

    __slots__ = ("_seconds", "_offset", "_sign")

    def __init__(self, seconds: int, offset_minutes: int = 0, sign: Optional[str] = None) -> None:
        if sign is None:
            sign = "-" if offset_minutes < 0 else "+"
        elif sign not in ("+", "-"):
            raise ValueError(f"Sign must be '+' or '-', not {sign!r}")

        self._seconds = seconds
        self._offset = offset_minutes
        self._sign = sign

    @classmethod
    def _from_native(cls, native: git_time) -> "Time":
        sign = native.sign.decode("ascii") if native.sign in (b"+", b"-") else None
        return cls(native.time, native.offset, sign)

    def _to_native(self) -> git_time:
        return git_time(time=self._seconds, offset=self._offset, sign=self._sign.encode("ascii"))

    @property
    def seconds(self) -> int:
        return self._seconds

    @property
    def offset_minutes(self) -> int:
        return self._offset

    def sign(self) -> str:
        return self._sign

    def to_datetime(self) -> dt.datetime:
        tz = dt.timezone(dt.timedelta(minutes=self._offset))
        return dt.datetime.fromtimestamp(self._seconds, tz=tz)

    def _key(self) -> tuple[int, int]:
        return self._seconds, self._offset

    def __eq__(self, other: "Time") -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "Time") -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(seconds={self._seconds!r},"
            + f" offset_minutes={self._offset!r}, sign={self._sign!r})"
        )
